"""
Base interfaces for the collaborators the chaos engine drives
"""
from abc import ABC, abstractmethod
from typing import Any, Dict
from .models import ConsistencyReport, ProjectInfo


class IClusterClient(ABC):
    """Interface for domain operations issued against one running node"""

    @abstractmethod
    def login(self) -> None:
        """Authenticate against the node"""
        pass

    @abstractmethod
    def create_schema(self, definition: Dict[str, Any]) -> str:
        """Create a schema and return its uuid"""
        pass

    @abstractmethod
    def create_project(self, definition: Dict[str, Any]) -> ProjectInfo:
        """Create a project and return its uuid and root node uuid"""
        pass

    @abstractmethod
    def assign_schema(self, project_name: str, schema_uuid: str) -> None:
        """Assign a schema to a project"""
        pass

    @abstractmethod
    def create_node(self, project_name: str, parent_uuid: str, schema_name: str,
                    fields: Dict[str, Any]) -> str:
        """Create a content node and return its uuid"""
        pass

    @abstractmethod
    def update_schema(self, schema_uuid: str, definition: Dict[str, Any]) -> None:
        """Update a schema, which triggers a migration on the server"""
        pass

    @abstractmethod
    def create_user(self, username: str, password: str) -> str:
        """Create a user and return its uuid"""
        pass

    @abstractmethod
    def invoke_backup(self) -> None:
        """Trigger a database backup"""
        pass

    @abstractmethod
    def check_consistency(self) -> ConsistencyReport:
        """Run the server-side consistency check"""
        pass


class IClusterNode(ABC):
    """Interface for a single cluster node (process or container)"""

    name: str
    data_path_prefix: str

    @property
    @abstractmethod
    def client(self) -> IClusterClient:
        """Client bound to this node"""
        pass

    @abstractmethod
    def await_ready(self, timeout: float) -> None:
        """Block until the node serves requests; raise NodeStartupTimeout otherwise"""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Gracefully stop the node"""
        pass

    @abstractmethod
    def kill(self) -> None:
        """Hard-kill the node"""
        pass

    @abstractmethod
    def drop_traffic(self, *peers: "IClusterNode") -> None:
        """Drop cluster traffic from the given peers, or from everyone when none are given"""
        pass

    @abstractmethod
    def resume_traffic(self) -> None:
        """Remove every traffic drop rule"""
        pass


class IClusterNodeFactory(ABC):
    """Interface for node lifecycle management"""

    @abstractmethod
    def create(self, cluster_id: str, node_name: str, data_path_prefix: str,
               init_cluster: bool, write_quorum: int) -> IClusterNode:
        """Create and start a node"""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Release every node created by this factory"""
        pass
