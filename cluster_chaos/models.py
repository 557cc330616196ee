"""
Core data models for the Cluster Chaos Harness
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from enum import Enum


class NodeState(Enum):
    """Lifecycle state of a cluster node as tracked by the topology"""
    RUNNING = "running"
    STOPPED = "stopped"
    DISCONNECTED = "disconnected"


class ActionType(Enum):
    """Chaos actions. Declaration order is the draw order of the seeded generator."""
    ADD_INSTANCE = "ADD_INSTANCE"
    REMOVE_INSTANCE = "REMOVE_INSTANCE"
    CREATE_USER = "CREATE_USER"
    CREATE_NODE = "CREATE_NODE"
    STOP_INSTANCE = "STOP_INSTANCE"
    START_INSTANCE = "START_INSTANCE"
    KILL_INSTANCE = "KILL_INSTANCE"
    BACKUP_INSTANCE = "BACKUP_INSTANCE"
    SPLIT_BRAIN = "SPLIT_BRAIN"
    MERGE_BRAIN = "MERGE_BRAIN"
    DISCONNECT_INSTANCE = "DISCONNECT_INSTANCE"
    CONNECT_INSTANCE = "CONNECT_INSTANCE"
    SCHEMA_MIGRATION = "SCHEMA_MIGRATION"


class ResolutionPolicy(Enum):
    """How a drawn action ends (or does not end) the current round"""
    RETRY_ON_GATE_FAIL = "retry_on_gate_fail"
    TERMINATE_REGARDLESS = "terminate_regardless"
    EXECUTE_THEN_CONTINUE = "execute_then_continue"
    EXECUTE_OR_REDRAW = "execute_or_redraw"


class ScenarioState(Enum):
    """States of the scenario driver"""
    PENDING = "pending"
    BOOTSTRAPPING = "bootstrapping"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ContainerConfig:
    """Settings for running cluster nodes as Docker containers"""
    image: str = "gentics/mesh:latest"
    network_name: str = "cluster-chaos"
    data_root: str = "/tmp/cluster-chaos/data"
    http_port: int = 8080
    cluster_ports: List[int] = field(default_factory=lambda: [5701, 2424, 2434])
    admin_username: str = "admin"
    admin_password: str = "admin"
    request_timeout: float = 30.0
    ready_poll_interval: float = 2.0
    extra_env: Dict[str, str] = field(default_factory=dict)


@dataclass
class ScenarioConfig:
    """Configuration of a seeded chaos scenario"""
    total_rounds: int = 40
    server_limit: int = 8
    write_quorum: int = 2
    startup_timeout: float = 100.0
    round_settle_delay: float = 15.0
    merge_settle_delay: float = 120.0
    quorum_settle_delay: float = 10.0
    seed: Optional[int] = 42
    cluster_name_prefix: str = "dummy"
    initial_node_name: str = "master"
    schema_name: str = "TestSchema"
    project_name: str = "Dummy"
    user_password: str = "somepass"
    strict_round_termination: bool = True
    report_dir: str = "/tmp/cluster-chaos/logs"
    cleanup_on_exit: bool = True
    container: ContainerConfig = field(default_factory=ContainerConfig)


@dataclass
class ProjectInfo:
    """Identifiers returned when a project is created"""
    uuid: str
    root_node_uuid: str


@dataclass
class DomainFixtures:
    """Domain objects created once and referenced by later actions"""
    schema_uuid: Optional[str] = None
    project: Optional[ProjectInfo] = None
    user_uuids: List[str] = field(default_factory=list)
    node_uuids: List[str] = field(default_factory=list)


@dataclass
class ConsistencyReport:
    """Result of a node's structural consistency check"""
    node_name: str
    inconsistencies: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.inconsistencies


@dataclass(frozen=True)
class ReportEntry:
    """A single line of the scenario report. Immutable once written."""
    kind: str  # "action" or "assertion"
    tag: str
    node_name: str
    message: str
    round_index: Optional[int] = None
    timestamp: float = 0.0


@dataclass
class RoundResult:
    """Outcome of one chaos engine round"""
    round_index: int
    draws: List[ActionType] = field(default_factory=list)
    applied: List[ActionType] = field(default_factory=list)
    wasted: bool = False


@dataclass
class ScenarioResult:
    """Complete scenario execution result"""
    scenario_id: str
    success: bool
    start_time: float
    end_time: float
    rounds_completed: int
    actions_applied: int
    assertions: int
    inconsistencies_found: int
    final_topology: Dict[str, List[str]] = field(default_factory=dict)
    error_message: Optional[str] = None
    seed: Optional[int] = None
    report_text: str = ""
    error_summary: Optional[Dict[str, Any]] = None
