"""
In-memory fakes of the cluster collaborators, shared by the test modules
"""
import pytest
from typing import List, Optional

from cluster_chaos.errors import ClusterClientError, NodeStartupTimeout, TrafficShapingError
from cluster_chaos.interfaces import IClusterClient, IClusterNode, IClusterNodeFactory
from cluster_chaos.models import ConsistencyReport, DomainFixtures, ProjectInfo, ScenarioConfig
from cluster_chaos.chaos_engine.topology import TopologyModel
from cluster_chaos.scenario_engine.report_log import ReportLog


class FakeClusterClient(IClusterClient):
    """Records every call and answers with predictable identifiers"""

    def __init__(self, node_name: str):
        self.node_name = node_name
        self.calls: List[tuple] = []
        self.inconsistencies: List[dict] = []
        self.reject_writes = False
        self._counter = 0

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self.node_name}-{self._counter}"

    def login(self):
        self.calls.append(('login',))
        return "token"

    def create_schema(self, definition):
        self.calls.append(('create_schema', definition['name']))
        return "schema-uuid"

    def create_project(self, definition):
        self.calls.append(('create_project', definition['name']))
        return ProjectInfo(uuid="project-uuid", root_node_uuid="root-node-uuid")

    def assign_schema(self, project_name, schema_uuid):
        self.calls.append(('assign_schema', project_name, schema_uuid))

    def create_node(self, project_name, parent_uuid, schema_name, fields):
        self.calls.append(('create_node', project_name, parent_uuid, schema_name))
        if self.reject_writes:
            raise ClusterClientError(f"{self.node_name} is read-only", status_code=503)
        return self._next("node")

    def update_schema(self, schema_uuid, definition):
        self.calls.append(('update_schema', schema_uuid, definition['description']))

    def create_user(self, username, password):
        self.calls.append(('create_user', username))
        return self._next("user")

    def invoke_backup(self):
        self.calls.append(('invoke_backup',))

    def check_consistency(self):
        self.calls.append(('check_consistency',))
        return ConsistencyReport(node_name=self.node_name, inconsistencies=list(self.inconsistencies))

    def called(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class FakeClusterNode(IClusterNode):
    """A node that only tracks its lifecycle and traffic rules"""

    def __init__(self, name: str, data_path_prefix: Optional[str] = None, init_cluster: bool = False,
                 fail_startup: bool = False):
        self.name = name
        self.data_path_prefix = data_path_prefix or name
        self.init_cluster = init_cluster
        self.fail_startup = fail_startup
        self.traffic_error: Optional[str] = None
        self.ready = False
        self.stopped = False
        self.killed = False
        self.dropped_from: List[tuple] = []
        self.resumed = 0
        self._client = FakeClusterClient(name)

    @property
    def client(self) -> FakeClusterClient:
        return self._client

    def await_ready(self, timeout):
        if self.fail_startup:
            raise NodeStartupTimeout(self.name, timeout)
        self.ready = True

    def stop(self):
        self.stopped = True

    def kill(self):
        self.killed = True

    def drop_traffic(self, *peers):
        if self.traffic_error:
            raise TrafficShapingError(self.traffic_error)
        self.dropped_from.append(tuple(p.name for p in peers))

    def resume_traffic(self):
        if self.traffic_error:
            raise TrafficShapingError(self.traffic_error)
        self.resumed += 1

    def __repr__(self):
        return f"FakeClusterNode({self.name})"


class FakeNodeFactory(IClusterNodeFactory):
    """Creates FakeClusterNodes and remembers them in creation order"""

    def __init__(self):
        self.created: List[FakeClusterNode] = []
        self.create_args: List[tuple] = []
        self.fail_startup_for: set = set()
        self.cleaned_up = False

    def create(self, cluster_id, node_name, data_path_prefix, init_cluster, write_quorum):
        self.create_args.append((cluster_id, node_name, data_path_prefix, init_cluster, write_quorum))
        node = FakeClusterNode(
            node_name, data_path_prefix, init_cluster,
            fail_startup=node_name in self.fail_startup_for
        )
        self.created.append(node)
        return node

    def cleanup(self):
        self.cleaned_up = True


def make_nodes(count: int, prefix: str = "server") -> List[FakeClusterNode]:
    return [FakeClusterNode(f"{prefix}{i}") for i in range(count)]


@pytest.fixture
def fake_factory():
    return FakeNodeFactory()


@pytest.fixture
def report_log(tmp_path):
    return ReportLog(str(tmp_path / "logs"))


@pytest.fixture
def topology():
    return TopologyModel(write_quorum=2)


@pytest.fixture
def fixtures():
    return DomainFixtures(
        schema_uuid="schema-uuid",
        project=ProjectInfo(uuid="project-uuid", root_node_uuid="root-node-uuid")
    )


@pytest.fixture
def fast_config(tmp_path):
    """Scenario config with all settle delays disabled"""
    return ScenarioConfig(
        total_rounds=6,
        round_settle_delay=0,
        merge_settle_delay=0,
        quorum_settle_delay=0,
        report_dir=str(tmp_path / "logs")
    )
