"""
Exception hierarchy for the Cluster Chaos Harness

Every subclass of FatalScenarioError aborts the scenario. TrafficShapingError
is the only failure the harness tolerates.
"""


class ChaosHarnessError(Exception):
    """Base class for all harness errors"""


class FatalScenarioError(ChaosHarnessError):
    """Failure that terminates the running scenario"""


class TopologyInvariantError(FatalScenarioError):
    """A node was moved out of a set it is not a member of"""


class NodeStartupTimeout(FatalScenarioError):
    """A node did not become ready within the startup timeout"""

    def __init__(self, node_name: str, timeout: float):
        super().__init__(f"Node {node_name} did not become ready within {timeout:.0f}s")
        self.node_name = node_name
        self.timeout = timeout


class ConsistencyViolationError(FatalScenarioError):
    """A node reported a non-empty list of inconsistencies"""

    def __init__(self, node_name: str, inconsistencies: list):
        super().__init__(
            f"The database in server {{{node_name}}} is not consistent: "
            f"{len(inconsistencies)} inconsistencies found"
        )
        self.node_name = node_name
        self.inconsistencies = inconsistencies


class CanaryWriteError(FatalScenarioError):
    """A node stopped accepting writes while the cluster was not split"""


class ClusterClientError(FatalScenarioError):
    """A domain REST call failed"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class TrafficShapingError(ChaosHarnessError):
    """Dropping or resuming traffic on a node failed"""
