"""
Consistency Verifier - Post-round checks of every running node
"""
import time
import logging
from typing import List
from ..errors import CanaryWriteError, ClusterClientError, ConsistencyViolationError
from ..interfaces import IClusterNode
from ..chaos_engine.engine import ChaosEngine
from ..chaos_engine.topology import TopologyModel
from .report_log import ReportLog

logger = logging.getLogger(__name__)


class ConsistencyVerifier:
    """
    Inspects every running node after a round.

    Each node must report zero inconsistencies. While the cluster is not
    split, the write quorum is re-established if needed and a canary node is
    written through every running node.
    """

    def __init__(self, topology: TopologyModel, engine: ChaosEngine, report_log: ReportLog,
                 quorum_settle_delay: float = 10.0):
        self.topology = topology
        self.engine = engine
        self.report_log = report_log
        self.quorum_settle_delay = quorum_settle_delay
        self.passes = 0
        self.inconsistencies_found = 0

    def verify(self) -> int:
        """Run one verification pass and return the number of nodes checked"""
        # Snapshot: quorum repair adds nodes while we iterate
        nodes: List[IClusterNode] = list(self.topology.running)
        for node in nodes:
            self.verify_node(node)
        self.passes += 1
        return len(nodes)

    def verify_node(self, node: IClusterNode) -> None:
        logger.info(f"Asserting server {node.name}")
        self.assert_consistency(node)

        # Writes are only expected to succeed while the cluster is whole
        if self.topology.has_split_brain:
            logger.info(f"Skipping write assertion on {node.name} while the cluster is split")
            return

        if self.engine.reach_write_quorum():
            logger.info(f"Waiting {self.quorum_settle_delay:.0f}s for the new nodes to join")
            time.sleep(self.quorum_settle_delay)

        self.assert_writable(node)

    def assert_consistency(self, node: IClusterNode) -> None:
        report = node.client.check_consistency()
        if report.inconsistencies:
            self.inconsistencies_found += len(report.inconsistencies)
            logger.error(f"Server {node.name} reported {len(report.inconsistencies)} inconsistencies")
            for inconsistency in report.inconsistencies:
                logger.error(f"  - {inconsistency}")
            raise ConsistencyViolationError(node.name, report.inconsistencies)
        self.report_log.log_assertion(node, "Consistency asserted")

    def assert_writable(self, node: IClusterNode) -> None:
        try:
            self.engine.create_node(node)
        except ClusterClientError as e:
            raise CanaryWriteError(f"Server {node.name} rejected the canary write: {e}") from e
        self.report_log.log_assertion(node, "Create node operation asserted")
