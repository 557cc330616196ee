"""Split-brain and merge executors"""
import time
import logging
from typing import List, Optional, Tuple
from ..errors import TrafficShapingError
from ..interfaces import IClusterNode
from ..models import ActionType
from ..scenario_engine.error_handler import ErrorHandler
from ..scenario_engine.report_log import ReportLog
from .topology import TopologyModel

logger = logging.getLogger(__name__)


def partition_halves(nodes: List[IClusterNode]) -> Tuple[List[IClusterNode], List[IClusterNode]]:
    """Split into a first half of size ceil(n/2) and the remainder"""
    size = (len(nodes) + 1) // 2
    return nodes[:size], nodes[size:]


class PartitionExecutor:
    """
    Simulates network partitions between running nodes.

    Partitions are best-effort: a failed traffic rule is logged through the
    error handler and the cluster is still treated as split.
    """

    def __init__(self, topology: TopologyModel, report_log: ReportLog,
                 error_handler: ErrorHandler, merge_settle_delay: float = 120.0):
        self.topology = topology
        self.report_log = report_log
        self.error_handler = error_handler
        self.merge_settle_delay = merge_settle_delay

    def split_brain(self) -> bool:
        """Partition the running nodes into two halves. Only fires for an even count."""
        self.report_log.log_action(ActionType.SPLIT_BRAIN, None, "Invoking split brain situation on cluster")
        if self.topology.has_split_brain:
            logger.info("Cluster is already split, nothing to do")
            return False

        running = list(self.topology.running)
        if len(running) % 2 != 0:
            logger.info(f"Not splitting cluster with an odd number of running nodes ({len(running)})")
            return False

        half_a, half_b = partition_halves(running)
        logger.info(f"Splitting cluster into {[n.name for n in half_a]} and {[n.name for n in half_b]}")

        for node in half_a:
            self._drop(node, half_b)
        for node in half_b:
            self._drop(node, half_a)

        self.topology.has_split_brain = True
        return True

    def merge_brain(self) -> bool:
        """Resume all traffic on every running node and let the cluster re-merge"""
        self.report_log.log_action(ActionType.MERGE_BRAIN, None, "Merging split brain in cluster")
        if not self.topology.has_split_brain:
            logger.info("Cluster is not split, nothing to merge")
            return False

        for node in list(self.topology.running):
            self.resume(node)
            logger.info(f"Waiting {self.merge_settle_delay:.0f}s for {node.name} to re-merge")
            time.sleep(self.merge_settle_delay)

        self.topology.has_split_brain = False
        return True

    def resume(self, node: IClusterNode, round_index: Optional[int] = None) -> bool:
        try:
            node.resume_traffic()
            return True
        except TrafficShapingError as e:
            self.error_handler.record_traffic_failure(node.name, e, round_index)
            return False

    def disconnect(self, node: IClusterNode, round_index: Optional[int] = None) -> bool:
        """Drop all cluster traffic towards a single node"""
        try:
            node.drop_traffic()
            return True
        except TrafficShapingError as e:
            self.error_handler.record_traffic_failure(node.name, e, round_index)
            return False

    def _drop(self, node: IClusterNode, peers: List[IClusterNode]) -> None:
        try:
            node.drop_traffic(*peers)
        except TrafficShapingError as e:
            self.error_handler.record_traffic_failure(node.name, e)
