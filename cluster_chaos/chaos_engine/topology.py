"""Topology bookkeeping for the nodes of a chaos scenario"""
import logging
from typing import Dict, List, Optional
from ..errors import TopologyInvariantError
from ..interfaces import IClusterNode
from ..models import NodeState

logger = logging.getLogger(__name__)


class TopologyModel:
    """
    Tracks which nodes are running, stopped or disconnected.

    Running and stopped are disjoint. Disconnected nodes are a subset of the
    running nodes: a partitioned node is still process-alive. Lists keep
    insertion order so that seeded node selection is reproducible.
    """

    def __init__(self, write_quorum: int):
        if write_quorum < 1:
            raise ValueError(f"Write quorum must be a positive integer, got {write_quorum}")
        self.write_quorum = write_quorum
        self.running: List[IClusterNode] = []
        self.stopped: List[IClusterNode] = []
        self.disconnected: List[IClusterNode] = []
        self.has_split_brain = False

    def add_node(self, node: IClusterNode) -> None:
        """Register a freshly started node as running"""
        if self._contains(self.running, node) or self._contains(self.stopped, node):
            raise TopologyInvariantError(f"Node {node.name} is already part of the topology")
        self.running.append(node)
        logger.debug(f"Added {node.name} to running nodes")

    def move_to_stopped(self, node: IClusterNode) -> None:
        self._take(self.running, node, NodeState.RUNNING)
        self._discard(self.disconnected, node)
        self.stopped.append(node)
        logger.debug(f"Moved {node.name} to stopped nodes")

    def move_to_running(self, node: IClusterNode, replacement: Optional[IClusterNode] = None) -> None:
        """
        Move a stopped node back to running. A restarted node may be
        represented by a new handle, passed as replacement.
        """
        self._take(self.stopped, node, NodeState.STOPPED)
        self.running.append(replacement or node)
        logger.debug(f"Moved {node.name} to running nodes")

    def remove_node(self, node: IClusterNode) -> None:
        """Permanently drop a running node from the topology"""
        self._take(self.running, node, NodeState.RUNNING)
        self._discard(self.disconnected, node)
        logger.debug(f"Removed {node.name} from the topology")

    def mark_disconnected(self, node: IClusterNode) -> None:
        if not self._contains(self.running, node):
            raise TopologyInvariantError(f"Node {node.name} must be running to be disconnected")
        if not self._contains(self.disconnected, node):
            self.disconnected.append(node)

    def mark_connected(self, node: IClusterNode) -> None:
        self._take(self.disconnected, node, NodeState.DISCONNECTED)

    def state_of(self, node: IClusterNode) -> Optional[NodeState]:
        if self._contains(self.disconnected, node):
            return NodeState.DISCONNECTED
        if self._contains(self.running, node):
            return NodeState.RUNNING
        if self._contains(self.stopped, node):
            return NodeState.STOPPED
        return None

    def running_count(self) -> int:
        return len(self.running)

    def stopped_count(self) -> int:
        return len(self.stopped)

    def missing_for_quorum(self) -> int:
        return self.write_quorum - self.running_count()

    def meets_quorum(self) -> bool:
        return self.missing_for_quorum() <= 0

    def is_alone(self) -> bool:
        return self.running_count() <= 1

    def allow_stop_or_removal(self, round_index: int, total_rounds: int, server_limit: int) -> bool:
        """
        Allow removal and stopping if the server limit is reached, or if the
        node is not alone and the scenario is past its first half.
        """
        reached_limit = self.running_count() >= server_limit
        first_half = round_index < total_rounds // 2
        return reached_limit or (not self.is_alone() and not first_half)

    def summary(self) -> Dict[str, List[str]]:
        return {
            'running': [n.name for n in self.running],
            'stopped': [n.name for n in self.stopped],
            'disconnected': [n.name for n in self.disconnected],
        }

    def describe(self, round_index: int) -> List[str]:
        """Human-readable topology table for the per-round log"""
        lines = [
            "-" * 35,
            f"- Round: {round_index}",
            f"- Split brain: {self.has_split_brain}",
            "- Running nodes:",
            "-" * 35,
        ]
        for node in self.running:
            flag = " (disconnected)" if self._contains(self.disconnected, node) else ""
            lines.append(f"- {node.name}\t{node.data_path_prefix}{flag}")
        lines.append("- Stopped nodes:")
        lines.append("-" * 35)
        for node in self.stopped:
            lines.append(f"- {node.name}\t{node.data_path_prefix}")
        lines.append("-" * 35)
        return lines

    @staticmethod
    def _contains(nodes: List[IClusterNode], node: IClusterNode) -> bool:
        return any(n is node for n in nodes)

    def _take(self, nodes: List[IClusterNode], node: IClusterNode, expected: NodeState) -> None:
        for i, candidate in enumerate(nodes):
            if candidate is node:
                del nodes[i]
                return
        raise TopologyInvariantError(
            f"Node {node.name} is not {expected.value} (current state: {self.state_of(node)})"
        )

    @staticmethod
    def _discard(nodes: List[IClusterNode], node: IClusterNode) -> None:
        for i, candidate in enumerate(nodes):
            if candidate is node:
                del nodes[i]
                return
