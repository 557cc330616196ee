"""
Chaos Engine - Randomized topology and domain actions against a live cluster

Components:
- TopologyModel: Running/stopped/disconnected bookkeeping and quorum gates
- ActionCatalog: Action gates and round resolution policies
- PartitionExecutor: Split-brain, merge and single-node disconnects
- ChaosEngine: Seeded action draws and effects
"""
from .topology import TopologyModel
from .catalog import ActionCatalog, ActionSpec, GateContext, Resolution, resolve
from .partitions import PartitionExecutor
from .engine import ChaosEngine

__all__ = [
    'TopologyModel',
    'ActionCatalog',
    'ActionSpec',
    'GateContext',
    'Resolution',
    'resolve',
    'PartitionExecutor',
    'ChaosEngine',
]
