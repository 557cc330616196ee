"""
Chaos Engine - Draws random actions and applies their effects

One round repeatedly draws an action from the catalog, evaluates its gate
against the current topology and either applies the effect, redraws, or
ends the round, as the action's resolution policy dictates.
"""
import uuid
import random
import logging
from typing import Callable, Dict, Optional
from ..interfaces import IClusterNode, IClusterNodeFactory
from ..models import ActionType, DomainFixtures, RoundResult, ScenarioConfig
from ..mesh_client.payloads import node_fields, schema_definition
from ..scenario_engine.error_handler import ErrorHandler
from ..scenario_engine.report_log import ReportLog
from .catalog import ActionCatalog, GateContext
from .partitions import PartitionExecutor
from .topology import TopologyModel

logging.basicConfig(format='%(levelname)-5s | %(filename)s:%(lineno)-3d | %(message)s', level=logging.INFO, force=True)
logger = logging.getLogger(__name__)


class ChaosEngine:
    """Randomized action selection and execution for a single cluster"""

    def __init__(self, config: ScenarioConfig, topology: TopologyModel, node_factory: IClusterNodeFactory,
                 report_log: ReportLog, fixtures: DomainFixtures, cluster_id: str,
                 rng: Optional[random.Random] = None, catalog: Optional[ActionCatalog] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.config = config
        self.topology = topology
        self.node_factory = node_factory
        self.report_log = report_log
        self.fixtures = fixtures
        self.cluster_id = cluster_id
        # Single seeded sequence for action draws, node selection and names
        self.rng = rng or random.Random(config.seed)
        self.catalog = catalog or ActionCatalog(config.strict_round_termination)
        self.error_handler = error_handler or ErrorHandler()
        self.partitions = PartitionExecutor(topology, report_log, self.error_handler, config.merge_settle_delay)
        self.round_index = 0

        self._effects: Dict[ActionType, Callable[[], object]] = {
            ActionType.ADD_INSTANCE: self.add_instance,
            ActionType.REMOVE_INSTANCE: self.remove_instance,
            ActionType.CREATE_USER: self.create_user,
            ActionType.CREATE_NODE: self.create_node,
            ActionType.STOP_INSTANCE: self.stop_instance,
            ActionType.START_INSTANCE: self.start_instance,
            ActionType.KILL_INSTANCE: self.kill_instance,
            ActionType.BACKUP_INSTANCE: self.backup_instance,
            ActionType.SPLIT_BRAIN: self.partitions.split_brain,
            ActionType.MERGE_BRAIN: self.partitions.merge_brain,
            ActionType.DISCONNECT_INSTANCE: self.disconnect_instance,
            ActionType.CONNECT_INSTANCE: self.connect_instance,
            ActionType.SCHEMA_MIGRATION: self.schema_migration,
        }

    def draw_action(self) -> ActionType:
        return self.catalog.draw(self.rng)

    def run_round(self, round_index: int) -> RoundResult:
        """Draw and resolve actions until the drawn action's policy ends the round"""
        self.round_index = round_index
        self.report_log.begin_round(round_index)
        result = RoundResult(round_index=round_index)
        ctx = GateContext(
            topology=self.topology,
            round_index=round_index,
            total_rounds=self.config.total_rounds,
            server_limit=self.config.server_limit
        )

        while True:
            action = self.draw_action()
            result.draws.append(action)
            resolution = self.catalog.evaluate(action, ctx)

            if resolution.execute:
                logger.debug(f"Applying {action.value}")
                self._effects[action]()
                result.applied.append(action)
            else:
                logger.debug(f"Gate rejected {action.value}")

            if resolution.end_round:
                result.wasted = not resolution.execute
                if result.wasted:
                    logger.info(f"Round {round_index} ended by {action.value} without effect")
                return result

    def apply(self, action: ActionType):
        """Apply an action's effect directly, bypassing its gate"""
        return self._effects[action]()

    def random_running_node(self) -> IClusterNode:
        running = self.topology.running
        return running[self.rng.randrange(len(running))]

    def random_stopped_node(self) -> IClusterNode:
        stopped = self.topology.stopped
        return stopped[self.rng.randrange(len(stopped))]

    def random_name(self, prefix: str = "node") -> str:
        return f"{prefix}-{self.rng.getrandbits(32):08x}"

    def reach_write_quorum(self) -> bool:
        """Add instances until the write quorum is met. Returns True if any were added."""
        missing = self.topology.missing_for_quorum()
        if missing <= 0:
            return False
        for _ in range(missing):
            logger.info("Adding node to meet the write quorum requirements.")
            self.add_instance()
        return True

    def add_instance(self) -> IClusterNode:
        name = self.random_name()
        node = self.node_factory.create(self.cluster_id, name, name, False, self.config.write_quorum)
        self.report_log.log_action(ActionType.ADD_INSTANCE, node, f"Added server {name}")
        node.await_ready(self.config.startup_timeout)
        self.topology.add_node(node)
        return node

    def remove_instance(self) -> IClusterNode:
        node = self.random_running_node()
        self.report_log.log_action(ActionType.REMOVE_INSTANCE, node, f"Removing server: {node.name}")
        node.stop()
        self.topology.remove_node(node)
        return node

    def stop_instance(self) -> IClusterNode:
        node = self.random_running_node()
        self.report_log.log_action(ActionType.STOP_INSTANCE, node, f"Stopping server: {node.name}")
        node.stop()
        self.topology.move_to_stopped(node)
        return node

    def kill_instance(self) -> IClusterNode:
        node = self.random_running_node()
        self.report_log.log_action(ActionType.KILL_INSTANCE, node, f"Killing server: {node.name}")
        node.kill()
        self.topology.move_to_stopped(node)
        return node

    def start_instance(self) -> IClusterNode:
        """Restart a stopped node under its old name and data path"""
        stopped = self.random_stopped_node()
        self.report_log.log_action(ActionType.START_INSTANCE, stopped, f"Starting instance {stopped.name}")
        node = self.node_factory.create(
            self.cluster_id, stopped.name, stopped.data_path_prefix, False, self.config.write_quorum
        )
        node.await_ready(self.config.startup_timeout)
        self.topology.move_to_running(stopped, node)
        return node

    def backup_instance(self) -> IClusterNode:
        node = self.random_running_node()
        self.report_log.log_action(ActionType.BACKUP_INSTANCE, node, f"Invoking backup on server {node.name}")
        node.client.invoke_backup()
        logger.info(f"Invoked backup on server: {node.name}")
        return node

    def create_user(self) -> str:
        node = self.random_running_node()
        name = self.random_name("user")
        self.report_log.log_action(ActionType.CREATE_USER, node, f"Creating user {name}")
        user_uuid = node.client.create_user(name, self.config.user_password)
        logger.info(f"Using server: {node.name} - Created user {{{user_uuid}}}")
        self.fixtures.user_uuids.append(user_uuid)
        return user_uuid

    def create_node(self, node: Optional[IClusterNode] = None) -> str:
        """Create a content node below the project root, on a random node unless one is given"""
        target = node or self.random_running_node()
        self.report_log.log_action(ActionType.CREATE_NODE, target, "Creating node")
        node_uuid = target.client.create_node(
            self.config.project_name,
            self.fixtures.project.root_node_uuid,
            self.config.schema_name,
            node_fields()
        )
        self.fixtures.node_uuids.append(node_uuid)
        return node_uuid

    def schema_migration(self) -> IClusterNode:
        node = self.random_running_node()
        self.report_log.log_action(ActionType.SCHEMA_MIGRATION, node, f"Invoking schema migration {node.name}")
        # A new description is enough to make the server migrate all nodes of the schema
        description = f"Test schema{uuid.UUID(int=self.rng.getrandbits(128), version=4)}"
        node.client.update_schema(
            self.fixtures.schema_uuid,
            schema_definition(self.config.schema_name, description)
        )
        return node

    def disconnect_instance(self) -> IClusterNode:
        node = self.random_running_node()
        self.report_log.log_action(
            ActionType.DISCONNECT_INSTANCE, node, f"Disconnecting server from cluster {node.name}"
        )
        self.partitions.disconnect(node, self.round_index)
        self.topology.mark_disconnected(node)
        return node

    def connect_instance(self) -> IClusterNode:
        disconnected = self.topology.disconnected
        node = disconnected[self.rng.randrange(len(disconnected))]
        self.report_log.log_action(
            ActionType.CONNECT_INSTANCE, node, f"Reconnecting server to cluster {node.name}"
        )
        self.partitions.resume(node, self.round_index)
        self.topology.mark_connected(node)
        return node
