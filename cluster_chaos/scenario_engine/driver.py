"""
Scenario Driver - Runs a seeded chaos scenario end-to-end
"""
import time
import uuid
import random
import logging
from typing import List, Optional
from ..errors import FatalScenarioError
from ..interfaces import IClusterNode, IClusterNodeFactory
from ..models import DomainFixtures, RoundResult, ScenarioConfig, ScenarioResult, ScenarioState
from ..mesh_client.payloads import project_definition, schema_definition
from ..chaos_engine.engine import ChaosEngine
from ..chaos_engine.topology import TopologyModel
from .error_handler import ErrorHandler, ErrorContext, ErrorCategory, ErrorSeverity
from .report_log import ReportLog
from .verifier import ConsistencyVerifier

logger = logging.getLogger(__name__)

cli_logger = logging.getLogger('cli')
cli_logger.addHandler(logging.StreamHandler())
cli_logger.propagate = False


class ScenarioDriver:
    """
    Owns one scenario: bootstraps the cluster, runs the configured number of
    chaos rounds with a verification pass after each, then drains the report.

    The first fatal failure moves the scenario to FAILED. The report is
    flushed either way and the node factory is cleaned up on exit.
    """

    def __init__(self, config: ScenarioConfig, node_factory: IClusterNodeFactory,
                 report_log: Optional[ReportLog] = None, error_handler: Optional[ErrorHandler] = None,
                 rng: Optional[random.Random] = None):
        self.config = config
        self.node_factory = node_factory
        self.cluster_id = f"{config.cluster_name_prefix}{uuid.uuid4().hex[:8]}"
        self.state = ScenarioState.PENDING

        self.topology = TopologyModel(config.write_quorum)
        self.fixtures = DomainFixtures()
        self.report_log = report_log or ReportLog(config.report_dir)
        self.error_handler = error_handler or ErrorHandler()
        self.engine = ChaosEngine(
            config, self.topology, node_factory, self.report_log, self.fixtures, self.cluster_id,
            rng=rng, error_handler=self.error_handler
        )
        self.verifier = ConsistencyVerifier(
            self.topology, self.engine, self.report_log, config.quorum_settle_delay
        )

        self.round_results: List[RoundResult] = []
        self.rounds_completed = 0

    def run(self) -> ScenarioResult:
        """Execute the whole scenario and return its result"""
        start_time = time.time()
        error_message = None
        logger.info(f"Starting scenario {self.cluster_id} with seed {self.config.seed}")

        try:
            self._transition(ScenarioState.BOOTSTRAPPING)
            self.bootstrap()

            self._transition(ScenarioState.RUNNING)
            for round_index in range(self.config.total_rounds):
                self.run_round(round_index)
                self.rounds_completed += 1

        except FatalScenarioError as e:
            logger.error(f"Scenario {self.cluster_id} aborted: {e}")
            self.error_handler.record_fatal(e, self.report_log.current_round)
            error_message = str(e)
        except Exception as e:
            logger.error(f"Scenario {self.cluster_id} failed unexpectedly: {e}")
            self.error_handler.record_fatal(e, self.report_log.current_round)
            error_message = f"Unexpected error: {e}"
        finally:
            if self.config.cleanup_on_exit:
                self._cleanup()

        return self.drain(start_time, error_message)

    def bootstrap(self) -> IClusterNode:
        """Start the initial node, reach the write quorum and create the fixtures"""
        self.report_log.begin_round(None)
        name = self.config.initial_node_name

        cli_logger.info("")
        logger.info(f"Step 1: Starting initial server {name}")
        initial = self.node_factory.create(self.cluster_id, name, name, True, self.config.write_quorum)
        initial.await_ready(self.config.startup_timeout)
        self.topology.add_node(initial)

        cli_logger.info("")
        logger.info("Step 2: Reaching write quorum")
        self.engine.reach_write_quorum()

        cli_logger.info("")
        logger.info("Step 3: Creating schema and project")
        client = initial.client
        self.fixtures.schema_uuid = client.create_schema(schema_definition(self.config.schema_name))
        self.fixtures.project = client.create_project(project_definition(self.config.project_name))
        client.assign_schema(self.config.project_name, self.fixtures.schema_uuid)
        self.engine.create_node(initial)

        logger.info(f"Bootstrap complete: {self.topology.summary()}")
        return initial

    def run_round(self, round_index: int) -> RoundResult:
        """One chaos round followed by the settle delay and a verification pass"""
        cli_logger.info("")
        for line in self.topology.describe(round_index):
            logger.info(line)

        result = self.engine.run_round(round_index)
        self.round_results.append(result)

        logger.info(f"Waiting {self.config.round_settle_delay:.0f}s for the cluster to settle")
        time.sleep(self.config.round_settle_delay)

        checked = self.verifier.verify()
        logger.info(f"Round {round_index} verified {checked} servers")
        return result

    def drain(self, start_time: float, error_message: Optional[str] = None) -> ScenarioResult:
        """Flush the report and build the final result"""
        self._transition(ScenarioState.DRAINING)
        success = error_message is None

        result = ScenarioResult(
            scenario_id=self.cluster_id,
            success=success,
            start_time=start_time,
            end_time=time.time(),
            rounds_completed=self.rounds_completed,
            actions_applied=sum(len(r.applied) for r in self.round_results),
            assertions=len(self.report_log.assertions),
            inconsistencies_found=self.verifier.inconsistencies_found,
            final_topology=self.topology.summary(),
            error_message=error_message,
            seed=self.config.seed,
            error_summary=self.error_handler.get_error_summary()
        )
        result.report_text = self.report_log.flush(result)

        self._transition(ScenarioState.COMPLETED if success else ScenarioState.FAILED)
        logger.info(f"Scenario {self.cluster_id} finished: {'SUCCESS' if success else 'FAILED'}")
        return result

    def _transition(self, state: ScenarioState) -> None:
        logger.debug(f"Scenario {self.cluster_id}: {self.state.value} -> {state.value}")
        self.state = state

    def _cleanup(self) -> None:
        logger.info("Cleaning up cluster nodes")
        try:
            self.node_factory.cleanup()
        except Exception as e:
            self.error_handler.handle_error(ErrorContext(
                category=ErrorCategory.RESOURCE_CLEANUP,
                severity=ErrorSeverity.MEDIUM,
                message=f"Failed to clean up cluster {self.cluster_id}: {e}",
                exception=e
            ))
