"""
Main entry point for the Cluster Chaos Harness
"""
from dataclasses import replace
from typing import Callable, Optional
from .interfaces import IClusterNodeFactory
from .cluster_orchestrator.docker_nodes import DockerNodeFactory
from .models import ScenarioConfig, ScenarioResult
from .scenario_engine.driver import ScenarioDriver


def docker_factory(config: ScenarioConfig) -> IClusterNodeFactory:
    return DockerNodeFactory(config.container)


class ClusterChaosHarness:
    """Main orchestrator for the Cluster Chaos Harness"""

    def __init__(self, config: Optional[ScenarioConfig] = None,
                 factory_builder: Callable[[ScenarioConfig], IClusterNodeFactory] = docker_factory):
        """
        Initialize the harness with a base configuration and a way to build node factories
        """
        self.config = config or ScenarioConfig()
        self.factory_builder = factory_builder
        self.last_config: Optional[ScenarioConfig] = None
        self.last_driver: Optional[ScenarioDriver] = None

    def run_scenario(self, seed: Optional[int] = None, total_rounds: Optional[int] = None) -> ScenarioResult:
        """
        Run one chaos scenario, overriding the configured seed or round count when given.
        """
        config = self.config
        if seed is not None:
            config = replace(config, seed=seed)
        if total_rounds is not None:
            config = replace(config, total_rounds=total_rounds)

        self.last_config = config
        self.last_driver = ScenarioDriver(config, self.factory_builder(config))
        return self.last_driver.run()
