"""
Tests for the harness facade
"""
from unittest.mock import patch

from cluster_chaos.main import ClusterChaosHarness
from cluster_chaos.models import ScenarioConfig
from conftest import FakeNodeFactory


class TestClusterChaosHarness:

    def test_overrides_seed_and_rounds(self, fast_config):
        factories = []

        def build(config):
            factories.append(FakeNodeFactory())
            return factories[-1]

        harness = ClusterChaosHarness(fast_config, factory_builder=build)
        result = harness.run_scenario(seed=3, total_rounds=2)

        assert result.success, result.error_message
        assert result.seed == 3
        assert result.rounds_completed == 2
        assert harness.last_config.seed == 3
        assert fast_config.seed == 42
        assert factories[0].cleaned_up

    def test_uses_configured_values(self, fast_config):
        harness = ClusterChaosHarness(fast_config, factory_builder=lambda config: FakeNodeFactory())

        result = harness.run_scenario()

        assert result.rounds_completed == fast_config.total_rounds
        assert harness.last_driver.config is fast_config

    @patch('cluster_chaos.main.DockerNodeFactory')
    def test_default_factory_is_docker(self, mock_factory_cls):
        harness = ClusterChaosHarness(ScenarioConfig())

        factory = harness.factory_builder(harness.config)

        mock_factory_cls.assert_called_once_with(harness.config.container)
        assert factory is mock_factory_cls.return_value
