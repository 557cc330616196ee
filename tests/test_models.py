"""
Tests for data models
"""
from cluster_chaos.models import (
    ActionType, ConsistencyReport, ContainerConfig, DomainFixtures, ScenarioConfig
)


class TestScenarioConfig:
    """Test scenario defaults"""

    def test_defaults(self):
        config = ScenarioConfig()

        assert config.total_rounds == 40
        assert config.server_limit == 8
        assert config.write_quorum == 2
        assert config.startup_timeout == 100.0
        assert config.round_settle_delay == 15.0
        assert config.merge_settle_delay == 120.0
        assert config.quorum_settle_delay == 10.0
        assert config.seed == 42
        assert config.cluster_name_prefix == "dummy"
        assert config.strict_round_termination is True
        assert isinstance(config.container, ContainerConfig)

    def test_container_config_is_not_shared(self):
        first = ScenarioConfig()
        second = ScenarioConfig()
        first.container.cluster_ports.append(9999)

        assert 9999 not in second.container.cluster_ports


class TestActionType:

    def test_draw_order(self):
        assert [a.value for a in ActionType] == [
            "ADD_INSTANCE", "REMOVE_INSTANCE", "CREATE_USER", "CREATE_NODE", "STOP_INSTANCE",
            "START_INSTANCE", "KILL_INSTANCE", "BACKUP_INSTANCE", "SPLIT_BRAIN", "MERGE_BRAIN",
            "DISCONNECT_INSTANCE", "CONNECT_INSTANCE", "SCHEMA_MIGRATION",
        ]


class TestDomainModels:

    def test_consistency_report(self):
        assert ConsistencyReport("n").consistent
        assert not ConsistencyReport("n", [{'type': 'x'}]).consistent

    def test_fixtures_start_empty(self):
        fixtures = DomainFixtures()

        assert fixtures.schema_uuid is None
        assert fixtures.project is None
        assert fixtures.user_uuids == []
