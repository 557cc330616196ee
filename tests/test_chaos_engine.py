"""
Tests for the chaos engine rounds and action effects
"""
import random
import pytest
from unittest.mock import patch

from cluster_chaos.chaos_engine.engine import ChaosEngine
from cluster_chaos.chaos_engine.topology import TopologyModel
from cluster_chaos.models import ActionType, ScenarioConfig
from conftest import FakeClusterNode, make_nodes


@pytest.fixture
def engine(fast_config, topology, fake_factory, report_log, fixtures):
    return ChaosEngine(fast_config, topology, fake_factory, report_log, fixtures, "dummy1234")


def populate(topology, count):
    nodes = make_nodes(count)
    for node in nodes:
        topology.add_node(node)
    return nodes


class TestRounds:
    """Test draw and resolution loop"""

    def test_retry_redraws_until_gate_passes(self, engine, topology):
        populate(topology, 2)
        draws = [ActionType.START_INSTANCE, ActionType.START_INSTANCE, ActionType.ADD_INSTANCE]

        with patch.object(engine, 'draw_action', side_effect=draws):
            result = engine.run_round(0)

        assert result.draws == draws
        assert result.applied == [ActionType.ADD_INSTANCE]
        assert not result.wasted
        assert topology.running_count() == 3

    def test_terminate_regardless_wastes_round(self, engine, topology):
        populate(topology, 2)

        with patch.object(engine, 'draw_action', side_effect=[ActionType.KILL_INSTANCE]):
            result = engine.run_round(0)

        assert result.applied == []
        assert result.wasted
        assert topology.running_count() == 2
        assert topology.stopped_count() == 0

    def test_relaxed_termination_redraws_kill(self, fast_config, topology, fake_factory, report_log, fixtures):
        fast_config.strict_round_termination = False
        engine = ChaosEngine(fast_config, topology, fake_factory, report_log, fixtures, "dummy1234")
        populate(topology, 2)

        with patch.object(engine, 'draw_action',
                          side_effect=[ActionType.KILL_INSTANCE, ActionType.BACKUP_INSTANCE]):
            result = engine.run_round(0)

        assert result.applied == [ActionType.BACKUP_INSTANCE]
        assert not result.wasted

    def test_split_brain_continues_round(self, engine, topology):
        populate(topology, 2)
        draws = [ActionType.SPLIT_BRAIN, ActionType.MERGE_BRAIN, ActionType.CREATE_USER]

        with patch('cluster_chaos.chaos_engine.partitions.time.sleep'):
            with patch.object(engine, 'draw_action', side_effect=draws):
                result = engine.run_round(3)

        assert result.applied == draws
        assert not topology.has_split_brain

    def test_report_entries_carry_round(self, engine, topology, report_log):
        populate(topology, 2)

        with patch.object(engine, 'draw_action', side_effect=[ActionType.BACKUP_INSTANCE]):
            engine.run_round(7)

        assert report_log.actions[-1].round_index == 7
        assert report_log.actions[-1].tag == "BACKUP_INSTANCE"

    def test_same_seed_same_draws(self, fast_config, fake_factory, report_log, fixtures):
        first = ChaosEngine(fast_config, TopologyModel(2), fake_factory, report_log, fixtures, "c",
                            rng=random.Random(42))
        second = ChaosEngine(fast_config, TopologyModel(2), fake_factory, report_log, fixtures, "c",
                             rng=random.Random(42))

        assert [first.draw_action() for _ in range(50)] == [second.draw_action() for _ in range(50)]


class TestEffects:
    """Test the effect of each action on topology and collaborators"""

    def test_add_instance(self, engine, topology, fake_factory, report_log):
        node = engine.add_instance()

        assert topology.running == [node]
        assert node.ready
        cluster_id, name, prefix, init_cluster, quorum = fake_factory.create_args[-1]
        assert (cluster_id, prefix, init_cluster, quorum) == ("dummy1234", name, False, 2)
        assert report_log.action_trace() == [f"ADD_INSTANCE:{name}"]
        assert report_log.entries[-1].message == f"Added server {name}"

    def test_remove_instance(self, engine, topology):
        nodes = populate(topology, 3)

        removed = engine.remove_instance()

        assert removed in nodes
        assert removed.stopped
        assert topology.running_count() == 2
        assert topology.stopped_count() == 0

    def test_stop_instance(self, engine, topology):
        populate(topology, 3)

        stopped = engine.stop_instance()

        assert stopped.stopped
        assert topology.stopped == [stopped]

    def test_kill_instance(self, engine, topology):
        populate(topology, 3)

        killed = engine.kill_instance()

        assert killed.killed
        assert topology.stopped == [killed]

    def test_start_instance_reuses_name_and_data_path(self, engine, topology, fake_factory):
        nodes = populate(topology, 2)
        topology.move_to_stopped(nodes[0])

        restarted = engine.start_instance()

        assert restarted is not nodes[0]
        assert restarted.name == nodes[0].name
        assert restarted.data_path_prefix == nodes[0].data_path_prefix
        assert topology.running == [nodes[1], restarted]
        assert topology.stopped == []

    def test_create_user_records_fixture(self, engine, topology, fixtures):
        node = populate(topology, 1)[0]

        user_uuid = engine.create_user()

        assert fixtures.user_uuids == [user_uuid]
        assert node.client.called('create_user') == 1

    def test_create_node_under_project_root(self, engine, topology, fixtures):
        node = populate(topology, 1)[0]

        engine.create_node()

        assert ('create_node', 'Dummy', 'root-node-uuid', 'TestSchema') in node.client.calls
        assert len(fixtures.node_uuids) == 1

    def test_backup_instance(self, engine, topology):
        node = populate(topology, 1)[0]

        assert engine.backup_instance() is node
        assert node.client.called('invoke_backup') == 1

    def test_schema_migration_changes_description(self, engine, topology):
        node = populate(topology, 1)[0]

        engine.schema_migration()
        engine.schema_migration()

        updates = [c for c in node.client.calls if c[0] == 'update_schema']
        assert len(updates) == 2
        assert all(c[1] == "schema-uuid" for c in updates)
        assert all(c[2].startswith("Test schema") for c in updates)
        assert updates[0][2] != updates[1][2]

    def test_disconnect_and_connect(self, engine, topology):
        node = populate(topology, 1)[0]

        engine.disconnect_instance()
        assert topology.disconnected == [node]
        assert node.dropped_from == [()]

        engine.connect_instance()
        assert topology.disconnected == []
        assert node.resumed == 1

    def test_disconnect_with_no_running_nodes_fails(self, engine):
        with pytest.raises(ValueError):
            engine.disconnect_instance()

    def test_disconnect_tolerates_traffic_failure(self, engine, topology):
        node = populate(topology, 1)[0]
        node.traffic_error = "iptables missing"

        engine.disconnect_instance()

        assert topology.disconnected == [node]
        assert engine.error_handler.get_error_summary()['by_category'] == {'network_partition': 1}


class TestWriteQuorum:
    """Test quorum repair"""

    def test_reach_write_quorum_adds_missing_nodes(self, fast_config, fake_factory, report_log, fixtures):
        topology = TopologyModel(write_quorum=3)
        engine = ChaosEngine(fast_config, topology, fake_factory, report_log, fixtures, "c")
        topology.add_node(FakeClusterNode("master"))

        assert engine.reach_write_quorum()
        assert topology.running_count() == 3
        assert len(fake_factory.created) == 2

    def test_reach_write_quorum_noop_when_met(self, engine, topology, fake_factory):
        populate(topology, 2)

        assert not engine.reach_write_quorum()
        assert fake_factory.created == []
