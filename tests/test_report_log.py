"""
Tests for the scenario report
"""
import json
import pytest
from dataclasses import FrozenInstanceError

from cluster_chaos.models import ActionType, ScenarioResult
from cluster_chaos.scenario_engine.report_log import ReportLog
from conftest import FakeClusterNode


class TestReportLog:

    def test_render_format(self, report_log):
        node = FakeClusterNode("node-1")
        report_log.log_action(ActionType.STOP_INSTANCE, node, "Stopping server: node-1")
        report_log.log_assertion(node, "Consistency asserted")
        report_log.log_action(ActionType.SPLIT_BRAIN, None, "Invoking split brain situation on cluster")

        assert report_log.render() == (
            "STOP_INSTANCE ==> node-1 ===> Stopping server: node-1\n"
            "ASSERTION ==> node-1 ==> Consistency asserted\n"
            "SPLIT_BRAIN ==> none ===> Invoking split brain situation on cluster\n"
        )

    def test_empty_render(self, report_log):
        assert report_log.render() == ""

    def test_entries_are_immutable(self, report_log):
        entry = report_log.log_action(ActionType.ADD_INSTANCE, FakeClusterNode("a"), "Added server a")

        with pytest.raises(FrozenInstanceError):
            entry.message = "changed"

    def test_round_index_follows_begin_round(self, report_log):
        node = FakeClusterNode("a")
        report_log.log_action(ActionType.ADD_INSTANCE, node, "Added server a")
        report_log.begin_round(4)
        report_log.log_assertion(node, "Consistency asserted")

        assert [e.round_index for e in report_log.entries] == [None, 4]

    def test_action_trace_and_filters(self, report_log):
        node = FakeClusterNode("a")
        report_log.log_action(ActionType.ADD_INSTANCE, node, "Added server a")
        report_log.log_assertion(node, "Consistency asserted")

        assert report_log.action_trace() == ["ADD_INSTANCE:a"]
        assert len(report_log.actions) == 1
        assert len(report_log.assertions) == 1

    def test_flush_writes_text_and_json(self, tmp_path):
        log = ReportLog(str(tmp_path / "out"))
        log.log_action(ActionType.BACKUP_INSTANCE, FakeClusterNode("a"), "Invoking backup on server a")
        result = ScenarioResult(
            scenario_id="dummyabc", success=True, start_time=0.0, end_time=1.0,
            rounds_completed=1, actions_applied=1, assertions=0, inconsistencies_found=0, seed=42
        )

        text = log.flush(result)

        assert (tmp_path / "out" / "report_dummyabc.txt").read_text() == text
        data = json.loads((tmp_path / "out" / "dummyabc.json").read_text())
        assert data['success'] is True
        assert data['seed'] == 42
        assert data['entries'][0]['tag'] == "BACKUP_INSTANCE"

    def test_flush_survives_unwritable_dir(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        log = ReportLog(str(blocker / "logs"))
        log.log_assertion(None, "Consistency asserted")

        assert log.flush() == "ASSERTION ==> none ==> Consistency asserted\n"
