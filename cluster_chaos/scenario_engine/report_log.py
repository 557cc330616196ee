"""
Report Log - Append-only record of chaos actions and assertions
"""
import json
import time
import logging
from pathlib import Path
from typing import List, Dict, Any, Optional
from datetime import datetime
from ..interfaces import IClusterNode
from ..models import ActionType, ReportEntry, ScenarioResult

logger = logging.getLogger(__name__)

NO_NODE = "none"


class ReportLog:
    """
    Ordered record of every action attempt and every assertion outcome.
    Entries are immutable; the log only grows. At scenario end the log is
    rendered as text and written to disk next to a JSON copy.
    """

    def __init__(self, log_dir: str = "/tmp/cluster-chaos/logs"):
        self.log_dir = Path(log_dir)
        self.entries: List[ReportEntry] = []
        self.current_round: Optional[int] = None

    def begin_round(self, round_index: Optional[int]) -> None:
        self.current_round = round_index

    def log_action(self, action: ActionType, node: Optional[IClusterNode], message: str) -> ReportEntry:
        """Record an action attempt against a node (or none)"""
        logger.info(message)
        entry = ReportEntry(
            kind='action',
            tag=action.value,
            node_name=node.name if node is not None else NO_NODE,
            message=message,
            round_index=self.current_round,
            timestamp=time.time()
        )
        self.entries.append(entry)
        return entry

    def log_assertion(self, node: Optional[IClusterNode], message: str) -> ReportEntry:
        """Record a passed assertion for a node"""
        entry = ReportEntry(
            kind='assertion',
            tag='ASSERTION',
            node_name=node.name if node is not None else NO_NODE,
            message=message,
            round_index=self.current_round,
            timestamp=time.time()
        )
        self.entries.append(entry)
        return entry

    @property
    def actions(self) -> List[ReportEntry]:
        return [e for e in self.entries if e.kind == 'action']

    @property
    def assertions(self) -> List[ReportEntry]:
        return [e for e in self.entries if e.kind == 'assertion']

    def action_trace(self) -> List[str]:
        """Ordered action tags with their target node, usable as a golden trace"""
        return [f"{e.tag}:{e.node_name}" for e in self.actions]

    def render(self) -> str:
        lines = []
        for entry in self.entries:
            if entry.kind == 'action':
                lines.append(f"{entry.tag} ==> {entry.node_name} ===> {entry.message}")
            else:
                lines.append(f"ASSERTION ==> {entry.node_name} ==> {entry.message}")
        return "\n".join(lines) + ("\n" if lines else "")

    def to_dict(self) -> List[Dict[str, Any]]:
        return [
            {
                'kind': e.kind,
                'tag': e.tag,
                'node': e.node_name,
                'message': e.message,
                'round': e.round_index,
                'datetime': datetime.fromtimestamp(e.timestamp).isoformat()
            }
            for e in self.entries
        ]

    def flush(self, result: Optional[ScenarioResult] = None) -> str:
        """Render the report, write it to disk and return the text"""
        report = self.render()
        scenario_id = result.scenario_id if result else datetime.now().strftime('%Y%m%d_%H%M%S')

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            (self.log_dir / f"report_{scenario_id}.txt").write_text(report)

            data = {'scenario_id': scenario_id, 'entries': self.to_dict()}
            if result:
                data.update({
                    'success': result.success,
                    'seed': result.seed,
                    'rounds_completed': result.rounds_completed,
                    'error_message': result.error_message,
                    'final_topology': result.final_topology
                })
            with open(self.log_dir / f"{scenario_id}.json", 'w') as f:
                json.dump(data, f, indent=2)
            logger.info(f"Wrote report for {scenario_id} to {self.log_dir}")
        except OSError as e:
            logger.error(f"Failed to write report to disk: {e}")

        return report
