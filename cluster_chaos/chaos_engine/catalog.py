"""
Action catalog - gate predicates and round resolution policies

Every chaos action carries a gate (a pure function of the topology and the
round index) and a resolution policy. `resolve` turns the pair
(policy, gate outcome) into an explicit decision, so the termination
behavior of every branch is plain data.
"""
import random
from dataclasses import dataclass
from typing import Callable, Dict, List
from ..models import ActionType, ResolutionPolicy
from .topology import TopologyModel


@dataclass(frozen=True)
class GateContext:
    """Everything a gate predicate may look at"""
    topology: TopologyModel
    round_index: int
    total_rounds: int
    server_limit: int


@dataclass(frozen=True)
class Resolution:
    """Decision taken for one draw"""
    execute: bool
    end_round: bool


@dataclass(frozen=True)
class ActionSpec:
    action: ActionType
    policy: ResolutionPolicy
    gate: Callable[[GateContext], bool]


def resolve(policy: ResolutionPolicy, gate_passed: bool) -> Resolution:
    """Map a policy and a gate outcome to (execute, end_round)"""
    if policy == ResolutionPolicy.RETRY_ON_GATE_FAIL:
        return Resolution(execute=gate_passed, end_round=gate_passed)
    if policy == ResolutionPolicy.TERMINATE_REGARDLESS:
        return Resolution(execute=gate_passed, end_round=True)
    if policy == ResolutionPolicy.EXECUTE_THEN_CONTINUE:
        return Resolution(execute=gate_passed, end_round=False)
    if policy == ResolutionPolicy.EXECUTE_OR_REDRAW:
        return Resolution(execute=gate_passed, end_round=gate_passed)
    raise ValueError(f"Unknown resolution policy: {policy}")


def _can_add(ctx: GateContext) -> bool:
    return ctx.topology.running_count() < ctx.server_limit


def _can_stop_or_remove(ctx: GateContext) -> bool:
    return ctx.topology.allow_stop_or_removal(ctx.round_index, ctx.total_rounds, ctx.server_limit)


def _meets_quorum(ctx: GateContext) -> bool:
    return ctx.topology.missing_for_quorum() <= 0


def _can_start(ctx: GateContext) -> bool:
    return ctx.topology.stopped_count() > 0 and ctx.topology.running_count() < ctx.server_limit


def _not_split(ctx: GateContext) -> bool:
    return not ctx.topology.has_split_brain


def _is_split(ctx: GateContext) -> bool:
    return ctx.topology.has_split_brain


def _has_disconnected(ctx: GateContext) -> bool:
    return bool(ctx.topology.disconnected)


def _has_running(ctx: GateContext) -> bool:
    return ctx.topology.running_count() > 0


def _always(ctx: GateContext) -> bool:
    return True


RETRY = ResolutionPolicy.RETRY_ON_GATE_FAIL
TERMINATE = ResolutionPolicy.TERMINATE_REGARDLESS
CONTINUE = ResolutionPolicy.EXECUTE_THEN_CONTINUE
REDRAW = ResolutionPolicy.EXECUTE_OR_REDRAW

DEFAULT_ACTION_SPECS: Dict[ActionType, ActionSpec] = {
    spec.action: spec for spec in [
        ActionSpec(ActionType.ADD_INSTANCE, RETRY, _can_add),
        ActionSpec(ActionType.REMOVE_INSTANCE, RETRY, _can_stop_or_remove),
        ActionSpec(ActionType.CREATE_USER, RETRY, _meets_quorum),
        ActionSpec(ActionType.CREATE_NODE, RETRY, _meets_quorum),
        ActionSpec(ActionType.STOP_INSTANCE, RETRY, _can_stop_or_remove),
        ActionSpec(ActionType.START_INSTANCE, RETRY, _can_start),
        ActionSpec(ActionType.KILL_INSTANCE, TERMINATE, _can_stop_or_remove),
        ActionSpec(ActionType.BACKUP_INSTANCE, REDRAW, _has_running),
        ActionSpec(ActionType.SPLIT_BRAIN, CONTINUE, _not_split),
        ActionSpec(ActionType.MERGE_BRAIN, CONTINUE, _is_split),
        # No guard: an empty running set fails at node selection time
        ActionSpec(ActionType.DISCONNECT_INSTANCE, TERMINATE, _always),
        ActionSpec(ActionType.CONNECT_INSTANCE, TERMINATE, _has_disconnected),
        ActionSpec(ActionType.SCHEMA_MIGRATION, RETRY, _meets_quorum),
    ]
}


class ActionCatalog:
    """Lookup of gates and policies, plus the uniform action draw"""

    def __init__(self, strict_round_termination: bool = True):
        self.strict_round_termination = strict_round_termination
        self.actions: List[ActionType] = list(ActionType)
        self.specs = dict(DEFAULT_ACTION_SPECS)

    def draw(self, rng: random.Random) -> ActionType:
        return self.actions[rng.randrange(len(self.actions))]

    def policy_for(self, action: ActionType) -> ResolutionPolicy:
        policy = self.specs[action].policy
        if policy == TERMINATE and not self.strict_round_termination:
            return RETRY
        return policy

    def gate_passes(self, action: ActionType, ctx: GateContext) -> bool:
        return self.specs[action].gate(ctx)

    def evaluate(self, action: ActionType, ctx: GateContext) -> Resolution:
        return resolve(self.policy_for(action), self.gate_passes(action, ctx))
