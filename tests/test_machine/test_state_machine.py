"""Tests for tinystate.machine.state_machine."""
from __future__ import annotations

from enum import Enum

import pytest

from tinystate.machine.listener import TransitionListener
from tinystate.machine.state_machine import StateMachine, TransitionPolicy
from tinystate.schema.errors import InvalidFlow, UnknownState


class Phase(str, Enum):
    STARTED = "started"
    RUNNING = "running"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sm() -> StateMachine:
    return StateMachine("started")


@pytest.fixture()
def cycle() -> StateMachine:
    machine = StateMachine("started")
    machine.permit_state("running", "stopped")
    machine.permit_transition(started="running", running="stopped", stopped="started")
    return machine


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_initial_state_is_known_and_current(self, sm: StateMachine) -> None:
        assert sm.is_known("started")
        assert sm.in_state("started")
        assert sm.state == "started"

    def test_flow_is_seeded_with_initial_state(self, sm: StateMachine) -> None:
        assert sm.flow_so_far() == ["started"]

    def test_accepts_a_listener(self) -> None:
        listener = TransitionListener()
        machine = StateMachine("started", listener)
        assert machine.listener is listener

    def test_enum_initial_state_is_normalised(self) -> None:
        machine = StateMachine(Phase.STARTED)
        assert machine.state == "started"
        assert machine.in_state("started")

    def test_rejects_non_token_initial_state(self) -> None:
        with pytest.raises(TypeError):
            StateMachine(42)  # type: ignore[arg-type]

    def test_default_policy_is_atomic(self, sm: StateMachine) -> None:
        assert sm.transition_policy is TransitionPolicy.ATOMIC

    def test_repr_contains_state(self, sm: StateMachine) -> None:
        assert "started" in repr(sm)


# ---------------------------------------------------------------------------
# permit_state
# ---------------------------------------------------------------------------


class TestPermitState:
    def test_makes_states_known(self, sm: StateMachine) -> None:
        first = sm.permit_state("closed")
        second = sm.permit_state("closed", "open")

        assert first == {"closed"}
        assert second == {"open"}
        assert sm.is_known("started")
        assert sm.is_known("closed")
        assert sm.is_known("open")

    def test_is_idempotent(self, sm: StateMachine) -> None:
        sm.permit_state("closed")
        before = len(sm.permitted_states)
        assert sm.permit_state("closed") == set()
        assert len(sm.permitted_states) == before

    def test_initial_state_is_not_reported_as_added(self, sm: StateMachine) -> None:
        assert sm.permit_state("started") == set()

    def test_does_not_permit_transitions_by_default(self, sm: StateMachine) -> None:
        sm.permit_state("running")
        assert sm.may_transition_to("running") is False
        with pytest.raises(InvalidFlow, match="Cannot change states from started to running"):
            sm.transition("running")

    def test_string_and_enum_are_the_same_state(self, sm: StateMachine) -> None:
        sm.permit_state(Phase.RUNNING)
        assert sm.is_known("running")
        assert sm.permit_state("running") == set()

    def test_states_are_case_sensitive(self, sm: StateMachine) -> None:
        assert sm.is_known("Started") is False

    def test_unknown_state_is_not_known(self, sm: StateMachine) -> None:
        assert sm.is_known("nowhere") is False

    def test_permitted_states_snapshot_is_immutable(self, sm: StateMachine) -> None:
        snapshot = sm.permitted_states
        assert isinstance(snapshot, frozenset)
        sm.permit_state("later")
        assert "later" not in snapshot


# ---------------------------------------------------------------------------
# permit_transition
# ---------------------------------------------------------------------------


class TestPermitTransition:
    def test_raises_on_unknown_source(self, sm: StateMachine) -> None:
        with pytest.raises(UnknownState) as exc_info:
            sm.permit_transition(unknown="started")
        assert exc_info.value.state == "unknown"

    def test_raises_on_unknown_destination(self, sm: StateMachine) -> None:
        with pytest.raises(UnknownState) as exc_info:
            sm.permit_transition(started="unknown")
        assert exc_info.value.state == "unknown"

    def test_returns_newly_permitted_pairs(self, sm: StateMachine) -> None:
        sm.permit_state("running")

        result = sm.permit_transition(started="running")
        assert result == {("started", "running")}

        adding_second_time = sm.permit_transition(started="running")
        assert isinstance(adding_second_time, set)
        assert adding_second_time == set()

    def test_accepts_positional_mapping(self, sm: StateMachine) -> None:
        sm.permit_state("running")
        assert sm.permit_transition({"started": "running"}) == {("started", "running")}

    def test_expands_collections_on_both_sides(self, sm: StateMachine) -> None:
        sm.permit_state("a", "b", "c")
        result = sm.permit_transition({("started", "a"): ["b", "c"]})
        assert result == {
            ("started", "b"),
            ("started", "c"),
            ("a", "b"),
            ("a", "c"),
        }

    def test_transition_is_possible_only_after_permission(self, sm: StateMachine) -> None:
        sm.permit_state("running")
        assert sm.may_transition_to("running") is False
        sm.permit_transition(started="running")
        assert sm.may_transition_to("running") is True
        sm.transition("running")
        assert sm.in_state("running")

    def test_self_transition_needs_explicit_permission(self, sm: StateMachine) -> None:
        with pytest.raises(InvalidFlow):
            sm.transition("started")

        sm.permit_transition(started="started")
        sm.transition("started")
        assert sm.flow_so_far() == ["started", "started"]


class TestTransitionPolicy:
    def test_atomic_policy_applies_nothing_on_failure(self) -> None:
        machine = StateMachine("started")
        machine.permit_state("running")
        with pytest.raises(UnknownState):
            machine.permit_transition({"started": "running", "running": "missing"})
        assert machine.permitted_transitions == frozenset()
        assert machine.may_transition_to("running") is False

    def test_per_pair_policy_keeps_earlier_pairs(self) -> None:
        machine = StateMachine("started", transition_policy=TransitionPolicy.PER_PAIR)
        machine.permit_state("running")
        with pytest.raises(UnknownState):
            machine.permit_transition({"started": "running", "running": "missing"})
        assert machine.permitted_transitions == frozenset({("started", "running")})
        assert machine.may_transition_to("running") is True

    def test_policy_accepts_plain_string(self) -> None:
        machine = StateMachine("started", transition_policy="per_pair")  # type: ignore[arg-type]
        assert machine.transition_policy is TransitionPolicy.PER_PAIR


# ---------------------------------------------------------------------------
# permit_states_and_transitions
# ---------------------------------------------------------------------------


class TestPermitStatesAndTransitions:
    def test_registers_states_and_transitions(self, sm: StateMachine) -> None:
        sm.permit_states_and_transitions(started=["rejected", "accepted"])
        assert sm.is_known("rejected")
        assert sm.is_known("accepted")
        assert sm.permitted_transitions == frozenset(
            {("started", "rejected"), ("started", "accepted")}
        )

    def test_returns_self_for_chaining(self, sm: StateMachine) -> None:
        result = sm.permit_states_and_transitions(started="running").permit_states_and_transitions(
            running="stopped"
        )
        assert result is sm
        sm.transition("running")
        sm.transition("stopped")
        assert sm.flow_so_far() == ["started", "running", "stopped"]

    def test_registers_unknown_sources(self, sm: StateMachine) -> None:
        sm.permit_states_and_transitions({"draft": "published"})
        assert sm.is_known("draft")
        assert ("draft", "published") in sm.permitted_transitions


# ---------------------------------------------------------------------------
# expect
# ---------------------------------------------------------------------------


class TestExpect:
    def test_returns_true_in_requisite_state(self, sm: StateMachine) -> None:
        assert sm.expect("started") is True

    def test_raises_in_other_state(self, sm: StateMachine) -> None:
        with pytest.raises(InvalidFlow) as exc_info:
            sm.expect("running")
        assert str(exc_info.value) == "Must be in running state, but was in started"
        assert exc_info.value.current_state == "started"
        assert exc_info.value.attempted_state == "running"
        assert exc_info.value.flow == ()

    def test_does_not_mutate(self, sm: StateMachine) -> None:
        with pytest.raises(InvalidFlow):
            sm.expect("running")
        assert sm.flow_so_far() == ["started"]


# ---------------------------------------------------------------------------
# transition
# ---------------------------------------------------------------------------


class TestTransition:
    def test_returns_previous_state(self, cycle: StateMachine) -> None:
        assert cycle.transition("running") == "started"

    def test_records_the_flow(self, cycle: StateMachine) -> None:
        cycle.transition("running")
        cycle.transition("stopped")
        cycle.transition("started")

        flow = cycle.flow_so_far()
        assert flow == ["started", "running", "stopped", "started"]

        flow.append("tampered")
        assert flow != cycle.flow_so_far()

    def test_unknown_state_raises_regardless_of_current(self, cycle: StateMachine) -> None:
        with pytest.raises(UnknownState):
            cycle.transition("exploded")
        cycle.transition("running")
        with pytest.raises(UnknownState) as exc_info:
            cycle.transition("exploded")
        assert exc_info.value.state == "exploded"

    def test_invalid_flow_leaves_machine_untouched(self, cycle: StateMachine) -> None:
        cycle.transition("running")
        with pytest.raises(InvalidFlow):
            cycle.transition("started")
        assert cycle.state == "running"
        assert cycle.flow_so_far() == ["started", "running"]

    def test_invalid_flow_message_contains_flow(self, cycle: StateMachine) -> None:
        cycle.transition("running")
        with pytest.raises(InvalidFlow) as exc_info:
            cycle.transition("started")
        message = str(exc_info.value)
        assert "from running to started" in message
        assert "flow so far: started > running" in message
        assert exc_info.value.flow == ("started", "running")

    def test_accepts_enum_tokens(self, cycle: StateMachine) -> None:
        assert cycle.transition(Phase.RUNNING) == "started"
        assert cycle.in_state(Phase.RUNNING)

    def test_valid_next_states(self, cycle: StateMachine) -> None:
        assert cycle.valid_next_states() == ["running"]
        cycle.permit_transition(started="stopped")
        assert cycle.valid_next_states() == ["running", "stopped"]


# ---------------------------------------------------------------------------
# transition_or_maintain
# ---------------------------------------------------------------------------


class TestTransitionOrMaintain:
    def test_stays_in_current_state(self) -> None:
        machine = StateMachine("perfect")
        assert machine.transition_or_maintain("perfect") is None
        assert machine.flow_so_far() == ["perfect"]

    def test_transitions_when_not_in_state(self) -> None:
        machine = StateMachine("perfect")
        machine.permit_state("perfect", "improving")
        machine.permit_transition(perfect="improving", improving="perfect")

        machine.transition_or_maintain("improving")
        assert machine.flow_so_far() == ["perfect", "improving"]

    def test_propagates_transition_errors(self) -> None:
        machine = StateMachine("perfect")
        machine.permit_state("improving")
        with pytest.raises(InvalidFlow):
            machine.transition_or_maintain("improving")
        with pytest.raises(UnknownState):
            machine.transition_or_maintain("unheard_of")
