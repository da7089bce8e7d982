"""A tiny embeddable state machine.

The machine lives in its own object and does not pollute the class of its
owner.  It knows a set of permitted states and permitted transitions,
records the flow of states it went through, and notifies an optional
:class:`~tinystate.machine.listener.TransitionListener` around every
transition.

Example
-------
::

    class Upload(TransitionListener):
        def __init__(self) -> None:
            self.automaton = StateMachine("initialized", self)
            self.automaton.permit_state("processing", "closing", "closed")
            self.automaton.permit_transition(
                initialized="processing", processing="closing"
            )
            self.automaton.permit_transition(closing="closed")

        def on_entering(self, state: str) -> None:
            ...

    upload = Upload()
    upload.automaton.transition("processing")
    upload.automaton.transition("initialized")   # raises InvalidFlow
    upload.automaton.transition("something_odd") # raises UnknownState

Hook exceptions
---------------
Exceptions raised by the listener are not caught.  If an after-hook raises,
the machine has already switched to the new state and stays there.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Mapping

from tinystate.machine.listener import TransitionListener
from tinystate.machine.tokens import StateToken, expand_pairs, normalize_state
from tinystate.schema.errors import InvalidFlow, UnknownState

logger = logging.getLogger(__name__)

Transition = tuple[str, str]
"""A permitted ``(from_state, to_state)`` pair."""


class TransitionPolicy(str, Enum):
    """How ``permit_transition`` behaves when a batch contains a bad pair.

    ATOMIC    : validate every pair first; a failing call changes nothing.
    PER_PAIR  : validate and apply pair by pair; pairs before the failing
                one stay applied.
    """

    ATOMIC = "atomic"
    PER_PAIR = "per_pair"


class StateMachine:
    """Track the state of an owner object and enforce its permitted flow.

    Parameters
    ----------
    initial_state:
        Starting state.  It is permitted automatically.
    listener:
        Optional object receiving transition hooks.  The machine borrows it
        and never manages its lifetime.
    transition_policy:
        Partial-failure behaviour of :meth:`permit_transition`.

    Not thread-safe: callers sharing a machine across threads must
    serialise access themselves.
    """

    def __init__(
        self,
        initial_state: StateToken,
        listener: TransitionListener | None = None,
        *,
        transition_policy: TransitionPolicy = TransitionPolicy.ATOMIC,
    ) -> None:
        state = normalize_state(initial_state)
        self._state: str = state
        self._flow: list[str] = [state]
        self._permitted_states: set[str] = {state}
        self._permitted_transitions: set[Transition] = set()
        self._listener = listener
        self._transition_policy = TransitionPolicy(transition_policy)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        """Return the current state."""
        return self._state

    @property
    def listener(self) -> TransitionListener | None:
        return self._listener

    @property
    def transition_policy(self) -> TransitionPolicy:
        return self._transition_policy

    @property
    def permitted_states(self) -> frozenset[str]:
        """Return a snapshot of all permitted states."""
        return frozenset(self._permitted_states)

    @property
    def permitted_transitions(self) -> frozenset[Transition]:
        """Return a snapshot of all permitted ``(from, to)`` pairs."""
        return frozenset(self._permitted_transitions)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def permit_state(self, *states: StateToken) -> set[str]:
        """Permit one or more states.

        Returns
        -------
        set[str]
            The states that were not known before this call.  Empty when all
            of them were already permitted.
        """
        states_to_permit = {normalize_state(state) for state in states}
        will_be_added = states_to_permit - self._permitted_states
        self._permitted_states |= states_to_permit
        if will_be_added:
            logger.debug("Permitted states %s", sorted(will_be_added))
        return will_be_added

    def permit_transition(
        self,
        transitions: Mapping[object, object] | None = None,
        /,
        **kwargs: object,
    ) -> set[Transition]:
        """Permit transitions between already permitted states.

        Keys and values may each be one state or a collection of states::

            machine.permit_transition(initialized="failed", running="closed")
            machine.permit_transition({"running": ["paused", "closed"]})

        Parameters
        ----------
        transitions:
            Mapping from source state(s) to destination state(s).
        **kwargs:
            Same, for sources that are valid Python identifiers.

        Returns
        -------
        set[tuple[str, str]]
            The pairs that were not permitted before this call.

        Raises
        ------
        UnknownState
            If either end of a pair is not a permitted state.  Under
            ``TransitionPolicy.ATOMIC`` nothing is applied; under
            ``PER_PAIR`` the pairs preceding the bad one stay applied.
        """
        pairs = list(expand_pairs(transitions, **kwargs))
        if self._transition_policy is TransitionPolicy.ATOMIC:
            for pair in pairs:
                self._check_pair(pair)

        additions: set[Transition] = set()
        for pair in pairs:
            if self._transition_policy is TransitionPolicy.PER_PAIR:
                self._check_pair(pair)
            if pair not in self._permitted_transitions:
                self._permitted_transitions.add(pair)
                additions.add(pair)

        if additions:
            logger.debug("Permitted transitions %s", sorted(additions))
        return additions

    def permit_states_and_transitions(
        self,
        transitions: Mapping[object, object] | None = None,
        /,
        **kwargs: object,
    ) -> StateMachine:
        """Permit states and the transitions between them in one call.

        ::

            machine.permit_states_and_transitions(created=["rejected", "accepted"])

        Every source and destination becomes a permitted state before the
        pair itself is permitted.

        Returns
        -------
        StateMachine
            ``self``, for chaining.
        """
        for source, destination in expand_pairs(transitions, **kwargs):
            self.permit_state(source, destination)
            self.permit_transition({source: destination})
        return self

    def _check_pair(self, pair: Transition) -> None:
        for state in pair:
            if state not in self._permitted_states:
                raise UnknownState(state)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def is_known(self, state: StateToken) -> bool:
        """Return True if *state* is a permitted state."""
        return normalize_state(state) in self._permitted_states

    def may_transition_to(self, to_state: StateToken) -> bool:
        """Return True if a transition from the current state to *to_state* is permitted."""
        to_state = normalize_state(to_state)
        return (
            to_state in self._permitted_states
            and (self._state, to_state) in self._permitted_transitions
        )

    def in_state(self, requisite_state: StateToken) -> bool:
        """Return True if the machine is currently in *requisite_state*."""
        return self._state == normalize_state(requisite_state)

    def expect(self, requisite_state: StateToken) -> bool:
        """Ensure the machine is in *requisite_state*.

        Returns
        -------
        bool
            Always True.

        Raises
        ------
        InvalidFlow
            If the machine is in any other state.
        """
        requisite_state = normalize_state(requisite_state)
        if requisite_state != self._state:
            raise InvalidFlow(
                f"Must be in {requisite_state} state, but was in {self._state}",
                current_state=self._state,
                attempted_state=requisite_state,
            )
        return True

    def valid_next_states(self) -> list[str]:
        """Return the states reachable from the current state, sorted."""
        return sorted(to for frm, to in self._permitted_transitions if frm == self._state)

    def flow_so_far(self) -> list[str]:
        """Return a copy of the states the machine went through, oldest first."""
        return list(self._flow)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transition(self, new_state: StateToken) -> str:
        """Transition to *new_state*.

        Transitioning to the current state is an ordinary transition and
        needs an explicit ``(state, state)`` permission.  Use
        :meth:`transition_or_maintain` to stay put instead.

        Returns
        -------
        str
            The state the machine has just left.

        Raises
        ------
        UnknownState
            If *new_state* is not a permitted state.
        InvalidFlow
            If the transition from the current state is not permitted.  The
            machine is left untouched.
        """
        new_state = normalize_state(new_state)

        if not self.is_known(new_state):
            raise UnknownState(new_state)

        if not self.may_transition_to(new_state):
            raise InvalidFlow(
                f"Cannot change states from {self._state} to {new_state} "
                f"(flow so far: {' > '.join(self._flow)})",
                current_state=self._state,
                attempted_state=new_state,
                flow=self._flow,
            )

        if self._listener is not None:
            self._dispatch_before_transition(self._listener, new_state)

        previous = self._state
        self._state = new_state
        self._flow.append(new_state)
        logger.debug("Transitioned %s -> %s", previous, new_state)

        if self._listener is not None:
            self._dispatch_after_transition(self._listener, previous)
        return previous

    def transition_or_maintain(self, new_state: StateToken) -> None:
        """Transition to *new_state* unless the machine is already in it.

        Raises
        ------
        UnknownState, InvalidFlow
            As :meth:`transition`, when a transition has to happen.
        """
        if self.in_state(new_state):
            return
        self.transition(new_state)

    # ------------------------------------------------------------------
    # Listener dispatch
    # ------------------------------------------------------------------

    def _dispatch_before_transition(
        self, listener: TransitionListener, to_state: str
    ) -> None:
        from_state = self._state
        listener.on_before_every(from_state, to_state)
        listener.on_leaving(from_state)
        listener.on_entering(to_state)
        listener.on_transition(from_state, to_state)

    def _dispatch_after_transition(
        self, listener: TransitionListener, from_state: str
    ) -> None:
        to_state = self._state
        listener.on_after_transition(from_state, to_state)
        listener.on_after_leaving(from_state)
        listener.on_after_entering(to_state)
        listener.on_after_every(from_state, to_state)

    def __repr__(self) -> str:
        return (
            f"StateMachine(state={self._state!r}, "
            f"states={len(self._permitted_states)}, "
            f"transitions={len(self._permitted_transitions)})"
        )


__all__ = ["StateMachine", "Transition", "TransitionPolicy"]
