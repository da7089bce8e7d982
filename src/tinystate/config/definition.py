"""Declarative machine definition for tinystate.

``MachineDefinition`` is a Pydantic v2 model that acts as the validated
boundary between raw definitions (YAML files, JSON files, in-memory dicts)
and :class:`~tinystate.machine.state_machine.StateMachine`.

Shipped in this module
----------------------
- MachineDefinition   - Pydantic v2 model with a ``build`` factory

Definition layout
-----------------
::

    initial_state: started
    states: [running, stopped]
    transitions:
      started: running
      running: [stopped]
      stopped: started
    transition_policy: atomic

Every transition endpoint must be the initial state or listed in
``states``.

YAML 1.1 reads bare ``on``, ``off``, ``yes`` and ``no`` as booleans, so
states with those names must be quoted (``states: ["on", "off"]``);
unquoted they are rejected as non-string tokens.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from tinystate.machine.listener import TransitionListener
from tinystate.machine.state_machine import StateMachine, Transition, TransitionPolicy
from tinystate.machine.tokens import as_tokens, normalize_state


def _canonical(token: object) -> str:
    try:
        return normalize_state(token)
    except TypeError as exc:
        # Pydantic only reports ValueError/AssertionError as validation errors.
        raise ValueError(str(exc)) from exc


def _canonical_many(tokens: object) -> list[str]:
    try:
        return as_tokens(tokens)
    except TypeError as exc:
        raise ValueError(str(exc)) from exc


class MachineDefinition(BaseModel):
    """Validated, declarative description of a state machine.

    Parameters
    ----------
    initial_state:
        The state the machine starts in.
    states:
        Additional permitted states.
    transitions:
        Mapping from a source state to one or more destination states.
        A scalar destination is accepted and wrapped in a list.
    transition_policy:
        Partial-failure policy passed to the built machine.
    """

    model_config = {"extra": "forbid"}

    initial_state: str
    states: list[str] = Field(default_factory=list)
    transitions: dict[str, list[str]] = Field(default_factory=dict)
    transition_policy: TransitionPolicy = Field(default=TransitionPolicy.ATOMIC)

    @field_validator("initial_state", mode="before")
    @classmethod
    def _normalise_initial_state(cls, value: Any) -> Any:  # noqa: ANN401
        return _canonical(value)

    @field_validator("states", mode="before")
    @classmethod
    def _normalise_states(cls, value: Any) -> Any:  # noqa: ANN401
        if value is None:
            return []
        return _canonical_many(value)

    @field_validator("transitions", mode="before")
    @classmethod
    def _normalise_transitions(cls, value: Any) -> Any:  # noqa: ANN401
        """Canonicalise keys and wrap scalar destinations in a list."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        normalised: dict[str, list[str]] = {}
        for source, destinations in value.items():
            targets = normalised.setdefault(_canonical(source), [])
            for destination in _canonical_many(destinations if destinations is not None else []):
                if destination not in targets:
                    targets.append(destination)
        return normalised

    @model_validator(mode="after")
    def _check_endpoints_declared(self) -> "MachineDefinition":
        declared = set(self.all_states)
        for source, destination in self.pairs():
            for endpoint in (source, destination):
                if endpoint not in declared:
                    raise ValueError(
                        f"Transition {source!r} -> {destination!r} uses undeclared state {endpoint!r}"
                    )
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def all_states(self) -> list[str]:
        """Return the initial state followed by the declared states, without duplicates."""
        ordered: list[str] = [self.initial_state]
        for state in self.states:
            if state not in ordered:
                ordered.append(state)
        return ordered

    def pairs(self) -> list[Transition]:
        """Return every ``(from, to)`` pair in definition order."""
        return [
            (source, destination)
            for source, destinations in self.transitions.items()
            for destination in destinations
        ]

    def unreachable_states(self) -> list[str]:
        """Return the declared states no path from ``initial_state`` reaches, sorted."""
        successors: dict[str, list[str]] = {}
        for source, destination in self.pairs():
            successors.setdefault(source, []).append(destination)

        visited = {self.initial_state}
        pending = [self.initial_state]
        while pending:
            for destination in successors.get(pending.pop(), []):
                if destination not in visited:
                    visited.add(destination)
                    pending.append(destination)
        return sorted(set(self.all_states) - visited)

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    def build(self, listener: TransitionListener | None = None) -> StateMachine:
        """Create a fresh :class:`StateMachine` from this definition.

        Parameters
        ----------
        listener:
            Optional listener handed to the machine.

        Returns
        -------
        StateMachine
            A machine in ``initial_state`` with every declared state and
            transition permitted.
        """
        machine = StateMachine(
            self.initial_state,
            listener,
            transition_policy=self.transition_policy,
        )
        machine.permit_state(*self.states)
        machine.permit_transition(self.transitions)
        return machine
