"""Transition listener interface.

A listener receives lifecycle notifications from a
:class:`~tinystate.machine.state_machine.StateMachine`.  For a transition
from ``A`` to ``B`` the machine calls, in order::

    on_before_every(A, B)
    on_leaving(A)
    on_entering(B)
    on_transition(A, B)
    # ..the machine switches to B here
    on_after_transition(A, B)
    on_after_leaving(A)
    on_after_entering(B)
    on_after_every(A, B)

Every hook is a no-op on :class:`TransitionListener`, so subclasses override
only the hooks they care about.  Return values are ignored and exceptions
propagate out of ``StateMachine.transition`` unchanged.

Shipped in this module
----------------------
- TransitionListener  - base class with no-op hooks
- CompositeListener   - forwards every hook to several listeners in order
"""
from __future__ import annotations

from typing import Iterable


class TransitionListener:
    """Base class for objects that observe state transitions.

    Example
    -------
    ::

        class Connection(TransitionListener):
            def on_entering(self, state: str) -> None:
                if state == "open":
                    self.socket.connect()
    """

    # ------------------------------------------------------------------
    # Before the state changes
    # ------------------------------------------------------------------

    def on_before_every(self, from_state: str, to_state: str) -> None:
        """Called first on every transition, before anything else."""

    def on_leaving(self, state: str) -> None:
        """Called while *state* is still current and about to be left."""

    def on_entering(self, state: str) -> None:
        """Called before the machine switches into *state*."""

    def on_transition(self, from_state: str, to_state: str) -> None:
        """Called last before the switch, for the exact pair."""

    # ------------------------------------------------------------------
    # After the state changed
    # ------------------------------------------------------------------

    def on_after_transition(self, from_state: str, to_state: str) -> None:
        """Called first after the switch, for the exact pair."""

    def on_after_leaving(self, state: str) -> None:
        """Called after *state* has been left."""

    def on_after_entering(self, state: str) -> None:
        """Called after *state* has become current."""

    def on_after_every(self, from_state: str, to_state: str) -> None:
        """Called last on every transition."""


class CompositeListener(TransitionListener):
    """Forward every hook to each wrapped listener in registration order.

    An exception from one listener stops the fan-out for that hook and
    propagates to the caller.

    Parameters
    ----------
    listeners:
        Listeners to notify, in order.
    """

    def __init__(self, listeners: Iterable[TransitionListener] = ()) -> None:
        self._listeners: list[TransitionListener] = list(listeners)

    def add(self, listener: TransitionListener) -> None:
        """Append *listener* to the fan-out list."""
        self._listeners.append(listener)

    def remove(self, listener: TransitionListener) -> bool:
        """Remove *listener*; return True if it was registered."""
        try:
            self._listeners.remove(listener)
            return True
        except ValueError:
            return False

    @property
    def listeners(self) -> tuple[TransitionListener, ...]:
        return tuple(self._listeners)

    def on_before_every(self, from_state: str, to_state: str) -> None:
        for listener in self._listeners:
            listener.on_before_every(from_state, to_state)

    def on_leaving(self, state: str) -> None:
        for listener in self._listeners:
            listener.on_leaving(state)

    def on_entering(self, state: str) -> None:
        for listener in self._listeners:
            listener.on_entering(state)

    def on_transition(self, from_state: str, to_state: str) -> None:
        for listener in self._listeners:
            listener.on_transition(from_state, to_state)

    def on_after_transition(self, from_state: str, to_state: str) -> None:
        for listener in self._listeners:
            listener.on_after_transition(from_state, to_state)

    def on_after_leaving(self, state: str) -> None:
        for listener in self._listeners:
            listener.on_after_leaving(state)

    def on_after_entering(self, state: str) -> None:
        for listener in self._listeners:
            listener.on_after_entering(state)

    def on_after_every(self, from_state: str, to_state: str) -> None:
        for listener in self._listeners:
            listener.on_after_every(from_state, to_state)

    def __repr__(self) -> str:
        return f"CompositeListener(listeners={self._listeners!r})"


__all__ = ["CompositeListener", "TransitionListener"]
