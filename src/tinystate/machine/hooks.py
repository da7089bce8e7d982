"""Table-driven transition hooks.

:class:`HookTable` is a :class:`~tinystate.machine.listener.TransitionListener`
that looks callbacks up in a dict keyed by :class:`HookPoint` and state
token(s).  It lets an owner attach behaviour to specific states without
writing a listener subclass full of ``if state == ...`` branches.

Example
-------
::

    hooks = HookTable()

    @hooks.entering("running")
    def _start_workers() -> None:
        pool.start()

    hooks.register(HookPoint.AFTER_EVERY, audit_log.record)

    machine = StateMachine("idle", hooks)
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from tinystate.machine.listener import TransitionListener
from tinystate.machine.tokens import StateToken, normalize_state

logger = logging.getLogger(__name__)

StateHook = Callable[[], object]
"""Hook bound to one state or one pair: called with no arguments."""

GlobalHook = Callable[[str, str], object]
"""Hook fired on every transition: called with ``(from_state, to_state)``."""

_HookKey = tuple[str, ...]


class HookPoint(str, Enum):
    """The eight places in a transition where hooks run, in firing order."""

    BEFORE_EVERY = "before_every"
    LEAVING = "leaving"
    ENTERING = "entering"
    TRANSITION = "transition"
    AFTER_TRANSITION = "after_transition"
    AFTER_LEAVING = "after_leaving"
    AFTER_ENTERING = "after_entering"
    AFTER_EVERY = "after_every"


_GLOBAL_POINTS = frozenset({HookPoint.BEFORE_EVERY, HookPoint.AFTER_EVERY})
_PAIR_POINTS = frozenset({HookPoint.TRANSITION, HookPoint.AFTER_TRANSITION})


def _key_for(
    point: HookPoint,
    state: StateToken | None,
    to_state: StateToken | None,
) -> _HookKey:
    if point in _GLOBAL_POINTS:
        if state is not None or to_state is not None:
            raise ValueError(f"{point.value} hooks are not bound to a state")
        return ()
    if point in _PAIR_POINTS:
        if state is None or to_state is None:
            raise ValueError(f"{point.value} hooks need both state and to_state")
        return (normalize_state(state), normalize_state(to_state))
    if state is None or to_state is not None:
        raise ValueError(f"{point.value} hooks need exactly one state")
    return (normalize_state(state),)


class HookTable(TransitionListener):
    """Listener that dispatches through a registry of callbacks.

    Callbacks registered under the same point and key run in registration
    order.  Global points (``BEFORE_EVERY``, ``AFTER_EVERY``) receive
    ``(from_state, to_state)``; every other point is called with no
    arguments.
    """

    def __init__(self) -> None:
        self._hooks: dict[HookPoint, dict[_HookKey, list[Callable[..., object]]]] = {
            point: {} for point in HookPoint
        }

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        point: HookPoint,
        callback: Callable[..., object],
        state: StateToken | None = None,
        to_state: StateToken | None = None,
    ) -> Callable[..., object]:
        """Register *callback* at *point*.

        Parameters
        ----------
        point:
            Where in the transition the callback runs.
        callback:
            The callable to invoke.
        state:
            The state for leaving/entering points, or the source state for
            pair points.  Must be omitted for global points.
        to_state:
            The destination state for pair points only.

        Returns
        -------
        Callable
            *callback* itself, so ``register`` can back decorators.

        Raises
        ------
        ValueError
            If the state arguments do not fit *point*.
        """
        point = HookPoint(point)
        key = _key_for(point, state, to_state)
        self._hooks[point].setdefault(key, []).append(callback)
        logger.debug("Registered %s hook %r for %s", point.value, callback, key)
        return callback

    def unregister(
        self,
        point: HookPoint,
        callback: Callable[..., object],
        state: StateToken | None = None,
        to_state: StateToken | None = None,
    ) -> bool:
        """Remove a previously registered callback.

        Returns
        -------
        bool
            True if the callback was found and removed.
        """
        point = HookPoint(point)
        key = _key_for(point, state, to_state)
        callbacks = self._hooks[point].get(key, [])
        try:
            callbacks.remove(callback)
            return True
        except ValueError:
            return False

    def hooks_for(
        self,
        point: HookPoint,
        state: StateToken | None = None,
        to_state: StateToken | None = None,
    ) -> list[Callable[..., object]]:
        """Return a copy of the callbacks registered for *point* and key."""
        point = HookPoint(point)
        key = _key_for(point, state, to_state)
        return list(self._hooks[point].get(key, []))

    # Decorator helpers

    def before_every(self, callback: GlobalHook) -> GlobalHook:
        self.register(HookPoint.BEFORE_EVERY, callback)
        return callback

    def after_every(self, callback: GlobalHook) -> GlobalHook:
        self.register(HookPoint.AFTER_EVERY, callback)
        return callback

    def leaving(self, state: StateToken) -> Callable[[StateHook], StateHook]:
        return self._decorator(HookPoint.LEAVING, state)

    def entering(self, state: StateToken) -> Callable[[StateHook], StateHook]:
        return self._decorator(HookPoint.ENTERING, state)

    def after_leaving(self, state: StateToken) -> Callable[[StateHook], StateHook]:
        return self._decorator(HookPoint.AFTER_LEAVING, state)

    def after_entering(self, state: StateToken) -> Callable[[StateHook], StateHook]:
        return self._decorator(HookPoint.AFTER_ENTERING, state)

    def transitioning(
        self, from_state: StateToken, to_state: StateToken
    ) -> Callable[[StateHook], StateHook]:
        return self._decorator(HookPoint.TRANSITION, from_state, to_state)

    def after_transitioning(
        self, from_state: StateToken, to_state: StateToken
    ) -> Callable[[StateHook], StateHook]:
        return self._decorator(HookPoint.AFTER_TRANSITION, from_state, to_state)

    def _decorator(
        self,
        point: HookPoint,
        state: StateToken,
        to_state: StateToken | None = None,
    ) -> Callable[[StateHook], StateHook]:
        # Validate the key eagerly so a bad decorator fails at definition time.
        _key_for(point, state, to_state)

        def decorate(callback: StateHook) -> StateHook:
            self.register(point, callback, state, to_state)
            return callback

        return decorate

    # ------------------------------------------------------------------
    # TransitionListener
    # ------------------------------------------------------------------

    def _fire(self, point: HookPoint, key: _HookKey, *args: str) -> None:
        # Copy so a hook may register or unregister hooks while firing.
        for callback in list(self._hooks[point].get(key, ())):
            callback(*args)

    def on_before_every(self, from_state: str, to_state: str) -> None:
        self._fire(HookPoint.BEFORE_EVERY, (), from_state, to_state)

    def on_leaving(self, state: str) -> None:
        self._fire(HookPoint.LEAVING, (state,))

    def on_entering(self, state: str) -> None:
        self._fire(HookPoint.ENTERING, (state,))

    def on_transition(self, from_state: str, to_state: str) -> None:
        self._fire(HookPoint.TRANSITION, (from_state, to_state))

    def on_after_transition(self, from_state: str, to_state: str) -> None:
        self._fire(HookPoint.AFTER_TRANSITION, (from_state, to_state))

    def on_after_leaving(self, state: str) -> None:
        self._fire(HookPoint.AFTER_LEAVING, (state,))

    def on_after_entering(self, state: str) -> None:
        self._fire(HookPoint.AFTER_ENTERING, (state,))

    def on_after_every(self, from_state: str, to_state: str) -> None:
        self._fire(HookPoint.AFTER_EVERY, (), from_state, to_state)

    def __len__(self) -> int:
        return sum(
            len(callbacks)
            for by_key in self._hooks.values()
            for callbacks in by_key.values()
        )

    def __repr__(self) -> str:
        return f"HookTable(hooks={len(self)})"


__all__ = ["GlobalHook", "HookPoint", "HookTable", "StateHook"]
