"""State machine subpackage."""
from __future__ import annotations

from tinystate.machine.hooks import HookPoint, HookTable
from tinystate.machine.listener import CompositeListener, TransitionListener
from tinystate.machine.state_machine import StateMachine, Transition, TransitionPolicy
from tinystate.machine.tokens import StateToken, normalize_state

__all__ = [
    "CompositeListener",
    "HookPoint",
    "HookTable",
    "StateMachine",
    "StateToken",
    "Transition",
    "TransitionListener",
    "TransitionPolicy",
    "normalize_state",
]
