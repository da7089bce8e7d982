"""tinystate - a tiny embeddable finite state machine.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick-start
-----------
>>> import tinystate
>>> machine = tinystate.StateMachine("started")
>>> machine.permit_states_and_transitions(started="running", running="stopped")  # doctest: +ELLIPSIS
StateMachine(...)
>>> machine.transition("running")
'started'
>>> machine.flow_so_far()
['started', 'running']
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from tinystate.schema.errors import (
    ConfigurationError,
    ErrorSeverity,
    InvalidFlow,
    TinyStateError,
    UnknownState,
)

# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------
from tinystate.machine.hooks import HookPoint, HookTable
from tinystate.machine.listener import CompositeListener, TransitionListener
from tinystate.machine.state_machine import StateMachine, Transition, TransitionPolicy
from tinystate.machine.tokens import StateToken, normalize_state

# ---------------------------------------------------------------------------
# Declarative definitions
# ---------------------------------------------------------------------------
from tinystate.config.definition import MachineDefinition
from tinystate.config.loader import DefinitionLoader
from tinystate.config.schema import validate_definition

__all__ = [
    "__version__",
    # Errors
    "ConfigurationError",
    "ErrorSeverity",
    "InvalidFlow",
    "TinyStateError",
    "UnknownState",
    # Machine
    "CompositeListener",
    "HookPoint",
    "HookTable",
    "StateMachine",
    "StateToken",
    "Transition",
    "TransitionListener",
    "TransitionPolicy",
    "normalize_state",
    # Definitions
    "DefinitionLoader",
    "MachineDefinition",
    "validate_definition",
]
