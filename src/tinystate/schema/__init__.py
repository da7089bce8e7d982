"""Schema subpackage: the tinystate error taxonomy."""
from __future__ import annotations

from tinystate.schema.errors import (
    ConfigurationError,
    ErrorSeverity,
    InvalidFlow,
    TinyStateError,
    UnknownState,
)

__all__ = [
    "ConfigurationError",
    "ErrorSeverity",
    "InvalidFlow",
    "TinyStateError",
    "UnknownState",
]
