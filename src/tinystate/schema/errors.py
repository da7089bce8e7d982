"""Error taxonomy for tinystate.

All exceptions raised by tinystate derive from ``TinyStateError`` so that
callers can catch the whole family with a single ``except TinyStateError``
clause while still being able to tell individual failure modes apart.

Shipped in this module
----------------------
- ErrorSeverity       - ordered severity enum
- TinyStateError      - root exception with severity and context payload
- UnknownState        - a state token that was never permitted
- InvalidFlow         - a transition or assertion that the flow does not allow
- ConfigurationError  - a machine definition failed to load or validate

All of these signal caller misuse.  The library never catches them itself.
"""
from __future__ import annotations

from enum import Enum
from typing import Sequence


class ErrorSeverity(str, Enum):
    """Ordered severity levels for ``TinyStateError`` instances.

    Severity is advisory metadata only; it lets logging and alerting code
    filter by impact without changing exception-handling semantics.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class TinyStateError(Exception):
    """Root exception for all tinystate failures.

    Parameters
    ----------
    message:
        Human-readable description of what went wrong.
    severity:
        Advisory ``ErrorSeverity`` level.  Defaults to ``HIGH``.
    context:
        Optional dict of structured metadata (states, flow, file paths)
        that helps diagnostics without parsing the message.

    Examples
    --------
    >>> try:
    ...     raise TinyStateError("something broke", ErrorSeverity.MEDIUM)
    ... except TinyStateError as exc:
    ...     print(exc.severity.value)
    medium
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.severity: ErrorSeverity = severity
        self.context: dict[str, object] = context or {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"message={str(self)!r}, "
            f"severity={self.severity.value!r})"
        )


class UnknownState(TinyStateError):
    """Raised when an operation references a state that was never permitted.

    Attributes
    ----------
    state:
        The offending state token, in canonical form when it could be
        canonicalised.
    """

    def __init__(self, state: object) -> None:
        self.state = state
        super().__init__(str(state), context={"state": state})


class InvalidFlow(TinyStateError):
    """Raised when the requested flow is not allowed.

    Covers transitions that were never permitted from the current state
    (including unregistered self-transitions) and failed ``expect`` checks.

    Attributes
    ----------
    current_state:
        The state the machine was in.
    attempted_state:
        The state that was requested or expected.
    flow:
        The flow recorded so far.  Empty for ``expect`` failures.
    """

    def __init__(
        self,
        message: str,
        current_state: str,
        attempted_state: str,
        flow: Sequence[str] = (),
    ) -> None:
        self.current_state = current_state
        self.attempted_state = attempted_state
        self.flow: tuple[str, ...] = tuple(flow)
        super().__init__(
            message,
            context={
                "current_state": current_state,
                "attempted_state": attempted_state,
                "flow": self.flow,
            },
        )


class ConfigurationError(TinyStateError):
    """Raised when a machine definition cannot be loaded or fails validation.

    Examples: missing file, unparsable YAML, transitions to undeclared states.
    """
