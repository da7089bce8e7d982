"""Validation helper for machine definitions.

Shipped in this module
----------------------
- MachineDefinition    - re-export with full Pydantic v2 validation
- validate_definition  - standalone validation helper
"""
from __future__ import annotations

from pydantic import ValidationError

from tinystate.config.definition import MachineDefinition
from tinystate.schema.errors import ConfigurationError

__all__ = ["MachineDefinition", "validate_definition"]


def validate_definition(data: dict[str, object]) -> MachineDefinition:
    """Validate a raw dict against the ``MachineDefinition`` schema.

    Parameters
    ----------
    data:
        Unvalidated key/value mapping.

    Returns
    -------
    MachineDefinition
        Validated and canonicalised definition.

    Raises
    ------
    ConfigurationError
        If the data fails Pydantic validation.  The original
        ``ValidationError`` is attached as the ``__cause__``.

    Examples
    --------
    >>> validate_definition({"initial_state": "idle"}).initial_state
    'idle'
    """
    try:
        return MachineDefinition.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Machine definition validation failed: {exc}",
            context={"errors": exc.errors()},
        ) from exc
