"""State-token canonicalisation.

Every state the machine sees passes through :func:`normalize_state` so that
different spellings of the same logical state compare equal.

Rules
-----
- ``str`` tokens are used as-is.  Comparison is case-sensitive and no
  whitespace is stripped.
- ``Enum`` members become their ``value`` when that value is a ``str``, and
  their ``name`` otherwise.  ``Phase.RUNNING = "running"`` and ``"running"``
  therefore name the same state.
- Anything else is rejected with ``TypeError``.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterator, Mapping, Union

StateToken = Union[str, Enum]
"""Anything accepted where a state is expected."""


def normalize_state(token: object) -> str:
    """Return the canonical ``str`` form of *token*.

    Raises
    ------
    TypeError
        If *token* is neither a ``str`` nor an ``Enum`` member.

    Examples
    --------
    >>> normalize_state("running")
    'running'
    """
    if isinstance(token, Enum):
        value = token.value
        return value if isinstance(value, str) else token.name
    if isinstance(token, str):
        return token
    raise TypeError(
        f"State tokens must be str or Enum members, got {type(token).__name__}: {token!r}"
    )


def as_tokens(one_or_more: object) -> list[str]:
    """Expand a scalar token or a collection of tokens into canonical tokens.

    A ``str`` or ``Enum`` member counts as a single token; any other iterable
    is expanded element by element, keeping its iteration order.
    """
    if isinstance(one_or_more, (str, Enum)):
        return [normalize_state(one_or_more)]
    try:
        items = iter(one_or_more)  # type: ignore[call-overload]
    except TypeError:
        # Not iterable: let normalize_state report the bad token.
        return [normalize_state(one_or_more)]
    return [normalize_state(item) for item in items]


def expand_pairs(
    mapping: Mapping[object, object] | None = None,
    /,
    **kwargs: object,
) -> Iterator[tuple[str, str]]:
    """Yield every ``(source, destination)`` pair implied by a mapping.

    Keys and values may each be one token or a collection of tokens.  Pairs
    are produced source-major, in mapping order followed by keyword order.

    Examples
    --------
    >>> list(expand_pairs({"created": ["accepted", "rejected"]}))
    [('created', 'accepted'), ('created', 'rejected')]
    """
    entries: list[tuple[object, object]] = list((mapping or {}).items())
    entries.extend(kwargs.items())
    for sources, destinations in entries:
        destination_tokens = as_tokens(destinations)
        for source in as_tokens(sources):
            for destination in destination_tokens:
                yield source, destination


__all__ = ["StateToken", "as_tokens", "expand_pairs", "normalize_state"]
