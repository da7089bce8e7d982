"""Config package for tinystate.

Provides declarative machine definitions and their loaders.
"""
from __future__ import annotations

from tinystate.config.definition import MachineDefinition
from tinystate.config.loader import DefinitionLoader
from tinystate.config.schema import validate_definition

__all__ = [
    "DefinitionLoader",
    "MachineDefinition",
    "validate_definition",
]
