"""Machine definition loader for tinystate.

``DefinitionLoader`` reads machine definitions from YAML files, JSON files,
or in-memory mappings and returns validated ``MachineDefinition`` objects.

Shipped in this module
----------------------
- DefinitionLoader   - multi-source definition loader
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

import yaml

from tinystate.config.definition import MachineDefinition
from tinystate.config.schema import validate_definition
from tinystate.schema.errors import ConfigurationError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})
_JSON_SUFFIXES = frozenset({".json"})


class DefinitionLoader:
    """Loads ``MachineDefinition`` objects from multiple sources.

    All loader methods return a validated definition.  Call
    :meth:`MachineDefinition.build` on the result to get a machine.

    Examples
    --------
    >>> loader = DefinitionLoader()
    >>> definition = loader.load_mapping({"initial_state": "idle"})
    >>> definition.build().state
    'idle'
    """

    def load_yaml(self, path: str | Path) -> MachineDefinition:
        """Load a definition from a YAML file.

        Raises
        ------
        ConfigurationError
            If the file is missing, cannot be parsed, or fails validation.
        """
        resolved = Path(path)
        if not resolved.exists():
            raise ConfigurationError(
                f"YAML definition file not found: {resolved}",
                context={"path": str(resolved)},
            )
        try:
            with resolved.open(encoding="utf-8") as fh:
                raw: object = yaml.safe_load(fh)
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"Failed to parse YAML definition at {resolved}: {exc}",
                context={"path": str(resolved)},
            ) from exc

        logger.debug("Loaded YAML definition from %s", resolved)
        return self._validate(raw, resolved)

    def load_json(self, path: str | Path) -> MachineDefinition:
        """Load a definition from a JSON file.

        Raises
        ------
        ConfigurationError
            If the file is missing, cannot be parsed, or fails validation.
        """
        resolved = Path(path)
        if not resolved.exists():
            raise ConfigurationError(
                f"JSON definition file not found: {resolved}",
                context={"path": str(resolved)},
            )
        try:
            with resolved.open(encoding="utf-8") as fh:
                raw = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"Failed to parse JSON definition at {resolved}: {exc}",
                context={"path": str(resolved)},
            ) from exc

        logger.debug("Loaded JSON definition from %s", resolved)
        return self._validate(raw, resolved)

    def load_mapping(self, data: Mapping[str, object]) -> MachineDefinition:
        """Validate an in-memory mapping."""
        return validate_definition(dict(data))

    def load(self, path: str | Path) -> MachineDefinition:
        """Load a definition file, picking the parser from its suffix.

        Raises
        ------
        ConfigurationError
            If the suffix is neither YAML nor JSON, or loading fails.
        """
        resolved = Path(path)
        suffix = resolved.suffix.lower()
        if suffix in _YAML_SUFFIXES:
            definition = self.load_yaml(resolved)
        elif suffix in _JSON_SUFFIXES:
            definition = self.load_json(resolved)
        else:
            raise ConfigurationError(
                f"Unsupported definition file type {suffix or '(none)'!r}: {resolved}",
                context={"path": str(resolved)},
            )
        logger.info("Loaded machine definition from %s", resolved)
        return definition

    @staticmethod
    def _validate(raw: object, path: Path) -> MachineDefinition:
        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"Machine definition at {path} must be a mapping, got {type(raw).__name__}",
                context={"path": str(path)},
            )
        return validate_definition(dict(raw))
