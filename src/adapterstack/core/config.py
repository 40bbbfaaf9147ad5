"""Expansion configuration and its YAML loader.

``ExpansionConfig`` is an immutable value handed to the expander and the
Python frontend. ``DEFAULT_CONFIG`` is the process-wide default and is never
mutated; a YAML file can derive a different value from it.

.. code-block:: yaml

    # adapterstack.yaml
    extra_markers: [Comparable, Serializable]
    attribute_names: [Adapter, adapter]
    qualified_parents: literal
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from adapterstack.core.models import DEFAULT_STACK_SUFFIX
from adapterstack.exceptions import ConfigError

CONFIG_FILENAME = "adapterstack.yaml"

# Structural tags that never count as dependencies.
DEFAULT_MARKERS: frozenset[str] = frozenset({
    "Sendable",
    "Equatable",
    "Hashable",
    "Codable",
    "Protocol",
    "Generic",
    "Capability",
})

QUALIFIED_DROP = "drop"
QUALIFIED_LITERAL = "literal"
_QUALIFIED_POLICIES = (QUALIFIED_DROP, QUALIFIED_LITERAL)

_KNOWN_KEYS = frozenset({
    "markers",
    "extra_markers",
    "attribute_names",
    "protocol_bases",
    "stack_suffix",
    "qualified_parents",
})


@dataclass(frozen=True)
class ExpansionConfig:
    """Settings shared by every expansion in a run.

    Attributes:
        markers: Marker capability names excluded from dependency lists.
        attribute_names: Decorator names recognised as the adapter annotation.
        protocol_bases: Base names that make a class a capability declaration.
        stack_suffix: Reserved suffix naming a protocol's stack.
        qualified_parents: ``"drop"`` ignores qualified and generic parent
            references; ``"literal"`` keeps them by their source text.
    """

    markers: frozenset[str] = DEFAULT_MARKERS
    attribute_names: tuple[str, ...] = ("Adapter",)
    protocol_bases: tuple[str, ...] = ("Protocol",)
    stack_suffix: str = DEFAULT_STACK_SUFFIX
    qualified_parents: str = QUALIFIED_DROP

    def __post_init__(self) -> None:
        if self.qualified_parents not in _QUALIFIED_POLICIES:
            raise ConfigError(
                f"qualified_parents must be one of {', '.join(_QUALIFIED_POLICIES)}, "
                f"got {self.qualified_parents!r}"
            )
        if not self.stack_suffix.isidentifier():
            raise ConfigError(f"stack_suffix must be an identifier, got {self.stack_suffix!r}")
        if not self.attribute_names:
            raise ConfigError("attribute_names must not be empty")

    @property
    def keeps_qualified(self) -> bool:
        return self.qualified_parents == QUALIFIED_LITERAL

    def is_marker(self, name: str) -> bool:
        return name in self.markers


DEFAULT_CONFIG = ExpansionConfig()


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return value


def config_from_dict(data: dict[str, Any], base: ExpansionConfig = DEFAULT_CONFIG) -> ExpansionConfig:
    """Derive a configuration from ``base`` using the keys present in ``data``.

    ``markers`` replaces the marker set; ``extra_markers`` extends it.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.
    """
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    changes: dict[str, Any] = {}
    markers = set(base.markers)
    if "markers" in data:
        markers = set(_string_list(data, "markers"))
    if "extra_markers" in data:
        markers.update(_string_list(data, "extra_markers"))
    changes["markers"] = frozenset(markers)

    for key in ("attribute_names", "protocol_bases"):
        if key in data:
            changes[key] = tuple(_string_list(data, key))
    for key in ("stack_suffix", "qualified_parents"):
        if key in data:
            if not isinstance(data[key], str):
                raise ConfigError(f"{key} must be a string")
            changes[key] = data[key]

    return dataclasses.replace(base, **changes)


def load_config(path: Path) -> ExpansionConfig:
    """Load an ``ExpansionConfig`` from a YAML file.

    An empty file yields ``DEFAULT_CONFIG``.

    Raises:
        ConfigError: If the file is unreadable, not valid YAML, or invalid.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return config_from_dict(data)


def discover_config(directory: Path) -> ExpansionConfig:
    """Return the config in ``directory/adapterstack.yaml``, or the default."""
    candidate = directory / CONFIG_FILENAME
    if candidate.is_file():
        return load_config(candidate)
    return DEFAULT_CONFIG
