# chore/ordered_map.py
"""
Order-preserving decoding of configuration mappings.

Task and option maps are decoded in source order because declaration order
drives default computation and interpolation precedence. Mappings are never
turned into hashed dicts on the way in: the YAML loader below builds a
MapSlice, a list of (key, value) pairs, so duplicate and even unhashable keys
survive until parse_ordered_map() validates them.

Plain scalars keep their source text: only null (and the `<<` merge key) is
resolved implicitly, so `3.10`, `0755` and `yes` reach the model as written.
Explicit tags (`!!int 3`) still construct typed values.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import yaml

from .exceptions import ConfigParseError

logger = logging.getLogger(__name__)

_MAPPING_TAG = yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG

_IMPLICIT_TAGS = ("tag:yaml.org,2002:null", "tag:yaml.org,2002:merge")


def _text_resolvers(resolver_cls: type) -> dict:
    """Implicit resolvers of `resolver_cls` without bool, int, float and timestamp."""
    return {
        first: [(tag, regexp) for tag, regexp in resolvers if tag in _IMPLICIT_TAGS]
        for first, resolvers in resolver_cls.yaml_implicit_resolvers.items()
    }


class MapSlice(list):
    """An ordered list of (key, value) pairs decoded from a mapping."""

    def keys(self) -> list[Any]:
        return [k for k, _ in self]

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value of the first pair whose key is `key`."""
        for k, v in self:
            if k == key:
                return v
        return default

    def __repr__(self) -> str:
        return f"MapSlice({list.__repr__(self)})"


# ─────────────────────────────────────────────────────────────────────────────
# YAML loader / dumper
# ─────────────────────────────────────────────────────────────────────────────
class OrderedLoader(yaml.SafeLoader):
    """SafeLoader that decodes every mapping into a MapSlice and plain scalars into str."""

    yaml_implicit_resolvers = _text_resolvers(yaml.SafeLoader)

    def construct_map_slice(self, node: yaml.Node) -> MapSlice:
        if not isinstance(node, yaml.MappingNode):
            raise yaml.constructor.ConstructorError(
                None, None, f"expected a mapping node, but found {node.id}", node.start_mark
            )
        self.flatten_mapping(node)
        pairs = MapSlice()
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=True)
            value = self.construct_object(value_node, deep=True)
            pairs.append((key, value))
        return pairs


OrderedLoader.add_constructor(_MAPPING_TAG, OrderedLoader.construct_map_slice)


class OrderedDumper(yaml.SafeDumper):
    """SafeDumper that writes MapSlice values as mappings, in order, without anchors."""

    yaml_implicit_resolvers = _text_resolvers(yaml.SafeDumper)

    def ignore_aliases(self, data: Any) -> bool:
        return True


def _represent_map_slice(dumper: OrderedDumper, data: MapSlice) -> yaml.Node:
    return dumper.represent_mapping(_MAPPING_TAG, list(data))


OrderedDumper.add_representer(MapSlice, _represent_map_slice)


def load_ordered(text: str | bytes) -> Any:
    """
    Decode YAML text, turning every mapping into a MapSlice.

    Raises:
        ConfigParseError: If the text is not valid YAML
    """
    try:
        return yaml.load(text, Loader=OrderedLoader)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"invalid YAML: {e}") from None


def dump_canonical(value: Any) -> str:
    """
    Re-serialize a decoded value to its canonical YAML text.

    A scalar is written as a single line with a trailing newline ("bar\\n").
    """
    text = yaml.dump(
        value,
        Dumper=OrderedDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    # PyYAML closes documents holding a bare scalar with an explicit end marker
    if text.endswith("\n...\n"):
        text = text[: -len("...\n")]
    return text


def from_mapping(value: Any) -> Any:
    """Recursively convert dicts (e.g. decoded TOML) into MapSlice, keeping insertion order."""
    if isinstance(value, Mapping):
        return MapSlice((k, from_mapping(v)) for k, v in value.items())
    if isinstance(value, list):
        return [from_mapping(v) for v in value]
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Parsing primitives
# ─────────────────────────────────────────────────────────────────────────────
def render_key(key: Any) -> str:
    """Render a mapping key for error messages."""
    if isinstance(key, str):
        return key
    if isinstance(key, MapSlice):
        return "{" + ", ".join(f"{render_key(k)}: {v!r}" for k, v in key) + "}"
    return repr(key)


def parse_ordered_map(
    pairs: Iterable[tuple[Any, Any]],
    assign: Callable[[str, str], None],
) -> list[str]:
    """
    Decode ordered (key, value) pairs one entity at a time.

    For each pair, in source order, the key is validated and assign(name, text)
    is called with the value re-serialized by dump_canonical(). The first error
    raised by assign propagates unchanged and the remaining pairs are skipped.

    Args:
        pairs: Ordered (key, raw value) pairs, typically a MapSlice
        assign: Callback decoding one entity; raises to abort

    Returns:
        The key names processed, in order. Duplicates are kept; detecting them
        is the caller's job.

    Raises:
        ConfigParseError: If a key is not a plain string
    """
    names: list[str] = []
    for key, value in pairs:
        if not isinstance(key, str):
            raise ConfigParseError(f"{render_key(key)} is not a valid key name")
        assign(key, dump_canonical(value))
        names.append(key)

    logger.debug(f"Parsed ordered map with {len(names)} entries")
    return names


def as_map_slice(value: Any, where: str) -> MapSlice:
    """Return `value` as a MapSlice, treating null as an empty mapping."""
    if value is None:
        return MapSlice()
    if isinstance(value, MapSlice):
        return value
    if isinstance(value, Mapping):
        return from_mapping(value)
    raise ConfigParseError(f"{where} must be a mapping, got {type(value).__name__}")


def decode_fields(value: Any, allowed: Iterable[str], where: str) -> dict[str, Any]:
    """
    Decode a fixed-field mapping into a dict.

    Raises:
        ConfigParseError: On a non-string, unknown or repeated field name
    """
    allowed = set(allowed)
    fields: dict[str, Any] = {}
    for key, item in as_map_slice(value, where):
        if not isinstance(key, str):
            raise ConfigParseError(f"{render_key(key)} is not a valid key name")
        if key not in allowed:
            raise ConfigParseError(
                f"unknown field '{key}' in {where} (valid fields: {', '.join(sorted(allowed))})"
            )
        if key in fields:
            raise ConfigParseError(f"field '{key}' is set more than once in {where}")
        fields[key] = item
    return fields
