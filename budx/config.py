"""Hierarchical configuration values addressed by dotted key paths."""

from __future__ import annotations

import os
import re
import typing
from collections.abc import Iterator, Mapping
from typing import IO, Any

from budx.scanner import FileScanner

_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

_ATTRIBUTE_GETTERS = (
    (bool, "get_bool"),
    (int, "get_int"),
    (float, "get_float"),
    (str, "get_str"),
    (list, "get_strings"),
)

_NAMED_TYPES = {
    "bool": bool,
    "int": int,
    "float": float,
    "str": str,
    "list": list,
    "List": list,
    "typing.List": list,
}


class Config(dict):
    """A nested mapping of configuration values.

    Values are looked up with dotted paths such as ``"server.http.port"``.
    Nested mappings stored in a ``Config`` are kept as ``Config`` objects so
    that sub-configurations share their data with the parent.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.update(*args, **kwargs)

    def __setitem__(self, key: str, value: Any) -> None:
        if isinstance(value, Mapping) and not isinstance(value, Config):
            value = Config(value)
        super().__setitem__(key, value)

    def update(self, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def __repr__(self) -> str:
        return f"Config({dict.__repr__(self)})"

    # lookups

    def _value(self, key: str) -> Any:
        if not key:
            return None
        node: Any = self
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def get_int(self, key: str, default: Any = None) -> Any:
        """Return the value at ``key`` as an int; floats are truncated."""
        value = self._value(key)
        if isinstance(value, float):
            return int(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return default

    def get_float(self, key: str, default: Any = None) -> Any:
        """Return the float at ``key`` or ``default``."""
        value = self._value(key)
        return value if isinstance(value, float) else default

    def get_str(self, key: str, default: Any = None) -> Any:
        """Return the string at ``key`` or ``default``."""
        value = self._value(key)
        return value if isinstance(value, str) else default

    def get_bool(self, key: str, default: Any = None) -> Any:
        """Return the boolean at ``key`` or ``default``."""
        value = self._value(key)
        return value if isinstance(value, bool) else default

    def _typed_list(self, key: str, kind: type, default: Any) -> Any:
        value = self._value(key)
        if not isinstance(value, (list, tuple)):
            return default
        items = [item for item in value if isinstance(item, kind)]
        return items if items else default

    def get_strings(self, key: str, default: Any = None) -> Any:
        """Return the strings of the list at ``key`` or ``default``."""
        return self._typed_list(key, str, default)

    def get_bools(self, key: str, default: Any = None) -> Any:
        """Return the booleans of the list at ``key`` or ``default``."""
        return self._typed_list(key, bool, default)

    # sub-configurations

    def sub_config(self, key: str) -> Config | None:
        """Return the mapping at ``key`` as a ``Config``, or ``None``."""
        return _as_config(self._value(key))

    def sub_configs(self) -> Iterator[tuple[str, Config | None]]:
        """Yield every top-level key with its sub-configuration, if any."""
        for key, value in list(self.items()):
            yield key, _as_config(value)

    def _sub_and_create(self, key: str) -> Config:
        value = self.get(key)
        if isinstance(value, Config):
            return value
        sub = Config(value) if isinstance(value, Mapping) else Config()
        self[key] = sub
        return self[key]

    # merging

    def merge(self, key: str, value: Any) -> None:
        """Merge ``value`` into the configuration at the dotted path ``key``.

        Scalars and lists of strings replace what is there; mappings are
        merged key by key.  An empty ``key`` merges a mapping into the root.
        Values of other types are ignored.
        """
        if not key:
            self._merge_mapping(value)
            return
        *parents, last = key.split(".")
        node = self
        for part in parents:
            node = node._sub_and_create(part)
        if isinstance(value, Mapping):
            node._sub_and_create(last)._merge_mapping(value)
        elif isinstance(value, (bool, int, float, str)):
            node[last] = value
        elif isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            node[last] = list(value)

    def _merge_mapping(self, source: Any) -> None:
        if not isinstance(source, Mapping):
            return
        for key, value in list(source.items()):
            self.merge(key, value)

    # objects

    def apply_to(self, obj: Any) -> Any:
        """Copy matching top-level values onto the attributes of ``obj``.

        A key ``httpPort`` matches an attribute named ``httpPort``,
        ``HttpPort`` or ``http_port``.  The attribute's current value (or its
        annotation when the value is ``None``) decides which type is read;
        keys whose values are of another type are skipped.
        """
        if obj is None:
            return obj
        hints = _annotations(type(obj))
        for key in list(self):
            if not key:
                continue
            name = _find_attribute(obj, key, hints)
            if name is None:
                continue
            getter = _getter_for(getattr(obj, name, None), hints.get(name))
            if getter is None:
                continue
            value = getattr(self, getter)(key)
            if value is not None:
                setattr(obj, name, value)
        return obj


def _as_config(value: Any) -> Config | None:
    if isinstance(value, Config):
        return value
    if isinstance(value, Mapping):
        return Config(value)
    return None


def _annotations(cls: type) -> dict[str, Any]:
    hints: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        annotations = vars(klass).get("__annotations__", {})
        if isinstance(annotations, Mapping):
            hints.update(annotations)
    return hints


def _find_attribute(obj: Any, key: str, hints: Mapping[str, Any]) -> str | None:
    candidates = (key, key[0].upper() + key[1:], _SNAKE_BOUNDARY.sub("_", key).lower())
    for name in candidates:
        if name in hints:
            return name
        if hasattr(obj, name) and not callable(getattr(obj, name)):
            return name
    return None


def _strip_optional(text: str) -> str:
    text = text.strip()
    if text.startswith(("Optional[", "typing.Optional[")) and text.endswith("]"):
        text = text[text.index("[") + 1 : -1].strip()
    parts = [part.strip() for part in text.split("|")]
    if len(parts) > 1 and "None" in parts:
        remaining = [part for part in parts if part != "None"]
        if len(remaining) == 1:
            return remaining[0]
    return text


def _kind_from_text(text: str) -> Any:
    text = _strip_optional(text)
    if "[" in text and text.endswith("]"):
        base = text[: text.index("[")].strip()
        inner = text[text.index("[") + 1 : -1].strip()
        kind = _NAMED_TYPES.get(base)
        if kind is list and inner != "str":
            return None
        return kind
    return _NAMED_TYPES.get(text)


def _getter_for(current: Any, hint: Any) -> str | None:
    if current is not None:
        kind: Any = type(current)
    elif isinstance(hint, str):
        kind = _kind_from_text(hint)
    else:
        kind = typing.get_origin(hint) or hint
        if kind is list and typing.get_args(hint) not in ((), (str,)):
            return None
    if not isinstance(kind, type):
        return None
    for base, getter in _ATTRIBUTE_GETTERS:
        if issubclass(kind, base):
            return getter
    return None


def load(file_name: str | os.PathLike[str]) -> Config:
    """Load a configuration file; relative paths are taken from the cwd."""
    path = os.path.abspath(os.fspath(file_name))
    config = Config()
    FileScanner().scan_file(path).apply(config)
    return config


def read(reader: IO[Any]) -> Config:
    """Load a configuration from an open text or binary stream."""
    config = Config()
    FileScanner().scan_stream(reader).apply(config)
    return config