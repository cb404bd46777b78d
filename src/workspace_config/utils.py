"""Utility functions for workspace-config.

Value trees are nested ``dict[str, Any]`` mappings addressed with dotted keys
(``"editor.font.size"``). Everything here is pure: inputs are never modified
unless the function name says it adds to or removes from a tree.
"""

from collections.abc import Callable
from collections.abc import Mapping
from copy import deepcopy
from types import MappingProxyType
from typing import Any

_MISSING = object()


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge two value trees with overlay precedence.

    Recursively merges nested mappings. Non-mapping values in overlay
    completely replace corresponding values in base. ``None`` in overlay is
    treated as undefined and keeps the base value.

    Args:
        base: Base tree
        overlay: Overlay tree (takes precedence)

    Returns:
        New merged dictionary (base and overlay are not modified)

    Examples:
        >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
        >>> overlay = {"b": {"c": 20}, "e": 5}
        >>> deep_merge(base, overlay)
        {'a': 1, 'b': {'c': 20, 'd': 3}, 'e': 5}

        >>> deep_merge({"a": 1}, {"a": None})
        {'a': 1}
    """
    result = {key: thaw(value) for key, value in base.items()}

    for key, value in overlay.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = thaw(value)

    return result


def thaw(value: Any) -> Any:
    """Return a mutable deep copy of a (possibly frozen) value."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [thaw(item) for item in value]
    return deepcopy(value)


def deep_freeze(value: Any) -> Any:
    """Return a read-only deep copy of a value.

    Mappings become ``MappingProxyType`` and lists become tuples, so callers
    cannot mutate what the stored models hold.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: deep_freeze(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(deep_freeze(item) for item in value)
    return value


def equals(a: Any, b: Any) -> bool:
    """Value-based, type-aware equality for tree values.

    ``True`` and ``1`` are different configuration values; lists and tuples
    with equal items are the same value.
    """
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(equals(a[key], b[key]) for key in a)
    if isinstance(a, list | tuple) and isinstance(b, list | tuple):
        return len(a) == len(b) and all(equals(x, y) for x, y in zip(a, b))
    if type(a) is not type(b):
        return False
    return a == b


def look_up(tree: Any, key: str | None, default: Any = None) -> Any:
    """Get the value at a dotted key.

    A literal key containing dots wins over traversal. An empty key returns
    the whole tree.
    """
    if not key:
        return tree
    if isinstance(tree, Mapping) and key in tree:
        return tree[key]
    node = tree
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def add_to_value_tree(
    tree: dict[str, Any],
    key: str,
    value: Any,
    conflict_reporter: Callable[[str], None],
) -> None:
    """Set ``value`` at a dotted key, creating intermediate mappings.

    When a prefix of the key already holds a non-mapping value, the write is
    dropped and ``conflict_reporter`` receives a message instead.
    """
    segments = key.split(".")
    last = segments.pop()
    current = tree
    for index, segment in enumerate(segments):
        node = current.get(segment)
        if node is None:
            node = current[segment] = {}
        elif not isinstance(node, dict):
            prefix = ".".join(segments[: index + 1])
            conflict_reporter(f"Ignoring {key} as {prefix} is {node!r}")
            return
        current = node
    current[last] = value


def remove_from_value_tree(tree: dict[str, Any], key: str) -> None:
    """Remove a dotted key, pruning parent mappings left empty."""
    _remove_segments(tree, key.split("."))


def _remove_segments(tree: dict[str, Any], segments: list[str]) -> None:
    first, rest = segments[0], segments[1:]
    if not rest:
        tree.pop(first, None)
        return
    node = tree.get(first)
    if isinstance(node, dict):
        _remove_segments(node, rest)
        if not node:
            del tree[first]


def to_value_tree(flat: Mapping[str, Any], conflict_reporter: Callable[[str], None]) -> dict[str, Any]:
    """Expand a mapping whose keys may be dotted into a nested tree.

    Settings files are usually authored with flat keys
    (``{"editor.fontSize": 12}``); nested values are copied as-is.
    """
    tree: dict[str, Any] = {}
    for key, value in flat.items():
        add_to_value_tree(tree, str(key), thaw(value), conflict_reporter)
    return tree


def get_configuration_keys(tree: Mapping[str, Any], prefix: str = "") -> set[str]:
    """Collect the dotted paths of every leaf value in a tree."""
    keys: set[str] = set()
    for key, value in tree.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, Mapping) and value:
            keys |= get_configuration_keys(value, path)
        else:
            keys.add(path)
    return keys


def get_changed_keys(old: Mapping[str, Any], new: Mapping[str, Any], prefix: str = "") -> set[str]:
    """Compute the minimal set of dotted keys whose value differs.

    When a whole subtree is added, removed or replaced by a scalar, only the
    subtree's root key is reported.

    Examples:
        >>> get_changed_keys({"a": {"b": {"c": 1, "d": 2}}}, {"a": {"b": {"c": 5, "d": 2}}})
        {'a.b.c'}

        >>> sorted(get_changed_keys({"a": 1}, {"b": {"c": 1}}))
        ['a', 'b']
    """
    changed: set[str] = set()
    for key in old.keys() | new.keys():
        path = f"{prefix}.{key}" if prefix else key
        before = old.get(key, _MISSING)
        after = new.get(key, _MISSING)
        if before is _MISSING or after is _MISSING:
            changed.add(path)
        elif isinstance(before, Mapping) and isinstance(after, Mapping):
            changed |= get_changed_keys(before, after, path)
        elif not equals(before, after):
            changed.add(path)
    return changed
