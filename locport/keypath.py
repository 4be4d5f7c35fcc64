#!/usr/bin/env python3
"""
Key path model shared by all formats.

A term key is stored as a single string. Flat formats treat that string as
one opaque segment. Nested formats (JSON/YAML trees) split it on the
hierarchy delimiter:

    "user.greeting"      -> ("user", "greeting")
    "errors.0"           -> ("errors", "0")        # array item
    "file\\.name.label"  -> ("file.name", "label") # escaped delimiter

Only the delimiter can be escaped (with a backslash); any other backslash
is literal. A segment that ends with a backslash cannot be followed by
another segment, and empty segments are never allowed.
"""

import json
from typing import Any, Iterable, Optional

from .errors import KeyConflict, MalformedKey

KeyPath = tuple[str, ...]

ESCAPE = '\\'


def parse(raw: str, nested: bool, delimiter: str = '.') -> KeyPath:
    """
    Split a term key into a key path.

    Args:
        raw: Term key as stored
        nested: Whether the target format is hierarchical
        delimiter: Hierarchy delimiter

    Returns:
        Tuple of segments (a single segment in flat mode)

    Raises:
        MalformedKey: Empty key, or empty segment in nested mode
    """
    if raw == '':
        raise MalformedKey(raw, "key is empty")
    if not nested:
        return (raw,)

    segments = []
    current = []
    i = 0
    while i < len(raw):
        char = raw[i]
        if char == ESCAPE and i + 1 < len(raw) and raw[i + 1] == delimiter:
            current.append(delimiter)
            i += 2
            continue
        if char == delimiter:
            segments.append(''.join(current))
            current = []
        else:
            current.append(char)
        i += 1
    segments.append(''.join(current))

    if any(segment == '' for segment in segments):
        raise MalformedKey(raw, "empty segment in key path")
    return tuple(segments)


def render(path: KeyPath, nested: bool, delimiter: str = '.') -> str:
    """
    Join a key path back into a term key.

    Raises:
        MalformedKey: Empty path/segment, or a segment that would make the
            joined key ambiguous
    """
    if not path:
        raise MalformedKey('', "key path is empty")
    if not nested:
        return delimiter.join(path)

    escaped = []
    for i, segment in enumerate(path):
        if segment == '':
            raise MalformedKey(delimiter.join(path), "empty segment in key path")
        if segment.endswith(ESCAPE) and i < len(path) - 1:
            raise MalformedKey(
                delimiter.join(path),
                f"segment {segment!r} ends with an escape character",
            )
        escaped.append(segment.replace(delimiter, ESCAPE + delimiter))
    return delimiter.join(escaped)


def validate_term_key(key: str, max_length: int = 255) -> None:
    """
    Check the storage rules for a term key.

    Raises:
        MalformedKey: Empty, whitespace only, or longer than max_length
    """
    if not key:
        raise MalformedKey(key, "key is empty")
    if not key.strip():
        raise MalformedKey(key, "key contains only whitespace")
    if len(key) > max_length:
        raise MalformedKey(key, f"key is longer than {max_length} characters")


def scalar_text(value: Any) -> str:
    """Text form of a scalar leaf from a JSON/YAML document."""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)


def flatten_tree(obj: Any, prefix: KeyPath = ()) -> list[tuple[KeyPath, str]]:
    """
    Flatten a nested dict/list document into (path, text) pairs.

    List items become indexed segments ("items", "0"), scalars are
    converted with scalar_text. Empty containers produce nothing.
    """
    pairs = []
    if isinstance(obj, dict):
        for key, value in obj.items():
            pairs.extend(flatten_tree(value, prefix + (scalar_text(key),)))
    elif isinstance(obj, list):
        for i, item in enumerate(obj):
            pairs.extend(flatten_tree(item, prefix + (str(i),)))
    else:
        pairs.append((prefix, scalar_text(obj)))
    return pairs


def build_tree(
    pairs: Iterable[tuple[KeyPath, Any]],
    delimiter: str = '.',
) -> tuple[dict, list[tuple[int, KeyConflict]]]:
    """
    Build a nested dict from key paths, in input order.

    A path that runs through an existing leaf, or lands on an existing leaf
    or branch, is not inserted; it is returned as a conflict together with
    its position in the input. Nodes whose keys are exactly "0".."n-1" in
    order become lists (the root always stays a dict).

    Returns:
        (tree, conflicts)
    """
    root: dict = {}
    conflicts = []

    for index, (path, value) in enumerate(pairs):
        node = root
        conflict = None
        for depth, segment in enumerate(path[:-1]):
            child = node.get(segment)
            if child is None:
                child = node[segment] = {}
            elif not isinstance(child, dict):
                conflict = path[:depth + 1]
                break
            node = child

        if conflict is None:
            final = path[-1]
            if final in node:
                conflict = path if not isinstance(node[final], dict) else _first_leaf(path, node[final])
            else:
                node[final] = value

        if conflict is not None:
            conflicts.append((
                index,
                KeyConflict(render(path, True, delimiter), render(conflict, True, delimiter)),
            ))

    return _listify(root, is_root=True), conflicts


def _first_leaf(prefix: KeyPath, node: dict) -> KeyPath:
    while isinstance(node, dict) and node:
        segment, node = next(iter(node.items()))
        prefix = prefix + (segment,)
    return prefix


def _listify(node: Any, is_root: bool = False) -> Any:
    if not isinstance(node, dict):
        return node
    converted = {key: _listify(value) for key, value in node.items()}
    keys = list(converted)
    if not is_root and keys and keys == [str(i) for i in range(len(keys))]:
        return list(converted.values())
    return converted


class KeyIndex:
    """
    Incremental conflict detector over a set of hierarchical keys.

    Tracks every stored key path (leaves) and every proper prefix of a
    stored path (branches). A new path conflicts when it is itself a branch
    or when one of its proper prefixes is a leaf.
    """

    def __init__(self, delimiter: str = '.'):
        self.delimiter = delimiter
        self._leaves: set[KeyPath] = set()
        self._branches: dict[KeyPath, KeyPath] = {}

    def add(self, path: KeyPath) -> None:
        self._leaves.add(path)
        for depth in range(1, len(path)):
            self._branches.setdefault(path[:depth], path)

    def find_conflict(self, path: KeyPath) -> Optional[str]:
        """Return the rendered key that blocks `path`, or None."""
        if path in self._leaves:
            return None
        if path in self._branches:
            return render(self._branches[path], True, self.delimiter)
        for depth in range(1, len(path)):
            if path[:depth] in self._leaves:
                return render(path[:depth], True, self.delimiter)
        return None
