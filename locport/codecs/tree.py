#!/usr/bin/env python3
"""
Record <-> object tree conversion for the nested JSON and YAML codecs.
"""

from typing import Any, Optional

from ..errors import MalformedKey, RecordError
from ..keypath import build_tree, flatten_tree, parse, render
from ..models import Record


def records_from_tree(data: Any, delimiter: str) -> list[Record]:
    """
    Flatten a decoded document into records with dotted keys.

    Paths that cannot be joined into a valid key (empty segments, a
    segment ending with the escape character) still produce a record; it
    carries the reason under metadata['malformed_key'] so reconciliation
    can skip it without failing the whole file.
    """
    records = []
    for path, text in flatten_tree(data):
        try:
            key = render(path, True, delimiter)
            metadata = {}
        except MalformedKey as e:
            key = delimiter.join(path)
            metadata = {'malformed_key': e.reason}
        records.append(Record(key=key, value=text, metadata=metadata))
    return records


def tree_from_records(
    records: list[Record],
    delimiter: str,
    issues: Optional[list[RecordError]] = None,
) -> dict:
    """
    Build the nested document for a list of records.

    Records whose keys are malformed or collide with another key are left
    out and reported through `issues` (or raised when issues is None).
    """
    pairs = []
    for record in records:
        try:
            pairs.append((parse(record.key, True, delimiter), record.value))
        except MalformedKey as e:
            if issues is None:
                raise
            issues.append(e)

    tree, conflicts = build_tree(pairs, delimiter)
    for _, conflict in conflicts:
        if issues is None:
            raise conflict
        issues.append(conflict)
    return tree
