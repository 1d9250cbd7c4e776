# packmerge/merge.py
from __future__ import annotations
from dataclasses import replace

from .metadata import Index, IndexFile


def merge_indexes(parent: Index, child: Index) -> Index:
    """Overlay the child index on top of the parent's.

    Entries are keyed by path; a child entry replaces the parent entry at the
    same path entirely. Parent entries without their own hash-format get the
    parent default stamped on when the two defaults differ, since the merged
    index carries the child's default.
    """
    merged: dict[str, IndexFile] = {}
    for entry in parent.files:
        if entry.hash_format is None and parent.hash_format != child.hash_format:
            entry = replace(entry, hash_format=parent.hash_format)
        merged[entry.file] = entry
    for entry in child.files:
        merged[entry.file] = entry
    return Index(hash_format=child.hash_format, files=tuple(merged.values()))
