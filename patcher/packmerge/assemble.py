# packmerge/assemble.py
from __future__ import annotations
import copy

from .errors import DecodeError
from .hashes import HashFormat, sha256_hex

# the merged index is always declared as sha256, whatever the inputs used
MERGED_INDEX_FORMAT = HashFormat.SHA256


def assemble(pack_document: dict, merged_index: bytes) -> dict:
    """Rewrite the child pack.toml table to describe the merged pack.

    Works on the raw TOML table rather than the typed Pack so fields this tool
    doesn't model (name, versions, ...) pass through untouched.
    """
    doc = copy.deepcopy(pack_document)
    index = doc.get("index")
    if not isinstance(index, dict):
        raise DecodeError("pack.toml: 'index' must be a table")
    options = doc.get("options")
    if isinstance(options, dict):
        options.pop("parent", None)
    index["hash"] = sha256_hex(merged_index)
    index["hash-format"] = MERGED_INDEX_FORMAT.value
    return doc
