# packmerge/metadata.py
from __future__ import annotations
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import tomli_w

from .errors import DecodeError, IoError, ManifestMissing
from .hashes import HashFormat


def loads_toml(text: str, what: str = "document") -> dict:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise DecodeError(f"{what}: invalid TOML ({e})") from e


def dumps_toml(doc: dict) -> str:
    return tomli_w.dumps(doc)


def read_toml(path: str | Path, what: str | None = None) -> dict:
    """Read and decode a local TOML file."""
    p = Path(path)
    what = what or p.name
    if not p.is_file():
        raise ManifestMissing(f"{what} doesn't exist: {p}")
    try:
        raw = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"{what}: not valid UTF-8 ({e})") from e
    except OSError as e:
        raise ManifestMissing(f"cannot read {what}: {e}") from e
    return loads_toml(raw, what)


def _require(table: dict, key: str, what: str):
    if key not in table:
        raise DecodeError(f"{what}: missing required field '{key}'")
    return table[key]


def _require_str(table: dict, key: str, what: str) -> str:
    value = _require(table, key, what)
    if not isinstance(value, str):
        raise DecodeError(f"{what}: field '{key}' must be a string")
    return value


def _hash_format(raw, what: str) -> HashFormat:
    try:
        return HashFormat.parse(raw)
    except ValueError as e:
        raise DecodeError(f"{what}: unsupported hash-format {raw!r}") from e


@dataclass(frozen=True)
class IndexFile:
    file: str
    hash: str
    hash_format: HashFormat | None = None
    metafile: bool | None = None

    @staticmethod
    def from_dict(data: dict, what: str = "index") -> "IndexFile":
        if not isinstance(data, dict):
            raise DecodeError(f"{what}: file entries must be tables")
        fmt = data.get("hash-format")
        metafile = data.get("metafile")
        if metafile is not None and not isinstance(metafile, bool):
            raise DecodeError(f"{what}: field 'metafile' must be a boolean")
        return IndexFile(
            file=_require_str(data, "file", what),
            hash=_require_str(data, "hash", what),
            hash_format=_hash_format(fmt, what) if fmt is not None else None,
            metafile=metafile,
        )

    def to_dict(self) -> dict:
        out: dict = {"file": self.file, "hash": self.hash}
        if self.hash_format is not None:
            out["hash-format"] = self.hash_format.value
        if self.metafile is not None:
            out["metafile"] = self.metafile
        return out


@dataclass(frozen=True)
class Index:
    hash_format: HashFormat
    files: tuple[IndexFile, ...] = field(default_factory=tuple)

    @staticmethod
    def from_dict(data: dict, what: str = "index") -> "Index":
        files = data.get("files") or []
        if not isinstance(files, list):
            raise DecodeError(f"{what}: 'files' must be an array of tables")
        return Index(
            hash_format=_hash_format(_require(data, "hash-format", what), what),
            files=tuple(IndexFile.from_dict(f, what) for f in files),
        )

    @staticmethod
    def loads(text: str, what: str = "index") -> "Index":
        return Index.from_dict(loads_toml(text, what), what)

    def to_dict(self) -> dict:
        return {
            "hash-format": self.hash_format.value,
            "files": [f.to_dict() for f in self.files],
        }

    def dumps(self) -> str:
        return dumps_toml(self.to_dict())


@dataclass(frozen=True)
class PackIndex:
    file: str
    hash_format: HashFormat
    hash: str


@dataclass(frozen=True)
class Pack:
    """Typed view of the pack.toml fields the merge actually reads."""
    index: PackIndex
    parent: str | None = None

    @staticmethod
    def from_dict(data: dict, what: str = "pack.toml") -> "Pack":
        index = _require(data, "index", what)
        if not isinstance(index, dict):
            raise DecodeError(f"{what}: 'index' must be a table")
        options = data.get("options") or {}
        if not isinstance(options, dict):
            raise DecodeError(f"{what}: 'options' must be a table")
        parent = options.get("parent")
        if parent is not None and not isinstance(parent, str):
            raise DecodeError(f"{what}: 'options.parent' must be a string")
        return Pack(
            index=PackIndex(
                file=_require_str(index, "file", f"{what} [index]"),
                hash_format=_hash_format(_require(index, "hash-format", f"{what} [index]"), what),
                hash=_require_str(index, "hash", f"{what} [index]"),
            ),
            parent=parent,
        )

    @staticmethod
    def loads(text: str, what: str = "pack.toml") -> "Pack":
        return Pack.from_dict(loads_toml(text, what), what)


def write_bytes(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise IoError(f"cannot write {path}: {e}") from e
