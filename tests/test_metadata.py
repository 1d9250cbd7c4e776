from __future__ import annotations

from pathlib import Path

import pytest

from packmerge.errors import DecodeError, ManifestMissing
from packmerge.hashes import HashFormat
from packmerge.metadata import Index, IndexFile, Pack, read_toml

PACK = """
name = "Child"

[index]
file = "index.toml"
hash-format = "sha256"
hash = "abcd"

[options]
parent = "https://example.test/pack.toml"
"""

INDEX = """
hash-format = "sha1"

[[files]]
file = "mods/a.pw.toml"
hash = "11"
metafile = true

[[files]]
file = "config/b.json"
hash = "22"
hash-format = "murmur2"
"""


def test_pack_decodes_modelled_fields() -> None:
    pack = Pack.loads(PACK)
    assert pack.index.file == "index.toml"
    assert pack.index.hash_format is HashFormat.SHA256
    assert pack.index.hash == "abcd"
    assert pack.parent == "https://example.test/pack.toml"


def test_pack_without_options_has_no_parent() -> None:
    pack = Pack.loads('[index]\nfile = "i.toml"\nhash-format = "md5"\nhash = "x"\n')
    assert pack.parent is None


def test_index_decodes_and_reencodes_optional_fields() -> None:
    index = Index.loads(INDEX)
    assert index.hash_format is HashFormat.SHA1
    assert index.files == (
        IndexFile("mods/a.pw.toml", "11", None, True),
        IndexFile("config/b.json", "22", HashFormat.MURMUR2, None),
    )
    assert index.to_dict()["files"] == [
        {"file": "mods/a.pw.toml", "hash": "11", "metafile": True},
        {"file": "config/b.json", "hash": "22", "hash-format": "murmur2"},
    ]


def test_index_without_files_is_empty() -> None:
    assert Index.loads('hash-format = "sha256"\n').files == ()


@pytest.mark.parametrize(
    "text",
    [
        "not = [valid",
        'files = []\n',
        'hash-format = "crc32"\n',
        'hash-format = "sha256"\n[[files]]\nfile = "a"\n',
    ],
)
def test_index_decode_errors(text: str) -> None:
    with pytest.raises(DecodeError):
        Index.loads(text)


def test_pack_missing_index_field() -> None:
    with pytest.raises(DecodeError):
        Pack.loads('[index]\nfile = "index.toml"\nhash = "x"\n')


def test_read_toml_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ManifestMissing):
        read_toml(tmp_path / "index.toml")


def test_read_toml_rejects_non_utf8(tmp_path: Path) -> None:
    p = tmp_path / "pack.toml"
    p.write_bytes(b'name = "\xff"\n')
    with pytest.raises(DecodeError):
        read_toml(p)
