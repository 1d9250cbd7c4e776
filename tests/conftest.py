from __future__ import annotations

import hashlib
from pathlib import Path

import pytest
import tomli_w

from packmerge import cli, fetch
from packmerge.errors import TransportError

PARENT_URL = "https://example.test/parent/pack.toml"


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class FakeRemote:
    """In-memory stand-in for the HTTP GET capability."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.requests: list[str] = []

    def add(self, url: str, data: bytes) -> None:
        self.files[url] = data

    def get(self, url: str) -> bytes:
        self.requests.append(url)
        if url not in self.files:
            raise TransportError(f"GET {url} failed: HTTP 404 Not Found")
        return self.files[url]


@pytest.fixture
def remote(monkeypatch: pytest.MonkeyPatch) -> FakeRemote:
    r = FakeRemote()
    monkeypatch.setattr(fetch, "http_get", r.get)
    monkeypatch.setattr(cli, "http_get", r.get)
    monkeypatch.setenv("PACKMERGE_TQDM", "1")
    return r


def publish_parent(remote: FakeRemote, files: dict[str, bytes], hash_format: str = "sha256",
                   extra_entries: list[dict] | None = None) -> dict:
    """Serve a parent pack (pack.toml, index.toml and files) under PARENT_URL."""
    base = PARENT_URL.rsplit("/", 1)[0]
    entries = []
    for rel, data in files.items():
        digest = hashlib.new(hash_format, data).hexdigest()
        entries.append({"file": rel, "hash": digest})
        remote.add(f"{base}/{rel}", data)
    entries.extend(extra_entries or [])
    index = {"hash-format": hash_format, "files": entries}
    index_bytes = tomli_w.dumps(index).encode("utf-8")
    remote.add(f"{base}/index.toml", index_bytes)
    pack = {
        "name": "Parent",
        "pack-format": "packwiz:1.1.0",
        "index": {"file": "index.toml", "hash-format": "sha256", "hash": sha256(index_bytes)},
        "versions": {"minecraft": "1.20.1"},
    }
    remote.add(PARENT_URL, tomli_w.dumps(pack).encode("utf-8"))
    return index


def write_child(root: Path, files: dict[str, bytes], hash_format: str = "sha256",
                parent: str | None = PARENT_URL) -> Path:
    """Write a child pack (pack.toml, index.toml and files) under root."""
    root.mkdir(parents=True, exist_ok=True)
    entries = []
    for rel, data in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        entries.append({"file": rel, "hash": hashlib.new(hash_format, data).hexdigest()})
    index_bytes = tomli_w.dumps({"hash-format": hash_format, "files": entries}).encode("utf-8")
    (root / "index.toml").write_bytes(index_bytes)
    pack: dict = {
        "name": "Child",
        "author": "someone",
        "version": "1.0.0",
        "pack-format": "packwiz:1.1.0",
        "index": {"file": "index.toml", "hash-format": "sha256", "hash": sha256(index_bytes)},
        "versions": {"minecraft": "1.20.1", "fabric": "0.15.0"},
        "options": {"acceptable-game-versions": ["1.20"]},
    }
    if parent is not None:
        pack["options"]["parent"] = parent
    (root / "pack.toml").write_bytes(tomli_w.dumps(pack).encode("utf-8"))
    return root / "pack.toml"
