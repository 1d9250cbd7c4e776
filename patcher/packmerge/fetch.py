# packmerge/fetch.py
from __future__ import annotations
import urllib.error, urllib.parse, urllib.request
from pathlib import Path

from . import __version__
from .errors import IoError, TransportError
from .hashes import HashFormat, verify
from .metadata import IndexFile
from .paths import join_under

USER_AGENT = f"packmerge/{__version__}"


def http_get(url: str) -> bytes:
    """Single GET, whole body. No retry and no timeout."""
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req) as r:
            return r.read()
    except urllib.error.HTTPError as e:
        raise TransportError(f"GET {url} failed: HTTP {e.code} {e.reason}") from e
    except (urllib.error.URLError, OSError) as e:
        raise TransportError(f"GET {url} failed: {e}") from e


def sibling_url(base_url: str, rel_path: str) -> str:
    """Replace the last path segment of base_url with rel_path.

    https://host/pack/pack.toml + mods/a.jar -> https://host/pack/mods/a.jar
    """
    parts = urllib.parse.urlsplit(base_url)
    head = parts.path.rsplit("/", 1)[0]
    path = f"{head}/{urllib.parse.quote(rel_path, safe='/')}"
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


def download_and_verify(url: str, expected: str, fmt: HashFormat) -> bytes:
    data = http_get(url)
    verify(data, expected, fmt, what=url)
    return data


def read_local(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise IoError(f"cannot read {path}: {e}") from e


class Fetcher:
    """Resolves index entries to bytes.

    A file present under the child pack's directory is the override and is
    returned as-is, without hash verification. Anything else comes from the
    parent pack's location and must match its declared hash.
    """

    def __init__(self, pack_base: Path, base_url: str, default_format: HashFormat):
        self.pack_base = Path(pack_base)
        self.base_url = base_url
        self.default_format = default_format

    def local_path(self, entry: IndexFile) -> Path:
        return join_under(self.pack_base, entry.file)

    def is_local(self, entry: IndexFile) -> bool:
        return self.local_path(entry).exists()

    def url_for(self, entry: IndexFile) -> str:
        return sibling_url(self.base_url, entry.file)

    def __call__(self, entry: IndexFile) -> bytes:
        if self.is_local(entry):
            return read_local(self.local_path(entry))
        fmt = entry.hash_format or self.default_format
        return download_and_verify(self.url_for(entry), entry.hash, fmt)
