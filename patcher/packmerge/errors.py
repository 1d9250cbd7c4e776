# packmerge/errors.py
from __future__ import annotations


class PackMergeError(Exception):
    """Base for every failure that aborts a run."""
    exit_code = 1


class ManifestMissing(PackMergeError):
    """A pack.toml or index file could not be found or read."""
    exit_code = 3


class DecodeError(PackMergeError):
    """A TOML document is malformed or misses a required field."""
    exit_code = 4


class TransportError(PackMergeError):
    """Remote GET failed at the network/HTTP layer."""
    exit_code = 5


class HashMismatch(PackMergeError):
    exit_code = 6

    def __init__(self, expected: str, actual: str, fmt, what: str | None = None):
        self.expected = expected
        self.actual = actual
        self.format = fmt
        self.what = what
        where = f" for {what}" if what else ""
        super().__init__(f"bad hash{where}: expected {fmt.value} {expected}, got {actual}")


class OutputNotEmpty(PackMergeError):
    exit_code = 7


class IoError(PackMergeError):
    """Local read/write/mkdir failure."""
    exit_code = 8
