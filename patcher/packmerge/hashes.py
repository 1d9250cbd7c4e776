# packmerge/hashes.py
from __future__ import annotations
import hashlib
from enum import Enum

from .errors import HashMismatch

_M = 0x5BD1E995
_MASK = 0xFFFFFFFF
# bytes CurseForge strips before fingerprinting: \t \n \r and space
_WHITESPACE = frozenset((9, 10, 13, 32))


def cf_fingerprint(data: bytes) -> int:
    """CurseForge file fingerprint.

    MurmurHash2 (32-bit, seed 1) over the input with whitespace bytes removed.
    Not interchangeable with a plain murmur2: the filtering step and the seed
    both matter.
    """
    buf = bytes(b for b in data if b not in _WHITESPACE)
    length = len(buf)
    h = (1 ^ length) & _MASK

    i = 0
    while length - i >= 4:
        k = buf[i] | (buf[i + 1] << 8) | (buf[i + 2] << 16) | (buf[i + 3] << 24)
        k = (k * _M) & _MASK
        k ^= k >> 24
        k = (k * _M) & _MASK
        h = (h * _M) & _MASK
        h ^= k
        i += 4

    rest = length - i
    if rest == 3:
        h ^= buf[i + 2] << 16
    if rest >= 2:
        h ^= buf[i + 1] << 8
    if rest >= 1:
        h ^= buf[i]
        h = (h * _M) & _MASK

    h ^= h >> 13
    h = (h * _M) & _MASK
    h ^= h >> 15
    return h


class HashFormat(Enum):
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"
    MURMUR2 = "murmur2"
    MD5 = "md5"

    def digest(self, data: bytes) -> str:
        if self is HashFormat.MURMUR2:
            return str(cf_fingerprint(data))
        return hashlib.new(self.value, data).hexdigest()

    @classmethod
    def parse(cls, raw) -> "HashFormat":
        """Map a TOML hash-format string onto the enum (ValueError if unknown)."""
        if not isinstance(raw, str):
            raise ValueError(f"hash format must be a string, got {type(raw).__name__}")
        return cls(raw.lower())


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def verify(data: bytes, expected: str, fmt: HashFormat, what: str | None = None) -> None:
    actual = fmt.digest(data)
    if actual.lower() != expected.lower():
        raise HashMismatch(expected, actual, fmt, what)
