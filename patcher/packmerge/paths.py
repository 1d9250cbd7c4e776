# packmerge/paths.py
from __future__ import annotations
from pathlib import Path

from .errors import DecodeError, IoError, ManifestMissing, OutputNotEmpty

PACK_FILE_NAME = "pack.toml"


def resolve_pack_toml(arg: str | Path | None) -> Path:
    """pack.toml itself or its directory; defaults to the working directory."""
    p = Path(arg) if arg is not None else Path.cwd()
    if p.name != PACK_FILE_NAME:
        p = p / PACK_FILE_NAME
    if not p.exists():
        raise ManifestMissing(f"{PACK_FILE_NAME} doesn't exist: {p}")
    return p


def prepare_output(out: str | Path) -> Path:
    """Create the output directory if needed; it must end up empty."""
    out = Path(out)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except FileExistsError as e:
        raise IoError(f"output path exists and is not a directory: {out}") from e
    except OSError as e:
        raise IoError(f"cannot create output directory {out}: {e}") from e
    if any(out.iterdir()):
        raise OutputNotEmpty(f"directory is not empty: {out}")
    return out


def join_under(root: str | Path, rel: str) -> Path:
    """root / rel, refusing index paths that point outside root."""
    root = Path(root)
    p = root / rel
    if not p.resolve().is_relative_to(root.resolve()):
        raise DecodeError(f"index path escapes {root}: {rel!r}")
    return p
