# packmerge/materialize.py
from __future__ import annotations
import io, os, sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable

from tqdm import tqdm

from .errors import IoError
from .metadata import IndexFile
from .paths import join_under

MAXIMUM_CONCURRENT_OPERATIONS = 8

# fetch_one(entry) -> bytes; raises PackMergeError on failure
FetchOne = Callable[[IndexFile], bytes]


def _log(msg: str) -> None:
    """
    Safe log function:
    - tqdm.write keeps messages from tearing an active progress bar.
    - Falls back to print when tqdm can't write (no stderr in frozen builds).
    """
    try:
        tqdm.write(msg, file=_tqdm_file())
        return
    except Exception:
        pass
    if getattr(sys, "stderr", None) is not None:
        print(msg, file=sys.stderr)
    else:
        print(msg)


def _tqdm_file():
    """File-like object for tqdm; a sink when sys.stderr is None."""
    f = getattr(sys, "stderr", None)
    return f if (f is not None and hasattr(f, "write")) else io.StringIO()


def _tqdm_disable() -> bool:
    """
    Disable tqdm when there is no real stderr or when explicitly requested.
    Env override: PACKMERGE_TQDM=0 forces enable, =1 forces disable.
    """
    env = os.environ.get("PACKMERGE_TQDM")
    if env == "0":
        return False
    if env == "1":
        return True
    f = getattr(sys, "stderr", None)
    return not (f is not None and hasattr(f, "write"))


def write_entry(output_root: Path, entry: IndexFile, data: bytes) -> Path:
    out = join_under(output_root, entry.file)
    try:
        # concurrent workers may race on shared parents; exist_ok makes that a no-op
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)
    except OSError as e:
        raise IoError(f"cannot write {out}: {e}") from e
    return out


def _materialize_single(entry: IndexFile, output_root: Path, fetch_one: FetchOne) -> str:
    data = fetch_one(entry)
    write_entry(output_root, entry, data)
    return entry.file


def materialize(files: Iterable[IndexFile], output_root: str | Path, fetch_one: FetchOne,
                workers: int = MAXIMUM_CONCURRENT_OPERATIONS) -> int:
    """Fetch every entry and write it under output_root; returns the file count.

    The first failure is re-raised. Work that hasn't started yet is cancelled,
    results still in flight are dropped, files already written stay on disk.
    """
    entries = list(files)
    total = len(entries)
    output_root = Path(output_root)

    with tqdm(total=total, desc="Materializing files", unit="file",
              file=_tqdm_file(), disable=_tqdm_disable()) as bar:
        ex = ThreadPoolExecutor(max_workers=workers)
        try:
            futs = {ex.submit(_materialize_single, e, output_root, fetch_one): e for e in entries}
            for fut in as_completed(futs):
                if fut.exception() is not None:
                    _log(f"failed: {futs[fut].file}")
                fut.result()
                bar.update(1)
        except BaseException:
            ex.shutdown(wait=False, cancel_futures=True)
            raise
        else:
            ex.shutdown(wait=True)
    return total
