# packmerge/cli.py
from __future__ import annotations
import argparse, sys
from pathlib import Path

from . import __version__
from .assemble import assemble
from .errors import DecodeError, PackMergeError
from .fetch import Fetcher, download_and_verify, http_get, sibling_url
from .materialize import MAXIMUM_CONCURRENT_OPERATIONS, materialize
from .merge import merge_indexes
from .metadata import Index, Pack, dumps_toml, read_toml, write_bytes
from .paths import PACK_FILE_NAME, join_under, prepare_output, resolve_pack_toml


def _decode_utf8(data: bytes, what: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"{what}: not valid UTF-8 ({e})") from e


def run(pack_arg: str | Path | None, output: str | Path) -> Path:
    """Build the merged pack into output; returns the written pack.toml path."""
    pack_toml = resolve_pack_toml(pack_arg)
    out = prepare_output(output)

    print("Loading local pack...")
    pack_doc = read_toml(pack_toml)
    pack = Pack.from_dict(pack_doc)
    pack_base = pack_toml.parent
    index = Index.from_dict(read_toml(pack_base / pack.index.file, pack.index.file), pack.index.file)

    if not pack.parent:
        raise DecodeError(f"{PACK_FILE_NAME}: pack must have a parent specified (options.parent)")

    print("Fetching parent pack:", pack.parent)
    parent = Pack.loads(_decode_utf8(http_get(pack.parent), "parent pack.toml"), "parent pack.toml")
    parent_index_url = sibling_url(pack.parent, parent.index.file)
    raw_parent_index = download_and_verify(parent_index_url, parent.index.hash, parent.index.hash_format)
    parent_index = Index.loads(_decode_utf8(raw_parent_index, parent_index_url), parent_index_url)

    merged = merge_indexes(parent_index, index)
    print(f"Merged index: {len(parent_index.files)} parent + {len(index.files)} local "
          f"-> {len(merged.files)} files")

    fetcher = Fetcher(pack_base, pack.parent, parent_index.hash_format)
    materialize(merged.files, out, fetcher, workers=MAXIMUM_CONCURRENT_OPERATIONS)

    merged_bytes = merged.dumps().encode("utf-8")
    write_bytes(join_under(out, pack.index.file), merged_bytes)

    final_pack = assemble(pack_doc, merged_bytes)
    out_pack = out / PACK_FILE_NAME
    write_bytes(out_pack, dumps_toml(final_pack).encode("utf-8"))
    print("Done →", out)
    return out_pack


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="packmerge",
        description="Generate a packwiz modpack based on another modpack",
    )
    p.add_argument("pack_toml", nargs="?", metavar=PACK_FILE_NAME,
                   help="Path to pack.toml (or its parent directory); current working directory by default")
    p.add_argument("-o", "--output", required=True,
                   help="Output path for the generated modpack; must be an empty directory, created if missing")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return p


def run_cli(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        run(args.pack_toml, args.output)
    except PackMergeError as e:
        print(f"error: {e}", file=sys.stderr)
        return e.exit_code
    return 0
