# packmerge/main.py
from __future__ import annotations
import sys

from . import cli


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    return cli.run_cli(argv)


if __name__ == "__main__":
    raise SystemExit(main())
