"""Allow ``python -m lead_importer leads.csv``; without arguments, show usage."""
from __future__ import annotations

import sys
from typing import Sequence

from .cli import build_parser
from .cli import main as run_import

PROG = "python -m lead_importer"


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if args:
        return run_import(args)
    build_parser(prog=PROG).print_help()
    return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
