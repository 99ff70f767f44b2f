from __future__ import annotations

import argparse
import sys
from pathlib import Path

from bl808svd.app import run_app
from bl808svd.errors import ExtractionError


def main() -> None:
    p = argparse.ArgumentParser(prog="bl808svd", description="Build a CMSIS-SVD file from BL808 register headers and RST docs")
    p.add_argument("--catalog", type=Path, default=None, help="Peripheral catalog YAML (default: built-in BL808 catalog)")
    p.add_argument("--root", type=Path, default=None, help="Project root holding the SDK and docs (default: enclosing git repo)")
    p.add_argument("--output", type=Path, default=Path("output.svd"), help="SVD output path (default: output.svd)")
    p.add_argument("--no-svd", action="store_true", help="Only print the address report")
    p.add_argument("--jobs", type=int, default=1, help="Parallel workers, one peripheral each")

    # Logging
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--quiet", action="store_true", help="Reduce console output")

    args = p.parse_args()

    try:
        run_app(
            catalog_path=args.catalog,
            root=args.root,
            output=None if args.no_svd else args.output,
            jobs=args.jobs,
            log_level=args.log_level,
            quiet=args.quiet,
        )
    except ExtractionError as e:
        # catalog or root problems; per-peripheral failures never get here
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
