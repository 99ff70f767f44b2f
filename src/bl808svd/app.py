from __future__ import annotations

from pathlib import Path
from typing import Optional

from bl808svd.core.catalog import default_catalog, load_catalog
from bl808svd.core.run import ExtractionRun, RunResult, find_repo_root
from bl808svd.svd.address_map import build_address_map
from bl808svd.svd.svd_writer import write_svd
from bl808svd.utils.logger import get_logger, setup_logging

log = get_logger(__name__)


def report(result: RunResult) -> None:
    for rec in result.extents():
        print(rec.as_csv())

    amap = build_address_map(result.peripherals)
    for a, b in amap.overlaps():
        log.warning("Address overlap: %s @0x%08X and %s @0x%08X", a.name, a.base_address, b.name, b.base_address)

    for o in result.failures:
        log.warning("Skipped %s: %s", o.entry.name, o.error)


def run_app(
    catalog_path: Optional[Path],
    root: Optional[Path],
    output: Optional[Path],
    jobs: int,
    log_level: str,
    quiet: bool,
) -> RunResult:
    setup_logging(level=log_level, quiet=quiet)

    catalog = load_catalog(catalog_path) if catalog_path else default_catalog()
    root = root if root is not None else find_repo_root()
    log.info("Catalog: %s", catalog_path or "built-in")
    log.info("Root: %s", root)

    result = ExtractionRun(catalog, root, jobs=jobs).execute()
    report(result)

    if output is not None:
        write_svd(result.device(catalog.device), output)
    return result
