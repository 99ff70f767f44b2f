from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from bl808svd.core.catalog import Catalog, CatalogEntry, DeviceInfo, SourceRef
from bl808svd.errors import CatalogError, ExtractionError, PathLike, SourceUnavailable
from bl808svd.parsers.c_header import append_registers_from_c_header, peripheral_from_c_header
from bl808svd.parsers.doc_rst import append_registers_from_doc_rst, peripheral_from_doc_rst
from bl808svd.svd.address_map import ExtentRecord, extent_record
from bl808svd.svd.model import Device, Peripheral, ValidateLevel
from bl808svd.utils.logger import get_logger

log = get_logger(__name__)


def find_repo_root(start: Optional[PathLike] = None) -> Path:
    here = Path(start) if start is not None else Path.cwd()
    here = here.resolve()
    for d in (here, *here.parents):
        if (d / ".git").exists():
            return d
    raise SourceUnavailable(f"no .git directory above {here}")


def _check_strict(peripheral: Peripheral, path: Path) -> None:
    # appended sources are only validated WEAK by their parsers
    try:
        peripheral.validate(ValidateLevel.STRICT)
    except ExtractionError as e:
        e.with_filename(path)
        raise


@dataclass
class EntryOutcome:
    entry: CatalogEntry
    peripheral: Optional[Peripheral] = None
    error: Optional[ExtractionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunResult:
    outcomes: list[EntryOutcome] = field(default_factory=list)

    @property
    def peripherals(self) -> list[Peripheral]:
        return [o.peripheral for o in self.outcomes if o.peripheral is not None]

    @property
    def failures(self) -> list[EntryOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def extents(self) -> list[ExtentRecord]:
        return [extent_record(p) for p in self.peripherals]

    def device(self, info: DeviceInfo) -> Device:
        return Device(
            name=info.name,
            version=info.version,
            description=info.description,
            address_unit_bits=info.address_unit_bits,
            width=info.width,
            peripherals=list(self.peripherals),
        )


class ExtractionRun:
    """One pass over a catalog.

    Each catalog entry is built on its own from its own files, so entries can
    run on a worker pool. A failing entry is logged and recorded; the rest of
    the run carries on.
    """

    def __init__(self, catalog: Catalog, root: PathLike, jobs: int = 1):
        self.catalog = catalog
        self.root = Path(root)
        self.jobs = max(1, jobs)

    def resolve(self, source: SourceRef) -> Path:
        if source.kind == "header":
            for folder in self.catalog.header_folders:
                candidate = self.root / folder / source.filename
                if candidate.exists():
                    return candidate
            raise SourceUnavailable("header file not found", source.filename)

        tree = self.catalog.doc_trees.get(source.lang)
        if tree is None:
            raise SourceUnavailable(f"no doc tree for language {source.lang!r}", source.filename)
        candidate = self.root / tree / source.filename
        if not candidate.exists():
            raise SourceUnavailable("doc file not found", candidate)
        return candidate

    def build_entry(self, entry: CatalogEntry) -> Peripheral:
        first, *rest = entry.sources
        path = self.resolve(first)
        if first.kind == "header":
            if entry.base_address is None:
                raise CatalogError(f"{entry.name}: header peripherals need a base_address")
            peripheral = peripheral_from_c_header(path, entry.base_address, entry.name)
        else:
            peripheral = peripheral_from_doc_rst(path, entry.name, entry.base_address)
        _check_strict(peripheral, path)

        for source in rest:
            path = self.resolve(source)
            if source.kind == "header":
                append_registers_from_c_header(path, peripheral)
            else:
                append_registers_from_doc_rst(path, peripheral)
            _check_strict(peripheral, path)
        return peripheral

    def run_entry(self, entry: CatalogEntry) -> EntryOutcome:
        try:
            p = self.build_entry(entry)
        except ExtractionError as e:
            log.error("Error processing peripheral %s from %s: %s",
                      entry.name, e.filename or entry.sources[0].filename, e)
            return EntryOutcome(entry=entry, error=e)
        log.debug("Built %s: %d registers", p.name, len(p.registers))
        return EntryOutcome(entry=entry, peripheral=p)

    def execute(self) -> RunResult:
        entries = list(self.catalog.peripherals)
        log.info("Extracting %d peripherals (jobs=%d) from %s", len(entries), self.jobs, self.root)
        if self.jobs == 1:
            outcomes = [self.run_entry(e) for e in entries]
        else:
            with ThreadPoolExecutor(max_workers=self.jobs) as pool:
                outcomes = list(pool.map(self.run_entry, entries))

        result = RunResult(outcomes=outcomes)
        log.info("Done: %d ok, %d failed", len(result.peripherals), len(result.failures))
        return result
