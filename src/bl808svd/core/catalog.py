"""Peripheral catalog: which files make up which peripheral, and where.

The catalog is a YAML file::

    device:
      name: BL808
      version: "0.1"
    header_folders:
      - path/to/regs/
    doc_trees:
      en: bl_docs/BL808_RM/en/RST
    peripherals:
      - name: DSP2
        base_address: 0x30011000
        sources:
          - header: dsp2_tg_reg.h
          - header: dsp2_front_reg.h
      - name: UART0
        base_address: 0x2000A000
        sources:
          - doc: uart_register.rst

The first source of an entry creates the peripheral, the rest extend it.
Header sources need the entry's base address; for doc sources it is an
optional override of the address inferred from the document.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from bl808svd.core.loader import load_text
from bl808svd.errors import CatalogError, PathLike

SOURCE_KINDS = ("header", "doc")
DEFAULT_LANG = "en"


@dataclass(frozen=True)
class SourceRef:
    kind: str  # "header" | "doc"
    filename: str
    lang: str = DEFAULT_LANG


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    sources: tuple[SourceRef, ...]
    base_address: Optional[int] = None


@dataclass(frozen=True)
class DeviceInfo:
    name: str = "BL808"
    version: str = "0.1"
    description: str = "Bouffalo Labs BL808"
    address_unit_bits: int = 8
    width: int = 32


@dataclass(frozen=True)
class Catalog:
    device: DeviceInfo = DeviceInfo()
    header_folders: tuple[str, ...] = ()
    doc_trees: dict[str, str] = field(default_factory=dict)
    peripherals: tuple[CatalogEntry, ...] = ()


def _int(v: Any, what: str) -> int:
    if isinstance(v, bool):
        raise CatalogError(f"{what}: expected an integer, got {v!r}")
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v, 0)
        except ValueError:
            pass
    raise CatalogError(f"{what}: expected an integer, got {v!r}")


def _parse_source(raw: Any, owner: str) -> SourceRef:
    if not isinstance(raw, dict):
        raise CatalogError(f"{owner}: source must be a mapping, got {raw!r}")
    kinds = [k for k in SOURCE_KINDS if k in raw]
    if len(kinds) != 1:
        raise CatalogError(f"{owner}: source needs exactly one of {SOURCE_KINDS}, got {dict(raw)!r}")
    kind = kinds[0]
    filename = raw[kind]
    if not isinstance(filename, str) or not filename:
        raise CatalogError(f"{owner}: {kind} source needs a filename")
    return SourceRef(kind=kind, filename=filename, lang=str(raw.get("lang", DEFAULT_LANG)))


def _parse_entry(raw: Any, idx: int) -> CatalogEntry:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise CatalogError(f"peripherals[{idx}]: entry needs a name")
    name = str(raw["name"])

    base = raw.get("base_address")
    base = None if base is None else _int(base, f"{name}.base_address")

    raw_sources = raw.get("sources") or []
    if not isinstance(raw_sources, list) or not raw_sources:
        raise CatalogError(f"{name}: entry needs at least one source")
    sources = tuple(_parse_source(s, name) for s in raw_sources)

    if sources[0].kind == "header" and base is None:
        raise CatalogError(f"{name}: header peripherals need a base_address")
    return CatalogEntry(name=name, sources=sources, base_address=base)


def parse_catalog(data: Any) -> Catalog:
    if not isinstance(data, dict):
        raise CatalogError("catalog must be a mapping")

    dev = data.get("device") or {}
    defaults = DeviceInfo()
    device = DeviceInfo(
        name=str(dev.get("name", defaults.name)),
        version=str(dev.get("version", defaults.version)),
        description=str(dev.get("description", defaults.description)),
        address_unit_bits=_int(dev.get("address_unit_bits", defaults.address_unit_bits), "device.address_unit_bits"),
        width=_int(dev.get("width", defaults.width), "device.width"),
    )

    entries = tuple(_parse_entry(e, i) for i, e in enumerate(data.get("peripherals") or []))
    seen: set[str] = set()
    for e in entries:
        if e.name in seen:
            raise CatalogError(f"duplicate peripheral name: {e.name}")
        seen.add(e.name)

    return Catalog(
        device=device,
        header_folders=tuple(str(f) for f in (data.get("header_folders") or [])),
        doc_trees={str(k): str(v) for k, v in (data.get("doc_trees") or {}).items()},
        peripherals=entries,
    )


def load_catalog_text(text: str, filename: Optional[PathLike] = None) -> Catalog:
    yaml = YAML(typ="safe")
    try:
        data = yaml.load(text)
    except YAMLError as e:
        raise CatalogError(f"invalid YAML: {e}", filename) from e
    try:
        return parse_catalog(data)
    except CatalogError as e:
        if filename is not None:
            e.with_filename(filename)
        raise


def load_catalog(path: PathLike) -> Catalog:
    return load_catalog_text(load_text(path), filename=Path(path))


DEFAULT_CATALOG = Path(__file__).resolve().parent.parent / "data" / "bl808.yaml"


def default_catalog() -> Catalog:
    return load_catalog(DEFAULT_CATALOG)
