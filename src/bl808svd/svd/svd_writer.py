from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from bl808svd.core.assembler import address_block_size
from bl808svd.svd.model import (
    AnyPeripheral,
    Device,
    Field,
    PeripheralArray,
    Register,
    ValidateLevel,
)
from bl808svd.utils.bits import fmt_hex
from bl808svd.utils.logger import get_logger

log = get_logger(__name__)

SCHEMA_VERSION = "1.3"
_XS = "http://www.w3.org/2001/XMLSchema-instance"


def _text(parent: ET.Element, tag: str, value) -> ET.Element:
    e = ET.SubElement(parent, tag)
    e.text = str(value)
    return e


def _field(parent: ET.Element, f: Field) -> None:
    fe = ET.SubElement(parent, "field")
    _text(fe, "name", f.name)
    if f.description:
        _text(fe, "description", f.description)
    _text(fe, "bitOffset", f.bits.offset)
    _text(fe, "bitWidth", f.bits.width)
    if f.access.svd_name:
        _text(fe, "access", f.access.svd_name)


def _register(parent: ET.Element, r: Register) -> None:
    re_ = ET.SubElement(parent, "register")
    _text(re_, "name", r.name)
    _text(re_, "addressOffset", f"0x{r.address_offset:X}")
    _text(re_, "size", f"0x{r.size_bits:X}")
    if r.fields:
        fields = ET.SubElement(re_, "fields")
        for f in r.fields:
            _field(fields, f)


def _peripheral(parent: ET.Element, p: AnyPeripheral) -> None:
    pe = ET.SubElement(parent, "peripheral")
    if isinstance(p, PeripheralArray):
        d = p.dimension
        _text(pe, "dim", d.dim)
        _text(pe, "dimIncrement", f"0x{d.dim_increment:X}")
        if d.dim_index:
            _text(pe, "dimIndex", d.dim_index)
        info = p.peripheral
    else:
        info = p
    _text(pe, "name", info.name)
    if info.description:
        _text(pe, "description", info.description)
    _text(pe, "baseAddress", fmt_hex(info.base_address))

    size = address_block_size(info)
    if size:
        ab = ET.SubElement(pe, "addressBlock")
        _text(ab, "offset", "0x0")
        _text(ab, "size", f"0x{size:X}")
        _text(ab, "usage", "registers")

    if info.registers:
        regs = ET.SubElement(pe, "registers")
        for r in info.registers:
            _register(regs, r)


def build_tree(device: Device) -> ET.Element:
    device.validate(ValidateLevel.STRICT)

    root = ET.Element(
        "device",
        {
            "schemaVersion": SCHEMA_VERSION,
            "xmlns:xs": _XS,
            "xs:noNamespaceSchemaLocation": f"CMSIS-SVD_Schema_{SCHEMA_VERSION.replace('.', '_')}.xsd",
        },
    )
    _text(root, "name", device.name)
    _text(root, "version", device.version)
    _text(root, "description", device.description)
    _text(root, "addressUnitBits", device.address_unit_bits)
    _text(root, "width", device.width)

    periphs = ET.SubElement(root, "peripherals")
    for p in device.peripherals:
        _peripheral(periphs, p)
    return root


def encode_device(device: Device) -> str:
    root = build_tree(device)
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode")


def write_svd(device: Device, path: Path) -> None:
    text = encode_device(device)
    with open(path, "w", encoding="utf-8") as f:
        f.write('<?xml version="1.0" encoding="utf-8"?>\n')
        f.write(text)
        f.write("\n")
    log.info("Wrote SVD device=%s peripherals=%d -> %s", device.name, len(device.peripherals), path)
