"""Register extraction from vendor ``*_reg.h`` headers.

The headers describe one peripheral as a struct of unions, each union
preceded by an offset comment and each bitfield followed by a comment giving
its bit position, access and reset mask::

    struct  glb_reg {
        /* 0x0 : soc_info0 */
        union {
            struct {
                uint32_t reserved_0_26 : 27; /* [26: 0],  rsvd,  0x0 */
                uint32_t chip_rdy      :  1; /* [   27],     r,  0x0 */
            }BF;
            uint32_t WORD;
        } soc_info0;

        /* 0x4  reserved */
        uint8_t RESERVED0x4[76];
    };

Parsing is line oriented. Each line inside the struct has to match one of
the rules below; the rule that failed is reported in MalformedHeader.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from bl808svd.core import assembler
from bl808svd.core.loader import load_text
from bl808svd.errors import (
    ExtractionError,
    MalformedHeader,
    PathLike,
    UnknownAccessMode,
)
from bl808svd.svd.model import (
    AccessMode,
    BitRange,
    Field,
    Peripheral,
    Register,
    ValidateLevel,
)
from bl808svd.utils.bits import parse_hex

ACCESS_MODES: dict[str, AccessMode] = {
    "RW": AccessMode.READ_WRITE,
    "rw": AccessMode.READ_WRITE,
    "RWAC": AccessMode.READ_WRITE,
    "RW1C": AccessMode.READ_WRITE,
    "r/w": AccessMode.READ_WRITE,
    "ROC": AccessMode.READ_ONLY,
    "RO": AccessMode.READ_ONLY,
    "r": AccessMode.READ_ONLY,
    "R": AccessMode.READ_ONLY,
    "w": AccessMode.WRITE_ONLY,
    "WO": AccessMode.WRITE_ONLY,
    "w1c": AccessMode.WRITE_ONCE,
    "w1p": AccessMode.WRITE_ONCE,
    "rsvd": AccessMode.UNSPECIFIED,
    "RSVD": AccessMode.UNSPECIFIED,
    "None": AccessMode.UNSPECIFIED,
}

TYPE_SUFFIX_LEN = 4  # "_reg"

_PERIPHERAL = re.compile(r"^struct\s+(?P<type_name>\w+)\s*\{$")
_PERIPHERAL_END = re.compile(r"^\}\s*;$")
_REGISTER_HEADER = re.compile(r"^/\*\s*0x(?P<offset>[0-9A-Fa-f]+)\s*:\s*(?P<name>\w+)\s*\*/$")
_RESERVED_HEADER = re.compile(r"^/\*\s*0x(?P<offset>[0-9A-Fa-f]+)\s+reserved\s*\*/$", re.IGNORECASE)
_RESERVED_PADDING = re.compile(r"^uint(8|16|32)_t\s+RESERVED\w*\s*\[\s*\d+\s*\]\s*;$")
_UNION_OPEN = re.compile(r"^union\s*\{$")
_BF_OPEN = re.compile(r"^struct\s*\{$")
_BF_CLOSE = re.compile(r"^\}\s*BF\s*;$")
_WORD = re.compile(r"^uint32_t\s+WORD\s*;$")
_REGISTER_END = re.compile(r"^\}\s*(?P<name>\w+)\s*;$")
_FIELD = re.compile(
    r"^uint32_t\s+(?P<name>\w+)\s*:\s*(?P<size>\d+)\s*;"
    r"\s*/\*\s*\[(?P<pos>[^\]]*)\]\s*,\s*(?P<access>[^,]*?)\s*,\s*(?P<mask>[^\s*]*)\s*\*/$"
)
_FIELD_POS_RANGE = re.compile(r"^\s*(?P<start>\d+)\s*:\s*(?P<end>\d+)\s*$")
_FIELD_POS = re.compile(r"^\s*(?P<pos>\d+)\s*$")


@dataclass(frozen=True)
class HeaderFragment:
    peripheral_name: str
    registers: tuple[Register, ...]


class _Cursor:
    """Non-blank, stripped lines with their 1-based line numbers."""

    def __init__(self, text: str):
        self._lines = text.splitlines()
        self._i = 0

    def __iter__(self) -> Iterator[tuple[int, str]]:
        return self

    def __next__(self) -> tuple[int, str]:
        while self._i < len(self._lines):
            self._i += 1
            line = self._lines[self._i - 1].strip()
            if line:
                return self._i, line
        raise StopIteration

    def next_or_none(self) -> Optional[tuple[int, str]]:
        return next(self, None)


def parse_access(token: str, line: Optional[int] = None) -> AccessMode:
    try:
        return ACCESS_MODES[token]
    except KeyError:
        raise UnknownAccessMode(token, line) from None


def _parse_field(m: re.Match, lineno: int) -> Field:
    name = m.group("name")
    _size = int(m.group("size"))  # informational, positions below are authoritative

    pos = m.group("pos")
    ranged = _FIELD_POS_RANGE.match(pos)
    if ranged:
        msb, lsb = int(ranged.group("start")), int(ranged.group("end"))
    else:
        single = _FIELD_POS.match(pos)
        if not single:
            raise MalformedHeader("field_pos", f"bad bit position [{pos}]", lineno)
        msb = lsb = int(single.group("pos"))

    access = parse_access(m.group("access"), lineno)
    _mask = parse_hex(m.group("mask"), default=0)

    return Field(
        name=name,
        bits=BitRange.from_msb_lsb(msb, lsb),
        access=access,
    ).validate(ValidateLevel.STRICT)


def _parse_register(cur: _Cursor, offset: int, name: str, header_line: int) -> Register:
    fields: list[Field] = []
    for lineno, line in cur:
        if _UNION_OPEN.match(line) or _BF_OPEN.match(line) or _BF_CLOSE.match(line) or _WORD.match(line):
            continue
        m = _FIELD.match(line)
        if m:
            fields.append(_parse_field(m, lineno))
            continue
        if _REGISTER_END.match(line):
            return Register(
                name=name,
                address_offset=offset,
                fields=tuple(fields),
            ).validate(ValidateLevel.WEAK)
        raise MalformedHeader("register", f"unexpected line in register {name!r}: {line!r}", lineno)
    raise MalformedHeader("register", f"register {name!r} is not closed", header_line)


def _parse_registers(cur: _Cursor) -> list[Register]:
    registers: list[Register] = []
    for lineno, line in cur:
        if _PERIPHERAL_END.match(line):
            return registers

        m = _REGISTER_HEADER.match(line)
        if m:
            offset = int(m.group("offset"), 16)
            registers.append(_parse_register(cur, offset, m.group("name"), lineno))
            continue

        if _RESERVED_HEADER.match(line):
            nxt = cur.next_or_none()
            if nxt is None or not _RESERVED_PADDING.match(nxt[1]):
                raise MalformedHeader(
                    "reserved_register",
                    "reserved comment is not followed by a padding array",
                    nxt[0] if nxt else lineno,
                )
            # padding, not addressable state
            continue

        raise MalformedHeader("registers", f"expected a register, got {line!r}", lineno)
    raise MalformedHeader("peripheral", "struct is not closed")


def parse_c_header(text: str, filename: Optional[PathLike] = None) -> HeaderFragment:
    """Parse header text into the peripheral's registers, in file order."""
    cur = _Cursor(text)
    try:
        for lineno, line in cur:
            m = _PERIPHERAL.match(line)
            if m:
                break
        else:
            raise MalformedHeader("reg_file", "no 'struct <name> {' block found")

        type_name = m.group("type_name")
        peripheral_name = type_name[:-TYPE_SUFFIX_LEN]
        if not peripheral_name:
            raise MalformedHeader("peripheral", f"type name {type_name!r} is too short", lineno)

        registers = _parse_registers(cur)
    except ExtractionError as e:
        if filename is not None:
            e.with_filename(filename)
        raise

    return HeaderFragment(peripheral_name=peripheral_name, registers=tuple(registers))


def registers_from_c_header(path: PathLike) -> list[Register]:
    return list(parse_c_header(load_text(path), filename=path).registers)


def peripheral_from_c_header(path: PathLike, base_address: int, name: str) -> Peripheral:
    return assembler.create(name, base_address, registers_from_c_header(path))


def append_registers_from_c_header(path: PathLike, peripheral: Peripheral) -> Peripheral:
    return assembler.extend(peripheral, registers_from_c_header(path))
