"""Register extraction from the reference manual's ``*_register.rst`` pages.

Every register is a section: a title underlined with dashes, an address line,
a couple of directives and a five column grid table::

    utx_config
    ------------

    **Address：**  0x2000a000

    .. table:: utx_config

        +-------+------------+------+-------+-----------------------+
        | Bit   | Name       |Type  | Reset | Description           |
        +=======+============+======+=======+=======================+
        | 31:16 | cr_utx_len | r/w  | 0     | Length of TX transfer |
        +-------+------------+------+-------+-----------------------+
        | 0     | cr_utx_en  | r/w  | 0     | TX enable             |
        |       |            |      |       | 1: enabled            |
        +-------+------------+------+-------+-----------------------+

A row with an empty bit cell continues the description of the field above.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from bl808svd.core import assembler
from bl808svd.core.loader import load_text
from bl808svd.errors import (
    DanglingContinuationRow,
    ExtractionError,
    MalformedTable,
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
    "r/w": AccessMode.READ_WRITE,
    "rw": AccessMode.READ_WRITE,
    "rwac": AccessMode.READ_WRITE,
    "rw1c": AccessMode.READ_WRITE,
    "roc/rw": AccessMode.READ_WRITE,
    "w": AccessMode.WRITE_ONLY,
    "w1c": AccessMode.WRITE_ONCE,
    "w1p": AccessMode.WRITE_ONCE,
    "r": AccessMode.READ_ONLY,
    "roc": AccessMode.READ_ONLY,
    "HwInit": AccessMode.READ_ONLY,
    "rsvd": AccessMode.UNSPECIFIED,
    "": AccessMode.UNSPECIFIED,
}

# "|" inside a description would split the cell
TEXT_FIXUPS = (("Vsync|Hsync", "Vsync or Hsync"),)

TABLE_COLUMNS = 5

_UNDERLINE = re.compile(r"^-+$")
_ADDRESS = re.compile(r"^\*\*\s*(?:Address|地址)\s*[:：]\s*\*\*(?P<value>.*)$")
_BORDER = re.compile(r"^\+(?:-+\+)+$")
_HEADER_BORDER = re.compile(r"^\+(?:=+\+)+$")
_BITS_RANGE = re.compile(r"^\[?\s*(?P<high>\d+)\s*:\s*(?P<low>\d+)\s*\]?$")
_BITS_SINGLE = re.compile(r"^\[?\s*(?P<bit>\d+)\s*\]?$")


@dataclass(frozen=True)
class DocFragment:
    registers: tuple[Register, ...]
    base_address: int


@dataclass
class _FieldRow:
    name: str
    msb: int
    lsb: int
    access: AccessMode
    description: str
    lines: list[str] = field(default_factory=list)

    def build(self) -> Field:
        text = "\n".join([self.description, *self.lines])
        return Field(
            name=self.name,
            bits=BitRange.from_msb_lsb(self.msb, self.lsb),
            access=self.access,
            description=text,
        ).validate(ValidateLevel.WEAK)


def parse_access(token: str, line: Optional[int] = None) -> AccessMode:
    try:
        return ACCESS_MODES[token]
    except KeyError:
        raise UnknownAccessMode(token, line) from None


def parse_address(text: str, line: Optional[int] = None) -> int:
    """Parse ``2000a000``, ``0x2000a000`` or a sized literal like ``32'h30012000``."""
    s = text.strip()
    if not s:
        return 0
    if "'" in s:
        # skip the quote and the radix letter
        s = s[s.index("'") + 2:]
    try:
        return parse_hex(s)
    except ValueError:
        raise MalformedTable("address", f"bad address {text!r}", line) from None


def parse_bits(text: str, line: Optional[int] = None) -> tuple[int, int]:
    """Return (msb, lsb) for ``high:low`` or a single bit number."""
    m = _BITS_RANGE.match(text)
    if m:
        return int(m.group("high")), int(m.group("low"))
    m = _BITS_SINGLE.match(text)
    if m:
        bit = int(m.group("bit"))
        return bit, bit
    raise MalformedTable("bits", f"bad bit position {text!r}", line)


class _DocReader:
    def __init__(self, text: str):
        for old, new in TEXT_FIXUPS:
            text = text.replace(old, new)
        self.lines = [ln.strip() for ln in text.splitlines()]
        self.i = 0

    def is_title(self, i: int) -> bool:
        return (
            i + 1 < len(self.lines)
            and bool(self.lines[i])
            and not self.lines[i].startswith(("+", "|", ".."))
            and bool(_UNDERLINE.match(self.lines[i + 1]))
        )

    def table_follows(self, i: int) -> bool:
        """True if a grid table starts before the next section title."""
        while i < len(self.lines) and not self.is_title(i):
            if self.lines[i].startswith("+"):
                return True
            i += 1
        return False

    def next_nonblank(self, i: int) -> int:
        while i < len(self.lines) and not self.lines[i]:
            i += 1
        return i

    def parse(self) -> DocFragment:
        registers: list[Register] = []
        base_address = 0

        while self.i < len(self.lines):
            if not self.is_title(self.i):
                self.i += 1
                continue

            title_line = self.i
            title = self.lines[title_line]
            j = self.next_nonblank(title_line + 2)
            m = _ADDRESS.match(self.lines[j]) if j < len(self.lines) else None
            if m is None:
                if registers or self.table_follows(title_line + 2):
                    raise MalformedTable("address", f"register {title!r} has no address line", title_line + 1)
                # document preamble, no table of its own
                self.i = title_line + 2
                continue

            address = parse_address(m.group("value"), j + 1)
            if base_address == 0:
                base_address = address
            offset = address - base_address
            if offset < 0:
                raise MalformedTable(
                    "address",
                    f"register {title!r} at 0x{address:X} lies below base 0x{base_address:X}",
                    j + 1,
                )

            self.i = j + 1
            fields = self.parse_table(title)
            # tables list the high bits first
            fields.reverse()
            registers.append(
                Register(
                    name=title,
                    address_offset=offset,
                    fields=tuple(fields),
                ).validate(ValidateLevel.WEAK)
            )

        if not registers:
            raise MalformedTable("peripheral_file", "no register sections found")
        return DocFragment(registers=tuple(registers), base_address=base_address)

    def find_table(self, title: str) -> int:
        i = self.i
        while i < len(self.lines):
            if self.lines[i].startswith("+"):
                return i
            if self.is_title(i):
                break
            i += 1
        raise MalformedTable("table", f"register {title!r} has no table", self.i + 1)

    def parse_table(self, title: str) -> list[Field]:
        start = self.find_table(title)
        end = start
        while end < len(self.lines) and self.lines[end].startswith(("+", "|")):
            end += 1
        self.i = end

        body = None
        for k in range(start, end):
            if _HEADER_BORDER.match(self.lines[k]):
                body = k + 1
                break
        if body is None:
            raise MalformedTable("table_header", f"table for {title!r} has no header separator", start + 1)

        rows: list[_FieldRow] = []
        for k in range(body, end):
            line = self.lines[k]
            lineno = k + 1
            if _BORDER.match(line):
                continue
            if not (line.startswith("|") and line.endswith("|")):
                raise MalformedTable("row", f"bad table line {line!r}", lineno)
            cells = [c.strip() for c in line[1:-1].split("|")]
            if len(cells) != TABLE_COLUMNS:
                raise MalformedTable(
                    "row", f"expected {TABLE_COLUMNS} cells, got {len(cells)}", lineno
                )
            bits, name, access, _reset, description = cells

            if not bits:
                if not rows:
                    raise DanglingContinuationRow(lineno)
                if description:
                    rows[-1].lines.append(description)
                continue

            msb, lsb = parse_bits(bits, lineno)
            rows.append(
                _FieldRow(
                    name=name,
                    msb=msb,
                    lsb=lsb,
                    access=parse_access(access, lineno),
                    description=description,
                )
            )
        return [r.build() for r in rows]


def parse_doc_rst(text: str, filename: Optional[PathLike] = None) -> DocFragment:
    """Parse a register document; the base address is the first non-zero address."""
    try:
        return _DocReader(text).parse()
    except ExtractionError as e:
        if filename is not None:
            e.with_filename(filename)
        raise


def peripheral_from_doc_rst(
    path: PathLike,
    name: str,
    base_override: Optional[int] = None,
) -> Peripheral:
    frag = parse_doc_rst(load_text(path), filename=path)
    base = frag.base_address if base_override is None else base_override
    p = assembler.create(name, base, frag.registers)
    try:
        return p.validate(ValidateLevel.STRICT)
    except ExtractionError as e:
        e.with_filename(path)
        raise


def append_registers_from_doc_rst(path: PathLike, peripheral: Peripheral) -> Peripheral:
    frag = parse_doc_rst(load_text(path), filename=path)
    return assembler.extend(peripheral, frag.registers)
