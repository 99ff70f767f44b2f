from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from bl808svd.errors import ModelInvalid

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ValidateLevel(enum.Enum):
    WEAK = "weak"
    STRICT = "strict"


class AccessMode(enum.Enum):
    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"
    READ_WRITE = "read-write"
    WRITE_ONCE = "writeOnce"
    UNSPECIFIED = None

    @property
    def svd_name(self) -> Optional[str]:
        return self.value


@dataclass(frozen=True)
class BitRange:
    msb: int
    lsb: int

    @classmethod
    def from_msb_lsb(cls, msb: int, lsb: int) -> "BitRange":
        return cls(msb=msb, lsb=lsb)

    @property
    def offset(self) -> int:
        return self.lsb

    @property
    def width(self) -> int:
        return self.msb - self.lsb + 1

    def overlaps(self, other: "BitRange") -> bool:
        return self.lsb <= other.msb and other.lsb <= self.msb

    def __str__(self) -> str:
        return f"[{self.msb}:{self.lsb}]"


@dataclass(frozen=True)
class Field:
    name: str
    bits: BitRange
    access: AccessMode = AccessMode.UNSPECIFIED
    description: Optional[str] = None

    def validate(self, level: ValidateLevel = ValidateLevel.WEAK) -> "Field":
        if level is ValidateLevel.STRICT:
            if not self.name:
                raise ModelInvalid("field has no name")
            if self.bits.lsb > self.bits.msb:
                raise ModelInvalid(
                    f"field {self.name!r}: lsb {self.bits.lsb} is above msb {self.bits.msb}"
                )
        return self


@dataclass(frozen=True)
class Register:
    name: str
    address_offset: int
    fields: tuple[Field, ...] = ()
    size_bits: int = 32

    def validate(self, level: ValidateLevel = ValidateLevel.WEAK) -> "Register":
        if level is ValidateLevel.STRICT:
            if not self.name:
                raise ModelInvalid(f"register at offset 0x{self.address_offset:X} has no name")
            for f in self.fields:
                try:
                    f.validate(level)
                except ModelInvalid as e:
                    raise ModelInvalid(f"register {self.name!r}: {e}") from e
        return self

    def overlapping_fields(self) -> list[tuple[Field, Field]]:
        """Pairs of fields whose bit ranges intersect, in field order."""
        pairs: list[tuple[Field, Field]] = []
        for i, a in enumerate(self.fields):
            for b in self.fields[i + 1:]:
                if a.bits.overlaps(b.bits):
                    pairs.append((a, b))
        return pairs


@dataclass
class Peripheral:
    name: str
    base_address: int
    registers: list[Register] = field(default_factory=list)
    description: Optional[str] = None

    def validate(self, level: ValidateLevel = ValidateLevel.WEAK) -> "Peripheral":
        if level is ValidateLevel.STRICT:
            if not self.name:
                raise ModelInvalid("peripheral has no name")
            if not _IDENT.match(self.name):
                raise ModelInvalid(f"peripheral name {self.name!r} is not an identifier")
            for r in self.registers:
                try:
                    r.validate(level)
                except ModelInvalid as e:
                    raise ModelInvalid(f"peripheral {self.name!r}: {e}") from e
        return self


@dataclass(frozen=True)
class Dimension:
    dim: int
    dim_increment: int
    dim_index: Optional[str] = None


@dataclass
class PeripheralArray:
    peripheral: Peripheral
    dimension: Dimension

    @property
    def name(self) -> str:
        return self.peripheral.name

    @property
    def base_address(self) -> int:
        return self.peripheral.base_address

    @property
    def registers(self) -> list[Register]:
        return self.peripheral.registers

    def validate(self, level: ValidateLevel = ValidateLevel.WEAK) -> "PeripheralArray":
        self.peripheral.validate(level)
        if level is ValidateLevel.STRICT and self.dimension.dim < 1:
            raise ModelInvalid(f"peripheral array {self.name!r} has dim {self.dimension.dim}")
        return self


AnyPeripheral = Union[Peripheral, PeripheralArray]


@dataclass
class Device:
    name: str
    version: str = "0.1"
    description: str = ""
    address_unit_bits: int = 8
    width: int = 32
    peripherals: list[AnyPeripheral] = field(default_factory=list)

    def validate(self, level: ValidateLevel = ValidateLevel.WEAK) -> "Device":
        if level is ValidateLevel.STRICT:
            if not self.name:
                raise ModelInvalid("device has no name")
            for p in self.peripherals:
                p.validate(level)
        return self
