"""Turn parsed register fragments into peripherals.

A fragment is the ordered list of registers produced by parsing one source
file. A peripheral is created from its first fragment and may be extended by
fragments from further files that share its base address.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from bl808svd.errors import ArrayPeripheralNotSupported
from bl808svd.svd.model import (
    AnyPeripheral,
    Peripheral,
    PeripheralArray,
    Register,
    ValidateLevel,
)
from bl808svd.utils.bits import bytes_for_bits

Fragment = Sequence[Register]


def create(name: str, base_address: int, fragment: Iterable[Register]) -> Peripheral:
    """Wrap one fragment as a new peripheral. An empty fragment is allowed."""
    return Peripheral(
        name=name,
        base_address=base_address,
        registers=list(fragment),
    ).validate(ValidateLevel.WEAK)


def extend(target: AnyPeripheral, fragment: Iterable[Register]) -> Peripheral:
    """Append a fragment's registers, in order, after the existing ones.

    Nothing is reordered or deduplicated. Only single peripherals can be
    extended.
    """
    if isinstance(target, PeripheralArray):
        raise ArrayPeripheralNotSupported(
            f"cannot append registers to peripheral array {target.name!r}"
        )
    target.registers.extend(fragment)
    return target


def _max_offset(peripheral: AnyPeripheral) -> int | None:
    offsets = [r.address_offset for r in peripheral.registers]
    return max(offsets) if offsets else None


def compute_extent(peripheral: AnyPeripheral) -> tuple[int, int]:
    """Return (base_address, highest register address) for reporting."""
    base = peripheral.base_address
    top = _max_offset(peripheral)
    return base, base + (top or 0)


def address_block_size(peripheral: AnyPeripheral) -> int:
    """Bytes covered by [base, base + max(offset) + register width)."""
    regs = peripheral.registers
    if not regs:
        return 0
    return max(r.address_offset + bytes_for_bits(r.size_bits) for r in regs)
