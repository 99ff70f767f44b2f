from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from bl808svd.core.assembler import address_block_size, compute_extent
from bl808svd.svd.model import AnyPeripheral


@dataclass(frozen=True)
class ExtentRecord:
    name: str
    base_address: int
    highest_address: int

    def as_csv(self) -> str:
        return f"{self.name},{self.base_address},{self.highest_address}"


def extent_record(p: AnyPeripheral) -> ExtentRecord:
    base, top = compute_extent(p)
    return ExtentRecord(name=p.name, base_address=base, highest_address=top)


@dataclass(frozen=True)
class AddressRange:
    base: int
    end: int  # exclusive
    peripheral: AnyPeripheral

    def overlaps(self, other: "AddressRange") -> bool:
        return self.base < other.end and other.base < self.end


@dataclass(frozen=True)
class AddressMap:
    ranges: tuple[AddressRange, ...] = ()

    def overlaps(self) -> list[tuple[AnyPeripheral, AnyPeripheral]]:
        """Pairs of peripherals whose address ranges intersect."""
        out = []
        for i, a in enumerate(self.ranges):
            for b in self.ranges[i + 1:]:
                if b.base >= a.end:
                    break
                if a.overlaps(b):
                    out.append((a.peripheral, b.peripheral))
        return out


def build_address_map(peripherals: Iterable[AnyPeripheral]) -> AddressMap:
    ranges = []
    for p in peripherals:
        base = p.base_address
        # empty peripherals still claim one word
        end = base + max(address_block_size(p), 4)
        ranges.append(AddressRange(base=base, end=end, peripheral=p))
    ranges.sort(key=lambda r: r.base)
    return AddressMap(ranges=tuple(ranges))
