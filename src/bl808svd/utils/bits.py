from __future__ import annotations


def bytes_for_bits(size_bits: int) -> int:
    return (size_bits + 7) // 8


def parse_hex(text: str, default: int | None = None) -> int:
    """Parse hex digits with or without a 0x prefix.

    With a default, malformed text yields the default instead of raising.
    """
    s = text.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    try:
        return int(s, 16)
    except ValueError:
        if default is None:
            raise
        return default


def fmt_hex(value: int) -> str:
    return f"0x{value:08X}"
