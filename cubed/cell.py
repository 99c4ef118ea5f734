"""Encoding of tilemap cells into signed 16-bit integers.

Bit 15 marks a solid cell, bits 8-14 hold an identifier and the low
byte holds the map token.
"""

SOLID_MASK = 0x8000
SOLID_SHIFT = 15
ID_MASK = 0x7F00
ID_SHIFT = 8
TYPE_MASK = 0xFF


def _to_int16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def set_cell(solid: bool, ident: int, kind: str) -> int:
    """Build a cell from its solidity, identifier and token character."""
    return _to_int16(
        (int(bool(solid)) << SOLID_SHIFT)
        | ((ident & 0x7F) << ID_SHIFT)
        | (ord(kind) & TYPE_MASK)
    )


def get_type(cell: int) -> str:
    """Return the token character stored in a cell."""
    return chr(cell & TYPE_MASK)


def get_id(cell: int) -> int:
    """Return the identifier stored in a cell."""
    return (cell & ID_MASK) >> ID_SHIFT


def is_solid(cell: int) -> bool:
    """Whether the cell blocks movement and rays."""
    return bool(cell & SOLID_MASK)


def is_door(kind: str) -> bool:
    """Whether a token character denotes a door."""
    return kind in ("d", "D")


def is_transparent(kind: str) -> bool:
    """Whether rays may see through a cell with this token."""
    return is_door(kind)