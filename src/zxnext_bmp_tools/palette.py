"""Palette conversion, minimization and 4-bit reduction."""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set

from .color import RGB333, RGB888, pack_rgb333, to_rgb333, to_standard_rgb333

BLACK: RGB333 = (0, 0, 0)
IDENTITY_TABLE = bytes(range(256))
MAX_4BIT_COLORS = 16


@dataclass
class PaletteRemap:
    """A rewritten palette plus the old index -> new index translation table.

    ``table`` always has 256 entries so it can be fed to ``bytes.translate``.
    ``count`` is the number of meaningful entries at the start of ``palette``;
    the rest are cleared to black.
    """

    palette: List[RGB333]
    table: bytes
    count: int

    @property
    def changes_indices(self) -> bool:
        return self.table != IDENTITY_TABLE


def convert_palette(
    colors: Sequence[RGB888], rounding: str = "round", standard: bool = False
) -> List[RGB333]:
    """Convert RGB888 palette colors to RGB333.

    With ``standard`` each color is snapped to the RGB332 standard palette
    instead of being rounded channel by channel.
    """
    if standard:
        return [to_standard_rgb333(color, rounding) for color in colors]
    return [to_rgb333(color, rounding) for color in colors]


def minimize_palette(
    palette: Sequence[RGB333],
    count: int | None = None,
    used: Iterable[int] | None = None,
) -> PaletteRemap:
    """Remove duplicate colors and sort the rest in standard palette order.

    Only the first ``count`` entries are considered (all of them by default).
    When ``used`` is given, entries whose index is not in it are ignored too;
    pass the indices referenced by the image pixels so that a cleared tail
    left by an earlier pass does not add black to the palette.

    Every considered index is mapped to the sorted slot of its color; other
    indices keep their value. Entries past the distinct colors are cleared.
    """

    count = len(palette) if count is None else count
    if not 0 <= count <= len(palette):
        raise ValueError(f"count must be between 0 and {len(palette)}")

    considered: Sequence[int]
    if used is None:
        considered = range(count)
    else:
        considered = sorted(index for index in set(used) if 0 <= index < count)

    first_seen: Dict[RGB333, int] = {}
    for index in considered:
        first_seen.setdefault(palette[index], index)

    distinct = sorted(first_seen, key=pack_rgb333)
    slots = {color: slot for slot, color in enumerate(distinct)}

    table = bytearray(IDENTITY_TABLE)
    for index in considered:
        table[index] = slots[palette[index]]

    minimized = distinct + [BLACK] * (len(palette) - len(distinct))
    return PaletteRemap(palette=minimized, table=bytes(table), count=len(distinct))


def reduce_to_4bit(palette: Sequence[RGB333], rows: Iterable[bytes]) -> PaletteRemap:
    """Keep the first 16 distinct palette indices used by the image.

    Indices are collected in raster order and given slots 0-15 in the order
    they are first seen. Pixels using any other index are cleared to index 0.
    """

    slots: Dict[int, int] = {}
    dropped: Set[int] = set()
    cleared = 0
    for row in rows:
        for index in row:
            if index in slots:
                continue
            if len(slots) < MAX_4BIT_COLORS:
                slots[index] = len(slots)
            else:
                dropped.add(index)
                cleared += 1

    if cleared:
        warnings.warn(
            f"Image uses more than {MAX_4BIT_COLORS} colors; "
            f"{cleared} pixels were cleared to index 0",
            RuntimeWarning,
            stacklevel=2,
        )

    table = bytearray(IDENTITY_TABLE)
    for index in dropped:
        table[index] = 0
    reduced = [BLACK] * len(palette)
    for index, slot in slots.items():
        table[index] = slot
        reduced[slot] = palette[index]
    return PaletteRemap(palette=reduced, table=bytes(table), count=len(slots))


def format_palette_text(palette: Sequence[RGB333], count: int | None = None) -> str:
    entries = palette if count is None else palette[:count]
    return ", ".join(f"{idx}: ({r},{g},{b})" for idx, (r, g, b) in enumerate(entries))
