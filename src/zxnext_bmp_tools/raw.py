"""Raw image and palette encoding for Spectrum Next layer 2 and sprites.

Layouts produced by :func:`transcode_pixels`:

Bits | Layout  | Byte index of pixel (x, y)       | Typical use
-----|---------|----------------------------------|----------------------------------
8    | rows    | ``y * width + x``                | 256x192 layer 2, 8-bit sprites
8    | columns | ``x * height + y``               | 320x256 layer 2
4    | rows    | ``y * ceil(width / 2) + x // 2`` | 4-bit sprites
4    | columns | ``(x // 2) * height + y``        | 640x256 layer 2

In the 4-bit layouts the leftmost pixel of a pair goes in the high nibble.
"""

from __future__ import annotations

import warnings
from typing import List, Sequence

from .bmp import padded_row_size, row_offset
from .color import RGB333

RAW_COLOR_SIZE = 2
RAW_PALETTE_SIZE = 256 * RAW_COLOR_SIZE
RAW_4BIT_PALETTE_SIZE = 16 * RAW_COLOR_SIZE


def raw_row_size(width: int, four_bit: bool = False) -> int:
    return (width + 1) // 2 if four_bit else width


def raw_image_size(width: int, height: int, four_bit: bool = False) -> int:
    return raw_row_size(width, four_bit) * height


def encode_raw_color(color: RGB333) -> bytes:
    """Encode an RGB333 color as an RGB332 byte plus the lowest blue bit."""
    r, g, b = color
    return bytes(((r << 5) | (g << 2) | (b >> 1), b & 0x01))


def encode_raw_palette(palette: Sequence[RGB333], four_bit: bool = False) -> bytes:
    """Encode the first 16 or 256 palette colors; missing entries are black."""
    count = 16 if four_bit else 256
    encoded = bytearray(count * RAW_COLOR_SIZE)
    for index, color in enumerate(palette[:count]):
        encoded[index * RAW_COLOR_SIZE : (index + 1) * RAW_COLOR_SIZE] = encode_raw_color(color)
    return bytes(encoded)


def _nibble_pairs(row: bytes) -> bytes:
    if len(row) % 2:
        row = row + b"\x00"
    return bytes(((row[x] & 0x0F) << 4) | (row[x + 1] & 0x0F) for x in range(0, len(row), 2))


def transcode_pixels(
    pixels: bytes,
    width: int,
    height: int,
    *,
    bottom_up: bool = False,
    four_bit: bool = False,
    columns: bool = False,
    stride: int | None = None,
) -> bytes:
    """Repack an 8-bit pixel buffer into one of the raw layouts.

    ``pixels`` holds ``height`` rows of ``stride`` bytes (the padded BMP row
    size by default), stored bottom row first when ``bottom_up`` is set.
    Only the first ``width`` bytes of each row are used. An odd width in 4-bit
    mode leaves the low nibble of the last byte of each row at 0.
    """

    stride = padded_row_size(width) if stride is None else stride
    row_size = raw_row_size(width, four_bit)
    raw = bytearray(row_size * height)
    truncated = False

    for y in range(height):
        start = row_offset(y, height, stride, bottom_up)
        row = pixels[start : start + width]
        if four_bit:
            truncated = truncated or max(row) > 0x0F
            row = _nibble_pairs(row)
        if columns:
            raw[y :: height] = row
        else:
            raw[y * row_size : (y + 1) * row_size] = row

    if truncated:
        warnings.warn(
            "Pixel indices above 15 were truncated to their low 4 bits",
            RuntimeWarning,
            stacklevel=2,
        )
    return bytes(raw)


def restore_pixels(
    raw: bytes,
    width: int,
    height: int,
    *,
    four_bit: bool = False,
    columns: bool = False,
) -> List[bytes]:
    """Undo :func:`transcode_pixels`, returning unpadded rows top to bottom."""

    row_size = raw_row_size(width, four_bit)
    expected = row_size * height
    if len(raw) != expected:
        raise ValueError(f"Raw image must be {expected} bytes, got {len(raw)}")

    rows: List[bytes] = []
    for y in range(height):
        if columns:
            packed = raw[y :: height]
        else:
            packed = raw[y * row_size : (y + 1) * row_size]
        if four_bit:
            unpacked = bytearray()
            for value in packed:
                unpacked.append(value >> 4)
                unpacked.append(value & 0x0F)
            rows.append(bytes(unpacked[:width]))
        else:
            rows.append(bytes(packed))
    return rows
