"""RGB888 <-> RGB333 color conversion for the Spectrum Next.

The Next displays 9-bit colors (3 bits per channel). Palette entries are
written to the hardware either as a full RGB333 value or as an RGB332 byte,
in which case the missing lowest blue bit is the OR of the two blue bits.
"""

from __future__ import annotations

from typing import Tuple

RGB888 = Tuple[int, int, int]
RGB333 = Tuple[int, int, int]

ROUNDING_MODES = ("round", "ceil", "floor")


def _scale(value: int, source_max: int, target_max: int, mode: str) -> int:
    numerator = value * target_max
    if mode == "round":
        return (2 * numerator + source_max) // (2 * source_max)
    if mode == "ceil":
        return -(-numerator // source_max)
    if mode == "floor":
        return numerator // source_max
    raise ValueError(f"Unknown rounding mode: {mode}")


def quantize(c8: int, mode: str = "round") -> int:
    """Convert an 8-bit channel (0-255) to a 3-bit channel (0-7)."""
    return _scale(c8, 255, 7, mode)


def dequantize(c3: int) -> int:
    """Convert a 3-bit channel (0-7) to the nearest 8-bit channel (0-255)."""
    return _scale(c3, 7, 255, "round")


def to_rgb333(color: RGB888, mode: str = "round") -> RGB333:
    r, g, b = color
    return (quantize(r, mode), quantize(g, mode), quantize(b, mode))


def to_rgb888(color: RGB333) -> RGB888:
    r, g, b = color
    return (dequantize(r), dequantize(g), dequantize(b))


def pack_rgb333(color: RGB333) -> int:
    """Return the 9-bit ``RRRGGGBBB`` value, the order of the standard palette."""
    r, g, b = color
    return (r << 6) | (g << 3) | b


def to_rgb332(color: RGB888, mode: str = "round") -> int:
    """Encode an RGB888 color as an ``RRRGGGBB`` standard palette byte."""
    r, g, b = color
    return (quantize(r, mode) << 5) | (quantize(g, mode) << 2) | _scale(b, 255, 3, mode)


def rgb332_to_rgb333(value: int) -> RGB333:
    b2 = value & 0x03
    b3 = (b2 << 1) | ((b2 >> 1) | b2) & 0x01
    return ((value >> 5) & 0x07, (value >> 2) & 0x07, b3)


def to_standard_rgb333(color: RGB888, mode: str = "round") -> RGB333:
    """Map a color onto the fixed RGB332 standard palette and widen it to RGB333."""
    return rgb332_to_rgb333(to_rgb332(color, mode))
