import struct
from pathlib import Path
from typing import Sequence

import pytest


def build_bmp(
    rows: Sequence[Sequence[int]],
    palette: Sequence[tuple[int, int, int]] = (),
    top_down: bool = False,
) -> bytes:
    """Build an uncompressed 8-bit BMP; ``rows`` are listed top to bottom."""

    height = len(rows)
    width = len(rows[0])
    stride = (width + 3) & ~3

    bgra = bytearray(1024)
    for i, (r, g, b) in enumerate(palette):
        bgra[i * 4 : i * 4 + 4] = bytes((b, g, r, 0))

    stored = rows if top_down else list(reversed(rows))
    pixel_data = b"".join(bytes(row).ljust(stride, b"\x00") for row in stored)

    offset = 14 + 40 + len(bgra)
    file_header = struct.pack("<2sIHHI", b"BM", offset + len(pixel_data), 0, 0, offset)
    info_header = struct.pack(
        "<IiiHHIIiiII",
        40,
        width,
        -height if top_down else height,
        1,
        8,
        0,
        len(pixel_data),
        2835,
        2835,
        256,
        0,
    )
    return file_header + info_header + bytes(bgra) + pixel_data


def set_field(data: bytes, offset: int, fmt: str, value: int) -> bytes:
    patched = bytearray(data)
    struct.pack_into(fmt, patched, offset, value)
    return bytes(patched)


@pytest.fixture
def make_bmp():
    return build_bmp


@pytest.fixture
def write_bmp(tmp_path: Path):
    def _write(name: str, *args, **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_bmp(*args, **kwargs))
        return path

    return _write


@pytest.fixture
def two_row_bmp() -> bytes:
    """8x2 top-down image: a row of index 0 above a row of index 1."""
    palette = [(0, 0, 0), (255, 0, 0)] + [(36, 73, 109)] * 6
    return build_bmp([[0] * 8, [1] * 8], palette, top_down=True)
