"""Reader for uncompressed 8-bit indexed BMP files.

Only the parts of the container needed by the converters are decoded:

Offset | Size | Field
-------|------|-------------------------------------------------------
0      | 2    | Signature ``BM``
2      | 4    | Total file size
10     | 4    | Offset of the pixel data
14     | 4    | Size of the sub-header (at least a BITMAPINFOHEADER)
18     | 4    | Width in pixels
22     | 4    | Height in pixels, negative for top-to-bottom row storage
28     | 2    | Bits per pixel (must be 8)
30     | 4    | Compression method (must be 0)

The 256 entry BGRA palette follows the sub-header and every pixel row is
padded to a multiple of 4 bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Sequence, Set, Tuple

from .errors import BmpFormatError, FileAccessError, FormatProblem

FILE_HEADER_SIZE = 14
MIN_DIB_HEADER_SIZE = 40
HEADER_SIZE = FILE_HEADER_SIZE + MIN_DIB_HEADER_SIZE
PALETTE_COLORS = 256
PALETTE_SIZE = PALETTE_COLORS * 4
MIN_BMP_FILE_SIZE = HEADER_SIZE + PALETTE_SIZE + 4

RGB888 = Tuple[int, int, int]


def padded_row_size(width: int) -> int:
    """Return the number of bytes a row of ``width`` 8-bit pixels occupies."""
    return (width + 3) & ~0x03


def row_offset(y: int, rows: int, stride: int, bottom_up: bool) -> int:
    """Map a logical row (0 is the topmost visual row) to its byte offset."""
    if bottom_up:
        return (rows - 1 - y) * stride
    return y * stride


@dataclass(frozen=True)
class BmpImage:
    """Geometry, palette and pixel bytes of a validated 8-bit BMP."""

    width: int
    height: int
    palette_offset: int
    pixel_offset: int
    palette: bytes
    pixels: bytes
    source: str | None = None

    @property
    def bottom_up(self) -> bool:
        return self.height > 0

    @property
    def rows(self) -> int:
        return abs(self.height)

    @property
    def stride(self) -> int:
        return padded_row_size(self.width)

    def row(self, y: int) -> bytes:
        start = row_offset(y, self.rows, self.stride, self.bottom_up)
        return self.pixels[start : start + self.width]

    def iter_rows(self) -> Iterator[bytes]:
        """Yield the unpadded rows from top to bottom."""
        for y in range(self.rows):
            yield self.row(y)

    def used_indices(self) -> Set[int]:
        """Return the palette indices referenced by at least one pixel."""
        used: Set[int] = set()
        for row in self.iter_rows():
            used.update(row)
        return used

    def colors(self) -> List[RGB888]:
        """Return the palette as RGB888 triples."""
        result: List[RGB888] = []
        for i in range(PALETTE_COLORS):
            b, g, r = self.palette[i * 4 : i * 4 + 3]
            result.append((r, g, b))
        return result

    def map_pixels(self, table: bytes) -> bytes:
        """Translate every pixel index through ``table``, keeping row padding."""
        mapped = bytearray(self.pixels)
        for y in range(self.rows):
            start = y * self.stride
            end = start + self.width
            mapped[start:end] = self.pixels[start:end].translate(table)
        return bytes(mapped)


def _u16(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 2], "little")


def _u32(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 4], "little")


def _i32(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 4], "little", signed=True)


def parse_bmp(data: bytes, source: str | None = None) -> BmpImage:
    """Validate ``data`` as an 8-bit uncompressed BMP and decode it.

    Raises:
        FileAccessError: ``data`` ends before the header, the palette or the
            declared pixel rows.
        BmpFormatError: one of the header checks failed; ``problem`` tells
            which one.
    """

    name = source or "<memory>"
    if len(data) < HEADER_SIZE:
        raise FileAccessError(f"Can't read the BMP header in file {name}.")

    if data[0:2] != b"BM":
        raise BmpFormatError(FormatProblem.NOT_BMP, source)

    file_size = _u32(data, 2)
    if file_size < MIN_BMP_FILE_SIZE:
        raise BmpFormatError(FormatProblem.TRUNCATED_HEADER, source)

    pixel_offset = _u32(data, 10)
    if pixel_offset >= file_size:
        raise BmpFormatError(FormatProblem.INVALID_OFFSET, source)

    dib_header_size = _u32(data, 14)
    if dib_header_size < MIN_DIB_HEADER_SIZE:
        raise BmpFormatError(FormatProblem.UNSUPPORTED_HEADER, source)
    palette_offset = FILE_HEADER_SIZE + dib_header_size

    width = _u32(data, 18)
    if width == 0:
        raise BmpFormatError(FormatProblem.INVALID_WIDTH, source)
    height = _i32(data, 22)
    if height == 0:
        raise BmpFormatError(FormatProblem.INVALID_HEIGHT, source)

    if width * abs(height) >= file_size:
        raise BmpFormatError(FormatProblem.INVALID_IMAGE_SIZE, source)

    if _u16(data, 28) != 8:
        raise BmpFormatError(FormatProblem.UNSUPPORTED_DEPTH, source)

    if _u32(data, 30) != 0:
        raise BmpFormatError(FormatProblem.UNSUPPORTED_COMPRESSION, source)

    palette = data[palette_offset : palette_offset + PALETTE_SIZE]
    if len(palette) != PALETTE_SIZE:
        raise FileAccessError(f"Can't read the BMP palette in file {name}.")

    image_size = padded_row_size(width) * abs(height)
    pixels = data[pixel_offset : pixel_offset + image_size]
    if len(pixels) != image_size:
        raise FileAccessError(f"Can't read the BMP image data in file {name}.")

    return BmpImage(
        width=width,
        height=height,
        palette_offset=palette_offset,
        pixel_offset=pixel_offset,
        palette=bytes(palette),
        pixels=bytes(pixels),
        source=source,
    )


def read_file(path: str | Path) -> bytes:
    path = Path(path)
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise FileAccessError(f"Can't open file {path}.") from exc
    except OSError as exc:
        raise FileAccessError(f"Can't read file {path}.") from exc


def write_file(path: str | Path, data: bytes) -> Path:
    path = Path(path)
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise FileAccessError(f"Can't write file {path}.") from exc
    return path


def load_bmp(path: str | Path) -> BmpImage:
    """Read and validate the BMP file at ``path``."""
    return parse_bmp(read_file(path), str(path))


def encode_bmp_palette(colors: Sequence[RGB888]) -> bytes:
    """Encode up to 256 RGB888 colors as BGRA quads, zero-filling the rest."""
    if len(colors) > PALETTE_COLORS:
        raise ValueError("A BMP palette holds at most 256 colors")
    palette = bytearray(PALETTE_SIZE)
    for i, (r, g, b) in enumerate(colors):
        palette[i * 4 : i * 4 + 4] = bytes((b, g, r, 0))
    return bytes(palette)


def patch_bmp(
    data: bytes,
    image: BmpImage,
    palette: bytes | None = None,
    pixels: bytes | None = None,
) -> bytes:
    """Return ``data`` with the palette and/or pixel region replaced.

    Header fields and everything outside the two regions are kept byte for
    byte.
    """

    patched = bytearray(data)
    if palette is not None:
        if len(palette) != PALETTE_SIZE:
            raise ValueError(f"palette must be {PALETTE_SIZE} bytes")
        patched[image.palette_offset : image.palette_offset + PALETTE_SIZE] = palette
    if pixels is not None:
        if len(pixels) != len(image.pixels):
            raise ValueError(f"pixels must be {len(image.pixels)} bytes")
        patched[image.pixel_offset : image.pixel_offset + len(pixels)] = pixels
    return bytes(patched)
