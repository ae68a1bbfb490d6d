"""Conversion pipelines for the Spectrum Next BMP tools.

``convert_bmp`` (the ``nextbmp`` tool) rewrites the palette of an 8-bit BMP
so that every color is one the Next can display, optionally minimizing the
palette or reducing the image to 16 colors.

``convert_bmp_to_raw`` (the ``nextraw`` tool) turns an 8-bit BMP into raw
pixel data with an optional raw palette:

File  | Content
------|--------------------------------------------------------------
.nxi  | Raw palette (32 or 512 bytes, when embedded) + raw pixel data
.nxp  | Raw palette when written to a separate file
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import List

from .bmp import BmpImage, encode_bmp_palette, parse_bmp, patch_bmp, read_file, write_file
from .color import RGB333, ROUNDING_MODES, to_rgb888
from .errors import OptionsError
from .palette import convert_palette, minimize_palette, reduce_to_4bit
from .raw import encode_raw_palette, transcode_pixels

RAW_IMAGE_EXTENSION = ".nxi"
RAW_PALETTE_EXTENSION = ".nxp"

PALETTE_MODES = ("closest", "minimized", "standard")
PALETTE_PLACEMENTS = ("embedded", "separate", "none")


@dataclass(frozen=True)
class ConvertOptions:
    """Options shared by both conversions."""

    rounding: str = "round"  # round, ceil, floor
    palette_mode: str = "closest"  # closest, minimized, standard
    four_bit: bool = False
    palette_placement: str = "embedded"  # embedded, separate, none
    columns: bool = False

    def __post_init__(self) -> None:
        if self.rounding not in ROUNDING_MODES:
            raise OptionsError(f"Unknown rounding mode: {self.rounding}")
        if self.palette_mode not in PALETTE_MODES:
            raise OptionsError(f"Unknown palette mode: {self.palette_mode}")
        if self.palette_placement not in PALETTE_PLACEMENTS:
            raise OptionsError(f"Unknown palette placement: {self.palette_placement}")

    @classmethod
    def from_flags(
        cls,
        *,
        minimize: bool = False,
        standard: bool = False,
        **kwargs,
    ) -> "ConvertOptions":
        """Build options from on/off palette flags; standard wins over minimize."""
        if standard:
            mode = "standard"
        elif minimize:
            mode = "minimized"
        else:
            mode = "closest"
        return cls(palette_mode=mode, **kwargs)


@dataclass
class BmpConversion:
    data: bytes
    image: BmpImage
    palette: List[RGB333]
    color_count: int


@dataclass
class RawConversion:
    palette: bytes
    pixels: bytes
    width: int
    height: int
    rgb333_palette: List[RGB333]


def convert_bmp(
    data: bytes, options: ConvertOptions | None = None, source: str | None = None
) -> BmpConversion:
    """Convert the palette of an 8-bit BMP held in ``data`` to RGB333 colors.

    The returned ``data`` is the complete file with the palette (and, when
    indices were remapped, the pixel rows) patched in place.
    """

    options = options or ConvertOptions()
    image = parse_bmp(data, source)

    standard = options.palette_mode == "standard"
    palette = convert_palette(image.colors(), options.rounding, standard)
    count = len(palette)
    remapped = False

    if options.palette_mode == "minimized":
        remap = minimize_palette(palette, used=image.used_indices())
        palette, count = remap.palette, remap.count
        if remap.changes_indices:
            image = replace(image, pixels=image.map_pixels(remap.table))
            remapped = True

    if options.four_bit:
        remap = reduce_to_4bit(palette, image.iter_rows())
        palette, count = remap.palette, remap.count
        if remap.changes_indices:
            image = replace(image, pixels=image.map_pixels(remap.table))
            remapped = True

    bmp_palette = encode_bmp_palette([to_rgb888(color) for color in palette])
    patched = patch_bmp(
        data,
        image,
        palette=bmp_palette,
        pixels=image.pixels if remapped else None,
    )
    return BmpConversion(data=patched, image=image, palette=palette, color_count=count)


def convert_bmp_file(
    src: str | Path,
    dst: str | Path | None = None,
    options: ConvertOptions | None = None,
) -> BmpConversion:
    """Convert ``src`` and write the result to ``dst`` (``src`` itself by default)."""

    src = Path(src)
    target = Path(dst) if dst is not None else src
    result = convert_bmp(read_file(src), options, str(src))
    write_file(target, result.data)
    return result


def convert_bmp_to_raw(
    data: bytes, options: ConvertOptions | None = None, source: str | None = None
) -> RawConversion:
    """Convert an 8-bit BMP held in ``data`` to raw palette and pixel bytes.

    The raw palette always uses nearest rounding of the BMP colors; it is
    empty when ``palette_placement`` is ``"none"``.
    """

    options = options or ConvertOptions()
    image = parse_bmp(data, source)

    rgb333 = convert_palette(image.colors())
    if options.palette_placement == "none":
        raw_palette = b""
    else:
        raw_palette = encode_raw_palette(rgb333, options.four_bit)

    raw_pixels = transcode_pixels(
        image.pixels,
        image.width,
        image.rows,
        bottom_up=image.bottom_up,
        four_bit=options.four_bit,
        columns=options.columns,
        stride=image.stride,
    )
    return RawConversion(
        palette=raw_palette,
        pixels=raw_pixels,
        width=image.width,
        height=image.rows,
        rgb333_palette=rgb333,
    )


def with_extension(path: str | Path, extension: str) -> Path:
    """Replace the suffix of ``path`` with ``extension``, appending when there is none."""
    return Path(path).with_suffix(extension)


def raw_output_paths(
    src: str | Path,
    dst: str | Path | None = None,
    options: ConvertOptions | None = None,
) -> tuple[Path, Path | None]:
    """Return the raw image path and, for separate palettes, the palette path."""

    options = options or ConvertOptions()
    image_path = Path(dst) if dst is not None else with_extension(src, RAW_IMAGE_EXTENSION)
    if image_path == Path(src):
        raise OptionsError("BMP file and raw image file cannot have the same name.")
    palette_path = None
    if options.palette_placement == "separate":
        palette_path = with_extension(image_path, RAW_PALETTE_EXTENSION)
    return image_path, palette_path


def convert_bmp_file_to_raw(
    src: str | Path,
    dst: str | Path | None = None,
    options: ConvertOptions | None = None,
) -> tuple[RawConversion, List[Path]]:
    """Convert ``src`` to raw files and return the conversion and written paths."""

    options = options or ConvertOptions()
    image_path, palette_path = raw_output_paths(src, dst, options)
    result = convert_bmp_to_raw(read_file(src), options, str(src))

    written: List[Path] = []
    if options.palette_placement == "embedded":
        write_file(image_path, result.palette + result.pixels)
        written.append(image_path)
    else:
        if palette_path is not None:
            written.append(write_file(palette_path, result.palette))
        written.append(write_file(image_path, result.pixels))
    return result, written
