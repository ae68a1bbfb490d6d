"""Command line interfaces for the nextbmp and nextraw tools."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .converter import (
    RAW_IMAGE_EXTENSION,
    RAW_PALETTE_EXTENSION,
    ConvertOptions,
    convert_bmp_file,
    convert_bmp_file_to_raw,
)
from .errors import ConversionError
from .palette import format_palette_text
from .preview import render_preview, save_preview
from .raw import restore_pixels


def build_nextbmp_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nextbmp",
        description=(
            "Convert the RGB888 palette of an uncompressed 8-bit BMP file to the\n"
            "Spectrum Next RGB333 colors. Each palette color is written back as the\n"
            "RGB888 equivalent of its RGB333 color so that the BMP displays as it will\n"
            "on the Next. The BMP file is updated in place unless DST is given."
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("src", type=Path, help="Source 8-bit BMP file")
    parser.add_argument("dst", nargs="?", type=Path, help="Destination BMP file (default: SRC)")

    rounding = parser.add_mutually_exclusive_group()
    rounding.add_argument(
        "--round",
        dest="rounding",
        action="store_const",
        const="round",
        help="Round color channels to the nearest RGB333 value (default)",
    )
    rounding.add_argument(
        "--ceil",
        dest="rounding",
        action="store_const",
        const="ceil",
        help="Round color channels up",
    )
    rounding.add_argument(
        "--floor",
        dest="rounding",
        action="store_const",
        const="floor",
        help="Round color channels down",
    )
    parser.set_defaults(rounding="round")

    parser.add_argument(
        "--min-palette",
        action="store_true",
        help=(
            "Remove duplicate colors and sort the palette in standard palette order.\n"
            "Pixels are remapped to the new palette indices. Ignored with --std-palette."
        ),
    )
    parser.add_argument(
        "--std-palette",
        action="store_true",
        help="Snap each color to the Spectrum Next RGB332 standard palette",
    )
    parser.add_argument(
        "--4bit",
        dest="four_bit",
        action="store_true",
        help=(
            "Keep the first 16 colors used by the image. Pixels using any other\n"
            "color are set to index 0."
        ),
    )
    parser.add_argument("--preview", type=Path, help="Also write a PNG preview of the result")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print the resulting RGB333 palette",
    )
    return parser


def build_nextraw_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nextraw",
        description=(
            "Convert an uncompressed 8-bit BMP file to a raw image file for the\n"
            "Spectrum Next. If DST is not given, the source name is used with the\n"
            f'extension "{RAW_IMAGE_EXTENSION}".'
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("src", type=Path, help="Source 8-bit BMP file")
    parser.add_argument("dst", nargs="?", type=Path, help="Destination raw image file")

    placement = parser.add_mutually_exclusive_group()
    placement.add_argument(
        "--embed-palette",
        dest="palette_placement",
        action="store_const",
        const="embedded",
        help="Prepend the raw palette to the raw image file (default)",
    )
    placement.add_argument(
        "--sep-palette",
        dest="palette_placement",
        action="store_const",
        const="separate",
        help=(
            "Write the raw palette to a separate file with the same name as the\n"
            f'raw image file but with the extension "{RAW_PALETTE_EXTENSION}"'
        ),
    )
    placement.add_argument(
        "--no-palette",
        dest="palette_placement",
        action="store_const",
        const="none",
        help="Do not create a raw palette",
    )
    parser.set_defaults(palette_placement="embedded")

    parser.add_argument(
        "--4bit",
        dest="four_bit",
        action="store_true",
        help="Use 4 bits per pixel (16 colors). Default is 8 bits per pixel (256 colors).",
    )
    parser.add_argument(
        "--columns",
        action="store_true",
        help="Use column based memory layout. Default is row based memory layout.",
    )
    parser.add_argument("--preview", type=Path, help="Also write a PNG preview of the raw image")
    return parser


def nextbmp_main(argv: list[str] | None = None) -> int:
    args = build_nextbmp_parser().parse_args(argv)

    try:
        options = ConvertOptions.from_flags(
            minimize=args.min_palette,
            standard=args.std_palette,
            rounding=args.rounding,
            four_bit=args.four_bit,
        )
        result = convert_bmp_file(args.src, args.dst, options)
        print(f"wrote {args.dst or args.src}")

        if args.verbose:
            print(format_palette_text(result.palette, result.color_count))

        if args.preview is not None:
            image = result.image
            preview = render_preview(image.iter_rows(), image.width, image.rows, result.palette)
            print(f"wrote {save_preview(preview, args.preview)}")
        return 0
    except ConversionError as exc:
        print(exc, file=sys.stderr)
        return 1


def nextraw_main(argv: list[str] | None = None) -> int:
    args = build_nextraw_parser().parse_args(argv)

    try:
        options = ConvertOptions(
            palette_placement=args.palette_placement,
            four_bit=args.four_bit,
            columns=args.columns,
        )
        result, written = convert_bmp_file_to_raw(args.src, args.dst, options)
        for path in written:
            print(f"wrote {path}")

        if args.preview is not None:
            rows = restore_pixels(
                result.pixels,
                result.width,
                result.height,
                four_bit=options.four_bit,
                columns=options.columns,
            )
            preview = render_preview(rows, result.width, result.height, result.rgb333_palette)
            print(f"wrote {save_preview(preview, args.preview)}")
        return 0
    except ConversionError as exc:
        print(exc, file=sys.stderr)
        return 1
