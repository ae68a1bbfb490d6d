"""Spectrum Next BMP tools.

Converts uncompressed 8-bit BMP files for the ZX Spectrum Next: ``nextbmp``
rewrites the BMP palette to RGB333 colors and ``nextraw`` writes raw layer 2
or sprite pixel data with a raw palette. Both are available as console
scripts or can be imported to convert bytes in memory.
"""

from .bmp import BmpImage, load_bmp, parse_bmp
from .color import dequantize, quantize
from .converter import (
    BmpConversion,
    ConvertOptions,
    RawConversion,
    convert_bmp,
    convert_bmp_file,
    convert_bmp_file_to_raw,
    convert_bmp_to_raw,
)
from .errors import (
    BmpFormatError,
    ConversionError,
    FileAccessError,
    FormatProblem,
    OptionsError,
)
from .palette import minimize_palette, reduce_to_4bit
from .raw import encode_raw_palette, restore_pixels, transcode_pixels

__all__ = [
    "BmpConversion",
    "BmpFormatError",
    "BmpImage",
    "ConversionError",
    "ConvertOptions",
    "FileAccessError",
    "FormatProblem",
    "OptionsError",
    "RawConversion",
    "convert_bmp",
    "convert_bmp_file",
    "convert_bmp_file_to_raw",
    "convert_bmp_to_raw",
    "dequantize",
    "encode_raw_palette",
    "load_bmp",
    "minimize_palette",
    "parse_bmp",
    "quantize",
    "reduce_to_4bit",
    "restore_pixels",
    "transcode_pixels",
]
