"""Exceptions raised by the BMP tools."""

from __future__ import annotations

from enum import Enum


class FormatProblem(Enum):
    """Reasons a file is rejected by the BMP reader, in checking order."""

    NOT_BMP = "Not a BMP file."
    TRUNCATED_HEADER = "Invalid size of BMP file."
    INVALID_OFFSET = "Invalid header of BMP file."
    UNSUPPORTED_HEADER = "Invalid/unsupported header of BMP file."
    INVALID_WIDTH = "Invalid image width in BMP file."
    INVALID_HEIGHT = "Invalid image height in BMP file."
    INVALID_IMAGE_SIZE = "Invalid image size in BMP file."
    UNSUPPORTED_DEPTH = "Not an 8-bit BMP file."
    UNSUPPORTED_COMPRESSION = "Not an uncompressed BMP file."


class ConversionError(Exception):
    """Base class for every error raised by a conversion."""


class BmpFormatError(ConversionError):
    """The source is not a valid or supported 8-bit BMP file."""

    def __init__(self, problem: FormatProblem, source: str | None = None):
        self.problem = problem
        self.source = source
        if source is None:
            message = problem.value
        else:
            message = f"{problem.value} The file {source} is not a valid or supported BMP file."
        super().__init__(message)


class FileAccessError(ConversionError):
    """A file could not be opened, read or written, or ended too early."""


class OptionsError(ConversionError):
    """Invalid or conflicting conversion options."""
