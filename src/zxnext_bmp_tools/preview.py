"""PNG previews of converted images in the colors the Next will display."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from PIL import Image

from .color import RGB333, to_rgb888
from .errors import FileAccessError


def render_preview(
    rows: Iterable[bytes], width: int, height: int, palette: Sequence[RGB333]
) -> Image.Image:
    """Build a palette image from top-to-bottom rows of palette indices."""

    data = b"".join(rows)
    if len(data) != width * height:
        raise ValueError(f"Expected {width * height} pixels, got {len(data)}")

    flat = []
    for color in list(palette)[:256]:
        flat.extend(to_rgb888(color))
    flat.extend([0] * (768 - len(flat)))

    preview = Image.frombytes("P", (width, height), data)
    preview.putpalette(flat)
    return preview


def save_preview(image: Image.Image, path: str | Path) -> Path:
    path = Path(path)
    try:
        image.save(path, format="PNG")
    except OSError as exc:
        raise FileAccessError(f"Can't write preview file {path}.") from exc
    return path
