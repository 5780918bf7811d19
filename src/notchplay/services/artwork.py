"""Artwork decoding into small thumbnails."""

from __future__ import annotations

from io import BytesIO

from PIL import Image

THUMBNAIL_SIZE = (64, 64)


def decode_artwork(
    data: bytes, *, size: tuple[int, int] = THUMBNAIL_SIZE
) -> Image.Image:
    """Decode encoded image bytes into an RGBA thumbnail.

    Raises `PIL.UnidentifiedImageError` / `OSError` on undecodable data.
    """
    with Image.open(BytesIO(data)) as image:
        thumbnail = image.convert("RGBA")
    thumbnail.thumbnail(size, Image.Resampling.LANCZOS)
    return thumbnail
