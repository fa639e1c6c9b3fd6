"""Decoded RGBA pixel buffers and the Pillow based loader."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple

from PIL import Image

from .errors import ConversionError, ShapeMismatchError

Color = Tuple[int, int, int]
BLACK: Color = (0, 0, 0)


@dataclass(frozen=True)
class PixelBuffer:
    """``width`` x ``height`` RGBA quadruplets, row-major, top row first."""

    width: int
    height: int
    data: bytes

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ShapeMismatchError(
                f"Image size must be positive (got {self.width}x{self.height})"
            )
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ShapeMismatchError(
                f"Pixel data is {len(self.data)} bytes; "
                f"{self.width}x{self.height} RGBA needs {expected}"
            )

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def iter_colors(self) -> Iterator[Color]:
        data = self.data
        for i in range(0, len(data), 4):
            yield (data[i], data[i + 1], data[i + 2])

    @classmethod
    def from_colors(cls, width: int, height: int, colors, alpha: int = 255) -> "PixelBuffer":
        """Build a buffer from ``(r, g, b)`` tuples in row-major order."""

        data = bytearray()
        for r, g, b in colors:
            data.extend((r, g, b, alpha))
        return cls(width, height, bytes(data))


def pixels_from_image(image: Image.Image) -> PixelBuffer:
    rgba = image.convert("RGBA")
    width, height = rgba.size
    return PixelBuffer(width, height, rgba.tobytes())


def load_pixels(path: str | Path) -> PixelBuffer:
    path = Path(path)
    try:
        with Image.open(path) as img:
            return pixels_from_image(img)
    except FileNotFoundError as exc:
        raise ConversionError(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise ConversionError(f"Failed to read image: {path}") from exc
