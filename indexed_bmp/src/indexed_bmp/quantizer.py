"""Exact-match mapping of pixels to palette indices."""

from __future__ import annotations

from typing import Dict, Sequence

from .bmp import PALETTE_ENTRIES
from .errors import ShapeMismatchError
from .pixels import Color, PixelBuffer
from .palette import PaletteMode


def reverse_lookup(palette: Sequence[Color]) -> Dict[Color, int]:
    # Later slots overwrite earlier ones, so black resolves to the last black slot.
    return {tuple(color): index for index, color in enumerate(palette)}


class Quantizer:
    """Map pixels onto a finalized palette.

    Colors missing from the palette (dropped when the color table filled up)
    get ``mode.fallback_index``. That slot holds whatever the palette has
    there, which in shared mode is the first collected color rather than
    black.
    """

    def __init__(self, palette: Sequence[Color], mode: PaletteMode):
        if len(palette) != PALETTE_ENTRIES:
            raise ShapeMismatchError(
                f"Palette must have exactly {PALETTE_ENTRIES} entries, got {len(palette)}"
            )
        self.palette = list(palette)
        self.mode = mode
        self.lookup = reverse_lookup(palette)

    def __call__(self, pixels: PixelBuffer) -> bytes:
        pixels.validate()
        lookup = self.lookup
        fallback = self.mode.fallback_index
        return bytes(lookup.get(color, fallback) for color in pixels.iter_colors())


def quantize(pixels: PixelBuffer, palette: Sequence[Color], mode: PaletteMode) -> bytes:
    return Quantizer(palette, mode)(pixels)
