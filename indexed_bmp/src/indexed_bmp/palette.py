"""Unique color collection and 256 entry palette construction."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Sequence

from .bmp import PALETTE_ENTRIES, RowOrder
from .pixels import BLACK, Color, PixelBuffer


class PaletteMode(Enum):
    """Palette layout policy shared by collection, palette building and quantization.

    ``SHARED``: every image of a batch feeds one palette. Slot 0 is forced to
    black and at most 255 colors are collected. Table indices start at 2.
    Unknown colors fall back to index 1.

    ``PER_IMAGE``: a single image owns all 256 slots, indices start at 0 and
    unknown colors fall back to index 0.
    """

    SHARED = "shared"
    PER_IMAGE = "per-image"

    @property
    def capacity(self) -> int:
        return PALETTE_ENTRIES - 1 if self is PaletteMode.SHARED else PALETTE_ENTRIES

    @property
    def index_base(self) -> int:
        return 2 if self is PaletteMode.SHARED else 0

    @property
    def fallback_index(self) -> int:
        return 1 if self is PaletteMode.SHARED else 0

    @property
    def default_row_order(self) -> RowOrder:
        return RowOrder.REVERSED if self is PaletteMode.SHARED else RowOrder.TOP_DOWN


class ColorTable:
    """Insertion ordered ``Color -> index`` table with a fixed capacity.

    Indices are assigned as ``mode.index_base + len(table)`` and never change.
    Once the table is full new colors are skipped and counted in ``dropped``.
    """

    def __init__(self, mode: PaletteMode = PaletteMode.PER_IMAGE):
        self.mode = mode
        self._indices: Dict[Color, int] = {}
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._indices)

    def __contains__(self, color: object) -> bool:
        return color in self._indices

    @property
    def capacity(self) -> int:
        return self.mode.capacity

    @property
    def is_full(self) -> bool:
        return len(self._indices) >= self.mode.capacity

    def add(self, color: Color) -> bool:
        if color in self._indices:
            return False
        if self.is_full:
            self.dropped += 1
            return False
        self._indices[color] = self.mode.index_base + len(self._indices)
        return True

    def index_of(self, color: Color) -> int | None:
        return self._indices.get(color)

    def colors(self) -> List[Color]:
        return list(self._indices)


def scan(
    pixels: PixelBuffer,
    table: ColorTable | None = None,
    mode: PaletteMode = PaletteMode.PER_IMAGE,
) -> ColorTable:
    """Add every pixel color of ``pixels`` to ``table`` in row-major order.

    A new table is created for ``mode`` when ``table`` is None. The table is
    returned so it can be threaded through several scans.
    """

    pixels.validate()
    if table is None:
        table = ColorTable(mode)
    add = table.add
    for color in pixels.iter_colors():
        add(color)
    return table


def build_palette(table: ColorTable) -> List[Color]:
    """Finalize ``table`` into exactly 256 palette entries.

    In shared mode the collected colors are padded to 255 entries and black is
    prepended, so the first collected color lands in slot 1 even though its
    table index is 2.
    """

    palette = table.colors()
    if table.mode is PaletteMode.SHARED:
        palette.extend([BLACK] * (PALETTE_ENTRIES - 1 - len(palette)))
        palette.insert(0, BLACK)
    else:
        palette.extend([BLACK] * (PALETTE_ENTRIES - len(palette)))
    return palette


def format_palette_text(palette: Sequence[Color], limit: int | None = None) -> str:
    entries = [f"{idx}: ({r},{g},{b})" for idx, (r, g, b) in enumerate(palette)]
    if limit is not None and len(entries) > limit:
        entries = entries[:limit] + [f"... ({len(palette) - limit} more)"]
    return ", ".join(entries)
