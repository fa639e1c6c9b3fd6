"""Batch conversion of RGBA images into 8-bit indexed BMP files."""

from __future__ import annotations

import concurrent.futures
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

from .bmp import RowOrder, encode_bmp
from .errors import ConversionError, EmptyInputError
from .palette import ColorTable, PaletteMode, build_palette, scan
from .pixels import Color, PixelBuffer, load_pixels
from .quantizer import Quantizer

SINGLE_OUTPUT_NAME = "image.bmp"


@dataclass
class ConvertOptions:
    """Palette and layout selection.

    ``mode`` and ``row_order`` left as None are resolved per batch: shared
    palette for several images, per-image palette for one, and the mode's
    own row order.
    """

    mode: PaletteMode | None = None
    row_order: RowOrder | None = None
    jobs: int = 1

    def resolve_mode(self, count: int) -> PaletteMode:
        if self.mode is not None:
            return self.mode
        return PaletteMode.SHARED if count > 1 else PaletteMode.PER_IMAGE

    def resolve_row_order(self, mode: PaletteMode) -> RowOrder:
        return self.row_order if self.row_order is not None else mode.default_row_order


@dataclass
class ConvertedImage:
    index: int
    name: str
    width: int
    height: int
    data: bytes


def output_name(index: int, total: int) -> str:
    """Default file name for the ``index``-th (0-based) of ``total`` images."""

    if total == 1:
        return SINGLE_OUTPUT_NAME
    return f"image_{index + 1}.bmp"


def shared_palette(buffers: Sequence[PixelBuffer]) -> Tuple[ColorTable, List[Color]]:
    """Scan every buffer into one shared table and finalize its palette."""

    table = ColorTable(PaletteMode.SHARED)
    for buffer in buffers:
        scan(buffer, table)
    return table, build_palette(table)


def _encode(
    index: int,
    total: int,
    buffer: PixelBuffer,
    quantizer: Quantizer,
    row_order: RowOrder,
) -> ConvertedImage:
    indices = quantizer(buffer)
    data = encode_bmp(buffer.width, buffer.height, indices, quantizer.palette, row_order)
    return ConvertedImage(index, output_name(index, total), buffer.width, buffer.height, data)


def _encode_own_palette(
    index: int, total: int, buffer: PixelBuffer, row_order: RowOrder
) -> ConvertedImage:
    table = scan(buffer, mode=PaletteMode.PER_IMAGE)
    quantizer = Quantizer(build_palette(table), PaletteMode.PER_IMAGE)
    return _encode(index, total, buffer, quantizer, row_order)


def convert_images(
    buffers: Sequence[PixelBuffer], options: ConvertOptions | None = None
) -> List[ConvertedImage]:
    """Convert ``buffers`` into BMP files.

    In shared mode every valid image is scanned before any image is
    quantized. Images that fail (bad shape, encoding error) are reported with
    a ``RuntimeWarning`` and left out of the result; the others still convert.
    With ``options.jobs > 1`` quantizing and encoding run in worker processes.
    """

    options = options or ConvertOptions()
    if not buffers:
        raise EmptyInputError("No images were supplied.")

    total = len(buffers)
    mode = options.resolve_mode(total)
    row_order = options.resolve_row_order(mode)

    valid: List[Tuple[int, PixelBuffer]] = []
    for index, buffer in enumerate(buffers):
        try:
            buffer.validate()
        except ConversionError as exc:
            warnings.warn(f"image {index + 1} skipped: {exc}", RuntimeWarning, stacklevel=2)
            continue
        valid.append((index, buffer))

    if mode is PaletteMode.SHARED:
        _table, palette = shared_palette([buffer for _, buffer in valid])
        quantizer = Quantizer(palette, mode)
        tasks = [(_encode, (index, total, buffer, quantizer, row_order)) for index, buffer in valid]
    else:
        tasks = [(_encode_own_palette, (index, total, buffer, row_order)) for index, buffer in valid]

    results: List[ConvertedImage] = []
    if options.jobs <= 1 or len(tasks) <= 1:
        for (index, _buffer), (func, args) in zip(valid, tasks):
            try:
                results.append(func(*args))
            except ConversionError as exc:
                warnings.warn(f"image {index + 1} skipped: {exc}", RuntimeWarning, stacklevel=2)
        return results

    # The palette is final here; workers only read it.
    with concurrent.futures.ProcessPoolExecutor(max_workers=options.jobs) as executor:
        futures = [executor.submit(func, *args) for func, args in tasks]
        for (index, _buffer), future in zip(valid, futures):
            try:
                results.append(future.result())
            except ConversionError as exc:
                warnings.warn(f"image {index + 1} skipped: {exc}", RuntimeWarning, stacklevel=2)

    return results


def convert_image(buffer: PixelBuffer, options: ConvertOptions | None = None) -> bytes:
    """Convert a single image, raising instead of warning on failure."""

    options = options or ConvertOptions()
    mode = options.resolve_mode(1)
    row_order = options.resolve_row_order(mode)
    if mode is PaletteMode.SHARED:
        _table, palette = shared_palette([buffer])
        return _encode(0, 1, buffer, Quantizer(palette, mode), row_order).data
    return _encode_own_palette(0, 1, buffer, row_order).data


def convert_pngs(
    paths: Sequence[str | Path], options: ConvertOptions | None = None
) -> List[ConvertedImage]:
    if not paths:
        raise EmptyInputError("Please select at least one PNG file.")
    buffers = [load_pixels(path) for path in paths]
    return convert_images(buffers, options)
