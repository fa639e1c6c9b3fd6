"""8-bit indexed BMP serialization.

File layout (all integers little endian)::

    offset  size  field
    ------  ----  ------------------------------------------------------
         0     2  "BM"
         2     4  file size = 54 + 1024 + row_size * height
         6     4  reserved (0)
        10     4  pixel data offset = 54 + 1024
        14     4  BITMAPINFOHEADER size (40)
        18     4  width (signed)
        22     4  -height (signed, negative = top-down)
        26     2  planes (1)
        28     2  bits per pixel (8)
        30     4  compression (0 = BI_RGB)
        34     4  image data size = row_size * height
        38     4  horizontal resolution (0)
        42     4  vertical resolution (0)
        46     4  palette colors (256)
        50     4  important colors (0)
        54  1024  palette, 256 x (B, G, R, 0)
      1078     *  pixel rows, each padded with zeros to a multiple of 4
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .errors import ConversionError, ShapeMismatchError
from .pixels import Color

FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40
HEADER_SIZE = FILE_HEADER_SIZE + INFO_HEADER_SIZE
PALETTE_ENTRIES = 256
PALETTE_SIZE = PALETTE_ENTRIES * 4
PIXEL_DATA_OFFSET = HEADER_SIZE + PALETTE_SIZE
BITS_PER_PIXEL = 8

_FILE_HEADER = struct.Struct("<2sIII")
_INFO_HEADER = struct.Struct("<IiiHHIIiiII")


class RowOrder(Enum):
    """How source rows are placed into the stored pixel array.

    ``TOP_DOWN`` stores source row ``y`` as stored row ``y``; combined with the
    negative height this displays the image upright.

    ``REVERSED`` stores source row ``y`` as stored row ``height - 1 - y``.
    Because the header still declares a top-down bitmap, viewers show the
    image upside down. This is how the shared-palette batch tool has always
    written its files.
    """

    TOP_DOWN = "top-down"
    REVERSED = "reversed"


@dataclass(frozen=True)
class BmpHeader:
    file_size: int
    pixel_offset: int
    header_size: int
    width: int
    height: int
    planes: int
    bits_per_pixel: int
    compression: int
    image_size: int
    colors_used: int
    important_colors: int

    @property
    def top_down(self) -> bool:
        return self.height < 0


def row_size(width: int) -> int:
    """Bytes per stored row: ``width`` rounded up to a multiple of 4."""

    return (width + 3) & ~3


def encode_bmp(
    width: int,
    height: int,
    indices: bytes | bytearray | Sequence[int],
    palette: Sequence[Color],
    row_order: RowOrder = RowOrder.TOP_DOWN,
) -> bytes:
    if width <= 0 or height <= 0:
        raise ShapeMismatchError(f"Image size must be positive (got {width}x{height})")
    if len(indices) != width * height:
        raise ShapeMismatchError(
            f"Expected {width * height} palette indices for {width}x{height}, got {len(indices)}"
        )
    if len(palette) != PALETTE_ENTRIES:
        raise ShapeMismatchError(
            f"Palette must have exactly {PALETTE_ENTRIES} entries, got {len(palette)}"
        )

    stride = row_size(width)
    image_size = stride * height
    file_size = PIXEL_DATA_OFFSET + image_size
    buf = bytearray(file_size)

    _FILE_HEADER.pack_into(buf, 0, b"BM", file_size, 0, PIXEL_DATA_OFFSET)
    _INFO_HEADER.pack_into(
        buf,
        FILE_HEADER_SIZE,
        INFO_HEADER_SIZE,
        width,
        -height,
        1,
        BITS_PER_PIXEL,
        0,
        image_size,
        0,
        0,
        PALETTE_ENTRIES,
        0,
    )

    offset = HEADER_SIZE
    for r, g, b in palette:
        buf[offset : offset + 4] = bytes((b, g, r, 0))
        offset += 4

    source = bytes(indices)
    for y in range(height):
        if row_order is RowOrder.REVERSED:
            stored_row = height - 1 - y
        else:
            stored_row = y
        start = PIXEL_DATA_OFFSET + stored_row * stride
        buf[start : start + width] = source[y * width : (y + 1) * width]

    return bytes(buf)


def read_bmp_header(data: bytes) -> BmpHeader:
    if len(data) < HEADER_SIZE:
        raise ConversionError(f"BMP data too short ({len(data)} bytes)")
    magic, file_size, _reserved, pixel_offset = _FILE_HEADER.unpack_from(data, 0)
    if magic != b"BM":
        raise ConversionError("Missing BM signature")
    (
        header_size,
        width,
        height,
        planes,
        bits_per_pixel,
        compression,
        image_size,
        _x_res,
        _y_res,
        colors_used,
        important_colors,
    ) = _INFO_HEADER.unpack_from(data, FILE_HEADER_SIZE)
    return BmpHeader(
        file_size=file_size,
        pixel_offset=pixel_offset,
        header_size=header_size,
        width=width,
        height=height,
        planes=planes,
        bits_per_pixel=bits_per_pixel,
        compression=compression,
        image_size=image_size,
        colors_used=colors_used,
        important_colors=important_colors,
    )
