"""PNG to 8-bit indexed BMP converter.

Images are reduced to a palette of at most 256 exact colors (first come,
first served) and written as uncompressed top-down BMP files. It can be
invoked through the CLI (``python -m indexed_bmp``) or imported to convert
decoded pixel buffers into bytes.
"""

from .bmp import RowOrder, encode_bmp, read_bmp_header, row_size
from .converter import (
    ConvertedImage,
    ConvertOptions,
    convert_image,
    convert_images,
    convert_pngs,
    output_name,
    shared_palette,
)
from .errors import ConversionError, EmptyInputError, ShapeMismatchError
from .palette import ColorTable, PaletteMode, build_palette, format_palette_text, scan
from .pixels import PixelBuffer, load_pixels, pixels_from_image
from .quantizer import Quantizer, quantize

__all__ = [
    "ColorTable",
    "ConversionError",
    "ConvertOptions",
    "ConvertedImage",
    "EmptyInputError",
    "PaletteMode",
    "PixelBuffer",
    "Quantizer",
    "RowOrder",
    "ShapeMismatchError",
    "build_palette",
    "convert_image",
    "convert_images",
    "convert_pngs",
    "encode_bmp",
    "format_palette_text",
    "load_pixels",
    "output_name",
    "pixels_from_image",
    "quantize",
    "read_bmp_header",
    "row_size",
    "scan",
    "shared_palette",
]
