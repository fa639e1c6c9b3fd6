"""Command line interface for the indexed BMP converter."""

from __future__ import annotations

import argparse
import sys
import warnings
from pathlib import Path
from typing import Iterable, List

from .bmp import RowOrder
from .converter import ConvertedImage, ConvertOptions, convert_images, output_name, shared_palette
from .errors import ConversionError, EmptyInputError
from .palette import PaletteMode, build_palette, format_palette_text, scan
from .pixels import PixelBuffer, load_pixels

MODE_CHOICES = {
    "auto": None,
    "shared": PaletteMode.SHARED,
    "per-image": PaletteMode.PER_IMAGE,
}
ROW_ORDER_CHOICES = {
    "auto": None,
    "top-down": RowOrder.TOP_DOWN,
    "reversed": RowOrder.REVERSED,
}


def iter_pngs(paths: Iterable[str]) -> List[Path]:
    results: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            if path.suffix.lower() != ".png":
                raise ConversionError(f"Unsupported file type (expected .png): {path}")
            results.append(path)
        elif path.is_dir():
            for entry in sorted(path.iterdir()):
                if entry.is_file() and entry.suffix.lower() == ".png":
                    results.append(entry)
        else:
            raise ConversionError(f"Input path does not exist: {path}")
    if not results:
        raise EmptyInputError("No PNG files were found in the provided inputs.")
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Convert PNG files into 8-bit palette-indexed BMP files.\n"
            "With several inputs all images share one 256-color palette (slot 0 is black);\n"
            "a single input gets a palette of its own. Colors beyond the palette capacity\n"
            "are mapped to a fallback slot (1 when shared, 0 otherwise)."
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="PNG files or folders containing PNGs (non-recursive)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        required=True,
        help="Destination directory for .bmp files",
    )
    parser.add_argument(
        "--mode",
        choices=list(MODE_CHOICES),
        default="auto",
        help="Palette mode (auto: shared for several inputs, per-image for one)",
    )
    parser.add_argument(
        "--row-order",
        choices=list(ROW_ORDER_CHOICES),
        default="auto",
        help=(
            "Stored row order (auto: reversed in shared mode, top-down in per-image mode).\n"
            "'reversed' reproduces the flipped output of the original batch tool."
        ),
    )
    parser.add_argument(
        "--keep-names",
        action="store_true",
        help="Name outputs after the input files instead of image_<n>.bmp",
    )
    parser.add_argument("--prefix", default="", help="Optional prefix for output filenames")
    parser.add_argument("--suffix", default="", help="Optional suffix for output filenames")
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Worker processes for quantizing and encoding once the palette is built",
    )
    parser.add_argument(
        "--show-palette",
        action="store_true",
        help="Print the collected palette(s) before writing files",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite existing files without prompting",
    )
    return parser


def show_palettes(inputs: List[Path], buffers: List[PixelBuffer], mode: PaletteMode) -> None:
    if mode is PaletteMode.SHARED:
        table, palette = shared_palette(buffers)
        # Slot 0 is the reserved black ahead of the collected colors.
        groups = [("shared", table, palette, len(table) + 1)]
    else:
        groups = []
        for path, buffer in zip(inputs, buffers):
            table = scan(buffer, mode=mode)
            groups.append((path.name, table, build_palette(table), len(table)))

    for label, table, palette, limit in groups:
        print(f"{label} palette: {len(table)} colors, {table.dropped} pixels over capacity")
        print(format_palette_text(palette, limit=limit))


def output_names(
    inputs: List[Path],
    prefix: str,
    suffix: str,
    keep_names: bool,
) -> List[str]:
    names: List[str] = []
    seen = set()
    for index, path in enumerate(inputs):
        if keep_names:
            stem = path.stem
        else:
            stem = Path(output_name(index, len(inputs))).stem
        name = f"{prefix}{stem}{suffix}.bmp"
        if name in seen:
            raise ConversionError(f"Duplicate output name would occur: {name}")
        seen.add(name)
        names.append(name)
    return names


def check_conflicts(names: List[str], output_dir: Path, force: bool) -> None:
    if force:
        return
    conflicts = [str(output_dir / name) for name in names if (output_dir / name).exists()]
    if conflicts:
        raise ConversionError(
            "Output files already exist (use --force to overwrite):\n" + "\n".join(conflicts)
        )


def write_outputs(
    converted: List[ConvertedImage],
    names: List[str],
    output_dir: Path,
) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)

    for item in converted:
        target = output_dir / names[item.index]
        target.write_bytes(item.data)
        print(f"wrote {target}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.jobs < 1:
            raise ConversionError("--jobs must be 1 or greater")
        options = ConvertOptions(
            mode=MODE_CHOICES[args.mode],
            row_order=ROW_ORDER_CHOICES[args.row_order],
            jobs=args.jobs,
        )

        inputs = iter_pngs(args.inputs)
        output_dir = Path(args.output_dir)
        names = output_names(inputs, args.prefix, args.suffix, args.keep_names)
        check_conflicts(names, output_dir, args.force)

        buffers = [load_pixels(path) for path in inputs]

        if args.show_palette:
            show_palettes(inputs, buffers, options.resolve_mode(len(buffers)))

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            converted = convert_images(buffers, options)
        for warning in caught:
            print(f"Warning: {warning.message}", file=sys.stderr)

        write_outputs(converted, names, output_dir)
        return 0 if len(converted) == len(inputs) else 1
    except ConversionError as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
