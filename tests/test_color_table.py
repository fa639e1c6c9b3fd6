import pytest

from indexed_bmp import ColorTable, PaletteMode, PixelBuffer, ShapeMismatchError, build_palette, scan
from indexed_bmp.palette import format_palette_text

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def _strip(colors):
    return PixelBuffer.from_colors(len(colors), 1, colors)


def test_mode_constants() -> None:
    assert PaletteMode.SHARED.capacity == 255
    assert PaletteMode.SHARED.index_base == 2
    assert PaletteMode.SHARED.fallback_index == 1
    assert PaletteMode.PER_IMAGE.capacity == 256
    assert PaletteMode.PER_IMAGE.index_base == 0
    assert PaletteMode.PER_IMAGE.fallback_index == 0


def test_scan_assigns_indices_in_first_seen_order() -> None:
    table = scan(_strip([RED, GREEN, RED, BLUE, GREEN]))

    assert table.colors() == [RED, GREEN, BLUE]
    assert table.index_of(RED) == 0
    assert table.index_of(GREEN) == 1
    assert table.index_of(BLUE) == 2
    assert table.index_of(WHITE) is None


def test_scan_ignores_alpha() -> None:
    data = bytes([10, 20, 30, 255, 10, 20, 30, 0])
    table = scan(PixelBuffer(2, 1, data))

    assert table.colors() == [(10, 20, 30)]


def test_shared_table_threads_through_several_scans() -> None:
    table = ColorTable(PaletteMode.SHARED)
    scan(_strip([RED]), table)
    scan(_strip([BLUE, RED]), table)

    assert table.colors() == [RED, BLUE]
    assert table.index_of(RED) == 2
    assert table.index_of(BLUE) == 3


def test_indices_never_change_once_assigned() -> None:
    table = ColorTable()
    table.add(RED)
    table.add(GREEN)
    assert table.add(RED) is False
    assert table.index_of(RED) == 0


def test_overflow_is_silent_and_counted() -> None:
    colors = [(i, 1, 0) for i in range(256)]
    table = scan(_strip(colors + [(0, 2, 0), (0, 2, 0)]), ColorTable(PaletteMode.SHARED))

    assert len(table) == 255
    assert table.is_full
    assert (255, 1, 0) not in table
    assert table.dropped == 3


def test_per_image_capacity_is_256() -> None:
    colors = [(i, 1, 0) for i in range(256)]
    table = scan(_strip(colors + [(0, 2, 0)]))

    assert len(table) == 256
    assert table.index_of((255, 1, 0)) == 255
    assert table.dropped == 1


def test_scan_rejects_inconsistent_buffer() -> None:
    with pytest.raises(ShapeMismatchError):
        scan(PixelBuffer(2, 2, bytes(12)))
    with pytest.raises(ShapeMismatchError):
        scan(PixelBuffer(0, 1, b""))


@pytest.mark.parametrize("mode", list(PaletteMode))
@pytest.mark.parametrize("count", [0, 1, 200, 300])
def test_palette_always_has_256_entries(mode, count) -> None:
    colors = [(i % 256, i // 256 + 1, 0) for i in range(count)] or [BLACK]
    table = scan(_strip(colors), ColorTable(mode))

    assert len(build_palette(table)) == 256


def test_per_image_palette_layout() -> None:
    table = scan(PixelBuffer.from_colors(2, 2, [RED, GREEN, BLUE, WHITE]))
    palette = build_palette(table)

    assert palette[:4] == [RED, GREEN, BLUE, WHITE]
    assert palette[4:] == [BLACK] * 252


def test_shared_palette_puts_first_color_in_slot_one() -> None:
    table = ColorTable(PaletteMode.SHARED)
    scan(_strip([RED]), table)
    scan(_strip([BLUE]), table)
    palette = build_palette(table)

    assert palette[0] == BLACK
    assert palette[1] == RED
    assert palette[2] == BLUE
    assert palette[3:] == [BLACK] * 253


def test_shared_palette_slot_zero_is_black_even_when_full() -> None:
    colors = [(255, i, 255) for i in range(256)]
    table = scan(_strip(colors), ColorTable(PaletteMode.SHARED))
    palette = build_palette(table)

    assert palette[0] == BLACK
    assert palette[1:] == colors[:255]


def test_format_palette_text_truncates() -> None:
    text = format_palette_text([RED, GREEN, BLUE], limit=2)

    assert text == "0: (255,0,0), 1: (0,255,0), ... (1 more)"
