import pytest
from PIL import Image

from conftest import set_field
from zxnext_bmp_tools.bmp import (
    PALETTE_SIZE,
    encode_bmp_palette,
    load_bmp,
    padded_row_size,
    parse_bmp,
    patch_bmp,
    row_offset,
)
from zxnext_bmp_tools.errors import BmpFormatError, FileAccessError, FormatProblem


def test_padded_row_size() -> None:
    assert [padded_row_size(w) for w in (1, 3, 4, 5, 8)] == [4, 4, 4, 8, 8]


def test_row_offset_for_both_storage_orders() -> None:
    assert [row_offset(y, 3, 4, bottom_up=False) for y in range(3)] == [0, 4, 8]
    assert [row_offset(y, 3, 4, bottom_up=True) for y in range(3)] == [8, 4, 0]


def test_parse_bottom_up_image(make_bmp) -> None:
    image = parse_bmp(make_bmp([[1, 2, 3], [4, 5, 6]], [(10, 20, 30)]))

    assert image.width == 3
    assert image.height == 2
    assert image.bottom_up
    assert image.stride == 4
    # The bottom row is stored first.
    assert image.pixels == bytes([4, 5, 6, 0, 1, 2, 3, 0])
    assert list(image.iter_rows()) == [b"\x01\x02\x03", b"\x04\x05\x06"]
    assert image.colors()[0] == (10, 20, 30)
    assert len(image.colors()) == 256


def test_parse_top_down_image(make_bmp) -> None:
    image = parse_bmp(make_bmp([[1, 2, 3], [4, 5, 6]], top_down=True))

    assert image.height == -2
    assert not image.bottom_up
    assert image.rows == 2
    assert image.row(0) == b"\x01\x02\x03"
    assert image.row(1) == b"\x04\x05\x06"


def test_minimum_geometry_is_accepted(make_bmp) -> None:
    data = make_bmp([[7]])
    assert len(data) == 1082

    image = parse_bmp(data)
    assert (image.width, image.rows) == (1, 1)
    assert image.row(0) == b"\x07"


@pytest.mark.parametrize(
    ("offset", "fmt", "value", "problem"),
    [
        (0, "<H", 0x4142, FormatProblem.NOT_BMP),
        (2, "<I", 1081, FormatProblem.TRUNCATED_HEADER),
        (10, "<I", 1094, FormatProblem.INVALID_OFFSET),
        (14, "<I", 12, FormatProblem.UNSUPPORTED_HEADER),
        (18, "<I", 0, FormatProblem.INVALID_WIDTH),
        (22, "<i", 0, FormatProblem.INVALID_HEIGHT),
        (18, "<I", 547, FormatProblem.INVALID_IMAGE_SIZE),
        (28, "<H", 24, FormatProblem.UNSUPPORTED_DEPTH),
        (30, "<I", 1, FormatProblem.UNSUPPORTED_COMPRESSION),
    ],
)
def test_header_checks(two_row_bmp, offset, fmt, value, problem) -> None:
    data = set_field(two_row_bmp, offset, fmt, value)

    with pytest.raises(BmpFormatError) as excinfo:
        parse_bmp(data)
    assert excinfo.value.problem is problem


def test_header_checks_run_in_order(two_row_bmp) -> None:
    data = set_field(two_row_bmp, 28, "<H", 4)
    data = set_field(data, 30, "<I", 2)

    with pytest.raises(BmpFormatError) as excinfo:
        parse_bmp(data)
    assert excinfo.value.problem is FormatProblem.UNSUPPORTED_DEPTH


def test_format_error_names_the_file(two_row_bmp) -> None:
    with pytest.raises(BmpFormatError, match="pic.bmp"):
        parse_bmp(b"XX" + two_row_bmp[2:], "pic.bmp")


@pytest.mark.parametrize("length", [20, 54 + 500, 54 + 1024 + 10])
def test_short_data_is_an_access_error(two_row_bmp, length) -> None:
    with pytest.raises(FileAccessError):
        parse_bmp(two_row_bmp[:length])


def test_load_missing_file(tmp_path) -> None:
    with pytest.raises(FileAccessError, match="Can't open file"):
        load_bmp(tmp_path / "missing.bmp")


def test_reads_bmp_written_by_pillow(tmp_path) -> None:
    palette = []
    for i in range(256):
        palette.extend((i, 255 - i, (i * 7) % 256))
    source = Image.new("P", (5, 3))
    source.putpalette(palette)
    source.putdata([(x + y * 5) for y in range(3) for x in range(5)])
    path = tmp_path / "pillow.bmp"
    source.save(path, format="BMP")

    image = load_bmp(path)

    assert (image.width, image.height) == (5, 3)
    assert image.row(0) == bytes([0, 1, 2, 3, 4])
    assert image.row(2) == bytes([10, 11, 12, 13, 14])
    assert image.colors()[3] == (3, 252, 21)


def test_map_pixels_keeps_row_padding(make_bmp) -> None:
    data = bytearray(make_bmp([[1, 1, 0], [0, 1, 1]], top_down=True))
    # Put junk in the padding byte of the first row.
    data[1078 + 3] = 0xEE
    image = parse_bmp(bytes(data))

    table = bytearray(range(256))
    table[1] = 2
    table[0xEE] = 0
    mapped = image.map_pixels(bytes(table))

    assert mapped == bytes([2, 2, 0, 0xEE, 0, 2, 2, 0])


def test_used_indices_skip_row_padding(make_bmp) -> None:
    data = bytearray(make_bmp([[1, 3, 3], [4, 1, 1]], top_down=True))
    data[1078 + 3] = 0xEE
    image = parse_bmp(bytes(data))

    assert image.used_indices() == {1, 3, 4}


def test_encode_bmp_palette() -> None:
    encoded = encode_bmp_palette([(1, 2, 3), (255, 128, 0)])

    assert len(encoded) == PALETTE_SIZE
    assert encoded[:8] == bytes([3, 2, 1, 0, 0, 128, 255, 0])
    assert encoded[8:] == bytes(PALETTE_SIZE - 8)


def test_patch_bmp_replaces_only_the_palette(two_row_bmp) -> None:
    image = parse_bmp(two_row_bmp)
    palette = encode_bmp_palette([(255, 255, 255)] * 256)

    patched = patch_bmp(two_row_bmp, image, palette=palette)

    assert len(patched) == len(two_row_bmp)
    assert patched[:54] == two_row_bmp[:54]
    assert patched[54 : 54 + PALETTE_SIZE] == palette
    assert patched[54 + PALETTE_SIZE :] == two_row_bmp[54 + PALETTE_SIZE :]


def test_patch_bmp_rejects_wrong_sizes(two_row_bmp) -> None:
    image = parse_bmp(two_row_bmp)

    with pytest.raises(ValueError):
        patch_bmp(two_row_bmp, image, palette=b"\x00" * 10)
    with pytest.raises(ValueError):
        patch_bmp(two_row_bmp, image, pixels=b"\x00")
