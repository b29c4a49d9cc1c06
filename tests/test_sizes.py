import pytest

from rookpkg.sizes import format_size


def test_zero_bytes():
    assert format_size(0) == "0 B"


def test_small_sizes_are_whole_bytes():
    assert format_size(512) == "512 B"
    assert format_size(1023) == "1023 B"


def test_one_kilobyte():
    assert format_size(1024) == "1.00 KB"


def test_one_megabyte():
    assert format_size(1024 * 1024) == "1.00 MB"


def test_one_gigabyte():
    assert format_size(1024 ** 3) == "1.00 GB"


@pytest.mark.parametrize(
    ("size", "unit"),
    [
        (1024, "KB"),
        (1024 * 1024 - 1, "KB"),
        (1024 * 1024, "MB"),
        (1024 ** 3 - 1, "MB"),
        (1024 ** 3, "GB"),
        (5 * 1024 ** 4, "GB"),
    ],
)
def test_unit_boundaries(size, unit):
    assert format_size(size).split()[1] == unit


@pytest.mark.parametrize("size", [1024, 3000, 1024 * 1024 * 7, 1024 ** 3 * 2 + 5])
def test_scaled_sizes_have_two_decimals(size):
    number = format_size(size).split()[0]
    assert len(number.split(".")[1]) == 2


def test_negative_size_is_rejected():
    with pytest.raises(ValueError):
        format_size(-1)