import pytest

from rookpkg.textutil import textwrap, truncate

SAMPLE = (
    "A heap-based buffer overflow in the parser allows remote attackers "
    "to execute arbitrary code via a crafted archive header field."
)


def test_textwrap_empty_text_gives_no_lines():
    assert textwrap("", 70) == []
    assert textwrap("   \n\t ", 70) == []


def test_textwrap_short_text_is_one_line():
    assert textwrap("hello world", 70) == ["hello world"]


def test_textwrap_collapses_whitespace():
    assert textwrap("hello   \n world\t", 70) == ["hello world"]


@pytest.mark.parametrize("width", [10, 20, 35, 70])
def test_textwrap_preserves_words_in_order(width):
    lines = textwrap(SAMPLE, width)
    assert " ".join(lines).split() == SAMPLE.split()


@pytest.mark.parametrize("width", [10, 20, 35, 70])
def test_textwrap_respects_width(width):
    for line in textwrap(SAMPLE, width):
        assert len(line) <= width or " " not in line


@pytest.mark.parametrize("width", [10, 20, 35])
def test_textwrap_is_greedy(width):
    lines = textwrap(SAMPLE, width)
    assert len(lines) > 1
    for line, following in zip(lines, lines[1:]):
        first_word = following.split()[0]
        assert len(line) + 1 + len(first_word) > width


def test_textwrap_long_word_stands_alone():
    word = "x" * 30
    lines = textwrap(f"a {word} b", 10)
    assert lines == ["a", word, "b"]


def test_textwrap_exact_fit_stays_on_line():
    assert textwrap("ab cd", 5) == ["ab cd"]
    assert textwrap("ab cd", 4) == ["ab", "cd"]


def test_truncate_short_text_unchanged():
    assert truncate("short", 60) == "short"


def test_truncate_text_at_limit_unchanged():
    text = "y" * 60
    assert truncate(text, 60) == text


@pytest.mark.parametrize("max_len", [3, 10, 60])
def test_truncate_long_text(max_len):
    result = truncate(SAMPLE, max_len)
    assert len(result) == max_len
    assert result.endswith("...")
    assert SAMPLE.startswith(result[:-3])


def test_truncate_pinned_value():
    assert truncate("abcdefghij", 8) == "abcde..."


def test_truncate_too_small_limit_raises():
    with pytest.raises(ValueError):
        truncate("abcdef", 2)