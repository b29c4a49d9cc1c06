import pytest

from rookpkg.checksums import (
    is_placeholder_checksum,
    replace_sha256_in_line,
    update_spec_checksums,
)

NEW_HASH = "a" * 64
OTHER_HASH = "b" * 64


@pytest.mark.parametrize("value", ["FIXME", "fixme", "Fixme", "TODO", "todo", ""])
def test_placeholders_are_detected(value):
    assert is_placeholder_checksum(value) is True


@pytest.mark.parametrize("value", [NEW_HASH, "skip", "fixme-later"])
def test_real_values_are_not_placeholders(value):
    assert is_placeholder_checksum(value) is False


def test_replace_sha256_in_line_replaces_value():
    line = 'source0 = { url = "https://example.com/a.tar.gz", sha256 = "FIXME" }'
    assert replace_sha256_in_line(line, NEW_HASH) == line.replace("FIXME", NEW_HASH)


def test_replace_sha256_in_line_replaces_empty_value():
    line = 'sha256 = ""'
    assert replace_sha256_in_line(line, NEW_HASH) == 'sha256 = "' + NEW_HASH + '"'


@pytest.mark.parametrize(
    "line",
    [
        'url = "https://example.com/a.tar.gz"',
        "sha256 = FIXME",
        'sha256 = "unterminated',
        "",
    ],
)
def test_replace_sha256_in_line_leaves_other_lines(line):
    assert replace_sha256_in_line(line, NEW_HASH) == line


SPEC = (
    "[package]\n"
    'name = "hello"\n'
    "\n"
    "[sources]\n"
    'source0 = { url = "https://example.com/hello.tar.gz", sha256 = "FIXME" }\n'
    'source1 = { url = "https://example.com/extra.tar.gz", sha256 = "TODO" }\n'
)


@pytest.fixture
def spec_file(tmp_path):
    path = tmp_path / "hello.rook"
    path.write_text(SPEC, encoding="utf-8")
    return path


def test_update_single_source(spec_file):
    update_spec_checksums(spec_file, [("source0", "FIXME", NEW_HASH)])
    content = spec_file.read_text(encoding="utf-8")
    assert content == SPEC.replace('"FIXME"', f'"{NEW_HASH}"')


def test_update_multiple_sources(spec_file):
    update_spec_checksums(
        spec_file,
        [("source0", "FIXME", NEW_HASH), ("source1", "TODO", OTHER_HASH)],
    )
    content = spec_file.read_text(encoding="utf-8")
    assert f'sha256 = "{NEW_HASH}"' in content
    assert f'sha256 = "{OTHER_HASH}"' in content
    assert "FIXME" not in content and "TODO" not in content


def test_update_unknown_key_leaves_file_unchanged(spec_file):
    update_spec_checksums(spec_file, [("source9", "FIXME", NEW_HASH)])
    assert spec_file.read_text(encoding="utf-8") == SPEC


def test_update_preserves_line_count_and_trailing_newline(spec_file):
    update_spec_checksums(spec_file, [("source1", "TODO", NEW_HASH)])
    content = spec_file.read_text(encoding="utf-8")
    assert content.endswith("\n")
    assert content.count("\n") == SPEC.count("\n")


def test_update_tolerates_spacing(tmp_path):
    path = tmp_path / "spaced.rook"
    original = 'source0={url="https://example.com/x.tar",sha256="old"}\n'
    path.write_text(original, encoding="utf-8")
    update_spec_checksums(path, [("source0", "old", NEW_HASH)])
    assert path.read_text(encoding="utf-8") == original.replace("old", NEW_HASH)


def test_update_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        update_spec_checksums(tmp_path / "absent.rook", [("source0", "", NEW_HASH)])