"""Checksum placeholders and in-place checksum updates of spec files."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable

_PLACEHOLDERS = frozenset({"fixme", "todo"})


def is_placeholder_checksum(value: str) -> bool:
    """Return True if ``value`` is empty or a FIXME/TODO placeholder."""
    return not value or value.lower() in _PLACEHOLDERS


def replace_sha256_in_line(line: str, new_sha256: str) -> str:
    """Replace the quoted value following ``sha256`` on a line.

    The line is returned unchanged when it holds no ``sha256`` followed by
    a complete quoted string.
    """
    start = line.find("sha256")
    if start == -1:
        return line
    quote = line.find('"', start)
    if quote == -1:
        return line
    value_start = quote + 1
    value_end = line.find('"', value_start)
    if value_end == -1:
        return line
    return line[:value_start] + new_sha256 + line[value_end:]


def _source_pattern(key: str) -> re.Pattern[str]:
    return re.compile(
        rf'({re.escape(key)}\s*=\s*\{{\s*url\s*=\s*"[^"]*"\s*,\s*sha256\s*=\s*")'
        r'([^"]*)'
        r'("\s*\})'
    )


def update_spec_checksums(
    spec_path: str | os.PathLike[str],
    updates: Iterable[tuple[str, str, str]],
) -> None:
    """Rewrite source checksums in a spec file.

    Each update is ``(source key, old sha256, new sha256)``. The first inline
    table of the form ``key = { url = "...", sha256 = "..." }`` has its
    ``sha256`` value replaced; keys with no such table are left alone.
    """
    with open(spec_path, encoding="utf-8", newline="") as handle:
        content = handle.read()

    for key, _old_sha256, new_sha256 in updates:
        content = _source_pattern(key).sub(
            lambda match, value=new_sha256: f"{match.group(1)}{value}{match.group(3)}",
            content,
            count=1,
        )

    with open(spec_path, "w", encoding="utf-8", newline="") as handle:
        handle.write(content)