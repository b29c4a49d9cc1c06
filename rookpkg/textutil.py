"""Small text helpers for terminal reports."""

from __future__ import annotations

_ELLIPSIS = "..."


def textwrap(text: str, width: int) -> list[str]:
    """Greedily wrap ``text`` into lines of at most ``width`` characters.

    Runs of whitespace collapse to single spaces. A word longer than
    ``width`` is kept whole on a line of its own.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def truncate(text: str, max_len: int) -> str:
    """Return ``text`` cut to ``max_len`` characters, ending in ``...`` if cut."""
    if len(text) <= max_len:
        return text
    if max_len < len(_ELLIPSIS):
        raise ValueError(
            f"max_len must be at least {len(_ELLIPSIS)} to truncate, got {max_len}"
        )
    return text[: max_len - len(_ELLIPSIS)] + _ELLIPSIS