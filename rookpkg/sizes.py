"""Human-readable byte sizes."""

from __future__ import annotations

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024

_UNITS = ((_GB, "GB"), (_MB, "MB"), (_KB, "KB"))


def format_size(size: int) -> str:
    """Format a byte count using binary units, two decimals above bytes.

    Sizes below 1 KiB are shown as whole bytes, e.g. ``"512 B"``; larger
    sizes use the largest of KB, MB and GB that fits, e.g. ``"1.50 KB"``.
    """
    if size < 0:
        raise ValueError(f"size must not be negative, got {size}")
    for factor, unit in _UNITS:
        if size >= factor:
            return f"{size / factor:.2f} {unit}"
    return f"{size} B"