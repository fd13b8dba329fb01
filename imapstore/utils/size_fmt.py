"""Human-readable size formatting for RFC822.SIZE values."""
from __future__ import annotations

_UNITS = ("B", "KB", "MB", "GB", "TB")


def human_size(num_bytes: int, decimals: int = 1) -> str:
    """Convert a byte count to a string like '512 B' or '2.3 MB'."""
    if abs(num_bytes) < 1024:
        return f"{int(num_bytes)} B"
    size = float(num_bytes)
    for unit in _UNITS[1:]:
        size /= 1024.0
        if abs(size) < 1024.0 or unit == _UNITS[-1]:
            break
    return f"{size:.{decimals}f} {unit}"
