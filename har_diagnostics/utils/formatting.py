"""
Shared formatting functions for human-readable report output.
"""


BYTE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_bytes(size_bytes: int) -> str:
    """
    Format a byte count with 1024-based units, e.g. ``1536`` -> ``"1.5 KB"``.

    Values are rounded to two decimals with trailing zeros dropped.
    """
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    unit = 0
    # Compare the rounded value so 1048575 becomes "1 MB", not "1024 KB"
    while round(value, 2) >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {BYTE_UNITS[unit]}"


def format_ms(duration_ms: float) -> str:
    """Whole milliseconds, e.g. ``123.6`` -> ``"124ms"``."""
    return f"{round(duration_ms)}ms"


def truncate_url(url: str, max_length: int = 80) -> str:
    """Cut long URLs to ``max_length`` characters and mark the cut with an ellipsis."""
    if len(url) <= max_length:
        return url
    return url[:max_length] + "..."
