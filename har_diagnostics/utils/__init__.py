"""
Utility modules for HAR trace diagnostics.

This package contains formatting helpers shared by the report rendering and
the command-line interface.
"""

from .formatting import format_bytes, format_ms, truncate_url

__all__ = [
    'format_bytes',
    'format_ms',
    'truncate_url'
]
