"""
Formatting utilities for Dedupligator.

Provides human-readable formatting for counts, durations, percentages and
file sizes used by the CLI report.
"""

from __future__ import annotations

# Re-export format_size from models for convenience
from ..models import format_size


def format_number(n: int) -> str:
    """
    Format large numbers with commas for readability.

    Examples:
        >>> format_number(1234567)
        '1,234,567'
    """
    return f"{n:,}"


def format_duration(seconds: float) -> str:
    """
    Format an elapsed time in seconds.

    Examples:
        >>> format_duration(4.25)
        '4.2s'
        >>> format_duration(150)
        '2m 30s'
        >>> format_duration(3665)
        '1h 1m'
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{int(seconds / 60)}m {int(seconds % 60)}s"
    else:
        hours = int(seconds / 3600)
        minutes = int((seconds % 3600) / 60)
        return f"{hours}h {minutes}m"


def format_percent(value: float) -> str:
    """Format a percentage in [0, 100] with one decimal."""
    return f"{value:.1f}%"


__all__ = ['format_number', 'format_duration', 'format_percent', 'format_size']
