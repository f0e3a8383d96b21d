"""
Report formatting and display for the CLI interface.

Provides functions to format and print duplicate groups in a human-readable
format.
"""

from __future__ import annotations

from ..finder import FinderStats
from ..models import DuplicateGroup, format_size
from ..utils.formatters import format_duration, format_number


def sort_groups(groups: list[DuplicateGroup]) -> list[DuplicateGroup]:
    """Order groups by total size (largest first), then label, and number them."""
    ordered = sorted(groups, key=lambda g: (-g.total_size, g.label))
    for i, group in enumerate(ordered, 1):
        group.id = i
    return ordered


def _format_group_header(group: DuplicateGroup) -> str:
    """Format a group header line."""
    return (f"\nGroup {group.id}: {group.label} "
            f"({group.file_count} files, {group.total_size_formatted})")


def _calculate_statistics(groups: list[DuplicateGroup]) -> dict[str, int]:
    """
    Calculate statistics for duplicate groups.

    Returns:
        Dictionary with statistics:
        - total_duplicates: Number of duplicate files (excludes the representative)
        - total_groups: Number of groups
        - total_waste: Total file size of duplicates (bytes)
    """
    return {
        'total_duplicates': sum(len(g.duplicates) for g in groups),
        'total_groups': len(groups),
        'total_waste': sum(g.potential_savings for g in groups),
    }


def _print_section_header(title: str) -> None:
    """Print a section header with divider lines."""
    print("\n" + "-" * 70)
    print(title)
    print("-" * 70)


def print_duplicate_report(
    groups: list[DuplicateGroup],
    strategy_name: str,
    stats: FinderStats,
    elapsed_seconds: float,
) -> None:
    """
    Print a report of found duplicates.

    Args:
        groups: Duplicate groups, already sorted and numbered
        strategy_name: Name of the strategy used
        stats: Counters from the finder run
        elapsed_seconds: Wall time of the run
    """
    print("\n" + "=" * 70)
    print("DUPLICATE IMAGE REPORT")
    print("=" * 70)

    summary = _calculate_statistics(groups)
    print(f"\nStrategy: {strategy_name}")
    print(f"Images scanned: {format_number(stats.files_scanned)} "
          f"in {format_duration(elapsed_seconds)}")
    print(f"Duplicates found: {format_number(summary['total_duplicates'])} files in "
          f"{format_number(summary['total_groups'])} groups")
    if stats.comparison_failures:
        print(f"Comparisons failed: {format_number(stats.comparison_failures)} "
              f"(treated as not duplicate)")

    if groups:
        _print_section_header("DUPLICATE GROUPS")
        for group in groups:
            print(_format_group_header(group))
            for position, f in enumerate(group.files):
                marker = "  [KEEP]" if position == 0 else "  [DUPE]"
                print(f"{marker} {f.path}")
                print(f"         {format_size(f.size)}")

    print("\n" + "=" * 70)
    print(f"Total space recoverable: {format_size(summary['total_waste'])}")
    print("=" * 70)


__all__ = ['print_duplicate_report', 'sort_groups']
