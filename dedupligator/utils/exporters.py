"""
Export functionality for Dedupligator.

Provides functions to export duplicate groups to TXT, CSV and JSON files.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import TextIO

from ..models import DuplicateGroup

EXPORT_FORMATS = ('txt', 'csv', 'json')


def _export_txt(groups: list[DuplicateGroup], file_handle: TextIO) -> None:
    """Write a plain-text report; the representative is marked [KEEP]."""
    file_handle.write("DUPLICATE IMAGE REPORT\n")
    file_handle.write("=" * 70 + "\n")
    for i, group in enumerate(groups, 1):
        file_handle.write(
            f"\nGroup {i}: {group.label} ({group.file_count} files, "
            f"{group.total_size_formatted})\n"
        )
        for position, f in enumerate(group.files):
            marker = "[KEEP]" if position == 0 else "[DUPE]"
            file_handle.write(f"  {marker} {f.path}\n")


def _export_csv(groups: list[DuplicateGroup], file_handle: TextIO) -> None:
    """
    Write one row per file.

    Columns: group_id, label, match_type, status, path, size
    """
    writer = csv.writer(file_handle)
    writer.writerow(['group_id', 'label', 'match_type', 'status', 'path', 'size'])
    for i, group in enumerate(groups, 1):
        for position, f in enumerate(group.files):
            status = "keep" if position == 0 else "duplicate"
            writer.writerow([i, group.label, group.match_type, status, f.path, f.size])


def _export_json(groups: list[DuplicateGroup], file_handle: TextIO) -> None:
    payload = []
    for i, group in enumerate(groups, 1):
        data = group.to_dict()
        data['id'] = group.id if group.id is not None else i
        payload.append(data)
    json.dump({'groups': payload}, file_handle, indent=2)


def export_results(
    groups: list[DuplicateGroup],
    output_path: Path,
    export_format: str = 'txt'
) -> None:
    """
    Export duplicate groups to a file.

    Args:
        groups: Duplicate groups, in the order they should be listed
        output_path: Path to output file
        export_format: 'txt', 'csv' or 'json'. Default: 'txt'

    Raises:
        ValueError: If export_format is not supported
        OSError: If file cannot be written
    """
    if export_format not in EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format: {export_format}. Use one of: {', '.join(EXPORT_FORMATS)}."
        )

    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        if export_format == 'txt':
            _export_txt(groups, f)
        elif export_format == 'csv':
            _export_csv(groups, f)
        else:
            _export_json(groups, f)


__all__ = ['export_results', 'EXPORT_FORMATS']
