"""
Data models for Dedupligator.

Contains dataclasses for representing candidate files and duplicate groups.
"""

from dataclasses import dataclass, field
from typing import Optional
import os


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable form."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


@dataclass(frozen=True)
class CandidateFile:
    """
    Immutable snapshot of an image file taken at scan time.

    Identity is the absolute path; later changes on disk are not observed.

    Attributes:
        path: Absolute path to the file
        size: Size in bytes
        modified: Last-modified timestamp (seconds since the epoch)
    """
    path: str
    size: int = 0
    modified: float = 0.0

    def __hash__(self):
        return hash(self.path)

    def __eq__(self, other):
        if not isinstance(other, CandidateFile):
            return False
        return self.path == other.path

    @classmethod
    def from_path(cls, path: str) -> 'CandidateFile':
        """Stat a file once and snapshot it. Raises OSError if it vanished."""
        path = os.path.abspath(path)
        stat = os.stat(path)
        return cls(path=path, size=stat.st_size, modified=stat.st_mtime)

    @property
    def name(self) -> str:
        """Return just the filename portion of the path."""
        return os.path.basename(self.path)

    @property
    def directory(self) -> str:
        """Return the directory containing this file."""
        return os.path.dirname(self.path)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.path)[1].lower()

    @property
    def size_formatted(self) -> str:
        """Return human-readable file size."""
        return format_size(self.size)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'path': self.path,
            'name': self.name,
            'directory': self.directory,
            'size': self.size,
            'size_formatted': self.size_formatted,
            'modified': self.modified,
        }


@dataclass
class DuplicateGroup:
    """
    A group of files judged duplicate by the active strategy.

    The first file is the representative every other member was matched
    against (or the earliest member when groups are built by connectivity).

    Attributes:
        files: Ordered member files, representative first
        match_type: Strategy that produced the group ('exact', 'perceptual', 'neural')
        id: Optional identifier assigned by the caller for display
    """
    files: list = field(default_factory=list)
    match_type: str = "unknown"
    id: Optional[int] = None

    @property
    def representative(self) -> Optional[CandidateFile]:
        """The file the group was built around."""
        return self.files[0] if self.files else None

    @property
    def label(self) -> str:
        """Group label shown to users (representative file name)."""
        rep = self.representative
        return rep.name if rep else ""

    @property
    def file_count(self) -> int:
        """Number of files in this group."""
        return len(self.files)

    @property
    def total_size(self) -> int:
        """Combined size of all members in bytes."""
        return sum(f.size for f in self.files)

    @property
    def total_size_mb(self) -> float:
        return self.total_size / (1024 * 1024)

    @property
    def total_size_formatted(self) -> str:
        return format_size(self.total_size)

    @property
    def duplicates(self) -> list:
        """All members except the representative."""
        return self.files[1:]

    @property
    def potential_savings(self) -> int:
        """Bytes that could be saved by keeping only the representative."""
        return sum(f.size for f in self.duplicates)

    @property
    def potential_savings_formatted(self) -> str:
        """Human-readable potential savings."""
        return format_size(self.potential_savings)

    @property
    def paths(self) -> frozenset:
        """Membership as a set of paths (order independent)."""
        return frozenset(f.path for f in self.files)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'label': self.label,
            'match_type': self.match_type,
            'file_count': self.file_count,
            'total_size': self.total_size,
            'total_size_formatted': self.total_size_formatted,
            'files': [f.to_dict() for f in self.files],
            'potential_savings': self.potential_savings,
            'potential_savings_formatted': self.potential_savings_formatted,
        }
