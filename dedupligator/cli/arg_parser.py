"""
Argument parsing for the CLI interface.

Provides functions to create and configure the argument parser for the
dedupligator command-line interface.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from ..config import DEFAULT_NEURAL_THRESHOLD, DEFAULT_THRESHOLD
from ..finder import GROUPING_MODES, GROUPING_REPRESENTATIVE
from ..strategies.base import StrategyKind
from ..utils.exporters import EXPORT_FORMATS


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Options left unset default to None so the user configuration file and
    environment variables can supply them.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description='Find duplicate and visually similar images',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /path/to/photos
      Find byte-identical duplicates

  %(prog)s /path/to/photos --strategy perceptual --threshold 5
      Find near-duplicates whose perceptual hashes differ in at most 5 bits

  %(prog)s /path/to/photos --strategy neural --similarity 0.85
      Find near-duplicates by MobileNetV2 embedding similarity

  %(prog)s /path/to/photos --export results.csv --export-format csv
      Export results to CSV for external review
        """
    )

    # Positional argument
    parser.add_argument(
        'directory',
        type=Path,
        help='Directory to scan for duplicate images'
    )

    # Matching options
    parser.add_argument(
        '-s', '--strategy',
        choices=[kind.value for kind in StrategyKind],
        default=None,
        help='Matching strategy. Default: exact (or the configured default_strategy)'
    )

    parser.add_argument(
        '-t', '--threshold',
        type=int,
        default=None,
        help=f'Perceptual hash threshold (0-64, lower=stricter). Default: {DEFAULT_THRESHOLD}'
    )

    parser.add_argument(
        '--similarity',
        type=float,
        default=None,
        help=f'Neural cosine similarity threshold (0-1, higher=stricter). Default: {DEFAULT_NEURAL_THRESHOLD}'
    )

    parser.add_argument(
        '--model',
        type=str,
        default=None,
        help='MobileNetV2 state_dict file for the neural strategy (default: torchvision weights)'
    )

    parser.add_argument(
        '--grouping',
        choices=list(GROUPING_MODES),
        default=GROUPING_REPRESENTATIVE,
        help='How matches form groups: around a representative, or connected components. '
             f'Default: {GROUPING_REPRESENTATIVE}'
    )

    # Performance options
    parser.add_argument(
        '-w', '--workers',
        type=int,
        default=None,
        help='Number of parallel workers. Default: number of CPU cores'
    )

    parser.add_argument(
        '--cache-capacity',
        type=int,
        default=None,
        help='Entries kept in each strategy cache. Default: 10000'
    )

    # Export options
    parser.add_argument(
        '-e', '--export',
        type=Path,
        help='Export results to file'
    )

    parser.add_argument(
        '--export-format',
        choices=list(EXPORT_FORMATS),
        default='txt',
        help='Export format. Default: txt'
    )

    # Output options
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bar (useful for piping output)'
    )

    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: List of argument strings (default: sys.argv)

    Returns:
        Parsed arguments as Namespace object

    Examples:
        >>> args = parse_arguments(['/path/to/photos', '--threshold', '5'])
        >>> args.threshold
        5
    """
    parser = create_parser()
    return parser.parse_args(argv)


__all__ = [
    'create_parser',
    'parse_arguments',
]
