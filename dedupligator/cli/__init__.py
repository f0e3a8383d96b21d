"""
CLI package for Dedupligator.

Provides the command-line interface for scanning a directory tree for
duplicate images and exporting the results.

Public API:
- main: Entry point for CLI execution
- CLIOrchestrator: CLI workflow orchestration class
- print_duplicate_report: Function to display results report
"""

from __future__ import annotations

from .orchestrator import CLIOrchestrator, setup_logging, EXIT_INTERRUPTED
from .arg_parser import create_parser, parse_arguments
from .reporting import print_duplicate_report, sort_groups


def main(argv=None) -> int:
    """
    Main entry point for the CLI.

    Delegates to CLIOrchestrator to execute the complete workflow.

    Returns:
        Exit code (0 for success, 1 for error, 130 when interrupted)

    Examples:
        >>> # Called from __main__.py
        >>> exit_code = main()
        >>> sys.exit(exit_code)
    """
    orchestrator = CLIOrchestrator(argv)
    return orchestrator.run()


__all__ = [
    # Main entry point
    'main',
    # Core classes
    'CLIOrchestrator',
    'EXIT_INTERRUPTED',
    # Utilities
    'setup_logging',
    'create_parser',
    'parse_arguments',
    'print_duplicate_report',
    'sort_groups',
]
