"""
Allow running the package with: python -m dedupligator

By default, runs a scan. Use the 'config' subcommand to inspect or create
the user configuration file.

Examples:
    python -m dedupligator /path/to/photos               # Scan (exact matching)
    python -m dedupligator scan /path/to/photos -s neural
    python -m dedupligator config                        # Show current settings
    python -m dedupligator config --init                 # Create example config file
"""

import sys


def _config_command(argv) -> int:
    from .user_config import get_user_config

    config = get_user_config()

    if '--init' in argv or '-i' in argv:
        # Create example config file
        if config.create_example_config():
            print("Created example configuration file at:")
            print(f"  {config.config_file_path}")
            print("\nEdit this file to customize Dedupligator settings.")
            return 0
        print("Failed to create configuration file.")
        return 1

    # Show current config path and values
    print(f"Configuration file: {config.config_file_path}")
    if config.config_file_path.exists():
        print("Status: found")
    else:
        print("Status: not found (using defaults)")
        print("\nRun 'python -m dedupligator config --init' to create one.")

    print("\nCurrent settings:")
    for key, value in config.as_dict().items():
        print(f"  {key}: {value}")
    return 0


def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] == 'config':
        return _config_command(argv[1:])
    if argv and argv[0] == 'scan':
        argv = argv[1:]
    from .cli import main as cli_main
    return cli_main(argv)


if __name__ == '__main__':
    sys.exit(main())
