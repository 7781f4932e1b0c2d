# prunewalk/main.py
"""Main entry point for the prunewalk CLI application."""

from prunewalk.cli.interface import main_cli


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli(prog_name="prunewalk")

if __name__ == '__main__':
    entrypoint()
