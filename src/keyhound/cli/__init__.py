"""keyhound CLI - Command-line interface for the keyhound tool."""

from keyhound.cli.main import app, run_cli

__all__ = ["app", "run_cli"]
