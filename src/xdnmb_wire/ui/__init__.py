"""Command-line surface for decoding captured responses."""

from xdnmb_wire.ui.cli import CLIError, build_parser, run_cli

__all__ = ["CLIError", "build_parser", "run_cli"]
