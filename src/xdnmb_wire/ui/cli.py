"""Command-line interface router for xdnmb-wire."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from xdnmb_wire.config import (
    ConfigLoadError,
    ConfigValidationError,
    decode_options_from_config,
    load_config,
)
from xdnmb_wire.constants import LIST_KINDS, RECORD_KINDS
from xdnmb_wire.decoding.errors import DecodeError
from xdnmb_wire.main import ExitCode
from xdnmb_wire.observability import setup_logging, shutdown_logging
from xdnmb_wire.records import WireRecord, decode


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = int(ExitCode.CONFIG_ERROR)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="xdnmb-wire",
        description=(
            "xdnmb-wire: decode captured forum API responses into canonical records.\n\n"
            "Common workflows:\n"
            "  xdnmb-wire decode --kind forum-list forums.json\n"
            "  curl -s ... | xdnmb-wire decode --kind thread -\n"
            "  xdnmb-wire config --profile strict\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./xdnmb.toml if present).",
    )
    common.add_argument(
        "--profile",
        default=None,
        help="Optional config profile overlay name (strict, audit, ...).",
    )
    common.add_argument(
        "--format",
        dest="output_format",
        choices=("json", "yaml"),
        default=None,
        help="Output format (default: [output].format from config).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # decode --------------------------------------------------------------
    decode_parser = subparsers.add_parser(
        "decode",
        parents=[common],
        help="Decode a captured API response",
        description=(
            "Read JSON text from FILE (or stdin for '-') and print its canonical form.\n\n"
            "Examples:\n"
            "  xdnmb-wire decode --kind forum-list getForumList.json\n"
            "  xdnmb-wire decode --kind thread --format yaml thread.json\n"
            "  xdnmb-wire decode --kind reply --strict ref.json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    decode_parser.add_argument(
        "--kind",
        required=True,
        choices=(*LIST_KINDS, *RECORD_KINDS),
        help="Record or listing kind of the document",
    )
    decode_parser.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Reject unknown keys and conflicting aliases (same as --profile strict)",
    )
    decode_parser.add_argument(
        "input", nargs="?", default="-", help="Input file, or '-' for stdin (default)"
    )
    decode_parser.set_defaults(handler=_cmd_decode)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration after profiles and overrides",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_decode(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    if args.strict:
        config["decoding"]["alias_conflict"] = "error"
        config["decoding"]["reject_unknown_fields"] = True
    setup_logging(config["observability"])

    text = _read_input(args.input)
    options = decode_options_from_config(config)
    try:
        document = json.loads(text)
        decoded = decode(args.kind, document, options=options)
    except DecodeError as exc:
        print(f"error: {exc.root_cause.kind}: {exc.message}", file=sys.stderr)
        return int(ExitCode.DECODE_FAILED)
    except ValueError as exc:
        # Over-long integer literals raise a plain ValueError.
        print(f"error: invalid JSON input: {exc}", file=sys.stderr)
        return int(ExitCode.DECODE_FAILED)

    print(_render(_to_plain(decoded), config, args.output_format))
    return int(ExitCode.SUCCESS)


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    print(_render(config, config, args.output_format))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    try:
        return load_config(args.config_path, profile=args.profile)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc


def _read_input(source: str) -> str:
    try:
        if source == "-":
            return sys.stdin.read()
        return Path(source).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise CLIError(
            f"input {source} is not valid UTF-8: {exc}", exit_code=int(ExitCode.DECODE_FAILED)
        ) from exc
    except OSError as exc:
        raise CLIError(f"unable to read {source}: {exc}") from exc


def _to_plain(decoded: WireRecord | tuple[WireRecord, ...]) -> object:
    if isinstance(decoded, tuple):
        return [item.to_dict() for item in decoded]
    return decoded.to_dict()


def _render(payload: object, config: Mapping[str, Any], output_format: str | None) -> str:
    output = config["output"]
    selected = output_format or output["format"]
    if selected == "yaml":
        return yaml.safe_dump(payload, sort_keys=True, allow_unicode=True).rstrip("\n")
    indent = output["indent"] or None
    return json.dumps(payload, sort_keys=True, indent=indent, ensure_ascii=False)


__all__ = ["CLIError", "build_parser", "run_cli"]
