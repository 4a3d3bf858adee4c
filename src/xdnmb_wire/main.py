"""Process entrypoint for ``python -m xdnmb_wire`` and the ``xdnmb-wire`` script."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Process exit codes of the ``xdnmb-wire`` command."""

    SUCCESS = 0
    DECODE_FAILED = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4


_KNOWN_EXIT_CODES = frozenset(int(code) for code in ExitCode)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and map any escaping exception onto an ``ExitCode``."""

    try:
        from xdnmb_wire.ui.cli import run_cli

        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:
        return _as_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - last handler before the process exits.
        exit_code = _exit_code_for(exc)
        if exit_code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(str(exc).strip() or type(exc).__name__, file=sys.stderr)
        return int(exit_code)


def _as_exit_code(code: object) -> int:
    if code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(code, int) and not isinstance(code, bool) and code in _KNOWN_EXIT_CODES:
        return code
    if isinstance(code, str) and code.strip():
        print(code.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


def _exit_code_for(exc: BaseException) -> ExitCode:
    from xdnmb_wire.config import ConfigLoadError, ConfigValidationError
    from xdnmb_wire.decoding.errors import DecodeError

    for item in _causes(exc):
        if isinstance(item, DecodeError):
            return ExitCode.DECODE_FAILED
        if isinstance(item, (ConfigLoadError, ConfigValidationError, FileNotFoundError)):
            return ExitCode.CONFIG_ERROR
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and the exceptions it was raised from, stopping on cycles."""

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


__all__ = ["ExitCode", "cli_entrypoint"]
