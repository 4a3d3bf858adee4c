"""Module entrypoint for ``python -m xdnmb_wire``."""

from __future__ import annotations

from xdnmb_wire.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
