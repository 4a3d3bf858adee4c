"""
xdnmb-wire: runtime config loader.

File: src/xdnmb_wire/config/loader.py

Layers, lowest first: built-in defaults, ``xdnmb.toml`` (or ``--config``),
the selected profile, ``XDNMB_<SECTION>_<KEY>`` environment variables, then
dotted CLI overrides such as ``{"output.indent": 0}``. The profile comes from
the ``profile`` argument, a ``"profile"`` CLI override or ``XDNMB_PROFILE``, in
that order.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from xdnmb_wire.config.schema import (
    SETTINGS,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
)
from xdnmb_wire.decoding.fields import DecodeOptions

DEFAULT_CONFIG_FILE: Final[str] = "xdnmb.toml"
ENV_PREFIX: Final[str] = "XDNMB_"
PROFILE_ENV_VAR: Final[str] = f"{ENV_PREFIX}PROFILE"


class ConfigLoadError(ValueError):
    """Raised when a config source cannot be read or an override cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    profile: str | None = None,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build the validated effective config from every source."""

    env = os.environ if environ is None else environ
    cli = dict(cli_overrides or {})

    config = assert_valid_config(merge_config(default_config(), _read_toml(config_path)))
    config = apply_profile_overlay(config, _select_profile(profile, cli, env))
    config = merge_config(config, _env_overlay(env))
    config = merge_config(config, _cli_overlay(cli))
    return assert_valid_config(config)


def decode_options_from_config(
    config: Mapping[str, object],
    *,
    logger: Any | None = None,
) -> DecodeOptions:
    """Build ``DecodeOptions`` from a validated config's ``[decoding]`` section."""

    section = config.get("decoding")
    if not isinstance(section, Mapping):
        raise ConfigLoadError("config is missing the [decoding] section")
    return DecodeOptions(
        alias_conflict=str(section["alias_conflict"]),
        reject_unknown_fields=bool(section["reject_unknown_fields"]),
        logger=logger,
    )


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Render the effective config as compact, key-sorted JSON."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_toml(config_path: str | Path | None) -> dict[str, Any]:
    # Only an explicitly named file has to exist.
    if config_path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not path.is_file():
            return {}
    else:
        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ConfigLoadError(f"config file not found: {path}")
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _select_profile(
    profile: str | None,
    cli: Mapping[str, object],
    env: Mapping[str, str],
) -> str | None:
    for source, candidate in (
        ("profile argument", profile),
        ("cli override 'profile'", cli.get("profile")),
        (PROFILE_ENV_VAR, env.get(PROFILE_ENV_VAR)),
    ):
        if candidate is None:
            continue
        if not isinstance(candidate, str):
            raise ConfigLoadError(f"{source} must be a string")
        return candidate.strip() or None
    return None


def _env_overlay(env: Mapping[str, str]) -> dict[str, Any]:
    overlay: dict[str, Any] = {}
    for setting in SETTINGS:
        if not setting.overridable or setting.env_name not in env:
            continue
        try:
            value = setting.from_text(env[setting.env_name])
        except ValueError as exc:
            raise ConfigLoadError(f"{setting.env_name} -> {setting.path} {exc}") from exc
        overlay.setdefault(setting.section, {})[setting.key] = value
    return overlay


def _cli_overlay(cli: Mapping[str, object]) -> dict[str, Any]:
    overlay: dict[str, Any] = {}
    for dotted, value in cli.items():
        if dotted == "profile":
            continue
        parts = [part for part in dotted.split(".") if part]
        if not parts:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        node = overlay
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return overlay


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "PROFILE_ENV_VAR",
    "decode_options_from_config",
    "dump_effective_config",
    "load_config",
]
