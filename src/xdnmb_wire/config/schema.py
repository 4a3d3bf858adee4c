"""
xdnmb-wire: configuration settings table and validation.

File: src/xdnmb_wire/config/schema.py

Every configurable value is one ``Setting`` row in ``SETTINGS``. The table
drives the defaults, validation of file and profile payloads, and the
``XDNMB_*`` environment bindings used by the loader, so adding an option
means adding one row.

Validation never stops at the first problem: ``validate_config`` returns every
issue with a dotted path such as ``profiles.loose.output.format``.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal

from xdnmb_wire.constants import (
    ALIAS_CONFLICT_POLICIES,
    ALIAS_ERROR,
    ALIAS_PREFER_PRIMARY,
    CONFIG_SCHEMA_VERSION,
)

SettingKind = Literal["choice", "flag", "count", "version"]

_PROFILE_NAME: Final[re.Pattern[str]] = re.compile(r"[a-z][a-z0-9_-]*")
_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


@dataclass(frozen=True, slots=True)
class Setting:
    """One configurable value: where it lives, its default and what it accepts."""

    section: str
    key: str
    kind: SettingKind
    default: object
    choices: tuple[str, ...] = ()
    # Profiles and environment variables may not touch non-overridable settings.
    overridable: bool = True

    @property
    def path(self) -> str:
        return f"{self.section}.{self.key}"

    @property
    def env_name(self) -> str:
        return f"XDNMB_{self.section.upper()}_{self.key.upper()}"

    def check(self, value: object) -> object:
        """Return the normalized value or raise ``ValueError`` describing the problem."""

        if self.kind == "flag":
            if not isinstance(value, bool):
                raise ValueError(f"expected boolean, got {type(value).__name__}")
            return value
        if self.kind in ("count", "version"):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"expected integer, got {type(value).__name__}")
            if self.kind == "version" and value != CONFIG_SCHEMA_VERSION:
                raise ValueError(migration_guidance(value))
            if value < 0:
                raise ValueError("must be >= 0")
            return value
        if not isinstance(value, str):
            raise ValueError(f"expected string, got {type(value).__name__}")
        choice = value.strip()
        if choice not in self.choices:
            raise ValueError(
                f"invalid value {choice!r}; expected one of: {', '.join(sorted(self.choices))}"
            )
        return choice

    def from_text(self, text: str) -> object:
        """Convert environment-variable text to this setting's native type."""

        text = text.strip()
        if self.kind == "flag":
            lowered = text.lower()
            if lowered in _TRUE_WORDS:
                return True
            if lowered in _FALSE_WORDS:
                return False
            raise ValueError("must be a boolean (true/false/1/0/yes/no/on/off)")
        if self.kind in ("count", "version"):
            try:
                return int(text)
            except ValueError:
                raise ValueError("must be an integer") from None
        return text


SETTINGS: Final[tuple[Setting, ...]] = (
    Setting("meta", "schema_version", "version", CONFIG_SCHEMA_VERSION, overridable=False),
    Setting(
        "decoding",
        "alias_conflict",
        "choice",
        ALIAS_PREFER_PRIMARY,
        choices=ALIAS_CONFLICT_POLICIES,
    ),
    Setting("decoding", "reject_unknown_fields", "flag", False),
    Setting(
        "observability",
        "log_level",
        "choice",
        "WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
    ),
    Setting("observability", "log_format", "choice", "json", choices=("json", "text")),
    Setting("observability", "redact_secrets", "flag", True),
    Setting("output", "format", "choice", "json", choices=("json", "yaml")),
    Setting("output", "indent", "count", 2),
)

SECTIONS: Final[tuple[str, ...]] = tuple(dict.fromkeys(setting.section for setting in SETTINGS))
PROFILE_SECTIONS: Final[tuple[str, ...]] = tuple(
    dict.fromkeys(setting.section for setting in SETTINGS if setting.overridable)
)

BUILTIN_PROFILES: Final[Mapping[str, Mapping[str, Mapping[str, object]]]] = {
    "strict": {"decoding": {"alias_conflict": ALIAS_ERROR, "reject_unknown_fields": True}},
    "audit": {"observability": {"log_level": "DEBUG"}},
}


def _build_defaults() -> dict[str, Any]:
    config: dict[str, Any] = {section: {} for section in SECTIONS}
    for setting in SETTINGS:
        config[setting.section][setting.key] = setting.default
    config["profiles"] = copy.deepcopy(dict(BUILTIN_PROFILES))
    return config


DEFAULT_CONFIG: Final[Mapping[str, Any]] = _build_defaults()


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when a config payload has one or more validation issues."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {issue.path}: {issue.message}" for issue in self.issues]
        super().__init__("invalid config:\n" + ("\n".join(lines) or "- <root>: invalid"))


def default_config() -> dict[str, Any]:
    """Return a fresh, mutable copy of the built-in defaults."""

    return copy.deepcopy(dict(DEFAULT_CONFIG))


def migration_guidance(found_version: int) -> str:
    """Describe how to resolve a ``meta.schema_version`` mismatch."""

    if found_version < CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is older than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade xdnmb.toml to the current schema"
        )
    if found_version > CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is newer than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade xdnmb-wire"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Return ``base`` with ``overlay`` merged in; nested tables merge key by key."""

    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, Mapping):
            merged[key] = merge_config(current if isinstance(current, Mapping) else {}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_profile_overlay(config: Mapping[str, object], profile: str | None) -> dict[str, Any]:
    """Merge the named profile onto ``config`` and validate the result.

    A missing or blank profile name leaves the config unchanged.
    """

    selected = (profile or "").strip()
    if not selected:
        return merge_config({}, config)
    profiles = config.get("profiles")
    overlay = profiles.get(selected) if isinstance(profiles, Mapping) else None
    if not isinstance(overlay, Mapping):
        raise ConfigValidationError(
            [ConfigValidationIssue("profiles", f"profile {selected!r} is not defined")]
        )
    return assert_valid_config(merge_config(config, overlay))


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Check a full config payload against ``SETTINGS`` and collect every issue."""

    issues: list[ConfigValidationIssue] = []
    if not isinstance(config, Mapping):
        issues.append(
            ConfigValidationIssue("<root>", f"expected object, got {type(config).__name__}")
        )
        return ConfigValidationResult(config=None, issues=tuple(issues))

    _unknown_keys(config, (*SECTIONS, "profiles"), "", issues)
    normalized = _check_sections(config, SECTIONS, "", issues, partial=False)
    normalized["profiles"] = _check_profiles(config.get("profiles", {}), issues)
    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Return the normalized config or raise ``ConfigValidationError``."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _check_sections(
    payload: Mapping[str, object],
    sections: Sequence[str],
    prefix: str,
    issues: list[ConfigValidationIssue],
    *,
    partial: bool,
) -> dict[str, Any]:
    # Profile overlays are partial: absent sections and keys are left alone.
    out: dict[str, Any] = {}
    for section in sections:
        section_path = _join(prefix, section)
        if section not in payload:
            if not partial:
                issues.append(ConfigValidationIssue(section_path, "missing required field"))
            continue
        values = payload[section]
        if not isinstance(values, Mapping):
            issues.append(
                ConfigValidationIssue(section_path, f"expected object, got {type(values).__name__}")
            )
            continue
        rows = [setting for setting in SETTINGS if setting.section == section]
        _unknown_keys(values, [setting.key for setting in rows], section_path, issues)
        checked: dict[str, object] = {}
        for setting in rows:
            key_path = _join(section_path, setting.key)
            if setting.key not in values:
                if not partial:
                    issues.append(ConfigValidationIssue(key_path, "missing required field"))
                continue
            try:
                checked[setting.key] = setting.check(values[setting.key])
            except ValueError as exc:
                issues.append(ConfigValidationIssue(key_path, str(exc)))
        out[section] = checked
    return out


def _check_profiles(value: object, issues: list[ConfigValidationIssue]) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        issues.append(
            ConfigValidationIssue("profiles", f"expected object, got {type(value).__name__}")
        )
        return {}
    profiles: dict[str, Any] = {}
    for name in sorted(value, key=str):
        path = _join("profiles", str(name))
        overlay = value[name]
        if not isinstance(name, str) or not _PROFILE_NAME.fullmatch(name):
            issues.append(ConfigValidationIssue(path, "profile names must match [a-z][a-z0-9_-]*"))
        elif not isinstance(overlay, Mapping):
            issues.append(
                ConfigValidationIssue(path, f"expected object, got {type(overlay).__name__}")
            )
        else:
            _unknown_keys(overlay, PROFILE_SECTIONS, path, issues)
            profiles[name] = _check_sections(overlay, PROFILE_SECTIONS, path, issues, partial=True)
    return profiles


def _unknown_keys(
    payload: Mapping[Any, object],
    allowed: Sequence[str],
    path: str,
    issues: list[ConfigValidationIssue],
) -> None:
    for key in sorted((key for key in payload if key not in allowed), key=str):
        issues.append(ConfigValidationIssue(_join(path, str(key)), "unknown field"))


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


__all__ = [
    "BUILTIN_PROFILES",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "PROFILE_SECTIONS",
    "SECTIONS",
    "SETTINGS",
    "Setting",
    "apply_profile_overlay",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
