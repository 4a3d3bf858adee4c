"""Configuration for the decoder and the ``xdnmb-wire`` command.

Settings come from ``xdnmb.toml``, ``XDNMB_*`` environment variables, named
profiles and CLI overrides. Load and validation failures raise
``ConfigLoadError`` and ``ConfigValidationError``.
"""

from xdnmb_wire.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    PROFILE_ENV_VAR,
    ConfigLoadError,
    decode_options_from_config,
    dump_effective_config,
    load_config,
)
from xdnmb_wire.config.schema import (
    BUILTIN_PROFILES,
    DEFAULT_CONFIG,
    SETTINGS,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    Setting,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)

__all__ = [
    "BUILTIN_PROFILES",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "PROFILE_ENV_VAR",
    "SETTINGS",
    "Setting",
    "apply_profile_overlay",
    "assert_valid_config",
    "decode_options_from_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
