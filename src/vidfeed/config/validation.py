"""
Validation of vidfeed config files for the validate-config command.

Loading is forgiving (bad keys are skipped with a warning); this module
reports the same problems explicitly so users can fix their files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vidfeed.config.loader import _YAML_KEYS

_NON_NEGATIVE = frozenset(
    [
        "progress_debounce_seconds",
        "progress_min_delta_seconds",
        "fallback_buffer_seconds",
        "pinterest_fallback_buffer_seconds",
        "buffer_window",
    ]
)


@dataclass
class ConfigValidationResult:
    """Result of validating a config dict.

    Attributes:
        errors: Values that will be ignored or misbehave.
        warnings: Non-fatal issues (unknown keys, empty values).
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if no errors were found."""
        return len(self.errors) == 0


def validate_config_dict(config_dict: Any) -> ConfigValidationResult:
    """Validate a parsed config.yaml.

    Checks for:
    - A non-mapping document
    - Unknown keys
    - Values that do not convert to the setting's type
    - Negative timings and buffer window
    - An empty parent_domain
    """
    result = ConfigValidationResult()

    if config_dict is None:
        return result

    if not isinstance(config_dict, dict):
        result.errors.append(
            f"Config must be a YAML mapping (dict), got {type(config_dict).__name__}"
        )
        return result

    for key, value in config_dict.items():
        converter = _YAML_KEYS.get(key)
        if converter is None:
            result.warnings.append(
                f"Unknown key '{key}'. Valid keys: {', '.join(sorted(_YAML_KEYS))}"
            )
            continue
        if value is None:
            result.warnings.append(f"Key '{key}' has no value; the default is used")
            continue
        try:
            converted = converter(value)
        except (TypeError, ValueError):
            result.errors.append(f"Invalid value for '{key}': {value!r}")
            continue
        if key in _NON_NEGATIVE and converted < 0:
            result.errors.append(f"'{key}' must be >= 0, got {converted}")
        if key == "parent_domain" and not converted.strip():
            result.errors.append("'parent_domain' must not be empty")

    return result
