"""Configuration validation with schema definitions.

Provides declarative schema definitions (ConfigField, ConfigItems) for the
sections of the configuration file, and fuzzy matching for typo detection.

Used by:
- `aliaskit validate`
- `aliaskit init`, which refuses to render an invalid configuration
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Any

__all__ = [
    "ALIAS_SCHEMA",
    "COMPLETION_SCHEMA",
    "ConfigField",
    "ConfigItems",
    "MAIN_SCHEMA",
    "SOURCE_PATH_SCHEMA",
    "ValidationReport",
    "format_config_error",
    "validate_config",
]


@dataclass
class ConfigField:
    """Describes an expected configuration field for validation.

    Attributes:
        name: The configuration key name
        field_type: Expected type or tuple of types
        required: Whether the field is required
        default: Default value if not provided
        description: Human-readable description
    """

    name: str
    field_type: type | tuple[type, ...] = str
    required: bool = False
    default: Any = None
    description: str = ""

    @property
    def type_name(self) -> str:
        """Return human-readable type name."""
        if isinstance(self.field_type, tuple):
            return " or ".join(typ.__name__ for typ in self.field_type)
        return self.field_type.__name__


class ConfigItems(list):
    """A list of ConfigField items with lookup by name."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)

    def get(self, name: str) -> ConfigField | None:
        """Get a ConfigField by name."""
        for prop in self:
            if prop.name == name:
                return prop
        return None

    @property
    def names(self) -> list[str]:
        """Return the known keys."""
        return [prop.name for prop in self]


MAIN_SCHEMA = ConfigItems(
    ConfigField("short_name", str, default="mca", description="Shell function bound to make-autocompleted-alias"),
    ConfigField("scan_timeout", (int, float), default=2.0, description="Directory scan limit, in seconds"),
    ConfigField("probe_timeout", (int, float), default=5.0, description="Completion probe limit, in seconds"),
    ConfigField("bash_completion", str, description="Path to the bash-completion framework script"),
    ConfigField("executable", str, default="aliaskit", description="Command used by the shell hooks"),
    ConfigField("probe", bool, default=True, description="Ask bash for completions missing from [completions]"),
)

SOURCE_PATH_SCHEMA = ConfigItems(
    ConfigField("path", str, required=True, description="Directory to scan"),
    ConfigField("all", bool, default=False, description="Include hidden files and directories"),
    ConfigField("keep_extension", bool, default=False, description="Keep extensions in alias names"),
)

ALIAS_SCHEMA = ConfigItems(
    ConfigField("name", str, required=True, description="Alias name"),
    ConfigField("command", (str, list), required=True, description="Command whose completion is borrowed"),
    ConfigField("source", str, description="File sourced by the alias"),
    ConfigField("override", str, description="Literal command run by the alias"),
    ConfigField("quiet", bool, default=False, description="Silence missing completion warnings"),
)

COMPLETION_SCHEMA = ConfigItems(
    ConfigField("handler", str, required=True, description="Completion function"),
    ConfigField("options", (str, list), default=[], description="Registration options, e.g. ['-o', 'filenames']"),
)

_SECTIONS = ("aliaskit", "source_path", "alias", "completions")


@dataclass
class ValidationReport:
    """Errors and warnings found in a configuration."""

    errors: list[str]
    warnings: list[str]

    @property
    def ok(self) -> bool:
        """Tell if no error was found."""
        return not self.errors


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Format a configuration error message.

    Args:
        section: Section name
        field: Field name that has the error
        message: Error description
        suggestion: Optional suggestion for fixing the error
    """
    msg = f"[{section}] Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


def _find_similar_key(unknown_key: str, known_keys: list[str]) -> str | None:
    matches = difflib.get_close_matches(unknown_key, known_keys, n=1)
    return matches[0] if matches else None


def _check_table(section: str, table: Any, schema: ConfigItems, report: ValidationReport) -> None:  # noqa: ANN401
    if not isinstance(table, dict):
        report.errors.append(format_config_error(section, section, "expected a table"))
        return
    for prop in schema:
        if prop.name not in table:
            if prop.required:
                report.errors.append(format_config_error(section, prop.name, "is required"))
            continue
        value = table[prop.name]
        # bool is an int: do not accept it for numbers
        if not isinstance(value, prop.field_type) or (isinstance(value, bool) and prop.field_type != bool):
            report.errors.append(format_config_error(section, prop.name, f"expected {prop.type_name}, got {type(value).__name__}"))
        elif isinstance(value, list) and not all(isinstance(item, str) for item in value):
            report.errors.append(format_config_error(section, prop.name, "expected a list of strings"))
    for key in table:
        if schema.get(key) is None:
            similar = _find_similar_key(key, schema.names)
            report.warnings.append(format_config_error(section, key, "unknown option", f"did you mean '{similar}'?" if similar else ""))


def validate_config(config: dict[str, Any]) -> ValidationReport:
    """Check a loaded configuration against the schemas."""
    report = ValidationReport(errors=[], warnings=[])

    for key in config:
        if key not in _SECTIONS:
            similar = _find_similar_key(key, list(_SECTIONS))
            report.warnings.append(format_config_error(key, key, "unknown section", f"did you mean '{similar}'?" if similar else ""))

    _check_table("aliaskit", config.get("aliaskit", {}), MAIN_SCHEMA, report)
    for idx, entry in enumerate(config.get("source_path", [])):
        _check_table(f"source_path.{idx}", entry, SOURCE_PATH_SCHEMA, report)
    for idx, entry in enumerate(config.get("alias", [])):
        _check_table(f"alias.{idx}", entry, ALIAS_SCHEMA, report)
        if isinstance(entry, dict) and "source" in entry and "override" in entry:
            report.errors.append(format_config_error(f"alias.{idx}", "source", "source and override are mutually exclusive"))
    completions = config.get("completions", {})
    if isinstance(completions, dict):
        for command, entry in completions.items():
            _check_table(f"completions.{command}", entry, COMPLETION_SCHEMA, report)
    else:
        report.errors.append(format_config_error("completions", "completions", "expected a table"))
    return report
