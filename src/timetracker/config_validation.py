"""Configuration validation for tt.

Validates the loaded TOML configuration and warns about potential issues.
"""

import logging
from typing import Any

from .utils import parse_duration

logger = logging.getLogger(__name__)

LOG_LEVELS = ("NONE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
REPORT_FORMATS = ("status", "short", "long", "tickets", "table", "activity", "ticket", "worktime")


class ConfigValidator:
    """Validates configuration dictionaries."""

    # Known top-level keys
    KNOWN_TOP_LEVEL = {"prefix", "report", "logging"}

    KNOWN_REPORT = {"format", "cutoff", "all"}

    KNOWN_LOGGING = {"level", "console_level"}

    def __init__(self):
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate(self, config: dict[str, Any]) -> tuple[list[str], list[str]]:
        """Validate the configuration.

        Args:
            config: The configuration dictionary to validate

        Returns:
            Tuple of (errors, warnings) lists
        """
        self.errors = []
        self.warnings = []

        self._validate_top_level(config)
        self._validate_report(config.get("report", {}))
        self._validate_logging(config.get("logging", {}))

        return self.errors, self.warnings

    def _validate_top_level(self, config: dict) -> None:
        """Validate top-level configuration keys."""
        for key in config:
            if key not in self.KNOWN_TOP_LEVEL:
                self.warnings.append(f"Unknown top-level config key: '{key}'")

        if "prefix" in config:
            prefix = config["prefix"]
            if not isinstance(prefix, str):
                self.errors.append("'prefix' must be a string")
            elif not prefix:
                self.warnings.append("'prefix' is empty - numbers will not be expanded")
            elif any(c.isspace() for c in prefix):
                self.errors.append("'prefix' must not contain whitespace")

    def _validate_report(self, report: dict) -> None:
        """Validate the report defaults."""
        if not isinstance(report, dict):
            self.errors.append("'report' section must be a dictionary")
            return

        for key in report:
            if key not in self.KNOWN_REPORT:
                self.warnings.append(f"Unknown field in report: '{key}'")

        if "format" in report and report["format"] not in REPORT_FORMATS:
            self.errors.append(
                f"report.format must be one of {', '.join(REPORT_FORMATS)}, "
                f"got {report['format']!r}"
            )

        if "cutoff" in report:
            cutoff = report["cutoff"]
            if not isinstance(cutoff, str):
                self.errors.append("report.cutoff must be a string in HH:MM format")
            else:
                try:
                    parse_duration(cutoff)
                except ValueError:
                    self.errors.append(f"report.cutoff must be in HH:MM format, got {cutoff!r}")

        if "all" in report and not isinstance(report["all"], bool):
            self.errors.append("report.all must be a boolean")

    def _validate_logging(self, logging_section: dict) -> None:
        """Validate the logging levels."""
        if not isinstance(logging_section, dict):
            self.errors.append("'logging' section must be a dictionary")
            return

        for key, value in logging_section.items():
            if key not in self.KNOWN_LOGGING:
                self.warnings.append(f"Unknown field in logging: '{key}'")
            elif value not in LOG_LEVELS:
                self.errors.append(f"logging.{key} must be one of {', '.join(LOG_LEVELS)}")


def validate_config(config: dict[str, Any]) -> tuple[list[str], list[str]]:
    """Validate configuration and return errors and warnings.

    Args:
        config: The configuration dictionary to validate

    Returns:
        Tuple of (errors, warnings) lists
    """
    validator = ConfigValidator()
    return validator.validate(config)


def log_validation_results(errors: list[str], warnings: list[str]) -> None:
    """Log validation results.

    Args:
        errors: List of error messages
        warnings: List of warning messages
    """
    for warning in warnings:
        logger.warning(f"Config warning: {warning}")
    for error in errors:
        logger.error(f"Config error: {error}")


def validate_and_warn(config: dict[str, Any]) -> bool:
    """Validate configuration and log warnings/errors.

    Args:
        config: The configuration dictionary to validate

    Returns:
        True if configuration is valid (no errors), False otherwise
    """
    errors, warnings = validate_config(config)
    log_validation_results(errors, warnings)
    return len(errors) == 0
