"""Validation output records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Severity attached to a validation failure."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ValidationFailure:
    """A single constraint violation produced by a validator unit."""
    property_name: str
    error_message: str
    attempted_value: Any = None
    error_code: str | None = None
    severity: Severity = Severity.ERROR
    custom_state: Any = None
    placeholder_values: dict[str, Any] = field(default_factory=dict, compare=False)

    def __str__(self) -> str:
        return self.error_message

    def to_dict(self) -> dict[str, Any]:
        return {
            "property_name": self.property_name,
            "error_message": self.error_message,
            "attempted_value": _jsonable(self.attempted_value),
            "error_code": self.error_code,
            "severity": self.severity.value,
            "custom_state": _jsonable(self.custom_state),
        }


@dataclass
class ValidationResult:
    """Outcome of validating one instance."""
    errors: list[ValidationFailure] = field(default_factory=list)
    rule_sets_executed: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = valid, 1 = failures present."""
        return 0 if self.is_valid else 1

    def to_dictionary(self) -> dict[str, list[str]]:
        """Group error messages by property name, preserving failure order."""
        grouped: dict[str, list[str]] = {}
        for failure in self.errors:
            grouped.setdefault(failure.property_name, []).append(failure.error_message)
        return grouped

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "is_valid": self.is_valid,
            "exit_code": self.exit_code,
            "rule_sets_executed": self.rule_sets_executed,
            "errors": [failure.to_dict() for failure in self.errors],
        }

    def to_string(self, separator: str = "\n") -> str:
        return separator.join(failure.error_message for failure in self.errors)

    def __str__(self) -> str:
        return self.to_string()


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return str(value)
