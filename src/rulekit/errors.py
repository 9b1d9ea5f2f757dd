"""Exception types raised by rulekit.

Validation failures are data and are returned in a ValidationResult. The
exceptions here signal something else: a broken rule declaration, a
cancelled asynchronous run, or an explicit request to raise on failure.
"""

from typing import Any


class RulekitError(Exception):
    """Base class for all rulekit exceptions."""


class ConfigurationError(RulekitError):
    """A rule or validator was declared in a way the engine cannot honour."""


class AsyncValidatorInvokedSynchronouslyError(ConfigurationError):
    """An async condition or validator was reached on the synchronous path."""

    def __init__(self, component: str, hint: str | None = None):
        message = (
            f"{component} contains asynchronous rules or conditions and cannot be run "
            "synchronously. Use validate_async instead."
        )
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
        self.component = component


class ValidationCancelledError(RulekitError):
    """Asynchronous validation was cancelled through its cancellation token."""

    def __init__(self, message: str = "Validation was cancelled"):
        super().__init__(message)


class ValidationException(RulekitError):
    """Raised by validate_and_raise when the instance is not valid."""

    def __init__(self, errors: list[Any], message: str | None = None):
        self.errors = list(errors)
        if message is None:
            lines = [f" -- {e.property_name}: {e.error_message} Severity: {e.severity.value}" for e in self.errors]
            message = "Validation failed: \n" + "\n".join(lines)
        super().__init__(message)
