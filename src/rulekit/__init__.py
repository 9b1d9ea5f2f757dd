"""rulekit - Declarative, fluent validation rules for Python objects.

rulekit lets you declare per-member validation rules once, then validate
any number of instances synchronously or asynchronously, collecting
structured failures instead of raising on the first problem.
"""

__version__ = "0.1.0"
__author__ = "rpapub"
__email__ = "contact@rpapub.dev"
__description__ = "Declarative, fluent validation rules for Python objects"

from rulekit.accessor import MemberAccessor
from rulekit.conditions import ApplyConditionTo
from rulekit.config import CascadeMode, RulekitConfig, configure, get_global_config, set_global_config
from rulekit.context import CancellationToken, ValidationContext
from rulekit.errors import (
    AsyncValidatorInvokedSynchronouslyError,
    ConfigurationError,
    RulekitError,
    ValidationCancelledError,
    ValidationException,
)
from rulekit.results import Severity, ValidationFailure, ValidationResult
from rulekit.rule import PropertyRule
from rulekit.validator import AbstractValidator

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    "__description__",
    "AbstractValidator",
    "PropertyRule",
    "MemberAccessor",
    "ApplyConditionTo",
    "CascadeMode",
    "RulekitConfig",
    "configure",
    "get_global_config",
    "set_global_config",
    "CancellationToken",
    "ValidationContext",
    "Severity",
    "ValidationFailure",
    "ValidationResult",
    "RulekitError",
    "ConfigurationError",
    "AsyncValidatorInvokedSynchronouslyError",
    "ValidationCancelledError",
    "ValidationException",
]
