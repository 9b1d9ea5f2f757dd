"""Validator unit contract.

A validator unit checks one value. When the check fails it writes its
message arguments into the context's message formatter and returns False;
the executor turns that into a ValidationFailure. Units can carry their own
sync and async conditions plus the metadata copied onto failures.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from rulekit.conditions import AsyncCondition, SyncCondition, combine_async_conditions, combine_conditions
from rulekit.config import get_global_config
from rulekit.errors import AsyncValidatorInvokedSynchronouslyError
from rulekit.messages import get_template
from rulekit.results import Severity


class PropertyValidator(ABC):
    """Base class for validator units."""

    is_async = False

    def __init__(self):
        self.condition: SyncCondition | None = None
        self.async_condition: AsyncCondition | None = None
        self.error_message: str | Callable[[Any], str] | None = None
        self.error_code: str | None = None
        self.severity: Severity | None = None
        self.custom_state_provider: Callable[[Any], Any] | None = None

    @property
    def name(self) -> str:
        """Stable kind name used for diagnostics, error codes and default messages."""
        return type(self).__name__

    @abstractmethod
    def is_valid(self, context, value: Any) -> bool:
        """Check ``value``; on failure populate ``context.message_formatter`` and return False."""

    async def is_valid_async(self, context, value: Any) -> bool:
        return self.is_valid(context, value)

    @property
    def has_condition(self) -> bool:
        return self.condition is not None

    @property
    def has_async_condition(self) -> bool:
        return self.async_condition is not None

    def apply_condition(self, predicate: SyncCondition) -> None:
        self.condition = combine_conditions(predicate, self.condition)

    def apply_async_condition(self, predicate: AsyncCondition) -> None:
        self.async_condition = combine_async_conditions(predicate, self.async_condition)

    def invoke_condition(self, context) -> bool:
        if self.condition is None:
            return True
        return bool(self.condition(context))

    async def invoke_async_condition(self, context) -> bool:
        if self.async_condition is None:
            return True
        return bool(await self.async_condition(context))

    def get_default_message_template(self) -> str:
        return get_template(self.name)

    def get_error_message_template(self, context) -> str:
        if callable(self.error_message):
            return self.error_message(context.instance_to_validate)
        if self.error_message is not None:
            return self.error_message
        return self.get_default_message_template()

    def get_error_code(self) -> str:
        return self.error_code or self.name

    def get_severity(self) -> Severity:
        return self.severity or get_global_config().default_severity

    def get_custom_state(self, context) -> Any:
        if self.custom_state_provider is None:
            return None
        return self.custom_state_provider(context.instance_to_validate)

    def describe(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{self.name}>"


class AsyncPropertyValidator(PropertyValidator):
    """Validator unit whose check must be awaited."""

    is_async = True

    def is_valid(self, context, value: Any) -> bool:
        raise AsyncValidatorInvokedSynchronouslyError(self.name)

    @abstractmethod
    async def is_valid_async(self, context, value: Any) -> bool:
        """Asynchronously check ``value``."""
