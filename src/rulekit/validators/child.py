"""Runs a nested object validator against a member value."""

from typing import Any

from .base import PropertyValidator


class ChildValidatorAdaptor(PropertyValidator):
    """Validates the member value with another object validator.

    Failures of the nested validator are emitted into the parent context with
    the member name prepended to their property path. The unit itself never
    reports a failure of its own.
    """

    def __init__(self, validator):
        super().__init__()
        self.validator = validator

    def is_valid(self, context, value: Any) -> bool:
        if value is None:
            return True
        child_context = context.for_child(value, context.property_name)
        for failure in self.validator.validate_context(child_context):
            context.emit_failure(failure)
        return True

    async def is_valid_async(self, context, value: Any) -> bool:
        if value is None:
            return True
        child_context = context.for_child(value, context.property_name)
        for failure in await self.validator.validate_context_async(child_context):
            context.emit_failure(failure)
        return True

    @property
    def has_async_parts(self) -> bool:
        return self.validator.has_async_parts

    def describe(self) -> str:
        return f"{self.name}({type(self.validator).__name__})"
