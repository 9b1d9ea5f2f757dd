"""Fluent rule declaration.

``rule_for`` returns a RuleBuilder. Validator methods append a unit to the
rule; ``with_*`` methods configure the most recently added unit; rule-level
methods (``with_name``, ``cascade``, ``dependent_rules``, ``on_failure``)
configure the rule itself.
"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from rulekit.conditions import ApplyConditionTo
from rulekit.config import CascadeMode
from rulekit.errors import ConfigurationError
from rulekit.results import Severity, ValidationFailure
from rulekit.rule import PropertyRule
from rulekit.validators import (
    AsyncPredicateValidator,
    ChildValidatorAdaptor,
    ExactLengthValidator,
    ExclusiveBetweenValidator,
    InclusiveBetweenValidator,
    LengthValidator,
    MaximumLengthValidator,
    MinimumLengthValidator,
    NotEmptyValidator,
    NotNullValidator,
    PredicateValidator,
    PropertyValidator,
    StringEnumValidator,
)

if TYPE_CHECKING:
    from rulekit.validator import AbstractValidator

T = TypeVar("T")


class RuleBuilder(Generic[T]):
    """Builds one PropertyRule declared on an AbstractValidator."""

    def __init__(self, rule: PropertyRule, parent_validator: "AbstractValidator[T]"):
        self.rule = rule
        self.parent_validator = parent_validator

    # -- validators -------------------------------------------------------

    def set_validator(self, validator: Any) -> "RuleBuilder[T]":
        """Add a validator unit, or a nested object validator for the member."""
        if isinstance(validator, PropertyValidator):
            self.rule.add_validator(validator)
        elif hasattr(validator, "validate_context"):
            self.rule.add_validator(ChildValidatorAdaptor(validator))
        else:
            raise ConfigurationError(
                f"Cannot use {type(validator).__name__} as a validator; "
                "expected a PropertyValidator or an AbstractValidator"
            )
        return self

    def not_null(self) -> "RuleBuilder[T]":
        return self.set_validator(NotNullValidator())

    def not_empty(self) -> "RuleBuilder[T]":
        return self.set_validator(NotEmptyValidator())

    def length(self, min_length: int, max_length: int | None) -> "RuleBuilder[T]":
        return self.set_validator(LengthValidator(min_length, max_length))

    def min_length(self, min_length: int) -> "RuleBuilder[T]":
        return self.set_validator(MinimumLengthValidator(min_length))

    def max_length(self, max_length: int) -> "RuleBuilder[T]":
        return self.set_validator(MaximumLengthValidator(max_length))

    def exact_length(self, length: int) -> "RuleBuilder[T]":
        return self.set_validator(ExactLengthValidator(length))

    def inclusive_between(self, from_: Any, to: Any) -> "RuleBuilder[T]":
        return self.set_validator(InclusiveBetweenValidator(from_, to))

    def exclusive_between(self, from_: Any, to: Any) -> "RuleBuilder[T]":
        return self.set_validator(ExclusiveBetweenValidator(from_, to))

    def is_enum_name(self, enum_type: type[Enum], case_sensitive: bool = True) -> "RuleBuilder[T]":
        return self.set_validator(StringEnumValidator(enum_type, case_sensitive))

    def must(self, predicate: Callable[..., bool]) -> "RuleBuilder[T]":
        """Custom check; ``predicate`` takes ``(value)`` or ``(instance, value)``."""
        return self.set_validator(PredicateValidator(predicate))

    def must_async(self, predicate: Callable[..., Awaitable[bool]]) -> "RuleBuilder[T]":
        return self.set_validator(AsyncPredicateValidator(predicate))

    # -- current validator options ----------------------------------------

    def with_message(self, message: str | Callable[[T], str]) -> "RuleBuilder[T]":
        """Override the message template of the last validator.

        The template may use ``{PropertyName}``, ``{PropertyValue}`` and any
        argument the validator records.
        """
        self.rule.current_validator.error_message = message
        return self

    def with_error_code(self, error_code: str) -> "RuleBuilder[T]":
        self.rule.current_validator.error_code = error_code
        return self

    def with_severity(self, severity: Severity | str) -> "RuleBuilder[T]":
        self.rule.current_validator.severity = Severity(severity)
        return self

    def with_state(self, provider: Callable[[T], Any]) -> "RuleBuilder[T]":
        self.rule.current_validator.custom_state_provider = provider
        return self

    def when(
        self,
        predicate: Callable[[T], bool],
        apply_condition_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS,
    ) -> "RuleBuilder[T]":
        """Run the validators declared so far only when ``predicate(instance)`` holds."""
        self.rule.apply_condition(lambda context: predicate(context.instance_to_validate), apply_condition_to)
        return self

    def unless(
        self,
        predicate: Callable[[T], bool],
        apply_condition_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS,
    ) -> "RuleBuilder[T]":
        return self.when(lambda instance: not predicate(instance), apply_condition_to)

    def when_async(
        self,
        predicate: Callable[[T], Awaitable[bool]],
        apply_condition_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS,
    ) -> "RuleBuilder[T]":
        async def condition(context) -> bool:
            return await predicate(context.instance_to_validate)

        self.rule.apply_async_condition(condition, apply_condition_to)
        return self

    def unless_async(
        self,
        predicate: Callable[[T], Awaitable[bool]],
        apply_condition_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS,
    ) -> "RuleBuilder[T]":
        async def negated(instance: T) -> bool:
            return not await predicate(instance)

        return self.when_async(negated, apply_condition_to)

    # -- rule options -----------------------------------------------------

    def with_name(self, name: str | Callable[[T], str]) -> "RuleBuilder[T]":
        """Display name used in messages; a callable receives the instance."""
        if callable(name):
            def factory(context):
                return name(context.instance_to_validate) if context is not None else None

            self.rule.set_display_name(factory)
        else:
            self.rule.set_display_name(name)
        return self

    def override_property_name(self, property_name: str) -> "RuleBuilder[T]":
        self.rule.property_name = property_name
        return self

    def cascade(self, mode: CascadeMode | str) -> "RuleBuilder[T]":
        self.rule.cascade_mode = CascadeMode(mode)
        return self

    def dependent_rules(self, action: Callable[[], None]) -> "RuleBuilder[T]":
        """Declare rules that only run when this rule produced no failures.

        Rules declared inside ``action`` are moved from the parent validator
        onto this rule.
        """
        with self.parent_validator.capture_rules(detach=True) as captured:
            action()
        self.rule.dependent_rules.extend(captured)
        return self

    def on_failure(self, callback: Callable[[T, list[ValidationFailure]], None]) -> "RuleBuilder[T]":
        self.rule.on_failure = callback
        return self

    def configure(self, configurator: Callable[[PropertyRule], None]) -> "RuleBuilder[T]":
        configurator(self.rule)
        return self
