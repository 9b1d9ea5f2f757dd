"""Object validators: the top-level entry point.

Subclass AbstractValidator and declare rules in ``__init__``::

    class PersonValidator(AbstractValidator[Person]):
        model = Person

        def __init__(self):
            super().__init__()
            self.rule_for("surname").not_null().length(1, 50)
            self.when(lambda p: p.is_employee, lambda: (
                self.rule_for("employee_number").not_empty()
            ))

Rules run in declaration order and their failures are collected in that
order. A validator is built once and can then validate many instances,
including concurrently.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from rulekit.accessor import MemberAccessor, as_accessor
from rulekit.builder import RuleBuilder
from rulekit.conditions import AsyncCondition, SyncCondition, negate, negate_async
from rulekit.config import CascadeMode, get_global_config
from rulekit.context import CancellationToken, RuleSetSelector, ValidationContext
from rulekit.errors import ValidationException
from rulekit.results import ValidationFailure, ValidationResult
from rulekit.rule import PropertyRule
from rulekit.validators.base import PropertyValidator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConditionOtherwise:
    """Returned by ``when``/``unless`` so an ``otherwise`` branch can be declared."""

    def __init__(self, validator: "AbstractValidator", condition: Callable[[Any], Any], is_async: bool):
        self._validator = validator
        self._condition = condition
        self._is_async = is_async

    def otherwise(self, action: Callable[[], None]) -> None:
        """Declare rules that run when the condition does not hold."""
        if self._is_async:
            self._validator._apply_shared_condition(negate_async(self._condition), action, is_async=True)
        else:
            self._validator._apply_shared_condition(negate(self._condition), action, is_async=False)


class AbstractValidator(Generic[T]):
    """Base class for object validators.

    Attributes:
        model: Optional factory used by tooling (the CLI and test helpers) to
            build instances of the validated type
        class_level_cascade_mode: When STOP, validation stops after the first
            rule that fails; None defers to the global configuration
        rule_level_cascade_mode: Default cascade for rules declared by this
            validator; None defers to the global configuration
    """

    model: Callable[..., T] | None = None

    def __init__(self):
        self._rules: list[PropertyRule] = []
        self.class_level_cascade_mode: CascadeMode | None = None
        self.rule_level_cascade_mode: CascadeMode | None = None

    # -- declaration ------------------------------------------------------

    @property
    def rules(self) -> tuple[PropertyRule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: PropertyRule) -> None:
        self._rules.append(rule)

    def rule_for(self, member: str | MemberAccessor) -> RuleBuilder[T]:
        """Start a rule for a member given as a path (``"address.postcode"``) or accessor."""
        rule = PropertyRule(as_accessor(member), self._resolve_rule_cascade_mode)
        self.add_rule(rule)
        return RuleBuilder(rule, self)

    def rule_for_model(self) -> RuleBuilder[T]:
        """Start a model-level rule whose value is the whole instance."""
        rule = PropertyRule(None, self._resolve_rule_cascade_mode)
        self.add_rule(rule)
        return RuleBuilder(rule, self)

    def when(self, predicate: Callable[[T], bool], action: Callable[[], None]) -> ConditionOtherwise:
        """Gate every rule declared by ``action`` on ``predicate(instance)``."""

        def condition(context: ValidationContext) -> bool:
            return predicate(context.instance_to_validate)

        return self._apply_shared_condition(condition, action, is_async=False)

    def unless(self, predicate: Callable[[T], bool], action: Callable[[], None]) -> ConditionOtherwise:
        return self.when(lambda instance: not predicate(instance), action)

    def when_async(self, predicate: Callable[[T], Awaitable[bool]], action: Callable[[], None]) -> ConditionOtherwise:
        async def condition(context: ValidationContext) -> bool:
            return await predicate(context.instance_to_validate)

        return self._apply_shared_condition(condition, action, is_async=True)

    def unless_async(self, predicate: Callable[[T], Awaitable[bool]], action: Callable[[], None]) -> ConditionOtherwise:
        async def negated(instance: T) -> bool:
            return not await predicate(instance)

        return self.when_async(negated, action)

    def rule_set(self, names: str | Iterable[str], action: Callable[[], None]) -> None:
        """Tag every rule declared by ``action`` with the given rule sets.

        Args:
            names: A comma separated string (``"Create,Update"``) or an iterable of names
            action: Callable declaring the rules
        """
        if isinstance(names, str):
            names = names.split(",")
        rule_sets = frozenset(n.strip() for n in names if n and n.strip())

        with self.capture_rules() as captured:
            action()
        for rule in captured:
            rule.add_rule_sets(rule_sets)

    @contextmanager
    def capture_rules(self, detach: bool = False) -> Iterator[list[PropertyRule]]:
        """Collect the rules declared inside the block.

        With ``detach`` the captured rules are removed from this validator,
        which is how dependent rules are moved onto their owner.
        """
        start = len(self._rules)
        captured: list[PropertyRule] = []
        yield captured
        captured.extend(self._rules[start:])
        if detach:
            del self._rules[start:]

    def _apply_shared_condition(
        self,
        condition: SyncCondition | AsyncCondition,
        action: Callable[[], None],
        is_async: bool,
    ) -> ConditionOtherwise:
        with self.capture_rules() as captured:
            action()
        for rule in captured:
            if is_async:
                rule.apply_shared_async_condition(condition)
            else:
                rule.apply_shared_condition(condition)
        return ConditionOtherwise(self, condition, is_async)

    def _resolve_rule_cascade_mode(self) -> CascadeMode:
        return self.rule_level_cascade_mode or get_global_config().cascade_mode

    def _resolve_class_cascade_mode(self) -> CascadeMode:
        return self.class_level_cascade_mode or get_global_config().class_level_cascade_mode

    # -- validator mutation by member ---------------------------------------

    def rules_for_member(self, member: str | MemberAccessor) -> list[PropertyRule]:
        name = member.name if isinstance(member, MemberAccessor) else member
        return [rule for rule in self._rules if rule.property_name == name]

    def remove_property_validator(self, member: str | MemberAccessor, validator_type: type[PropertyValidator]) -> None:
        """Remove every unit of exactly ``validator_type`` from the member's rules."""
        for rule in self.rules_for_member(member):
            for validator in rule.validators:
                if type(validator) is validator_type:
                    rule.remove_validator(validator)

    def replace_property_validator(self, member: str | MemberAccessor, new_validator: PropertyValidator) -> None:
        """Replace every unit of the same type as ``new_validator`` in the member's rules."""
        for rule in self.rules_for_member(member):
            for validator in rule.validators:
                if type(validator) is type(new_validator):
                    rule.replace_validator(validator, new_validator)

    def clear_property_validator(self, member: str | MemberAccessor) -> None:
        for rule in self.rules_for_member(member):
            rule.clear_validators()

    # -- execution ----------------------------------------------------------

    def validate(self, instance: T, rule_sets: str | Iterable[str] | None = None) -> ValidationResult:
        """Validate ``instance`` synchronously.

        Args:
            instance: Object to validate
            rule_sets: Rule sets to run; None runs the default rule set and
                ``"*"`` runs every rule

        Returns:
            ValidationResult with failures in declaration order
        """
        selector = RuleSetSelector(rule_sets)
        context = ValidationContext(instance, selector=selector)
        failures = self.validate_context(context)
        return ValidationResult(errors=failures, rule_sets_executed=sorted(selector.active))

    async def validate_async(
        self,
        instance: T,
        rule_sets: str | Iterable[str] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ValidationResult:
        """Validate ``instance`` on the asynchronous path.

        Raises:
            ValidationCancelledError: If ``cancellation`` is cancelled mid-run
        """
        selector = RuleSetSelector(rule_sets)
        context = ValidationContext(instance, selector=selector, cancellation=cancellation)
        failures = await self.validate_context_async(context)
        return ValidationResult(errors=failures, rule_sets_executed=sorted(selector.active))

    def validate_and_raise(self, instance: T, rule_sets: str | Iterable[str] | None = None) -> ValidationResult:
        """Validate and raise ValidationException if any failure was produced."""
        result = self.validate(instance, rule_sets)
        if not result.is_valid:
            raise ValidationException(result.errors)
        return result

    def validate_context(self, context: ValidationContext) -> list[ValidationFailure]:
        logger.debug(f"Validating {type(context.instance_to_validate).__name__} "
                     f"with {len(self._rules)} rules ({type(self).__name__})")
        class_cascade = self._resolve_class_cascade_mode()
        failures: list[ValidationFailure] = []

        for rule in tuple(self._rules):
            rule_failures = rule.run(context)
            failures.extend(rule_failures)
            if rule_failures and class_cascade == CascadeMode.STOP:
                logger.debug("Class-level cascade stop after first failing rule")
                break

        logger.debug(f"Validation of {type(context.instance_to_validate).__name__} "
                     f"finished with {len(failures)} failure(s)")
        return failures

    async def validate_context_async(self, context: ValidationContext) -> list[ValidationFailure]:
        logger.debug(f"Validating {type(context.instance_to_validate).__name__} asynchronously "
                     f"with {len(self._rules)} rules ({type(self).__name__})")
        class_cascade = self._resolve_class_cascade_mode()
        failures: list[ValidationFailure] = []

        for rule in tuple(self._rules):
            rule_failures = await rule.run_async(context)
            failures.extend(rule_failures)
            if rule_failures and class_cascade == CascadeMode.STOP:
                logger.debug("Class-level cascade stop after first failing rule")
                break

        logger.debug(f"Validation of {type(context.instance_to_validate).__name__} "
                     f"finished with {len(failures)} failure(s)")
        return failures

    # -- introspection --------------------------------------------------------

    @property
    def has_async_parts(self) -> bool:
        return any(rule.has_async_parts for rule in self._rules)

    def describe(self) -> list[dict[str, Any]]:
        return [rule.describe() for rule in self._rules]
