"""Rules: an ordered group of validator units bound to one member.

A rule is declared once, typically while an object validator is being
constructed, and then run concurrently by any number of validate calls.
Mutating a rule (adding, replacing or removing units, applying conditions)
must happen before validation starts; the engine does not guard against
concurrent mutation.
"""

from collections.abc import Callable, Iterable
from typing import Any

from rulekit.accessor import MemberAccessor, humanize_member_name
from rulekit.conditions import (
    NO_CONDITION,
    ApplyConditionTo,
    AsyncCondition,
    SharedCondition,
    SyncCondition,
)
from rulekit.config import CascadeMode, get_global_config
from rulekit.context import ValidationContext
from rulekit.errors import ConfigurationError
from rulekit.executor import MessageBuilderContext, execute_rule, execute_rule_async
from rulekit.results import ValidationFailure
from rulekit.validators.base import PropertyValidator


class PropertyRule:
    """A rule over one member, or over the whole instance when ``member`` is None.

    Args:
        member: Accessor for the validated member; None makes a model-level rule
        cascade_mode_resolver: Zero-argument function returning the effective
            cascade mode; defaults to reading the global configuration
    """

    def __init__(
        self,
        member: MemberAccessor | None = None,
        cascade_mode_resolver: Callable[[], CascadeMode] | None = None,
    ):
        self.member = member
        self._validators: list[PropertyValidator] = []
        self._cascade_mode_resolver = cascade_mode_resolver or (lambda: get_global_config().cascade_mode)
        self._property_name: str | None = member.name if member else None
        self._display_name: str | None = None
        self._display_name_factory: Callable[[ValidationContext], str] | None = None
        self._shared_condition: SharedCondition = NO_CONDITION
        self.rule_sets: frozenset[str] = frozenset()
        self.on_failure: Callable[[Any, list[ValidationFailure]], None] | None = None
        self.dependent_rules: list[PropertyRule] = []
        self.message_builder: Callable[[MessageBuilderContext], str] | None = None

    # -- validators -------------------------------------------------------

    @property
    def validators(self) -> tuple[PropertyValidator, ...]:
        return tuple(self._validators)

    @property
    def current_validator(self) -> PropertyValidator:
        """The most recently added validator unit."""
        if not self._validators:
            raise ConfigurationError(
                f"Rule for '{self.property_name or '<model>'}' has no validators; "
                "add a validator before configuring it"
            )
        return self._validators[-1]

    def add_validator(self, validator: PropertyValidator) -> None:
        self._validators.append(validator)

    def replace_validator(self, original: PropertyValidator, new_validator: PropertyValidator) -> None:
        """Swap ``original`` for ``new_validator`` in place; no-op when absent."""
        for index, existing in enumerate(self._validators):
            if existing is original:
                self._validators[index] = new_validator
                return

    def remove_validator(self, validator: PropertyValidator) -> None:
        """Remove ``validator``; no-op when absent."""
        for index, existing in enumerate(self._validators):
            if existing is validator:
                del self._validators[index]
                return

    def clear_validators(self) -> None:
        self._validators.clear()

    # -- naming -----------------------------------------------------------

    @property
    def property_name(self) -> str | None:
        return self._property_name

    @property_name.setter
    def property_name(self, value: str | None) -> None:
        self._property_name = value

    def set_display_name(self, name: str | Callable[[ValidationContext], str]) -> None:
        """Set a fixed display name or a factory of the context (last writer wins)."""
        if callable(name):
            self._display_name_factory = name
            self._display_name = None
        else:
            self._display_name = name
            self._display_name_factory = None

    def get_display_name(self, context: ValidationContext | None = None) -> str:
        if self._display_name_factory is not None:
            resolved = self._display_name_factory(context)
            if resolved is not None:
                return resolved
        if self._display_name is not None:
            return self._display_name
        return humanize_member_name(self._property_name)

    # -- cascade ----------------------------------------------------------

    @property
    def cascade_mode(self) -> CascadeMode:
        return self._cascade_mode_resolver()

    @cascade_mode.setter
    def cascade_mode(self, mode: CascadeMode) -> None:
        mode = CascadeMode(mode)
        self._cascade_mode_resolver = lambda: mode

    # -- conditions -------------------------------------------------------

    @property
    def shared_condition(self) -> SharedCondition:
        return self._shared_condition

    @property
    def has_async_parts(self) -> bool:
        """True when running this rule needs the asynchronous path."""
        if self._shared_condition.is_async:
            return True
        if any(v.is_async or v.has_async_condition or getattr(v, "has_async_parts", False)
               for v in self._validators):
            return True
        return any(rule.has_async_parts for rule in self.dependent_rules)

    def apply_condition(
        self,
        predicate: SyncCondition,
        apply_condition_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS,
    ) -> None:
        """Refine validators with an extra condition over the validation context.

        With ALL_VALIDATORS every unit added so far and every dependent rule is
        refined; with CURRENT_VALIDATOR only the most recently added unit.
        """
        if apply_condition_to == ApplyConditionTo.ALL_VALIDATORS:
            for validator in self._validators:
                validator.apply_condition(predicate)
            for dependent in self.dependent_rules:
                dependent.apply_condition(predicate, apply_condition_to)
        else:
            self.current_validator.apply_condition(predicate)

    def apply_async_condition(
        self,
        predicate: AsyncCondition,
        apply_condition_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS,
    ) -> None:
        if apply_condition_to == ApplyConditionTo.ALL_VALIDATORS:
            for validator in self._validators:
                validator.apply_async_condition(predicate)
            for dependent in self.dependent_rules:
                dependent.apply_async_condition(predicate, apply_condition_to)
        else:
            self.current_validator.apply_async_condition(predicate)

    def apply_shared_condition(self, predicate: SyncCondition) -> None:
        self._shared_condition = self._shared_condition.with_condition(predicate)

    def apply_shared_async_condition(self, predicate: AsyncCondition) -> None:
        self._shared_condition = self._shared_condition.with_async_condition(predicate)

    # -- rule sets --------------------------------------------------------

    def add_rule_sets(self, names: Iterable[str]) -> None:
        """Tag this rule and its dependent rules with additional rule sets."""
        self.rule_sets = self.rule_sets | frozenset(names)
        for dependent in self.dependent_rules:
            dependent.add_rule_sets(names)

    # -- execution --------------------------------------------------------

    def get_value(self, instance: Any) -> Any:
        if self.member is None:
            return instance
        return self.member.get(instance)

    def run(self, context: ValidationContext) -> list[ValidationFailure]:
        return execute_rule(self, context)

    async def run_async(self, context: ValidationContext) -> list[ValidationFailure]:
        return await execute_rule_async(self, context)

    def describe(self) -> dict[str, Any]:
        """Summary of the rule for tooling output."""
        return {
            "property": self.property_name or "",
            "display_name": self.get_display_name(None) if self._display_name_factory is None else "<dynamic>",
            "validators": [v.describe() for v in self._validators],
            "rule_sets": sorted(self.rule_sets),
            "cascade_mode": self.cascade_mode.value,
            "condition": self._shared_condition.kind.value,
            "dependent_rules": [rule.describe() for rule in self.dependent_rules],
        }

    def __repr__(self) -> str:
        return f"PropertyRule({self.property_name or '<model>'!s}, validators={len(self._validators)})"
