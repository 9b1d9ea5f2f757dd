"""Rule execution.

Running a rule walks a small state machine:

    not started -> rule-set check -> shared condition -> validator loop
                -> dependent rules (only when the loop produced no failures)
                -> done

The synchronous and asynchronous drivers below follow the same steps and
produce identical failure sequences for rules without async parts. The
async driver only suspends at async conditions and async validators.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rulekit.conditions import checkpoint
from rulekit.config import CascadeMode
from rulekit.context import MessageFormatter, ValidationContext
from rulekit.errors import AsyncValidatorInvokedSynchronouslyError
from rulekit.results import ValidationFailure
from rulekit.validators.base import PropertyValidator

if TYPE_CHECKING:
    from rulekit.rule import PropertyRule

logger = logging.getLogger(__name__)


@dataclass
class MessageBuilderContext:
    """Everything a custom message builder needs to produce an error message."""
    context: ValidationContext
    property_name: str
    display_name: str
    value: Any
    validator: PropertyValidator
    formatter: MessageFormatter

    @property
    def instance_to_validate(self) -> Any:
        return self.context.instance_to_validate

    def get_default_message(self) -> str:
        return self.formatter.build_message(self.validator.get_error_message_template(self.context))


def _label(rule: "PropertyRule") -> str:
    return rule.property_name or "<model>"


def _should_run(rule: "PropertyRule", context: ValidationContext) -> bool:
    if not context.selector.can_execute(rule.rule_sets):
        logger.debug(f"Skipping rule {_label(rule)}: rule sets {sorted(rule.rule_sets)} not selected")
        return False
    return True


def _enter_rule(rule: "PropertyRule", context: ValidationContext) -> tuple[str, Any]:
    display_name = rule.get_display_name(context)
    context.property_name = rule.property_name
    return display_name, rule.get_value(context.instance_to_validate)


def build_failure(
    rule: "PropertyRule",
    context: ValidationContext,
    validator: PropertyValidator,
    value: Any,
    display_name: str,
) -> ValidationFailure:
    """Turn the formatter state left by a failed validator into a ValidationFailure."""
    property_path = context.property_path(rule.property_name or display_name or None)
    formatter = context.message_formatter
    formatter.append_property_name(display_name)
    formatter.append_property_value(value)
    formatter.append_argument("PropertyPath", property_path)

    if rule.message_builder is not None:
        message = rule.message_builder(MessageBuilderContext(
            context=context,
            property_name=property_path,
            display_name=display_name,
            value=value,
            validator=validator,
            formatter=formatter,
        ))
    else:
        message = formatter.build_message(validator.get_error_message_template(context))

    return ValidationFailure(
        property_name=property_path,
        error_message=message,
        attempted_value=value,
        error_code=validator.get_error_code(),
        severity=validator.get_severity(),
        custom_state=validator.get_custom_state(context),
        placeholder_values=dict(formatter.placeholder_values),
    )


def _record_outcome(
    rule: "PropertyRule",
    context: ValidationContext,
    validator: PropertyValidator,
    value: Any,
    display_name: str,
    valid: bool,
    failures: list[ValidationFailure],
) -> bool:
    """Append failures for one validator; return True when the unit failed."""
    emitted = context.take_emitted_failures()
    failures.extend(emitted)
    if not valid:
        failures.append(build_failure(rule, context, validator, value, display_name))
    return bool(emitted) or not valid


def _finish_rule(
    rule: "PropertyRule",
    context: ValidationContext,
    failures: list[ValidationFailure],
) -> list[ValidationFailure]:
    if rule.on_failure is not None:
        rule.on_failure(context.instance_to_validate, list(failures))
    if rule.dependent_rules:
        logger.debug(f"Rule {_label(rule)} failed; skipping {len(rule.dependent_rules)} dependent rule(s)")
    return failures


def execute_rule(rule: "PropertyRule", context: ValidationContext) -> list[ValidationFailure]:
    """Run ``rule`` synchronously and return its failures.

    Raises:
        AsyncValidatorInvokedSynchronouslyError: If an async condition or
            async validator is reached
    """
    if not _should_run(rule, context):
        return []

    if not rule.shared_condition.evaluate(context):
        logger.debug(f"Skipping rule {_label(rule)}: shared condition is false")
        return []

    display_name, value = _enter_rule(rule, context)
    cascade = rule.cascade_mode
    failures: list[ValidationFailure] = []

    for validator in rule.validators:
        context.message_formatter.reset()

        if not validator.invoke_condition(context):
            logger.debug(f"Skipping {validator.name} on {_label(rule)}: condition is false")
            continue

        if validator.is_async or validator.has_async_condition:
            raise AsyncValidatorInvokedSynchronouslyError(
                validator.name, f"Rule for '{_label(rule)}' must be run with validate_async."
            )

        valid = validator.is_valid(context, value)
        failed = _record_outcome(rule, context, validator, value, display_name, valid, failures)

        if failed and cascade == CascadeMode.STOP:
            logger.debug(f"Cascade stop on {_label(rule)} after {validator.name}")
            break

    if failures:
        return _finish_rule(rule, context, failures)

    dependent_failures: list[ValidationFailure] = []
    for dependent in rule.dependent_rules:
        dependent_failures.extend(execute_rule(dependent, context))
    return dependent_failures


async def execute_rule_async(rule: "PropertyRule", context: ValidationContext) -> list[ValidationFailure]:
    """Run ``rule`` on the asynchronous path and return its failures.

    Cancellation is observed before every await. A cancelled rule raises
    and its partial failures are discarded.
    """
    if not _should_run(rule, context):
        return []

    if not await rule.shared_condition.evaluate_async(context):
        logger.debug(f"Skipping rule {_label(rule)}: shared condition is false")
        return []

    display_name, value = _enter_rule(rule, context)
    cascade = rule.cascade_mode
    failures: list[ValidationFailure] = []

    for validator in rule.validators:
        context.message_formatter.reset()

        if not validator.invoke_condition(context):
            logger.debug(f"Skipping {validator.name} on {_label(rule)}: condition is false")
            continue

        if validator.has_async_condition:
            await checkpoint(context)
            if not await validator.invoke_async_condition(context):
                logger.debug(f"Skipping {validator.name} on {_label(rule)}: async condition is false")
                continue

        if validator.is_async:
            await checkpoint(context)
        valid = await validator.is_valid_async(context, value)
        failed = _record_outcome(rule, context, validator, value, display_name, valid, failures)

        if failed and cascade == CascadeMode.STOP:
            logger.debug(f"Cascade stop on {_label(rule)} after {validator.name}")
            break

    if failures:
        return _finish_rule(rule, context, failures)

    dependent_failures: list[ValidationFailure] = []
    for dependent in rule.dependent_rules:
        dependent_failures.extend(await execute_rule_async(dependent, context))
    return dependent_failures
