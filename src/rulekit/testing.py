"""Assertion helpers for testing validators.

    result = test_validate(PersonValidator(), person)
    result.should_have_validation_error_for("surname").with_error_message("foo")
    result.should_not_have_validation_error_for("forename")

These helpers only read results and rule declarations; they add no engine behaviour.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any

from rulekit.accessor import MemberAccessor, as_accessor
from rulekit.results import Severity, ValidationFailure, ValidationResult
from rulekit.validators.child import ChildValidatorAdaptor


class ValidationTestException(AssertionError):
    """Raised when a validation expectation is not met."""


class FailureAssertions(Sequence):
    """The failures matched by an expectation, with chainable refinements."""

    def __init__(self, failures: Iterable[ValidationFailure]):
        self._failures = list(failures)

    def __getitem__(self, index):
        return self._failures[index]

    def __len__(self) -> int:
        return len(self._failures)

    def __iter__(self) -> Iterator[ValidationFailure]:
        return iter(self._failures)

    def __repr__(self) -> str:
        return f"FailureAssertions({self._failures!r})"

    def when(self, predicate: Callable[[ValidationFailure], bool], exception_message: str | None = None) -> "FailureAssertions":
        """Require at least one failure matching ``predicate``."""
        if not any(predicate(f) for f in self._failures):
            failure = self._failures[0] if self._failures else None
            raise ValidationTestException(
                _build_error_message(failure, exception_message, "Expected validation error was not found")
            )
        return self

    def when_all(self, predicate: Callable[[ValidationFailure], bool], exception_message: str | None = None) -> "FailureAssertions":
        """Require every failure to match ``predicate``."""
        for failure in self._failures:
            if not predicate(failure):
                raise ValidationTestException(
                    _build_error_message(failure, exception_message, "Found an unexpected validation error")
                )
        return self

    def with_error_message(self, expected: str) -> "FailureAssertions":
        return self.when(lambda f: f.error_message == expected,
                         f"Expected an error message of '{expected}'. Actual message was '{{Message}}'")

    def with_error_code(self, expected: str) -> "FailureAssertions":
        return self.when(lambda f: f.error_code == expected,
                         f"Expected an error code of '{expected}'. Actual error code was '{{Code}}'")

    def with_severity(self, expected: Severity) -> "FailureAssertions":
        return self.when(lambda f: f.severity == expected,
                         f"Expected a severity of '{Severity(expected).value}'. Actual severity was '{{Severity}}'")

    def with_custom_state(self, expected: Any) -> "FailureAssertions":
        return self.when(lambda f: f.custom_state == expected,
                         f"Expected custom state of '{expected}'. Actual state was '{{State}}'")

    def without_error_message(self, unexpected: str) -> "FailureAssertions":
        return self.when_all(lambda f: f.error_message != unexpected,
                             f"Found an unexpected error message of '{unexpected}'")

    def without_error_code(self, unexpected: str) -> "FailureAssertions":
        return self.when_all(lambda f: f.error_code != unexpected,
                             f"Found an unexpected error code of '{unexpected}'")

    def without_severity(self, unexpected: Severity) -> "FailureAssertions":
        return self.when_all(lambda f: f.severity != unexpected,
                             f"Found an unexpected severity of '{Severity(unexpected).value}'")

    def without_custom_state(self, unexpected: Any) -> "FailureAssertions":
        return self.when_all(lambda f: f.custom_state != unexpected,
                             f"Found an unexpected custom state of '{unexpected}'")


class TestValidationResult:
    """ValidationResult wrapper exposing should_* expectations."""

    __test__ = False

    def __init__(self, result: ValidationResult):
        self.result = result

    @property
    def errors(self) -> list[ValidationFailure]:
        return self.result.errors

    def should_have_validation_error_for(self, property_name: str) -> FailureAssertions:
        matches = [f for f in self.errors if f.property_name == property_name]
        if not matches:
            raise ValidationTestException(f"Expected a validation error for property {property_name}")
        return FailureAssertions(matches)

    def should_not_have_validation_error_for(self, property_name: str) -> None:
        matches = [f for f in self.errors if f.property_name == property_name]
        if matches:
            messages = ", ".join(f.error_message for f in matches)
            raise ValidationTestException(
                f"Expected no validation errors for property {property_name}, found: {messages}"
            )

    def should_have_any_validation_error(self) -> FailureAssertions:
        if not self.errors:
            raise ValidationTestException("Expected at least one validation error, but none were found.")
        return FailureAssertions(self.errors)

    def should_not_have_any_validation_errors(self) -> None:
        if self.errors:
            details = "\n".join(f"[{f.property_name}] {f.error_message}" for f in self.errors)
            raise ValidationTestException(f"Expected no validation errors, but found {len(self.errors)}:\n{details}")


def test_validate(validator, instance: Any, rule_sets: str | Iterable[str] | None = None) -> TestValidationResult:
    """Validate ``instance`` and wrap the result for assertions."""
    return TestValidationResult(validator.validate(instance, rule_sets))


async def test_validate_async(validator, instance: Any, rule_sets: str | Iterable[str] | None = None) -> TestValidationResult:
    return TestValidationResult(await validator.validate_async(instance, rule_sets))


test_validate.__test__ = False
test_validate_async.__test__ = False


def should_have_validation_error_for(
    validator,
    member: str | MemberAccessor,
    value: Any,
    rule_sets: str | Iterable[str] | None = None,
) -> FailureAssertions:
    """Set ``member`` to ``value`` on a fresh ``validator.model()`` and expect an error for it."""
    accessor = as_accessor(member)
    instance = _fresh_instance(validator)
    accessor.set(instance, value)
    return test_validate(validator, instance, rule_sets).should_have_validation_error_for(accessor.name)


def should_not_have_validation_error_for(
    validator,
    member: str | MemberAccessor,
    value: Any,
    rule_sets: str | Iterable[str] | None = None,
) -> None:
    accessor = as_accessor(member)
    instance = _fresh_instance(validator)
    accessor.set(instance, value)
    test_validate(validator, instance, rule_sets).should_not_have_validation_error_for(accessor.name)


def should_have_child_validator(validator, member: str | MemberAccessor | None, child_validator_type: type) -> None:
    """Expect ``member`` to be validated by a nested validator of ``child_validator_type``.

    Searches the member's rules and their dependent rules. Pass ``None`` to
    search the model-level rules.
    """
    name = as_accessor(member).name if member is not None else None
    rules = [rule for rule in validator.rules if (rule.member.name if rule.member else None) == name]
    units = [unit for rule in rules for unit in rule.validators]
    units += [unit for rule in rules for dependent in rule.dependent_rules for unit in dependent.validators]

    child_types = [type(unit.validator) for unit in units if isinstance(unit, ChildValidatorAdaptor)]
    if not any(issubclass(found, child_validator_type) for found in child_types):
        found_names = ", ".join(found.__name__ for found in child_types) or "none"
        raise ValidationTestException(
            f"Expected property '{name}' to have a child validator of type "
            f"'{child_validator_type.__name__}'. Instead found '{found_names}'"
        )


def _fresh_instance(validator) -> Any:
    if validator.model is None:
        raise ValidationTestException(
            f"{type(validator).__name__}.model must be set to build test instances"
        )
    return validator.model()


def _build_error_message(failure: ValidationFailure | None, exception_message: str | None, default_message: str) -> str:
    if exception_message is not None and failure is not None:
        return exception_message \
            .replace("{Code}", failure.error_code or "") \
            .replace("{Message}", failure.error_message) \
            .replace("{State}", "" if failure.custom_state is None else str(failure.custom_state)) \
            .replace("{Severity}", failure.severity.value)
    return default_message
