"""Tests for synchronous rule execution."""

import pytest

from conftest import Person
from rulekit import AbstractValidator
from rulekit.accessor import MemberAccessor
from rulekit.conditions import ApplyConditionTo
from rulekit.config import CascadeMode, configure
from rulekit.context import RuleSetSelector, ValidationContext
from rulekit.errors import AsyncValidatorInvokedSynchronouslyError
from rulekit.executor import execute_rule
from rulekit.results import Severity
from rulekit.rule import PropertyRule
from rulekit.validators import NotEmptyValidator, NotNullValidator
from rulekit.validators.base import PropertyValidator


class RecordingValidator(PropertyValidator):
    """Passes every value and records each one it is asked to check."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def is_valid(self, context, value):
        self.calls.append(value)
        return True


class SurnameValidator(AbstractValidator[Person]):
    model = Person

    def __init__(self):
        super().__init__()
        self.rule_for("surname").not_null().not_empty()


class TestCascade:
    """Test cascade behaviour within a rule."""

    def test_continue_collects_failures_in_order(self):
        result = SurnameValidator().validate(Person())

        assert [f.error_code for f in result.errors] == ["NotNullValidator", "NotEmptyValidator"]

    def test_stop_halts_after_first_failure(self):
        validator = SurnameValidator()
        validator.rules[0].cascade_mode = CascadeMode.STOP

        result = validator.validate(Person())
        assert [f.error_code for f in result.errors] == ["NotNullValidator"]

    def test_stop_never_invokes_later_validators(self):
        recorder = RecordingValidator()
        rule = PropertyRule(MemberAccessor.member("surname"))
        rule.add_validator(NotNullValidator())
        rule.add_validator(recorder)
        rule.cascade_mode = CascadeMode.STOP

        failures = execute_rule(rule, ValidationContext(Person()))

        assert len(failures) == 1
        assert recorder.calls == []

    def test_continue_invokes_later_validators(self):
        recorder = RecordingValidator()
        rule = PropertyRule(MemberAccessor.member("surname"))
        rule.add_validator(NotNullValidator())
        rule.add_validator(recorder)

        assert len(execute_rule(rule, ValidationContext(Person()))) == 1
        assert recorder.calls == [None]

    def test_global_cascade_change_applies_to_existing_rules(self):
        validator = SurnameValidator()
        assert len(validator.validate(Person()).errors) == 2

        configure(cascade_mode=CascadeMode.STOP)
        assert len(validator.validate(Person()).errors) == 1

        configure(cascade_mode=CascadeMode.CONTINUE)
        assert len(validator.validate(Person()).errors) == 2

    def test_validator_level_rule_cascade_default(self):
        validator = SurnameValidator()
        validator.rule_level_cascade_mode = CascadeMode.STOP

        assert len(validator.validate(Person()).errors) == 1

    def test_class_level_cascade_stops_after_first_failing_rule(self):
        class TwoRules(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.class_level_cascade_mode = CascadeMode.STOP
                self.rule_for("forename").not_null()
                self.rule_for("surname").not_null()

        result = TwoRules().validate(Person())
        assert [f.property_name for f in result.errors] == ["forename"]


class TestConditions:
    """Test shared and per-validator conditions during execution."""

    def test_false_shared_condition_skips_rule_and_dependents(self):
        calls = []

        class Conditional(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.when(lambda p: p.is_employee, lambda: (
                    self.rule_for("employee_number").not_null()
                    .on_failure(lambda instance, failures: calls.append(failures))
                    .dependent_rules(lambda: self.rule_for("surname").not_null())
                ))

        result = Conditional().validate(Person(is_employee=False))
        assert result.is_valid
        assert calls == []

    def test_true_shared_condition_runs_rule(self):
        class Conditional(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.when(lambda p: p.is_employee, lambda: self.rule_for("employee_number").not_null())

        result = Conditional().validate(Person(is_employee=True))
        assert [f.property_name for f in result.errors] == ["employee_number"]

    def test_otherwise_branch(self):
        class Conditional(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.when(
                    lambda p: p.is_employee,
                    lambda: self.rule_for("employee_number").not_null(),
                ).otherwise(lambda: self.rule_for("email").not_null())

        result = Conditional().validate(Person(is_employee=False))
        assert [f.property_name for f in result.errors] == ["email"]

    def test_unless(self):
        class Conditional(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.unless(lambda p: p.is_employee, lambda: self.rule_for("email").not_null())

        assert Conditional().validate(Person(is_employee=True)).is_valid
        assert not Conditional().validate(Person(is_employee=False)).is_valid

    def test_per_validator_condition_skips_only_that_unit(self):
        class Conditional(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                (self.rule_for("surname")
                    .not_null()
                    .not_empty().when(lambda p: p.age is not None, ApplyConditionTo.CURRENT_VALIDATOR))

        result = Conditional().validate(Person())
        assert [f.error_code for f in result.errors] == ["NotNullValidator"]

    def test_nested_when_and_rule_when_are_combined(self):
        class Conditional(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.when(lambda p: p.is_employee, lambda: (
                    self.rule_for("employee_number").not_null().when(lambda p: p.age is not None)
                ))

        validator = Conditional()
        assert validator.validate(Person(is_employee=True)).is_valid
        assert not validator.validate(Person(is_employee=True, age=30)).is_valid
        assert validator.validate(Person(is_employee=False, age=30)).is_valid


class TestDependentRules:
    """Test dependent rules and failure callbacks."""

    def make_validator(self):
        class WithDependents(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().dependent_rules(
                    lambda: self.rule_for("forename").not_null()
                )

        return WithDependents()

    def test_dependent_rules_are_detached_from_validator(self):
        validator = self.make_validator()

        assert len(validator.rules) == 1
        assert len(validator.rules[0].dependent_rules) == 1

    def test_dependents_skipped_when_owner_fails(self):
        result = self.make_validator().validate(Person())
        assert [f.property_name for f in result.errors] == ["surname"]

    def test_dependents_run_when_owner_passes(self):
        result = self.make_validator().validate(Person(surname="Smith"))
        assert [f.property_name for f in result.errors] == ["forename"]

    def test_cascade_stop_failure_still_skips_dependents(self):
        validator = self.make_validator()
        validator.rules[0].cascade_mode = CascadeMode.STOP

        result = validator.validate(Person())
        assert [f.property_name for f in result.errors] == ["surname"]

    def test_on_failure_called_once_with_failures(self):
        calls = []

        class Callback(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().not_empty().on_failure(
                    lambda instance, failures: calls.append((instance, failures))
                )

        person = Person()
        result = Callback().validate(person)

        assert len(calls) == 1
        instance, failures = calls[0]
        assert instance is person
        assert failures == result.errors

    def test_on_failure_not_called_when_valid(self):
        calls = []

        class Callback(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().on_failure(lambda instance, failures: calls.append(failures))

        Callback().validate(Person(surname="Smith"))
        assert calls == []

    def test_callback_exceptions_propagate(self):
        def explode(instance, failures):
            raise RuntimeError("boom")

        class Callback(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().on_failure(explode)

        with pytest.raises(RuntimeError, match="boom"):
            Callback().validate(Person())


class TestRuleSets:
    """Test rule-set selection."""

    def make_validator(self):
        class WithRuleSets(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null()
                self.rule_set("Names", lambda: self.rule_for("forename").not_null())
                self.rule_set(["Contact", "Names"], lambda: self.rule_for("email").not_null())

        return WithRuleSets()

    def test_default_selection_runs_untagged_rules(self):
        result = self.make_validator().validate(Person())

        assert [f.property_name for f in result.errors] == ["surname"]
        assert result.rule_sets_executed == ["default"]

    def test_named_selection(self):
        result = self.make_validator().validate(Person(), rule_sets="Names")
        assert [f.property_name for f in result.errors] == ["forename", "email"]

    def test_comma_separated_selection(self):
        result = self.make_validator().validate(Person(), rule_sets="default, Contact")
        assert [f.property_name for f in result.errors] == ["surname", "email"]
        assert result.rule_sets_executed == ["Contact", "default"]

    def test_wildcard_runs_everything(self):
        result = self.make_validator().validate(Person(), rule_sets=["*"])
        assert [f.property_name for f in result.errors] == ["surname", "forename", "email"]

    def test_execute_rule_honours_selector(self):
        rule = PropertyRule(MemberAccessor.member("surname"))
        rule.add_validator(NotNullValidator())
        rule.add_rule_sets(["Update"])

        assert execute_rule(rule, ValidationContext(Person())) == []
        other = ValidationContext(Person(), selector=RuleSetSelector(["Create"]))
        assert execute_rule(rule, other) == []
        selected = ValidationContext(Person(), selector=RuleSetSelector(["Update"]))
        assert len(execute_rule(rule, selected)) == 1

    def test_unselected_rule_set_on_validator(self):
        class Tagged(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_set("Update", lambda: self.rule_for("surname").not_null())

        validator = Tagged()
        assert validator.validate(Person()).is_valid
        assert validator.validate(Person(), rule_sets="Create").is_valid
        assert not validator.validate(Person(), rule_sets="Update").is_valid


class TestFailureFormatting:
    """Test how failures are built from validator state."""

    def test_default_message_and_metadata(self):
        result = SurnameValidator().validate(Person())
        failure = result.errors[0]

        assert failure.property_name == "surname"
        assert failure.error_message == "'Surname' must not be empty."
        assert failure.attempted_value is None
        assert failure.severity == Severity.ERROR
        assert failure.placeholder_values["PropertyName"] == "Surname"

    def test_custom_message_code_severity_and_state(self):
        class Custom(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                (self.rule_for("surname").length(2, 5)
                    .with_message("{PropertyName} of {PropertyValue} is {TotalLength} long")
                    .with_error_code("SURNAME_LENGTH")
                    .with_severity(Severity.WARNING)
                    .with_state(lambda p: {"id": p.forename}))

        failure = Custom().validate(Person(forename="Jo", surname="Leibowitz")).errors[0]

        assert failure.error_message == "Surname of Leibowitz is 9 long"
        assert failure.error_code == "SURNAME_LENGTH"
        assert failure.severity == Severity.WARNING
        assert failure.custom_state == {"id": "Jo"}

    def test_message_factory_receives_instance(self):
        class Custom(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().with_message(lambda p: f"{p.forename} needs a surname")

        failure = Custom().validate(Person(forename="Jo")).errors[0]
        assert failure.error_message == "Jo needs a surname"

    def test_default_severity_from_configuration(self):
        configure(default_severity=Severity.INFO)
        failure = SurnameValidator().validate(Person()).errors[0]
        assert failure.severity == Severity.INFO

    def test_with_name_changes_message_not_property(self):
        class Named(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().with_name("Last name")

        failure = Named().validate(Person()).errors[0]
        assert failure.property_name == "surname"
        assert failure.error_message == "'Last name' must not be empty."

    def test_override_property_name(self):
        class Overridden(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().override_property_name("LastName")

        failure = Overridden().validate(Person()).errors[0]
        assert failure.property_name == "LastName"
        assert failure.error_message == "'Last Name' must not be empty."

    def test_model_level_rule(self):
        class ModelLevel(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for_model().must(lambda p: p.forename != p.surname).with_message("Names must differ")

        failure = ModelLevel().validate(Person(forename="Al", surname="Al")).errors[0]
        assert failure.property_name == ""
        assert failure.error_message == "Names must differ"

    def test_model_level_rule_uses_display_name(self):
        class ModelLevel(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for_model().must(lambda p: False).with_name("Person")

        failure = ModelLevel().validate(Person()).errors[0]
        assert failure.property_name == "Person"

    def test_message_builder(self):
        class Built(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").not_null().configure(
                    lambda rule: setattr(rule, "message_builder",
                                         lambda ctx: f"[{ctx.property_name}] {ctx.get_default_message()}")
                )

        failure = Built().validate(Person()).errors[0]
        assert failure.error_message == "[surname] 'Surname' must not be empty."


class TestSyncPathRejectsAsync:
    """Test that the synchronous path refuses async parts."""

    def test_async_validator(self):
        async def unique(value):
            return True

        class AsyncRule(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("email").must_async(unique)

        with pytest.raises(AsyncValidatorInvokedSynchronouslyError):
            AsyncRule().validate(Person())

    def test_async_validator_condition(self):
        async def condition(p):
            return True

        class AsyncCondition(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("email").not_null().when_async(condition)

        with pytest.raises(AsyncValidatorInvokedSynchronouslyError):
            AsyncCondition().validate(Person())

    def test_async_shared_condition(self):
        async def condition(p):
            return True

        class AsyncShared(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.when_async(condition, lambda: self.rule_for("email").not_null())

        with pytest.raises(AsyncValidatorInvokedSynchronouslyError):
            AsyncShared().validate(Person())

    def test_false_unit_condition_skips_async_validator(self):
        async def never(value):
            return False

        class Skipped(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").must_async(never).when(lambda p: False)

        assert Skipped().validate(Person()).is_valid

    def test_true_unit_condition_still_rejects_async_validator(self):
        async def never(value):
            return False

        class NotSkipped(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_for("surname").must_async(never).when(lambda p: True)

        with pytest.raises(AsyncValidatorInvokedSynchronouslyError):
            NotSkipped().validate(Person())

    def test_rule_set_filter_runs_before_async_check(self):
        async def unique(value):
            return True

        class AsyncTagged(AbstractValidator[Person]):
            def __init__(self):
                super().__init__()
                self.rule_set("Remote", lambda: self.rule_for("email").must_async(unique))
                self.rule_for("surname").not_null()

        result = AsyncTagged().validate(Person())
        assert [f.property_name for f in result.errors] == ["surname"]


class TestExecuteRuleDirectly:

    def test_empty_rule_produces_nothing(self):
        rule = PropertyRule(MemberAccessor.member("surname"))
        assert execute_rule(rule, ValidationContext(Person())) == []

    def test_validators_see_member_value(self):
        seen = []
        rule = PropertyRule(MemberAccessor.member("surname"))
        rule.add_validator(NotEmptyValidator())
        rule.current_validator.apply_condition(lambda ctx: seen.append(ctx.instance_to_validate) or True)

        person = Person(surname="  ")
        failures = execute_rule(rule, ValidationContext(person))

        assert seen == [person]
        assert failures[0].attempted_value == "  "
