"""Tests for validation result records and the message formatter."""

import json

from rulekit.context import CancellationToken, MessageFormatter, RuleSetSelector, ValidationContext
from rulekit.results import Severity, ValidationFailure, ValidationResult


def make_result():
    return ValidationResult(
        errors=[
            ValidationFailure("surname", "Surname is required", error_code="NotNullValidator"),
            ValidationFailure("surname", "Surname is too short", attempted_value="A"),
            ValidationFailure("age", "Age is out of range", attempted_value=70, severity=Severity.WARNING),
        ],
        rule_sets_executed=["default"],
    )


class TestValidationResult:
    """Test ValidationResult helpers."""

    def test_valid_result(self):
        result = ValidationResult()
        assert result.is_valid
        assert result.exit_code == 0
        assert str(result) == ""

    def test_invalid_result(self):
        result = make_result()
        assert not result.is_valid
        assert result.exit_code == 1

    def test_to_dictionary_groups_in_order(self):
        assert make_result().to_dictionary() == {
            "surname": ["Surname is required", "Surname is too short"],
            "age": ["Age is out of range"],
        }

    def test_to_string(self):
        assert make_result().to_string(" | ") == \
            "Surname is required | Surname is too short | Age is out of range"

    def test_to_dict_is_json_serialisable(self):
        data = make_result().to_dict()
        encoded = json.loads(json.dumps(data))

        assert encoded["is_valid"] is False
        assert encoded["errors"][2]["severity"] == "warning"
        assert encoded["errors"][2]["attempted_value"] == 70

    def test_unserialisable_values_become_strings(self):
        failure = ValidationFailure("when", "bad", attempted_value=object(), custom_state={"ids": (1, 2)})
        data = failure.to_dict()

        assert isinstance(data["attempted_value"], str)
        assert data["custom_state"] == {"ids": [1, 2]}

    def test_placeholder_values_ignored_in_equality(self):
        a = ValidationFailure("x", "m", placeholder_values={"A": 1})
        b = ValidationFailure("x", "m")
        assert a == b


class TestMessageFormatter:
    """Test placeholder substitution."""

    def test_named_placeholders(self):
        formatter = MessageFormatter().append_property_name("Age").append_argument("From", 18)
        assert formatter.build_message("'{PropertyName}' must be at least {From}.") == "'Age' must be at least 18."

    def test_format_spec(self):
        formatter = MessageFormatter().append_argument("Value", 3.14159)
        assert formatter.build_message("{Value:.2f}") == "3.14"

    def test_unknown_placeholder_left_untouched(self):
        assert MessageFormatter().build_message("{Missing} stays") == "{Missing} stays"

    def test_none_becomes_empty(self):
        formatter = MessageFormatter().append_property_value(None)
        assert formatter.build_message("[{PropertyValue}]") == "[]"

    def test_reset(self):
        formatter = MessageFormatter().append_argument("A", 1)
        formatter.reset()
        assert formatter.placeholder_values == {}


class TestRuleSetSelector:

    def test_empty_selection_is_default(self):
        selector = RuleSetSelector()
        assert selector.active == frozenset({"default"})
        assert selector.can_execute(frozenset())
        assert not selector.can_execute({"Create"})

    def test_named_selection(self):
        selector = RuleSetSelector("Create, Update")
        assert selector.can_execute({"Update"})
        assert not selector.can_execute(frozenset())

    def test_wildcard(self):
        selector = RuleSetSelector(["*"])
        assert selector.can_execute(frozenset())
        assert selector.can_execute({"Anything"})


class TestValidationContext:

    def test_for_child_shares_selection_and_cancellation(self):
        selector = RuleSetSelector(["Shipping"])
        token = CancellationToken()
        parent = ValidationContext({"address": {}}, selector=selector, cancellation=token)

        child = parent.for_child({}, "address")

        assert child.selector is selector
        assert child.cancellation is token
        assert child.property_path("postcode") == "address.postcode"
        assert child.property_name is None

    def test_property_path_of_chain(self):
        context = ValidationContext("value", property_chain=("order", "lines"))

        assert context.instance_to_validate == "value"
        assert context.property_path(None) == "order.lines"
        assert context.property_path("sku") == "order.lines.sku"
