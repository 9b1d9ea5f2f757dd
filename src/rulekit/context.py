"""Per-call validation state.

A ValidationContext is created at the start of one top-level validate call
and handed by reference to every rule, dependent rule and nested validator
that runs as part of that call. It is never shared between concurrent calls.
"""

import re
import threading
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from rulekit.config import get_global_config
from rulekit.errors import ValidationCancelledError
from rulekit.results import ValidationFailure

T = TypeVar("T")

DEFAULT_RULE_SET = "default"
WILDCARD_RULE_SET = "*"

_PLACEHOLDER = re.compile(r"\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<spec>[^{}]*))?\}")


class MessageFormatter:
    """Scratch space a validator fills with named arguments for its message template."""

    def __init__(self):
        self.placeholder_values: dict[str, Any] = {}

    def append_argument(self, name: str, value: Any) -> "MessageFormatter":
        self.placeholder_values[name] = value
        return self

    def append_property_name(self, name: str) -> "MessageFormatter":
        return self.append_argument("PropertyName", name)

    def append_property_value(self, value: Any) -> "MessageFormatter":
        return self.append_argument("PropertyValue", value)

    def build_message(self, template: str) -> str:
        """Replace ``{Name}`` and ``{Name:spec}`` placeholders with argument values.

        Unknown placeholders are left untouched.
        """

        def replace(match: re.Match) -> str:
            name = match.group("name")
            if name not in self.placeholder_values:
                return match.group(0)
            value = self.placeholder_values[name]
            if value is None:
                return ""
            spec = match.group("spec")
            if spec:
                try:
                    return format(value, spec)
                except (TypeError, ValueError):
                    return str(value)
            return str(value)

        return _PLACEHOLDER.sub(replace, template)

    def reset(self) -> None:
        self.placeholder_values.clear()


class RuleSetSelector:
    """Decides which rules run for the active rule-set selection.

    An empty selection means the default rule set. Rules without rule sets
    belong to the default rule set. The wildcard ``*`` runs every rule.
    """

    def __init__(self, rule_sets: Iterable[str] | str | None = None):
        if isinstance(rule_sets, str):
            rule_sets = rule_sets.split(",")
        names = frozenset(name.strip() for name in (rule_sets or ()) if name and name.strip())
        self.rule_sets: frozenset[str] = names

    @property
    def active(self) -> frozenset[str]:
        return self.rule_sets or frozenset({DEFAULT_RULE_SET})

    def can_execute(self, rule_sets: Iterable[str]) -> bool:
        if WILDCARD_RULE_SET in self.rule_sets:
            return True
        effective = frozenset(rule_sets) or frozenset({DEFAULT_RULE_SET})
        return bool(effective & self.active)

    def __repr__(self) -> str:
        return f"RuleSetSelector({sorted(self.active)!r})"


class CancellationToken:
    """Cancellation signal for the asynchronous execution path.

    Safe to cancel from another thread.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ValidationCancelledError()


class ValidationContext(Generic[T]):
    """Carries the instance under validation and the state of one validate call."""

    def __init__(
        self,
        instance: T,
        selector: RuleSetSelector | None = None,
        cancellation: CancellationToken | None = None,
        property_chain: tuple[str, ...] = (),
    ):
        self.instance_to_validate = instance
        self.selector = selector or RuleSetSelector()
        self.cancellation = cancellation or CancellationToken()
        self.property_chain = property_chain
        self.message_formatter = MessageFormatter()
        # Name of the member whose rule is currently executing.
        self.property_name: str | None = None
        self._emitted: list[ValidationFailure] = []

    def raise_if_cancelled(self) -> None:
        self.cancellation.raise_if_cancelled()

    def property_path(self, name: str | None) -> str:
        """Full property path of ``name`` below this context's property chain."""
        separator = get_global_config().property_chain_separator
        parts = [*self.property_chain, name] if name else list(self.property_chain)
        return separator.join(parts)

    def for_child(self, instance: Any, property_name: str | None) -> "ValidationContext":
        """Context for validating a nested object held by ``property_name``."""
        chain = self.property_chain + ((property_name,) if property_name else ())
        return ValidationContext(
            instance,
            selector=self.selector,
            cancellation=self.cancellation,
            property_chain=chain,
        )

    def emit_failure(self, failure: ValidationFailure) -> None:
        """Record a failure produced directly by a validator unit."""
        self._emitted.append(failure)

    def take_emitted_failures(self) -> list[ValidationFailure]:
        emitted, self._emitted = self._emitted, []
        return emitted
