"""Validator checking that a string names a member of an Enum."""

from enum import Enum
from typing import Any

from rulekit.errors import ConfigurationError

from .base import PropertyValidator


class StringEnumValidator(PropertyValidator):
    """Valid when the value is the name of a member of ``enum_type``.

    Args:
        enum_type: Enum class whose member names are accepted
        case_sensitive: Compare names exactly (default) or ignoring case
    """

    def __init__(self, enum_type: type[Enum], case_sensitive: bool = True):
        super().__init__()
        if enum_type is None:
            raise TypeError("enum_type must not be None")
        if not (isinstance(enum_type, type) and issubclass(enum_type, Enum)):
            type_name = getattr(enum_type, "__name__", type(enum_type).__name__)
            raise ConfigurationError(
                f"The type '{type_name}' is not an enum and can't be used with is_enum_name."
            )
        self.enum_type = enum_type
        self.case_sensitive = case_sensitive
        names = list(enum_type.__members__)
        self._names = frozenset(names if case_sensitive else (n.casefold() for n in names))

    def is_valid(self, context, value: Any) -> bool:
        if value is None:
            return True
        candidate = str(value) if self.case_sensitive else str(value).casefold()
        return candidate in self._names

    def describe(self) -> str:
        return f"{self.name}({self.enum_type.__name__})"
