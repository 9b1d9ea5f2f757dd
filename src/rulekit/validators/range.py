"""Range validators over comparable values."""

from abc import abstractmethod
from collections.abc import Callable
from typing import Any

from .base import PropertyValidator


def default_compare(a: Any, b: Any) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


class RangeValidator(PropertyValidator):
    """Shared bounds handling for between-style validators.

    Args:
        from_: Lower bound
        to: Upper bound; must not be below ``from_``
        comparer: Optional three-way comparison returning <0, 0 or >0
    """

    def __init__(self, from_: Any, to: Any, comparer: Callable[[Any, Any], int] | None = None):
        super().__init__()
        self.compare = comparer or default_compare
        if self.compare(to, from_) < 0:
            raise ValueError(f"'to' ({to}) should be larger than 'from' ({from_})")
        self.from_ = from_
        self.to = to

    def is_valid(self, context, value: Any) -> bool:
        # None is never a range violation; only presence validators reject it.
        if value is None:
            return True

        if self.has_error(value):
            context.message_formatter \
                .append_argument("From", self.from_) \
                .append_argument("To", self.to) \
                .append_argument("Value", value)
            return False

        return True

    @abstractmethod
    def has_error(self, value: Any) -> bool:
        """True when ``value`` lies outside the range."""

    def describe(self) -> str:
        return f"{self.name}({self.from_}, {self.to})"


class InclusiveBetweenValidator(RangeValidator):
    """Valid when ``from_ <= value <= to``."""

    def has_error(self, value: Any) -> bool:
        return self.compare(value, self.from_) < 0 or self.compare(value, self.to) > 0


class ExclusiveBetweenValidator(RangeValidator):
    """Valid when ``from_ < value < to``."""

    def has_error(self, value: Any) -> bool:
        return self.compare(value, self.from_) <= 0 or self.compare(value, self.to) >= 0
