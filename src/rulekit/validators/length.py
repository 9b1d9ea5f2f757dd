"""String and collection length validators."""

from typing import Any

from rulekit.messages import get_template

from .base import PropertyValidator


class LengthValidator(PropertyValidator):
    """Length must fall within ``[min_length, max_length]``.

    A ``max_length`` of None means no upper bound. None values pass.
    """

    def __init__(self, min_length: int, max_length: int | None = None):
        super().__init__()
        if min_length < 0:
            raise ValueError("min_length must be >= 0")
        if max_length is not None and max_length < min_length:
            raise ValueError("max_length should be larger than min_length")
        self.min_length = min_length
        self.max_length = max_length

    def is_valid(self, context, value: Any) -> bool:
        if value is None:
            return True

        length = len(value)
        if length < self.min_length or (self.max_length is not None and length > self.max_length):
            context.message_formatter \
                .append_argument("MinLength", self.min_length) \
                .append_argument("MaxLength", self.max_length) \
                .append_argument("TotalLength", length)
            return False

        return True

    def get_default_message_template(self) -> str:
        if self.max_length is None:
            return get_template("MinimumLengthValidator")
        return super().get_default_message_template()

    def describe(self) -> str:
        upper = "" if self.max_length is None else self.max_length
        return f"{self.name}({self.min_length}..{upper})"


class MinimumLengthValidator(LengthValidator):

    def __init__(self, min_length: int):
        super().__init__(min_length, None)


class MaximumLengthValidator(LengthValidator):

    def __init__(self, max_length: int):
        super().__init__(0, max_length)


class ExactLengthValidator(LengthValidator):

    def __init__(self, length: int):
        super().__init__(length, length)
