"""Presence validators.

These are the only built-in validators that reject None; every comparison
and format validator treats None as valid and leaves that decision here.
"""

from collections.abc import Sized
from typing import Any

from .base import PropertyValidator


class NotNullValidator(PropertyValidator):

    def is_valid(self, context, value: Any) -> bool:
        return value is not None


class NotEmptyValidator(PropertyValidator):
    """Rejects None, blank strings and empty collections."""

    def is_valid(self, context, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        if isinstance(value, Sized):
            return len(value) > 0
        return True
