"""Validator units: the base contract and the built-in checks."""

from .base import AsyncPropertyValidator, PropertyValidator
from .child import ChildValidatorAdaptor
from .length import ExactLengthValidator, LengthValidator, MaximumLengthValidator, MinimumLengthValidator
from .predicate import AsyncPredicateValidator, PredicateValidator
from .presence import NotEmptyValidator, NotNullValidator
from .range import ExclusiveBetweenValidator, InclusiveBetweenValidator, RangeValidator
from .string_enum import StringEnumValidator

__all__ = [
    "PropertyValidator",
    "AsyncPropertyValidator",
    "ChildValidatorAdaptor",
    "LengthValidator",
    "MinimumLengthValidator",
    "MaximumLengthValidator",
    "ExactLengthValidator",
    "PredicateValidator",
    "AsyncPredicateValidator",
    "NotNullValidator",
    "NotEmptyValidator",
    "RangeValidator",
    "InclusiveBetweenValidator",
    "ExclusiveBetweenValidator",
    "StringEnumValidator",
]
