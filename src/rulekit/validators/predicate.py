"""User-supplied predicate validators (``must`` / ``must_async``)."""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from .base import AsyncPropertyValidator, PropertyValidator

InstancePredicate = Callable[[Any, Any], Any]


def adapt_predicate(predicate: Callable[..., Any]) -> InstancePredicate:
    """Normalise ``f(value)`` and ``f(instance, value)`` predicates to the latter."""
    try:
        params = inspect.signature(predicate).parameters.values()
    except (TypeError, ValueError):
        return lambda instance, value: predicate(value)

    if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params):
        return predicate
    positional = [
        p for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(positional) >= 2:
        return predicate
    return lambda instance, value: predicate(value)


class PredicateValidator(PropertyValidator):

    def __init__(self, predicate: Callable[..., bool]):
        super().__init__()
        self._predicate = adapt_predicate(predicate)

    def is_valid(self, context, value: Any) -> bool:
        return bool(self._predicate(context.instance_to_validate, value))


class AsyncPredicateValidator(AsyncPropertyValidator):

    def __init__(self, predicate: Callable[..., Awaitable[bool]]):
        super().__init__()
        self._predicate = adapt_predicate(predicate)

    async def is_valid_async(self, context, value: Any) -> bool:
        return bool(await self._predicate(context.instance_to_validate, value))
