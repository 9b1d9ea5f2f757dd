"""Condition composition for rules and validator units.

Conditions accumulate instead of overwriting each other: every new
condition is ANDed with whatever was already there, and the new one is
evaluated first. Both sides are always evaluated.

Rule-level shared conditions are a tagged variant (none, sync or async).
A rule commits to one form; mixing them is a declaration error.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from anyio.lowlevel import checkpoint_if_cancelled

from rulekit.errors import AsyncValidatorInvokedSynchronouslyError, ConfigurationError

SyncCondition = Callable[[Any], bool]
AsyncCondition = Callable[[Any], Awaitable[bool]]


class ApplyConditionTo(str, Enum):
    """Which validators a rule-level When/Unless refines."""
    ALL_VALIDATORS = "all_validators"
    CURRENT_VALIDATOR = "current_validator"


class ConditionKind(str, Enum):
    NONE = "none"
    SYNC = "sync"
    ASYNC = "async"


async def checkpoint(context: Any) -> None:
    """Observe both the context's token and native cancellation before an await."""
    context.raise_if_cancelled()
    await checkpoint_if_cancelled()


def combine_conditions(new: SyncCondition, existing: SyncCondition | None) -> SyncCondition:
    """AND a new synchronous condition onto an existing one (new first)."""
    if existing is None:
        return new

    def combined(context: Any) -> bool:
        new_result = new(context)
        existing_result = existing(context)
        return bool(new_result and existing_result)

    return combined


def combine_async_conditions(new: AsyncCondition, existing: AsyncCondition | None) -> AsyncCondition:
    """AND a new asynchronous condition onto an existing one (new awaited first)."""
    if existing is None:
        return new

    async def combined(context: Any) -> bool:
        await checkpoint(context)
        new_result = await new(context)
        await checkpoint(context)
        existing_result = await existing(context)
        return bool(new_result and existing_result)

    return combined


def negate(predicate: SyncCondition) -> SyncCondition:
    def negated(context: Any) -> bool:
        return not predicate(context)

    return negated


def negate_async(predicate: AsyncCondition) -> AsyncCondition:
    async def negated(context: Any) -> bool:
        return not await predicate(context)

    return negated


@dataclass(frozen=True)
class SharedCondition:
    """Rule-level condition gating every validator and dependent rule of a rule."""
    kind: ConditionKind = ConditionKind.NONE
    predicate: Callable[[Any], Any] | None = None

    @property
    def is_async(self) -> bool:
        return self.kind == ConditionKind.ASYNC

    def with_condition(self, predicate: SyncCondition) -> "SharedCondition":
        if self.kind == ConditionKind.ASYNC:
            raise ConfigurationError(
                "Cannot add a synchronous shared condition to a rule that already has an asynchronous one"
            )
        return SharedCondition(ConditionKind.SYNC, combine_conditions(predicate, self.predicate))

    def with_async_condition(self, predicate: AsyncCondition) -> "SharedCondition":
        if self.kind == ConditionKind.SYNC:
            raise ConfigurationError(
                "Cannot add an asynchronous shared condition to a rule that already has a synchronous one"
            )
        return SharedCondition(ConditionKind.ASYNC, combine_async_conditions(predicate, self.predicate))

    def evaluate(self, context: Any) -> bool:
        if self.kind == ConditionKind.NONE:
            return True
        if self.kind == ConditionKind.ASYNC:
            raise AsyncValidatorInvokedSynchronouslyError("Rule shared condition")
        return bool(self.predicate(context))

    async def evaluate_async(self, context: Any) -> bool:
        if self.kind == ConditionKind.NONE:
            return True
        if self.kind == ConditionKind.SYNC:
            return bool(self.predicate(context))
        await checkpoint(context)
        return bool(await self.predicate(context))


NO_CONDITION = SharedCondition()
