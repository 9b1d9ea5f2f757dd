"""Member accessors bind rules to a piece of object state.

An accessor is built once, when a rule is declared, and carries a getter
plus the stable member name used for failure property names and default
display names. No reflection happens at validation time.
"""

import operator
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from rulekit.errors import ConfigurationError


@dataclass(frozen=True)
class MemberAccessor:
    """Getter (and optional setter) for one member of an object graph."""
    name: str
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None] | None = None

    @classmethod
    def attribute(cls, path: str) -> "MemberAccessor":
        """Accessor for a (possibly dotted) attribute path such as ``address.postcode``."""
        if not path or not path.strip():
            raise ConfigurationError("Member path must not be empty")
        path = path.strip()
        parent_path, _, leaf = path.rpartition(".")
        parent_getter = operator.attrgetter(parent_path) if parent_path else None

        def setter(instance: Any, value: Any) -> None:
            target = parent_getter(instance) if parent_getter else instance
            setattr(target, leaf, value)

        return cls(name=path, getter=operator.attrgetter(path), setter=setter)

    @classmethod
    def key(cls, key: str) -> "MemberAccessor":
        """Accessor for a mapping key; missing keys read as None."""

        def getter(instance: Mapping) -> Any:
            return instance.get(key)

        def setter(instance: MutableMapping, value: Any) -> None:
            instance[key] = value

        return cls(name=key, getter=getter, setter=setter)

    @classmethod
    def member(cls, path: str) -> "MemberAccessor":
        """Accessor that reads mapping keys from mappings and attributes otherwise.

        Used where the same rules are run against plain decoded JSON and model
        instances alike.
        """
        if not path or not path.strip():
            raise ConfigurationError("Member path must not be empty")
        path = path.strip()
        segments = path.split(".")

        def getter(instance: Any) -> Any:
            current = instance
            for segment in segments:
                if current is None:
                    return None
                if isinstance(current, Mapping):
                    current = current.get(segment)
                else:
                    current = getattr(current, segment)
            return current

        def setter(instance: Any, value: Any) -> None:
            target = instance
            for segment in segments[:-1]:
                target = target[segment] if isinstance(target, Mapping) else getattr(target, segment)
            if isinstance(target, MutableMapping):
                target[segments[-1]] = value
            else:
                setattr(target, segments[-1], value)

        return cls(name=path, getter=getter, setter=setter)

    @property
    def can_write(self) -> bool:
        return self.setter is not None

    def get(self, instance: Any) -> Any:
        return self.getter(instance)

    def set(self, instance: Any, value: Any) -> None:
        if self.setter is None:
            raise ConfigurationError(f"Member '{self.name}' is read-only")
        self.setter(instance, value)


def as_accessor(member: "str | MemberAccessor") -> MemberAccessor:
    """Normalise a member reference given as a path string or an accessor."""
    if isinstance(member, MemberAccessor):
        return member
    if isinstance(member, str):
        return MemberAccessor.member(member)
    raise ConfigurationError(
        f"Expected a member path or MemberAccessor, got {type(member).__name__}"
    )


def split_pascal_case(value: str) -> str:
    """Insert spaces at word boundaries of a PascalCase name.

    ``GenderString`` becomes ``Gender String`` and ``HTTPServer`` becomes
    ``HTTP Server``. A dot directly followed by an upper-case letter is
    dropped so ``Address.Postcode`` becomes ``Address Postcode``.
    """
    if not value:
        return value

    chars: list[str] = []
    length = len(value)
    for i, current in enumerate(value):
        if current.isupper():
            if (i > 1 and not value[i - 1].isupper()) or (i + 1 < length and not value[i + 1].isupper()):
                chars.append(" ")
        if current != "." or i + 1 == length or not value[i + 1].isupper():
            chars.append(current)

    return "".join(chars).strip()


def humanize_member_name(name: str | None) -> str:
    """Default display name for a member.

    snake_case and lower-case names are split on underscores and each word
    capitalised; anything else goes through split_pascal_case.
    """
    if not name:
        return ""
    if "_" in name or name.islower():
        segments = []
        for dotted in name.split("."):
            words = [w for w in dotted.split("_") if w]
            segments.append(" ".join(w[:1].upper() + w[1:] for w in words))
        return " ".join(s for s in segments if s)
    return split_pascal_case(name)
