"""Pytest configuration and shared fixtures for rulekit tests."""

from dataclasses import dataclass, field
from enum import Enum

import pytest

from rulekit.config import reset_global_config


class Gender(Enum):
    Male = 1
    Female = 2


@dataclass
class Address:
    line1: str | None = None
    postcode: str | None = None
    country: str | None = None


@dataclass
class Person:
    forename: str | None = None
    surname: str | None = None
    age: int | None = None
    email: str | None = None
    gender_string: str | None = None
    is_employee: bool = False
    employee_number: str | None = None
    address: Address | None = None
    orders: list = field(default_factory=list)


@pytest.fixture(autouse=True)
def _reset_config():
    """Every test starts and ends with the default global configuration."""
    reset_global_config()
    yield
    reset_global_config()


@pytest.fixture
def person():
    """Fully valid person."""
    return Person(
        forename="Jeremy",
        surname="Skinner",
        age=40,
        email="jeremy@example.com",
        gender_string="Male",
        address=Address(line1="1 Main Street", postcode="AB1 2CD", country="UK"),
    )


@pytest.fixture
def empty_person():
    """Person with every member unset."""
    return Person()
