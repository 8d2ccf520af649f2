"""Record types shared by the test modules."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Address:
    city: str = ""
    zip_code: Optional[str] = None


@dataclass
class Customer:
    name: str = ""
    address: Optional[Address] = None


@dataclass
class Item:
    sku: str = ""
    price: float = 0.0


@dataclass
class Order:
    id: int = 0
    customer: Optional[Customer] = None
    items: Optional[List[Item]] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    extra: Optional[dict] = None
    _secret: str = "hidden"


@dataclass
class Person:
    name: str = ""


@dataclass(frozen=True)
class Point:
    x: int = 0
    y: int = 0


class Engine:
    """Cannot be built without arguments."""

    def __init__(self, cylinders: int):
        self.cylinders = cylinders


@dataclass
class Car:
    engine: Optional[Engine] = None


class Garage:
    """Plain class whose car setter always fails."""

    def __init__(self):
        self._car = None

    @property
    def car(self) -> Optional[Car]:
        return self._car

    @car.setter
    def car(self, value: Car):
        raise ValueError("garage is read-only")


class Account:
    kind: str

    def __init__(self, owner: str, balance: float = 0.0):
        self.owner = owner
        self.balance = balance
        self._pin = 1234
        self._nickname = None

    @property
    def display_name(self) -> str:
        return self.owner.upper()

    @property
    def nickname(self) -> str:
        return self._nickname

    @nickname.setter
    def nickname(self, value: str):
        self._nickname = value


class Slotted:
    __slots__ = ('left', 'right')
