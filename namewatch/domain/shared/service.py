"""Service base class."""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(eq_default=False)
class _ServiceMeta(type):
    """Metaclass that turns every Service subclass into a dataclass.

    Services own live state (registries, connection flags), so they keep
    identity equality and stay hashable.
    """

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls, eq=False)
        return cls


class Service(metaclass=_ServiceMeta):
    """Base class for domain services. Subclasses are automatically dataclasses."""
