"""Value objects for name watching."""

from collections.abc import Sequence
from typing import Any, Callable, NewType

from pydantic import BaseModel, ConfigDict, ValidationError

from namewatch.domain.shared.error import DecodeError

BusName = NewType("BusName", str)
"""A well-known (``org.example.Service``) or unique (``:1.42``) bus name."""

NameCallback = Callable[[str, Any], None]
"""Called as ``callback(name, context)`` once the watched name loses its owner."""

DBUS_INTERFACE = "org.freedesktop.DBus"
NAME_OWNER_CHANGED = "NameOwnerChanged"


class ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


class NameOwnerChanged(ValueObject):
    """Decoded NameOwnerChanged signal body."""

    model_config = ConfigDict(frozen=True, strict=True)

    name: str
    old_owner: str
    new_owner: str  # Empty when the name lost its owner

    @property
    def is_release(self) -> bool:
        """True when the name lost its owner without gaining a new one."""
        return self.new_owner == ""

    @classmethod
    def from_args(cls, args: Sequence[Any]) -> "NameOwnerChanged":
        """Decode the three string arguments of the signal.

        Raises:
            DecodeError: If there are not exactly three string arguments.
        """
        if len(args) != 3:
            raise DecodeError(
                f"Invalid arguments for {NAME_OWNER_CHANGED} signal: "
                f"expected 3, got {len(args)}"
            )
        name, old_owner, new_owner = args
        try:
            return cls(name=name, old_owner=old_owner, new_owner=new_owner)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid arguments for {NAME_OWNER_CHANGED} signal: {e}"
            ) from e


def match_rule(
    name: str,
    interface: str = DBUS_INTERFACE,
    member: str = NAME_OWNER_CHANGED,
) -> str:
    """Build the match rule that scopes ownership changes to ``name``."""
    return f"interface={interface},member={member},arg0={name}"
