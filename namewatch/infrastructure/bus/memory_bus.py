"""In-process bus: a BusConnection backed by a simulated bus daemon.

Covers what NameWatcher needs from a real daemon: message filters, match
rules (parsed and reference counted), and name ownership that emits
NameOwnerChanged when names are acquired, released, or their owner
disconnects.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from namewatch.domain.shared.error import BusError
from namewatch.domain.watch.model.value import DBUS_INTERFACE, NAME_OWNER_CHANGED
from namewatch.domain.watch.port.connection import (
    BusConnection,
    BusMessage,
    FilterResult,
    MessageFilter,
)

logger = logging.getLogger(__name__)

DBUS_PATH = "/org/freedesktop/DBus"

ERROR_MATCH_RULE_INVALID = "org.freedesktop.DBus.Error.MatchRuleInvalid"
ERROR_MATCH_RULE_NOT_FOUND = "org.freedesktop.DBus.Error.MatchRuleNotFound"
ERROR_NAME_HAS_NO_OWNER = "org.freedesktop.DBus.Error.NameHasNoOwner"
ERROR_ACCESS_DENIED = "org.freedesktop.DBus.Error.AccessDenied"

_RULE_KEYS = {"type", "sender", "interface", "member", "path", "destination"}
_ARG_KEY = re.compile(r"^arg([0-9]|[1-5][0-9]|6[0-3])$")


@dataclass(frozen=True)
class SignalMessage:
    """A signal as seen by inbound filters."""

    interface: str
    member: str
    args: tuple[Any, ...] = ()
    path: str = DBUS_PATH
    sender: str = DBUS_INTERFACE
    type: str = "signal"

    def is_signal(self, interface: str, member: str) -> bool:
        return self.type == "signal" and self.interface == interface and self.member == member

    def get_args(self) -> tuple[Any, ...]:
        return self.args


@dataclass(frozen=True)
class MatchRule:
    """Parsed form of a textual match rule."""

    text: str
    criteria: tuple[tuple[str, str], ...]

    @classmethod
    def parse(cls, text: str) -> "MatchRule":
        """Parse ``key=value`` pairs separated by commas.

        Values may be single-quoted. Unknown keys, repeated keys and pairs
        without ``=`` make the rule invalid.

        Raises:
            BusError: With name ``MatchRuleInvalid``.
        """
        criteria: dict[str, str] = {}
        if not text:
            return cls(text=text, criteria=())

        for pair in text.split(","):
            key, sep, value = pair.partition("=")
            key = key.strip()
            if not sep or not key:
                raise BusError(f"Invalid match rule component '{pair}'", name=ERROR_MATCH_RULE_INVALID)
            if key not in _RULE_KEYS and not _ARG_KEY.match(key):
                raise BusError(f"Unknown match rule key '{key}'", name=ERROR_MATCH_RULE_INVALID)
            if key in criteria:
                raise BusError(f"Key '{key}' specified twice in match rule", name=ERROR_MATCH_RULE_INVALID)
            if len(value) >= 2 and value[0] == value[-1] == "'":
                value = value[1:-1]
            criteria[key] = value

        return cls(text=text, criteria=tuple(criteria.items()))

    def matches(self, message: SignalMessage) -> bool:
        for key, expected in self.criteria:
            match = _ARG_KEY.match(key)
            if match:
                index = int(match.group(1))
                if index >= len(message.args) or message.args[index] != expected:
                    return False
            elif getattr(message, key, None) != expected:
                return False
        return True


@dataclass(eq=False)
class InMemoryBus(BusConnection):
    """A bus connection with its own in-process daemon.

    Example:
        bus = InMemoryBus()
        owner = bus.connect()
        bus.request_name("org.example.Player", owner)
        watcher = NameWatcher(bus)
        watcher.watch("org.example.Player", on_gone)
        bus.disconnect(owner)  # on_gone("org.example.Player", None)
    """

    accept_filters: bool = True
    _filters: list[MessageFilter] = field(default_factory=list, init=False, repr=False)
    _rules: list[MatchRule] = field(default_factory=list, init=False, repr=False)
    _owners: dict[str, str] = field(default_factory=dict, init=False, repr=False)
    _next_serial: int = field(default=1, init=False, repr=False)

    # -------------------------------------------------------------------------
    # BusConnection
    # -------------------------------------------------------------------------

    def add_filter(self, handler: MessageFilter) -> bool:
        if not self.accept_filters:
            logger.debug("Refusing message filter")
            return False
        self._filters.append(handler)
        return True

    def add_match(self, rule: str) -> None:
        self._rules.append(MatchRule.parse(rule))
        logger.debug(f"AddMatch {rule}")

    def remove_match(self, rule: str) -> None:
        for i, installed in enumerate(self._rules):
            if installed.text == rule:
                del self._rules[i]
                logger.debug(f"RemoveMatch {rule}")
                return
        raise BusError(f"The given match rule wasn't found: {rule}", name=ERROR_MATCH_RULE_NOT_FOUND)

    # -------------------------------------------------------------------------
    # Daemon state
    # -------------------------------------------------------------------------

    @property
    def match_rules(self) -> list[str]:
        """Installed rules, one item per AddMatch still in effect."""
        return [rule.text for rule in self._rules]

    @property
    def filters(self) -> list[MessageFilter]:
        return list(self._filters)

    def owner_of(self, name: str) -> str | None:
        return self._owners.get(name)

    def names(self) -> dict[str, str]:
        """Current name -> owner mapping."""
        return dict(self._owners)

    def connect(self) -> str:
        """Simulate a new peer connecting; returns its unique name."""
        unique = f":1.{self._next_serial}"
        self._next_serial += 1
        self._set_owner(unique, unique)
        return unique

    def request_name(self, name: str, owner: str) -> None:
        """Give ``name`` to ``owner``.

        Raises:
            BusError: If another peer already owns the name.
        """
        current = self._owners.get(name)
        if current == owner:
            return
        if current is not None:
            raise BusError(f"{name} is already owned by {current}", name=ERROR_ACCESS_DENIED)
        self._set_owner(name, owner)

    def release_name(self, name: str) -> None:
        """Release ``name`` from its owner.

        Raises:
            BusError: If the name has no owner.
        """
        if name not in self._owners:
            raise BusError(f"Name {name} has no owner", name=ERROR_NAME_HAS_NO_OWNER)
        self._set_owner(name, None)

    def disconnect(self, owner: str) -> None:
        """Simulate ``owner`` exiting: all its names are released, then itself."""
        for name, current in list(self._owners.items()):
            if current == owner and name != owner:
                self._set_owner(name, None)
        if owner in self._owners:
            self._set_owner(owner, None)

    def emit(self, message: BusMessage) -> bool:
        """Route a message to the filters if any installed rule matches it.

        Returns:
            True if the message was delivered.
        """
        if isinstance(message, SignalMessage) and not any(r.matches(message) for r in self._rules):
            return False

        for handler in list(self._filters):
            if handler(message) is FilterResult.HANDLED:
                break
        return True

    def _set_owner(self, name: str, owner: str | None) -> None:
        old = self._owners.pop(name, None)
        if owner is not None:
            self._owners[name] = owner
        self.emit(
            SignalMessage(
                interface=DBUS_INTERFACE,
                member=NAME_OWNER_CHANGED,
                args=(name, old or "", owner or ""),
            )
        )
