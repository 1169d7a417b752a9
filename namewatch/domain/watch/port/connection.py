"""Bus connection port.

The connection itself (handshake, reconnection, marshaling) lives outside
this package. NameWatcher only needs to install one inbound filter, add and
remove textual match rules, and read three strings out of a signal.
"""

from abc import abstractmethod
from enum import Enum
from typing import Any, Callable, Protocol


class FilterResult(Enum):
    """What an inbound filter tells the bus library about a message."""

    HANDLED = "handled"  # Stop dispatching to later filters
    NOT_YET_HANDLED = "not_yet_handled"


class BusMessage(Protocol):

    @abstractmethod
    def is_signal(self, interface: str, member: str) -> bool:
        """True if the message is the signal ``interface.member``."""
        ...

    @abstractmethod
    def get_args(self) -> tuple[Any, ...]:
        """Decoded message arguments, in order."""
        ...


MessageFilter = Callable[[BusMessage], FilterResult]


class BusConnection(Protocol):

    @abstractmethod
    def add_filter(self, handler: MessageFilter) -> bool:
        """Install a hook called for every inbound message.

        Returns:
            False if the bus library refused the filter.
        """
        ...

    @abstractmethod
    def add_match(self, rule: str) -> None:
        """Ask the bus to route messages matching ``rule`` to us.

        Blocks until the bus replies.

        Raises:
            BusError: If the rule is malformed or the request failed.
        """
        ...

    @abstractmethod
    def remove_match(self, rule: str) -> None:
        """Withdraw a rule previously added with ``add_match``.

        Raises:
            BusError: If the rule is unknown or the request failed.
        """
        ...
