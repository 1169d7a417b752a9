"""Watch registry - bookkeeping of who watches which bus name.

Pure in-memory data structure. It knows nothing about the bus; the
NameWatcher service keeps bus-side match rules in step with it, using the
return value of ``add_callback`` and the presence of entries.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from namewatch.domain.watch.model.value import NameCallback

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Subscription:
    """One registered (callback, context) pair for a name.

    Two subscriptions are the same registration when the callbacks compare
    equal and the contexts are the same object.
    """

    name: str
    callback: NameCallback
    context: Any = None

    def matches(self, callback: NameCallback, context: Any) -> bool:
        return self.callback == callback and self.context is context


@dataclass(eq=False)
class WatchEntry:
    """All subscriptions for a single name, in registration order."""

    name: str
    callbacks: list[Subscription] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.callbacks)


class WatchRegistry:
    """Registry of watched names.

    Invariant: an entry exists if and only if it holds at least one
    subscription.
    """

    def __init__(self) -> None:
        self._entries: dict[str, WatchEntry] = {}

    def find(self, name: str) -> WatchEntry | None:
        """Get the entry for a name (exact match)."""
        return self._entries.get(name)

    def find_callback(
        self, entry: WatchEntry, callback: NameCallback, context: Any
    ) -> Subscription | None:
        """Find the subscription for (callback, context) within an entry."""
        for sub in entry.callbacks:
            if sub.matches(callback, context):
                return sub
        return None

    def add_callback(self, name: str, callback: NameCallback, context: Any = None) -> bool:
        """Register a callback for a name.

        Returns:
            True if this call created the entry for ``name``, i.e. the name
            was not watched before. A duplicate (callback, context) is left
            alone and reports False.
        """
        entry = self._entries.get(name)
        if entry is not None and self.find_callback(entry, callback, context):
            logger.debug(f"Callback already registered for {name}")
            return False

        # No mutation before the new records exist (MemoryError safe)
        sub = Subscription(name=name, callback=callback, context=context)
        if entry is None:
            self._entries[name] = WatchEntry(name=name, callbacks=[sub])
            return True

        entry.callbacks.append(sub)
        return False

    def remove_callback(self, name: str, callback: NameCallback, context: Any = None) -> None:
        """Remove a callback, dropping the entry when it was the last one."""
        entry = self._entries.get(name)
        if entry is None:
            logger.debug(f"No entry for {name}")
            return

        sub = self.find_callback(entry, callback, context)
        if sub is None:
            logger.debug(f"No matching callback found for {name}")
            return

        entry.callbacks.remove(sub)
        if not entry.callbacks:
            del self._entries[name]

    def remove_entry(self, entry: WatchEntry) -> None:
        """Remove an entry with all its subscriptions.

        Does nothing if the registry no longer holds this very entry, e.g.
        when its last callback was already unwatched.
        """
        if self._entries.get(entry.name) is entry:
            del self._entries[entry.name]

    def subscriptions(self, name: str) -> list[Subscription]:
        """Subscriptions for a name, in registration order."""
        entry = self._entries.get(name)
        return list(entry.callbacks) if entry else []

    def names(self) -> list[str]:
        """List all watched names in the order they were first watched."""
        return list(self._entries.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
