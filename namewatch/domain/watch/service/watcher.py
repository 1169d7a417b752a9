"""NameWatcher - notifies subscribers once a bus name loses its owner."""

import logging
from dataclasses import field
from typing import Any

import logfire

from namewatch.domain.shared.error import (
    AllocationError,
    BusError,
    FilterInstallError,
    MatchRuleError,
    MatchRuleRemovalError,
    NameWatchError,
    NotFoundError,
)
from namewatch.domain.shared.service import Service
from namewatch.domain.watch.model.registry import Subscription, WatchEntry, WatchRegistry
from namewatch.domain.watch.model.value import (
    DBUS_INTERFACE,
    NAME_OWNER_CHANGED,
    NameCallback,
    NameOwnerChanged,
    match_rule,
)
from namewatch.domain.watch.port.connection import BusConnection, BusMessage, FilterResult

logger = logging.getLogger(__name__)


class NameWatcher(Service):
    """Multiplexes name watches onto one match rule per name.

    A single inbound filter is installed on the connection the first time
    anything is watched. Each distinct name gets one match rule, added with
    its first subscription and removed with its last. When the bus reports
    that a watched name lost its owner, every subscription for it is called
    once, in registration order, and the watch is over.

    Example:
        watcher = NameWatcher(connection)
        watcher.watch("org.example.Player", on_player_gone, ctx)
        ...
        watcher.unwatch("org.example.Player", on_player_gone, ctx)
    """

    connection: BusConnection
    registry: WatchRegistry = field(default_factory=WatchRegistry)
    interface: str = DBUS_INTERFACE
    member: str = NAME_OWNER_CHANGED
    _filter_installed: bool = field(default=False, init=False, repr=False)
    # name -> subscriptions of a firing entry not yet (fully) called
    _firing: dict[str, list[Subscription]] = field(default_factory=dict, init=False, repr=False)

    @property
    def filter_installed(self) -> bool:
        return self._filter_installed

    def match_rule(self, name: str) -> str:
        return match_rule(name, interface=self.interface, member=self.member)

    def watch(self, name: str, callback: NameCallback, context: Any = None) -> Subscription:
        """Call ``callback(name, context)`` once ``name`` loses its owner.

        Watching the same (name, callback, context) again is a no-op.

        Returns:
            The stored subscription.

        Raises:
            FilterInstallError: The bus refused the inbound filter.
            AllocationError: Out of memory while registering.
            MatchRuleError: The bus refused the match rule; nothing was registered.
        """
        logger.debug(f"watch({name})")

        with logfire.span("WatchName", name=name):
            self._ensure_filter()

            try:
                first = self.registry.add_callback(name, callback, context)
            except MemoryError as e:
                logger.error(f"Out of memory registering watch for {name}")
                raise AllocationError(f"Could not register watch for {name}") from e

            entry = self.registry.find(name)
            assert entry is not None
            sub = self.registry.find_callback(entry, callback, context)
            assert sub is not None

            # The rule is already in place unless this created the entry.
            # A firing name keeps its rule until the firing is over.
            if not first or name in self._firing:
                return sub

            rule = self.match_rule(name)
            try:
                self.connection.add_match(rule)
            except BusError as e:
                logger.error(f"Adding owner match rule for {name} failed: {e.message}")
                self.registry.remove_callback(name, callback, context)
                raise MatchRuleError(f"Adding owner match rule for {name} failed: {e.message}") from e

            logger.debug(f"Added match rule {rule}")
            return sub

    def unwatch(self, name: str, callback: NameCallback, context: Any = None) -> None:
        """Withdraw a watch added with :meth:`watch`.

        Raises:
            NotFoundError: ``name`` is not watched, or not by this
                (callback, context). Also the outcome after the watch fired.
            MatchRuleRemovalError: The bus refused to drop the rule. The
                subscription is gone locally regardless.
        """
        logger.debug(f"unwatch({name})")

        with logfire.span("UnwatchName", name=name):
            entry = self.registry.find(name)
            if entry is None and name not in self._firing:
                logger.error(f"No listener for {name}")
                raise NotFoundError(f"No listener for {name}")

            if entry is not None and self.registry.find_callback(entry, callback, context):
                self.registry.remove_callback(name, callback, context)
            elif not self._drop_pending(name, callback, context):
                logger.error(f"No matching callback found for {name}")
                raise NotFoundError(f"No matching callback found for {name}")

            # Keep the rule while other callbacks exist
            if name in self.registry or self._firing.get(name):
                return
            self._firing.pop(name, None)

            rule = self.match_rule(name)
            try:
                self.connection.remove_match(rule)
            except BusError as e:
                logger.error(f"Removing owner match rule for {name} failed: {e.message}")
                raise MatchRuleRemovalError(
                    f"Removing owner match rule for {name} failed: {e.message}"
                ) from e

            logger.debug(f"Removed match rule {rule}")

    def cancel(self, subscription: Subscription) -> None:
        """Unwatch using the subscription returned by :meth:`watch`."""
        self.unwatch(subscription.name, subscription.callback, subscription.context)

    def handle_message(self, message: BusMessage) -> FilterResult:
        """Inbound filter, called by the bus library for every message.

        Never raises and never claims the message, so filters installed
        after this one still see it.
        """
        if not message.is_signal(self.interface, self.member):
            return FilterResult.NOT_YET_HANDLED

        try:
            event = NameOwnerChanged.from_args(message.get_args())
        except NameWatchError as e:
            logger.error(e.message)
            return FilterResult.NOT_YET_HANDLED
        except Exception:
            logger.exception(f"Reading {self.member} arguments failed")
            return FilterResult.NOT_YET_HANDLED

        # Only losses of ownership are of interest
        if not event.is_release:
            logger.debug(f"{event.name} acquired by {event.new_owner}")
            return FilterResult.NOT_YET_HANDLED

        entry = self.registry.find(event.name)
        if entry is None:
            # Expected when a local unwatch races an in-flight signal
            logger.warning(
                f"Got {self.member} signal for {event.name} which has no listeners"
            )
            return FilterResult.NOT_YET_HANDLED

        try:
            self._fire(entry, event)
        except MemoryError:
            logger.exception(f"Out of memory notifying listeners for {event.name}")
        return FilterResult.NOT_YET_HANDLED

    def watched_names(self) -> list[str]:
        """Names with at least one subscription, in first-watched order."""
        return self.registry.names()

    def is_watching(self, name: str) -> bool:
        return name in self.registry

    def _ensure_filter(self) -> None:
        if self._filter_installed:
            return

        if not self.connection.add_filter(self.handle_message):
            logger.error("Installing the name owner filter failed")
            raise FilterInstallError("Installing the name owner filter failed")

        self._filter_installed = True
        logger.debug("Installed name owner filter")

    def _drop_pending(self, name: str, callback: NameCallback, context: Any) -> bool:
        """Unwatch a subscription of a firing entry that has not returned yet."""
        for sub in self._firing.get(name, []):
            if sub.matches(callback, context):
                self._firing[name].remove(sub)
                return True
        return False

    def _fire(self, entry: WatchEntry, event: NameOwnerChanged) -> None:
        """Call every subscription of ``entry`` once and end the watch.

        The entry leaves the registry before any callback runs, so a watch
        made from a callback, even of the very same (callback, context),
        starts a new entry that fires on the next release.
        """
        fired = list(entry.callbacks)
        pending = list(fired)
        self.registry.remove_entry(entry)
        self._firing[event.name] = pending

        with logfire.span("NameReleased", name=event.name, subscribers=len(fired)):
            logfire.info("Name released", name=event.name, old_owner=event.old_owner)

            try:
                for sub in fired:
                    # Unwatched by an earlier callback
                    if sub not in pending:
                        continue
                    try:
                        sub.callback(event.name, sub.context)
                    except Exception:
                        logger.exception(f"Callback for {event.name} raised")
                    if sub in pending:
                        pending.remove(sub)
            finally:
                if self._firing.get(event.name) is pending:
                    del self._firing[event.name]

        logger.debug(f"Notified {len(fired)} listener(s) for {event.name}")
