"""Integer-status API for watching bus names.

Each connection gets its own NameWatcher on first use, kept until
:func:`forget` or :func:`reset`. ``watch`` and ``unwatch`` return 0 on
success and -1 on failure, and never raise.

Example:
    def on_gone(name, context):
        ...

    if watch(connection, "org.example.Player", on_gone, player) < 0:
        ...
"""

import logging
from typing import Any

from namewatch.config import Config
from namewatch.domain.shared.error import NameWatchError
from namewatch.domain.watch.model.value import NameCallback
from namewatch.domain.watch.port.connection import BusConnection
from namewatch.domain.watch.service.watcher import NameWatcher

logger = logging.getLogger(__name__)

_watchers: dict[BusConnection, NameWatcher] = {}


def get_watcher(connection: BusConnection, config: Config | None = None) -> NameWatcher:
    """Get the watcher for a connection, creating it on first use.

    ``config`` only applies when the watcher is created.
    """
    watcher = _watchers.get(connection)
    if watcher is None:
        watch_config = (config or Config()).watch
        watcher = NameWatcher(
            connection=connection,
            interface=watch_config.interface,
            member=watch_config.member,
        )
        _watchers[connection] = watcher
    return watcher


def forget(connection: BusConnection) -> None:
    """Drop the watcher of a connection that is going away."""
    _watchers.pop(connection, None)


def reset() -> None:
    """Forget all watchers. Filters already installed on connections stay."""
    _watchers.clear()


def watch(
    connection: BusConnection,
    name: str,
    callback: NameCallback,
    context: Any = None,
) -> int:
    """Call ``callback(name, context)`` once ``name`` loses its owner."""
    try:
        get_watcher(connection).watch(name, callback, context)
    except NameWatchError as e:
        logger.debug(f"watch({name}) failed: {e.code}")
        return -1
    return 0


def unwatch(
    connection: BusConnection,
    name: str,
    callback: NameCallback,
    context: Any = None,
) -> int:
    """Withdraw a watch made with :func:`watch`."""
    try:
        get_watcher(connection).unwatch(name, callback, context)
    except NameWatchError as e:
        logger.debug(f"unwatch({name}) failed: {e.code}")
        return -1
    return 0
