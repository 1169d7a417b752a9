"""namewatch - one-shot notifications when a bus name loses its owner."""

from namewatch.application.api import forget, get_watcher, reset, unwatch, watch
from namewatch.domain.shared.error import (
    BusError,
    DecodeError,
    FilterInstallError,
    MatchRuleError,
    MatchRuleRemovalError,
    NameWatchError,
    NotFoundError,
)
from namewatch.domain.watch.model.registry import Subscription, WatchRegistry
from namewatch.domain.watch.model.value import NameOwnerChanged, match_rule
from namewatch.domain.watch.port.connection import BusConnection, BusMessage, FilterResult
from namewatch.domain.watch.service.watcher import NameWatcher

__all__ = [
    "BusConnection",
    "BusError",
    "BusMessage",
    "DecodeError",
    "FilterInstallError",
    "FilterResult",
    "MatchRuleError",
    "MatchRuleRemovalError",
    "NameOwnerChanged",
    "NameWatchError",
    "NameWatcher",
    "NotFoundError",
    "Subscription",
    "WatchRegistry",
    "forget",
    "get_watcher",
    "match_rule",
    "reset",
    "unwatch",
    "watch",
]
