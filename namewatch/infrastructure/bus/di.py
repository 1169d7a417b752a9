"""Dependency injection provider for the name watcher."""

from dishka import Provider, Scope, provide

from namewatch.config import Config
from namewatch.domain.watch.model.registry import WatchRegistry
from namewatch.domain.watch.port.connection import BusConnection
from namewatch.domain.watch.service.watcher import NameWatcher
from namewatch.infrastructure.bus.memory_bus import InMemoryBus


class WatchProvider(Provider):
    """Provides the watcher and its in-process bus.

    Everything is APP-scoped: one bus, one registry and one watcher per
    container, so the inbound filter is installed once.
    """

    def __init__(self, config: Config | None = None) -> None:
        super().__init__()
        self._config = config

    registry = provide(WatchRegistry, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_config(self) -> Config:
        return self._config or Config()

    @provide(scope=Scope.APP)
    def get_memory_bus(self) -> InMemoryBus:
        return InMemoryBus()

    @provide(scope=Scope.APP)
    def get_connection(self, bus: InMemoryBus) -> BusConnection:
        return bus

    @provide(scope=Scope.APP)
    def get_watcher(
        self,
        connection: BusConnection,
        registry: WatchRegistry,
        config: Config,
    ) -> NameWatcher:
        return NameWatcher(
            connection=connection,
            registry=registry,
            interface=config.watch.interface,
            member=config.watch.member,
        )
