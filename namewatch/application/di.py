from dishka import Container, make_container

from namewatch.config import Config
from namewatch.infrastructure.bus.di import WatchProvider


def create_container(config: Config | None = None) -> Container:
    return make_container(WatchProvider(config))
