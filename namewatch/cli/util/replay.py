"""Runs replay scenarios against an in-process bus."""

import logging
from typing import Any

from namewatch.cli.models import (
    DisconnectStep,
    Notification,
    OwnStep,
    ReleaseStep,
    Scenario,
    Step,
    StepOutcome,
    UnwatchStep,
    WatchStep,
)
from namewatch.domain.shared.error import NameWatchError
from namewatch.domain.watch.model.value import NameCallback
from namewatch.domain.watch.service.watcher import NameWatcher
from namewatch.infrastructure.bus.memory_bus import InMemoryBus

logger = logging.getLogger(__name__)


class ScenarioRunner:
    """Drives a NameWatcher and its InMemoryBus through scenario steps.

    Labels are mapped to stable objects, so the same callback label always
    means the same function and the same context label the same object.
    """

    def __init__(self, watcher: NameWatcher, bus: InMemoryBus) -> None:
        self._watcher = watcher
        self._bus = bus
        self._peers: dict[str, str] = {}  # owner label -> unique name
        self._callbacks: dict[str, NameCallback] = {}
        self._contexts: dict[str, str] = {}
        self._step = 0
        self.notifications: list[Notification] = []

    def run(self, scenario: Scenario) -> list[StepOutcome]:
        outcomes = []
        for index, step in enumerate(scenario.steps, 1):
            self._step = index
            outcomes.append(self._run_step(index, step))
        return outcomes

    def _run_step(self, index: int, step: Step) -> StepOutcome:
        target = getattr(step, "name", None) or getattr(step, "owner", "")
        try:
            detail = self._apply(step)
        except NameWatchError as e:
            logger.debug(f"Step {index} ({step.action}) failed: {e.message}")
            return StepOutcome(
                index=index, action=step.action, target=target, ok=False, detail=f"{e.code}: {e.message}"
            )
        return StepOutcome(index=index, action=step.action, target=target, ok=True, detail=detail)

    def _apply(self, step: Step) -> str:
        if isinstance(step, OwnStep):
            owner = self._peer(step.owner)
            self._bus.request_name(step.name, owner)
            return f"owned by {owner}"

        if isinstance(step, ReleaseStep):
            self._bus.release_name(step.name)
            return ""

        if isinstance(step, DisconnectStep):
            unique = self._peers.pop(step.owner, None)
            if unique is None:
                return "unknown peer"
            self._bus.disconnect(unique)
            return unique

        callback = self._callback(step.callback)
        context = self._context(step.context)
        if isinstance(step, WatchStep):
            self._watcher.watch(step.name, callback, context)
        elif isinstance(step, UnwatchStep):
            self._watcher.unwatch(step.name, callback, context)
        return step.callback

    def _peer(self, label: str) -> str:
        if label not in self._peers:
            self._peers[label] = self._bus.connect()
        return self._peers[label]

    def _callback(self, label: str) -> NameCallback:
        if label not in self._callbacks:

            def callback(name: str, context: Any) -> None:
                self.notifications.append(
                    Notification(step=self._step, name=name, callback=label, context=context)
                )

            self._callbacks[label] = callback
        return self._callbacks[label]

    def _context(self, label: str | None) -> str | None:
        if label is None:
            return None
        return self._contexts.setdefault(label, label)
