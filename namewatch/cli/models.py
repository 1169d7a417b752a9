"""Pydantic models for the CLI.

A replay scenario is a YAML document with a list of steps run in order
against an in-process bus:

    steps:
      - {action: own, name: org.example.Player, owner: player}
      - {action: watch, name: org.example.Player, callback: ui, context: window}
      - {action: disconnect, owner: player}

Owners, callbacks and contexts are free-form labels.
"""

from pathlib import Path
from typing import Annotated, Literal, Union

import yaml
from pydantic import BaseModel, Field


class OwnStep(BaseModel):
    """Peer ``owner`` acquires ``name`` (the peer connects first if new)."""

    action: Literal["own"]
    name: str
    owner: str


class ReleaseStep(BaseModel):
    """The owner of ``name`` releases it."""

    action: Literal["release"]
    name: str


class DisconnectStep(BaseModel):
    """Peer ``owner`` exits, losing all its names."""

    action: Literal["disconnect"]
    owner: str


class WatchStep(BaseModel):
    action: Literal["watch"]
    name: str
    callback: str = "default"
    context: str | None = None


class UnwatchStep(BaseModel):
    action: Literal["unwatch"]
    name: str
    callback: str = "default"
    context: str | None = None


Step = Annotated[
    Union[OwnStep, ReleaseStep, DisconnectStep, WatchStep, UnwatchStep],
    Field(discriminator="action"),
]


class Scenario(BaseModel):
    steps: list[Step] = []

    @classmethod
    def load(cls, path: Path) -> "Scenario":
        """Read and validate a scenario file."""
        data = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(data)


class StepOutcome(BaseModel):
    """Result of running one step."""

    index: int  # 1-based
    action: str
    target: str
    ok: bool
    detail: str = ""


class Notification(BaseModel):
    """A callback invocation observed during replay."""

    step: int  # Step that triggered it
    name: str
    callback: str
    context: str | None = None
