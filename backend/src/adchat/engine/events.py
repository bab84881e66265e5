"""Turn events produced by the engine, in emission order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ThreadAssigned:
    thread_id: str


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class TurnComplete:
    pass


@dataclass(frozen=True)
class TurnFailed:
    message: str


TurnEvent = Union[ThreadAssigned, TextDelta, TurnComplete, TurnFailed]
