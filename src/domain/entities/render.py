from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from src.domain.entities.generated_output import GeneratedOutput, Resolution
from src.domain.errors import ReframeError


class RenderStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class PromptReady:
    text: str


@dataclass(frozen=True)
class PromptNeedsGeneration:
    pass


PromptState = Union[PromptReady, PromptNeedsGeneration]


@dataclass(frozen=True)
class RenderRequest:
    resolution: Resolution | None = None


@dataclass(frozen=True)
class RenderOutcome:
    status: RenderStatus
    output: GeneratedOutput | None = None
    error: ReframeError | None = None
    prompt: str | None = None
    cached: bool = False  # served from the generation cache

    @property
    def ok(self) -> bool:
        return self.status == RenderStatus.COMPLETE


@dataclass
class RenderState:
    """Observable render state of a session, read by the UI."""

    status: RenderStatus = RenderStatus.IDLE
    output: GeneratedOutput | None = None
    error: str | None = None

    def start(self) -> None:
        self.status = RenderStatus.GENERATING
        self.error = None

    def complete(self, output: GeneratedOutput) -> None:
        self.status = RenderStatus.COMPLETE
        self.output = output
        self.error = None

    def fail(self, message: str) -> None:
        self.status = RenderStatus.ERROR
        self.error = message

    def reset(self, keep_output: bool = False) -> None:
        self.status = RenderStatus.IDLE
        self.error = None
        if not keep_output:
            self.output = None
