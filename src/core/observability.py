"""
Injectable observability hooks.

Pipeline stages report their timing and a few counters as PipelineEvent
objects to a caller-supplied hook instead of printing to the console. The
default hook forwards events to the standard logging module; tests use
EventRecorder to assert on what happened.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class PipelineEvent(BaseModel):
    """
    A completed pipeline stage.

    Fields:
    - stage: short stage name ("window", "cluster", "reconstruct", ...)
    - elapsed_seconds: wall-clock duration of the stage
    - details: stage-specific counters (window counts, thresholds, ...)
    """

    stage: str
    elapsed_seconds: float = Field(ge=0.0)
    details: Dict[str, Any] = Field(default_factory=dict)


EventHook = Callable[[PipelineEvent], None]


def logging_hook(event: PipelineEvent) -> None:
    """Default hook: one INFO line per stage."""
    extra = ", ".join(f"{key}={value}" for key, value in event.details.items())
    if extra:
        logger.info(f"{event.stage} finished in {event.elapsed_seconds:.2f} s ({extra})")
    else:
        logger.info(f"{event.stage} finished in {event.elapsed_seconds:.2f} s")


class EventRecorder:
    """Hook that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: List[PipelineEvent] = []

    def __call__(self, event: PipelineEvent) -> None:
        self.events.append(event)

    @property
    def stages(self) -> List[str]:
        return [event.stage for event in self.events]

    def last(self, stage: str) -> Optional[PipelineEvent]:
        for event in reversed(self.events):
            if event.stage == stage:
                return event
        return None


@contextmanager
def timed(stage: str, hook: Optional[EventHook], **details: Any) -> Iterator[Dict[str, Any]]:
    """
    Time a block and emit a PipelineEvent when it completes.

    The yielded dict can be filled with counters inside the block; they are
    merged into the event details. Nothing is emitted if the block raises.
    """
    collected: Dict[str, Any] = dict(details)
    started = time.perf_counter()
    yield collected
    if hook is not None:
        hook(
            PipelineEvent(
                stage=stage,
                elapsed_seconds=time.perf_counter() - started,
                details=collected,
            )
        )
