from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

_flow_logger = logging.getLogger("certflow.flow")


class _FlowLogAdapter(logging.LoggerAdapter):
    # Prefix every line with the flow description so interleaved output stays readable.
    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"[{self.extra['flow']}] {msg}", kwargs


@dataclass(slots=True)
class Context:
    # Context is per-flow runtime state handed to every step; it is not retained after the run.
    flow_id: str
    description: str
    started_at: datetime
    deadline: float | None = None
    logger: logging.LoggerAdapter = field(default_factory=lambda: _FlowLogAdapter(_flow_logger, {"flow": "-"}))
    notes: list[str] = field(default_factory=list)
    records: list[object] = field(default_factory=list)
    capture: object | None = None
    clock: Callable[[], float] = time.monotonic
    _cancelled: threading.Event = field(default_factory=threading.Event)

    def log(self, message: str, *args: object) -> None:
        # Step-facing logging sink; printf-style arguments like logging itself.
        self.logger.info(message, *args)

    def note(self, text: str) -> None:
        # Notes are append-only and end up in the flow report.
        self.notes.append(text)

    def cancel(self) -> None:
        self._cancelled.set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def deadline_exceeded(self) -> bool:
        return self.deadline is not None and self.clock() >= self.deadline

    def remaining(self) -> float | None:
        # Seconds left before the deadline; None when the flow has no deadline.
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self.clock())


@dataclass(frozen=True, slots=True)
class ContextFactory:
    # ContextFactory owns per-flow Context creation.
    timeout: float | None = None
    clock: Callable[[], float] = time.monotonic

    def new(self, description: str) -> Context:
        deadline = None if self.timeout is None else self.clock() + self.timeout
        return Context(
            flow_id=uuid.uuid4().hex,
            description=description,
            started_at=datetime.now(tz=UTC),
            deadline=deadline,
            logger=_FlowLogAdapter(_flow_logger, {"flow": description}),
            clock=self.clock,
        )
