from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from certflow.kernel.context import Context


@runtime_checkable
class Step(Protocol):
    # Step contract is execute(ctx) -> None; a raised exception is the step's failure.
    def execute(self, ctx: Context) -> None:
        raise NotImplementedError("Step protocol has no implementation")


@dataclass(frozen=True, slots=True)
class Sleep:
    # Fixed wait used at the composition layer to let external processes settle.
    seconds: float
    sleep_fn: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValueError("Sleep.seconds must be >= 0")

    def execute(self, ctx: Context) -> None:
        ctx.logger.debug("sleeping for %.1fs", self.seconds)
        self.sleep_fn(self.seconds)


@dataclass(frozen=True, slots=True)
class Call:
    # Adapts a plain callable into a Step; dependencies must be bound by the caller.
    fn: Callable[[Context], None]

    def execute(self, ctx: Context) -> None:
        self.fn(ctx)
