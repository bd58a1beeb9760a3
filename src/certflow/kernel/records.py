from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from certflow.kernel.context import Context


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    # ErrorInfo records the exception that failed a step.
    type: str
    message: str


@dataclass(frozen=True, slots=True)
class StepRecord:
    # StepRecord captures one step execution inside one flow.
    flow_id: str
    flow: str
    index: int
    label: str
    started_at: datetime
    finished_at: datetime
    duration_ms: float
    status: Literal["ok", "failed", "skipped"]
    error: ErrorInfo | None = None


@dataclass(frozen=True, slots=True)
class StepSpan:
    # StepSpan is the handle kept between step enter/exit.
    index: int
    label: str
    started_at: datetime


@dataclass(frozen=True, slots=True)
class FlowReport:
    # FlowReport summarizes one flow run; failed flows carry the failing label.
    flow_id: str
    description: str
    records: tuple[StepRecord, ...] = field(default_factory=tuple)
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return all(record.status == "ok" for record in self.records)

    @property
    def failed_step(self) -> StepRecord | None:
        for record in self.records:
            if record.status != "ok":
                return record
        return None


class StepRecorder:
    # StepRecorder emits StepRecord entries and appends them to ctx.records.
    def begin(self, *, index: int, label: str) -> StepSpan:
        return StepSpan(index=index, label=label, started_at=datetime.now(tz=UTC))

    def finish(
        self,
        *,
        ctx: Context,
        span: StepSpan,
        status: Literal["ok", "failed", "skipped"],
        exc: BaseException | None = None,
    ) -> StepRecord:
        finished_at = datetime.now(tz=UTC)
        record = StepRecord(
            flow_id=ctx.flow_id,
            flow=ctx.description,
            index=span.index,
            label=span.label,
            started_at=span.started_at,
            finished_at=finished_at,
            duration_ms=(finished_at - span.started_at).total_seconds() * 1000.0,
            status=status,
            error=None if exc is None else ErrorInfo(type=type(exc).__name__, message=str(exc)),
        )
        ctx.records.append(record)
        return record


def build_report(ctx: Context) -> FlowReport:
    records = tuple(r for r in ctx.records if isinstance(r, StepRecord))
    return FlowReport(
        flow_id=ctx.flow_id,
        description=ctx.description,
        records=records,
        notes=tuple(ctx.notes),
    )
