from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from certflow.kernel.context import Context, ContextFactory
from certflow.kernel.flow import Flow
from certflow.kernel.records import FlowReport, StepRecord, StepRecorder, build_report

if TYPE_CHECKING:
    from certflow.observability.log_capture import LogCaptureHarness
    from certflow.observability.report_sinks import ReportSink

logger = logging.getLogger(__name__)


class FlowCancelledError(RuntimeError):
    pass


class StepFailure(RuntimeError):
    # StepFailure carries the failing step label so reports point at the exact step.
    def __init__(self, label: str, index: int, cause: BaseException) -> None:
        super().__init__(f"Step {index + 1} '{label}' failed: {type(cause).__name__}: {cause}")
        self.label = label
        self.index = index
        self.cause = cause
        self.report: FlowReport | None = None


@dataclass(frozen=True, slots=True)
class FlowRunner:
    # FlowRunner executes flow steps in strict order and stops at the first failure.
    # No rollback: cleanup is the job of explicit trailing steps.
    context_factory: ContextFactory = field(default_factory=ContextFactory)
    recorder: StepRecorder = field(default_factory=StepRecorder)
    report_sink: ReportSink | None = None
    log_capture: LogCaptureHarness | None = None

    def run(self, flow: Flow, ctx: Context | None = None) -> FlowReport:
        flow.mark_started()
        if ctx is None:
            ctx = self.context_factory.new(flow.description)
        logger.info("running flow '%s' (%d steps)", flow.description, len(flow.steps))

        if not flow.capture_logs:
            self._run_steps(flow, ctx)
            return self._finish(ctx)

        if self.log_capture is None:
            raise ValueError(f"Flow '{flow.description}' needs log capture but the runner has none")
        # Capture lives exactly as long as the flow; end() runs even when a step fails.
        handle = self.log_capture.begin()
        ctx.capture = handle
        try:
            self._run_steps(flow, ctx)
        finally:
            ctx.capture = None
            self.log_capture.end(handle)
        return self._finish(ctx)

    def _run_steps(self, flow: Flow, ctx: Context) -> None:
        for index, spec in enumerate(flow.steps):
            span = self.recorder.begin(index=index, label=spec.label)
            if ctx.is_cancelled() or ctx.deadline_exceeded():
                reason = "cancelled" if ctx.is_cancelled() else "deadline exceeded"
                cause = FlowCancelledError(f"Flow {reason} before step could start")
                self._emit(self.recorder.finish(ctx=ctx, span=span, status="skipped", exc=cause))
                raise self._failure(ctx, spec.label, index, cause)

            ctx.log("step %d: %s", index + 1, spec.label)
            try:
                spec.step.execute(ctx)
            except Exception as exc:  # noqa: BLE001 - every step error becomes a labeled StepFailure
                self._emit(self.recorder.finish(ctx=ctx, span=span, status="failed", exc=exc))
                raise self._failure(ctx, spec.label, index, exc) from exc
            self._emit(self.recorder.finish(ctx=ctx, span=span, status="ok"))

    def _failure(self, ctx: Context, label: str, index: int, cause: BaseException) -> StepFailure:
        failure = StepFailure(label, index, cause)
        failure.report = self._finish(ctx)
        logger.error("flow '%s' failed at step %d '%s': %s", ctx.description, index + 1, label, cause)
        return failure

    def _finish(self, ctx: Context) -> FlowReport:
        if self.report_sink is not None:
            self.report_sink.flush()
        return build_report(ctx)

    def _emit(self, record: StepRecord) -> None:
        if self.report_sink is not None:
            self.report_sink.emit(record)
