from __future__ import annotations

from dataclasses import dataclass

from certflow.kernel.context import Context
from certflow.observability.log_capture import CaptureHandle, CaptureStateError, LogCaptureHarness
from vault_cert.usecases.assertions import expect_init_failure_logged, expect_no_init_failure_logged


def _active_handle(ctx: Context) -> CaptureHandle:
    # The runner attaches the handle for flows declared with capture_logs.
    handle = ctx.capture
    if not isinstance(handle, CaptureHandle):
        raise CaptureStateError("No log capture is active for this flow; declare it with capture_logs")
    return handle


@dataclass(frozen=True, slots=True)
class ExpectInitFailureLogged:
    capture: LogCaptureHarness
    component: str
    required: tuple[str, ...] = ()

    def execute(self, ctx: Context) -> None:
        line = expect_init_failure_logged(self.capture, _active_handle(ctx), self.component, *self.required)
        ctx.log("initialization error line: %s", line)


@dataclass(frozen=True, slots=True)
class ExpectNoInitFailureLogged:
    capture: LogCaptureHarness
    component: str

    def execute(self, ctx: Context) -> None:
        expect_no_init_failure_logged(self.capture, _active_handle(ctx), self.component)
