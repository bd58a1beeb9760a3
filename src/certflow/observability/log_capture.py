"""Process-wide capture of a diagnostic log stream.

The hosting runtime reports component initialization failures only through
its log output. A capture tees the named ``logging`` logger into an in-memory
buffer for the lifetime of one flow so steps can scan it for a sentinel line.

There is exactly one capture slot per process. ``begin`` fails fast with
``CaptureActiveError`` while another capture is outstanding, so flows that
rely on log assertions must be serialized by the caller.
"""

from __future__ import annotations

import io
import logging
import threading
from dataclasses import dataclass, field

# Single writer slot shared by every harness instance in the process.
_CAPTURE_SLOT = threading.Lock()

INIT_FAILURE_MARKER = "INIT_COMPONENT_FAILURE"


class CaptureActiveError(RuntimeError):
    pass


class CaptureStateError(RuntimeError):
    pass


class _BufferHandler(logging.Handler):
    # Appends formatted records to a text buffer; reads take the handler lock.
    def __init__(self) -> None:
        super().__init__(logging.NOTSET)
        self.buffer = io.StringIO()
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:  # noqa: BLE001 - logging contract: report via handleError
            self.handleError(record)
            return
        self.buffer.write(message + "\n")

    def lines(self) -> list[str]:
        self.acquire()
        try:
            return self.buffer.getvalue().splitlines()
        finally:
            self.release()

    def close(self) -> None:
        self.acquire()
        try:
            self.buffer.close()
        finally:
            self.release()
        super().close()


@dataclass(slots=True, eq=False)
class CaptureHandle:
    # Handle for one active capture; usable as a context manager for scoped release.
    harness: LogCaptureHarness
    handler: _BufferHandler
    previous_level: int
    active: bool = True

    def __enter__(self) -> CaptureHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.active:
            self.harness.end(self)


@dataclass(frozen=True, slots=True)
class LogCaptureHarness:
    logger_name: str = "dapr.runtime"
    level: int = logging.DEBUG
    _log: logging.Logger = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_log", logging.getLogger(self.logger_name))

    def begin(self) -> CaptureHandle:
        """Start teeing the logger into a fresh buffer.

        Raises CaptureActiveError if any capture is already outstanding.
        """
        if not _CAPTURE_SLOT.acquire(blocking=False):
            raise CaptureActiveError(
                f"A log capture is already active; flows using '{self.logger_name}' capture must run one at a time"
            )
        handler = _BufferHandler()
        previous_level = self._log.level
        self._log.addHandler(handler)
        # Lower the level only when the logger would otherwise drop records we need.
        if self._log.getEffectiveLevel() > self.level:
            self._log.setLevel(self.level)
        return CaptureHandle(harness=self, handler=handler, previous_level=previous_level)

    def check_for_marker(self, handle: CaptureHandle, marker: str = INIT_FAILURE_MARKER) -> str | None:
        """Return the first captured line containing ``marker``, or None."""
        self._require_active(handle)
        for line in handle.handler.lines():
            if marker in line:
                return line
        return None

    def lines(self, handle: CaptureHandle) -> list[str]:
        self._require_active(handle)
        return handle.handler.lines()

    def end(self, handle: CaptureHandle) -> None:
        """Restore the logger and discard the buffer."""
        self._require_active(handle)
        try:
            self._log.removeHandler(handle.handler)
            self._log.setLevel(handle.previous_level)
            handle.handler.close()
        finally:
            handle.active = False
            _CAPTURE_SLOT.release()

    def _require_active(self, handle: CaptureHandle) -> None:
        if not handle.active:
            raise CaptureStateError("Log capture handle is no longer active")
        if handle.harness is not self and handle.harness.logger_name != self.logger_name:
            raise CaptureStateError(
                f"Capture handle belongs to '{handle.harness.logger_name}', not '{self.logger_name}'"
            )
