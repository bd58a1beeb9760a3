from .log_capture import (
    INIT_FAILURE_MARKER,
    CaptureActiveError,
    CaptureHandle,
    CaptureStateError,
    LogCaptureHarness,
)
from .report_sinks import JsonlReportSink, MemoryReportSink, ReportSink, StdoutReportSink

__all__ = [
    "INIT_FAILURE_MARKER",
    "CaptureActiveError",
    "CaptureHandle",
    "CaptureStateError",
    "JsonlReportSink",
    "LogCaptureHarness",
    "MemoryReportSink",
    "ReportSink",
    "StdoutReportSink",
]
