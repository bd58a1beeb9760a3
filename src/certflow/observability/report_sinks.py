from __future__ import annotations

import json
import sys
from dataclasses import asdict, is_dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from certflow.kernel.records import StepRecord


@runtime_checkable
class ReportSink(Protocol):
    # ReportSink consumes StepRecord entries as the runner produces them.
    def emit(self, record: StepRecord) -> None:
        """Consume one StepRecord."""
        raise NotImplementedError("ReportSink is a port; use a concrete adapter.")

    def flush(self) -> None:
        """Flush buffered output if supported."""
        raise NotImplementedError("ReportSink is a port; use a concrete adapter.")

    def close(self) -> None:
        """Close the sink and release resources."""
        raise NotImplementedError("ReportSink is a port; use a concrete adapter.")


class JsonlReportSink(ReportSink):
    # One StepRecord per line; the file is truncated on open so results never carry over between runs.
    def __init__(self, *, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self._path.open("w", encoding="utf-8")

    def emit(self, record: StepRecord) -> None:
        self._handle.write(_dumps(record) + "\n")

    def flush(self) -> None:
        self._handle.flush()

    def close(self) -> None:
        self.flush()
        self._handle.close()


class StdoutReportSink(ReportSink):
    def emit(self, record: StepRecord) -> None:
        sys.stdout.write(_dumps(record) + "\n")

    def flush(self) -> None:
        sys.stdout.flush()

    def close(self) -> None:
        self.flush()


class MemoryReportSink(ReportSink):
    # Keeps records in order; used by tests and by the CLI summary.
    def __init__(self) -> None:
        self.records: list[StepRecord] = []

    def emit(self, record: StepRecord) -> None:
        self.records.append(record)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


def record_to_dict(record: StepRecord) -> dict[str, object]:
    # Stable key order and explicit field mapping.
    return {
        "flow_id": record.flow_id,
        "flow": record.flow,
        "index": record.index,
        "label": record.label,
        "started_at": _format_dt(record.started_at),
        "finished_at": _format_dt(record.finished_at),
        "duration_ms": record.duration_ms,
        "status": record.status,
        "error": _as_dict(record.error),
    }


def _dumps(record: StepRecord) -> str:
    return json.dumps(record_to_dict(record), separators=(",", ":"), ensure_ascii=False, default=str)


def _as_dict(obj: object) -> object:
    if obj is None:
        return None
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return obj


def _format_dt(value: datetime) -> str:
    # RFC3339 UTC format with Z suffix.
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")
