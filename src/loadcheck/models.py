"""Data models for loadcheck."""

from dataclasses import dataclass
from enum import IntEnum


class CheckStatus(IntEnum):
    """Monitoring-check status codes."""

    OK = 0
    WARNING = 1
    UNKNOWN = 3


@dataclass(slots=True, frozen=True)
class ProcessSnapshot:
    """Immutable snapshot of a process's CPU usage."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0 * core_count


@dataclass(slots=True, frozen=True)
class LoadSample:
    """Load average and processor count read at the start of a run."""

    load: float  # 1-minute load average
    processor_count: int


@dataclass(slots=True)
class CheckResult:
    """Outcome of one check run."""

    status: CheckStatus
    message: str
    exit_code: int = 0
    load: float | None = None
    threshold: float | None = None
    top_processes: str = ""
