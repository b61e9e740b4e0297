"""The load check cycle."""

import logging
import subprocess
import time
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from loadcheck.config import LoadCheckConfig
from loadcheck.errors import LoadCheckError
from loadcheck.lock import held_lock
from loadcheck.models import CheckResult, CheckStatus, LoadSample, ProcessSnapshot
from loadcheck.monitor import Platform, detect_platform

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H:%M:%S"


def compute_threshold(per_core_threshold: float, processor_count: int) -> float:
    """Get the allowed load for a host, rounded half-up to 2 decimals."""
    allowed = Decimal(str(per_core_threshold)) * processor_count
    return float(allowed.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_top_processes(processes: Iterable[ProcessSnapshot], limit: int = 5) -> str:
    """Format processes as space-joined ``name=cpu`` pairs, keeping the first ``limit``."""
    pairs = []
    for proc in processes:
        if len(pairs) == limit:
            break
        name = "_".join(proc.name.split()) or "?"
        pairs.append(f"{name}={proc.cpu_percent:.1f}")
    return " ".join(pairs)


def format_status_line(status: CheckStatus, check_name: str, message: str) -> str:
    """Format the single line read by the monitoring harness."""
    return f"{status.value} {check_name} - {status.name} - {message}"


class EventLog:
    """Append-only text log of exceedances and aborted runs."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def append(self, text: str) -> None:
        """Append text, terminating it with a newline if needed."""
        if not text.endswith("\n"):
            text += "\n"
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.error("Cannot write to %s: %s", self.path, e)


class LoadChecker:
    """
    Runs one load check.

    A run takes the lock, checks the platform's external commands,
    samples load and processor count, compares the load to the threshold,
    logs a process-table snapshot when it is exceeded and releases the lock.
    """

    def __init__(
        self,
        config: LoadCheckConfig,
        platform: Platform | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize the LoadChecker.

        Args:
            config: Check configuration.
            platform: Platform profile. Detected from the host when omitted.
            clock: Source of the run timestamp.
        """
        self.config = config
        self.platform = platform or detect_platform()
        self.log_path = config.log_path or self.platform.default_log_path()
        self.lock_path = config.get_lock_path()
        self.event_log = EventLog(self.log_path)
        self._clock = clock

    def run(self) -> CheckResult:
        """Run the check and return its result. Never raises LoadCheckError."""
        started = time.monotonic()
        timestamp = self._clock().strftime(TIMESTAMP_FORMAT)
        try:
            with held_lock(self.lock_path):
                result = self._check(timestamp)
        except LoadCheckError as e:
            result = self._fail(timestamp, e)
        logger.debug("Run took %.2f second(s)", time.monotonic() - started)
        return result

    def status_line(self, result: CheckResult) -> str:
        """Format a result as the monitoring-check line."""
        return format_status_line(result.status, self.config.check_name, result.message)

    def _check(self, timestamp: str) -> CheckResult:
        self.platform.check_dependencies()
        sample = self.platform.sample()
        rate = self.config.per_core_threshold
        threshold = compute_threshold(rate, sample.processor_count)

        logger.debug(
            "Variables/Values - rate: %s, load: %.2f, processors: %d, threshold: %.2f",
            rate,
            sample.load,
            sample.processor_count,
            threshold,
        )

        if sample.load > threshold:
            logger.debug(
                "Load of %.2f exceeds limit of %.2f, or %s per CPU for %d processors. See %s for details.",
                sample.load,
                threshold,
                rate,
                sample.processor_count,
                self.log_path,
            )
            self._log_exceedance(timestamp, sample, threshold)
            status = CheckStatus.WARNING
        else:
            logger.debug(
                "Load of %.2f below limit of %.2f, or %s per CPU for %d processors",
                sample.load,
                threshold,
                rate,
                sample.processor_count,
            )
            status = CheckStatus.OK

        top = format_top_processes(
            self.platform.get_top_processes(self.config.top_count, self.config.sample_interval),
            self.config.top_count,
        )
        return CheckResult(
            status=status,
            message=f"{top}, Load: {sample.load:.2f}",
            load=sample.load,
            threshold=threshold,
            top_processes=top,
        )

    def _log_exceedance(self, timestamp: str, sample: LoadSample, threshold: float) -> None:
        self.event_log.append(
            f"{timestamp} - Load of {sample.load:.2f} exceeds limit of {threshold:.2f}, "
            f"or {self.config.per_core_threshold} per CPU for {sample.processor_count} processors"
        )
        try:
            table = self.platform.get_process_table()
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Process snapshot failed: %s", e)
            table = f"process snapshot unavailable: {e}"
        self.event_log.append(table)

    def _fail(self, timestamp: str, error: LoadCheckError) -> CheckResult:
        logger.debug("Check failed: %s", error)
        self.event_log.append(f"{timestamp} {self.config.check_name} - {error}")
        return CheckResult(
            status=CheckStatus.UNKNOWN,
            message=error.status_message,
            exit_code=error.exit_code,
        )
