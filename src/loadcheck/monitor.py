"""Platform profiles for sampling load and processes."""

import logging
import math
import re
import shutil
import subprocess
import sys
import time
from pathlib import Path

import psutil

from loadcheck.errors import MissingDependencyError, SampleAcquisitionError
from loadcheck.models import LoadSample, ProcessSnapshot

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT = 30.0


def run_command(args: list[str], timeout: float = COMMAND_TIMEOUT) -> str:
    """Run an external command and return its standard output.

    Raises:
        OSError: If the command cannot be started
        subprocess.CalledProcessError: If the command exits non-zero
        subprocess.TimeoutExpired: If the command runs past timeout
    """
    logger.debug("Running %s", " ".join(args))
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=True,
        timeout=timeout,
    )
    return result.stdout


class Platform:
    """
    Capability set for one family of operating systems.

    Subclasses supply the load average, processor count, process-table
    snapshot and default log path. Top-process collection is shared and
    uses psutil, which handles both profiles.
    """

    name = "generic"
    required_commands: tuple[str, ...] = ("top",)

    def get_load_average(self) -> float:
        """Get the 1-minute load average."""
        raise NotImplementedError

    def get_processor_count(self) -> int:
        """Get the number of logical processors."""
        raise NotImplementedError

    def get_process_table(self) -> str:
        """Get the full output of the process snapshot utility."""
        raise NotImplementedError

    def default_log_path(self) -> Path:
        """Get the default event log path."""
        raise NotImplementedError

    def check_dependencies(self) -> None:
        """
        Verify every external command this platform uses is on PATH.

        Raises:
            MissingDependencyError: For the first command not found.
        """
        for command in self.required_commands:
            if shutil.which(command) is None:
                raise MissingDependencyError(command)

    def sample(self) -> LoadSample:
        """
        Read and validate the load average and processor count.

        Raises:
            SampleAcquisitionError: If either value is missing or invalid.
        """
        load = self.get_load_average()
        if not math.isfinite(load) or load < 0:
            raise SampleAcquisitionError(f"invalid load average {load!r}")

        processor_count = self.get_processor_count()
        if processor_count < 1:
            raise SampleAcquisitionError(f"invalid processor count {processor_count!r}")

        return LoadSample(load=load, processor_count=processor_count)

    def get_top_processes(self, count: int = 5, interval: float = 0.5) -> list[ProcessSnapshot]:
        """
        Get the processes using the most CPU, highest first.

        CPU usage is measured over ``interval`` seconds. Processes that exit,
        deny access or are zombies are skipped.
        """
        processes = self._collect_processes(interval)
        processes.sort(key=lambda p: p.cpu_percent, reverse=True)
        return processes[:count]

    def _collect_processes(self, interval: float) -> list[ProcessSnapshot]:
        """Collect a CPU snapshot of all running processes."""
        candidates: list[psutil.Process] = []
        for proc in psutil.process_iter(attrs=["pid", "name"]):
            try:
                # First call returns 0.0 and starts the measurement window
                proc.cpu_percent(None)
                candidates.append(proc)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        if interval > 0:
            time.sleep(interval)

        processes: list[ProcessSnapshot] = []
        for proc in candidates:
            try:
                with proc.oneshot():
                    info = proc.info
                    processes.append(
                        ProcessSnapshot(
                            pid=info.get("pid", 0),
                            name=info.get("name") or "",
                            cpu_percent=proc.cpu_percent(None) or 0.0,
                        )
                    )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        return processes

    def _sample_command(self, args: list[str]) -> str:
        """Run a sampling command, reporting any failure as a sample error."""
        try:
            return run_command(args)
        except (OSError, subprocess.SubprocessError) as e:
            raise SampleAcquisitionError(f"{args[0]} failed: {e}") from e


class ProcPlatform(Platform):
    """Linux-style hosts exposing /proc/loadavg."""

    name = "proc"
    required_commands = ("top",)

    def __init__(self, loadavg_path: Path = Path("/proc/loadavg")) -> None:
        self._loadavg_path = loadavg_path

    def get_load_average(self) -> float:
        try:
            fields = self._loadavg_path.read_text().split()
            return float(fields[0])
        except (OSError, IndexError, ValueError) as e:
            raise SampleAcquisitionError(f"cannot read {self._loadavg_path}: {e}") from e

    def get_processor_count(self) -> int:
        """Get the processors this process may run on, as nproc counts them."""
        try:
            affinity = psutil.Process().cpu_affinity()
        except (AttributeError, psutil.Error, OSError):
            # No affinity support on this host
            affinity = []
        if affinity:
            return len(affinity)
        count = psutil.cpu_count(logical=True)
        if count is None:
            raise SampleAcquisitionError("processor count unavailable")
        return count

    def get_process_table(self) -> str:
        return run_command(["top", "-b", "-n", "1"])

    def default_log_path(self) -> Path:
        return Path("/var/log/monitorload.log")


_LOAD_AVERAGE_RE = re.compile(r"load averages?:\s*(\S+)")
_PROCESSORS_RE = re.compile(r"Number of Processors:\s*(\d+)")
_CORES_RE = re.compile(r"Cores:\s*(\d+)")


def parse_w_load(output: str) -> float:
    """
    Parse the 1-minute load from the header of ``w``.

    Accepts ``load average: 0.52, 0.58, 0.59`` and the BSD
    ``load averages: 1,52 1,60 1,71`` forms.
    """
    match = _LOAD_AVERAGE_RE.search(output)
    if match is None:
        raise SampleAcquisitionError("no load average in w output")
    token = match.group(1).rstrip(",").replace(",", ".")
    try:
        return float(token)
    except ValueError as e:
        raise SampleAcquisitionError(f"invalid load average {token!r}") from e


def parse_hardware_profile(output: str) -> int:
    """
    Parse processors x cores from ``system_profiler SPHardwareDataType``.

    Hosts that report no processor line count as a single processor.
    """
    cores = _CORES_RE.search(output)
    if cores is None:
        raise SampleAcquisitionError("no core count in system_profiler output")
    processors = _PROCESSORS_RE.search(output)
    return int(cores.group(1)) * (int(processors.group(1)) if processors else 1)


class DarwinPlatform(Platform):
    """BSD-style hosts without /proc, sampled through w and system_profiler."""

    name = "darwin"
    required_commands = ("w", "system_profiler", "top")

    def get_load_average(self) -> float:
        return parse_w_load(self._sample_command(["w"]))

    def get_processor_count(self) -> int:
        return parse_hardware_profile(self._sample_command(["system_profiler", "SPHardwareDataType"]))

    def get_process_table(self) -> str:
        return run_command(["top", "-l", "1"])

    def default_log_path(self) -> Path:
        return Path.home() / "monitorload.log"


def detect_platform(platform_name: str | None = None) -> Platform:
    """Select the platform profile for this host."""
    platform_name = platform_name or sys.platform
    if platform_name.startswith("darwin"):
        return DarwinPlatform()
    return ProcPlatform()
