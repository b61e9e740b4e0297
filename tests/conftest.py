"""Shared test fixtures for loadcheck tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from loadcheck.config import LoadCheckConfig
from loadcheck.models import ProcessSnapshot
from loadcheck.monitor import Platform

PROCESS_TABLE = """top - 12:00:00 up 3 days,  2:11,  2 users,  load average: 0.50, 0.40, 0.30
Tasks: 123 total,   1 running, 122 sleeping,   0 stopped,   0 zombie
    PID USER      PR  NI    VIRT    RES    SHR S  %CPU  %MEM     TIME+ COMMAND
   4242 alice     20   0   12345   6789   1234 R  12.3   0.1   0:01.23 bash
"""


class FakePlatform(Platform):
    """Platform returning canned samples."""

    name = "fake"
    required_commands: tuple[str, ...] = ()

    def __init__(
        self,
        load: float = 0.10,
        processor_count: int = 4,
        processes: list[ProcessSnapshot] | None = None,
        process_table: str = PROCESS_TABLE,
        on_sample: Callable[[], None] | None = None,
    ) -> None:
        self.load = load
        self.processor_count = processor_count
        self.processes = processes if processes is not None else []
        self.process_table = process_table
        self.on_sample = on_sample
        self.table_calls = 0

    def get_load_average(self) -> float:
        if self.on_sample is not None:
            self.on_sample()
        return self.load

    def get_processor_count(self) -> int:
        return self.processor_count

    def get_process_table(self) -> str:
        self.table_calls += 1
        return self.process_table

    def default_log_path(self) -> Path:
        raise AssertionError("tests always set log_path")

    def _collect_processes(self, interval: float) -> list[ProcessSnapshot]:
        return list(self.processes)


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def processes() -> list[ProcessSnapshot]:
    """Process list in descending CPU order."""
    return [
        ProcessSnapshot(pid=1, name="bash", cpu_percent=12.3),
        ProcessSnapshot(pid=2, name="top", cpu_percent=8.1),
        ProcessSnapshot(pid=3, name="sshd", cpu_percent=0.5),
        ProcessSnapshot(pid=4, name="init", cpu_percent=0.1),
        ProcessSnapshot(pid=5, name="cron", cpu_percent=0.0),
        ProcessSnapshot(pid=6, name="x", cpu_percent=0.0),
    ]


@pytest.fixture
def config(tmp_path: Path) -> LoadCheckConfig:
    """Config writing its log and lock into a temp directory."""
    return LoadCheckConfig(
        log_path=tmp_path / "monitorload.log",
        lock_path=tmp_path / "monitor_load.tmp",
        sample_interval=0,
    )


@pytest.fixture
def make_platform(processes: list[ProcessSnapshot]) -> Callable[..., FakePlatform]:
    """Factory for fake platforms with the default process list."""

    def _make(**kwargs) -> FakePlatform:
        kwargs.setdefault("processes", processes)
        return FakePlatform(**kwargs)

    return _make
