"""Tests for loadcheck data models."""

import pytest

from loadcheck.models import CheckResult, CheckStatus, LoadSample, ProcessSnapshot


def test_check_status_codes():
    """Test CheckStatus carries the monitoring status codes."""
    assert CheckStatus.OK == 0
    assert CheckStatus.WARNING == 1
    assert CheckStatus.UNKNOWN == 3
    assert CheckStatus.WARNING.name == "WARNING"


def test_process_snapshot_creation():
    """Test ProcessSnapshot dataclass creation."""
    snapshot = ProcessSnapshot(pid=123, name="test_process", cpu_percent=50.0)

    assert snapshot.pid == 123
    assert snapshot.name == "test_process"
    assert snapshot.cpu_percent == 50.0


def test_process_snapshot_is_frozen():
    """Test that ProcessSnapshot is immutable (frozen)."""
    snapshot = ProcessSnapshot(pid=1, name="init", cpu_percent=0.1)

    with pytest.raises(AttributeError):
        snapshot.pid = 999


def test_snapshots_use_slots():
    """Test that snapshot dataclasses use __slots__."""
    assert not hasattr(ProcessSnapshot(pid=1, name="init", cpu_percent=0.1), "__dict__")
    assert not hasattr(LoadSample(load=0.5, processor_count=4), "__dict__")


def test_check_result_defaults():
    """Test CheckResult defaults to a clean exit with no sample."""
    result = CheckResult(status=CheckStatus.OK, message="ok")

    assert result.exit_code == 0
    assert result.load is None
    assert result.threshold is None
    assert result.top_processes == ""
