import pytest

from bpm_sdk.contracts import PhaseTimeoutError
from bpm_sdk.runtime import Deadline


def test_deadline_reports_remaining_budget():
    deadline = Deadline(60.0, phase="status")

    assert 59.0 < deadline.remaining() <= 60.0
    assert not deadline.expired()


def test_expired_deadline_raises_phase_timeout(monkeypatch):
    monkeypatch.setattr("bpm_sdk.runtime.deadline.time.monotonic", lambda: 200.0)
    deadline = Deadline(60.0, phase="stop", started_at=100.0)

    assert deadline.expired()
    with pytest.raises(PhaseTimeoutError, match="stop exceeded its time budget of 60s before stop container"):
        deadline.check("stop container")


def test_fresh_deadline_allows_calls(monkeypatch):
    monkeypatch.setattr("bpm_sdk.runtime.deadline.time.monotonic", lambda: 110.0)
    deadline = Deadline(60.0, phase="start", started_at=100.0)

    deadline.check("pull image")

    assert deadline.remaining() == 50.0


def test_phase_timeout_is_a_timeout_error():
    assert issubclass(PhaseTimeoutError, TimeoutError)
