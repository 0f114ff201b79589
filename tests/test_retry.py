import pytest

from promptdesk.utils import retry as retry_module
from promptdesk.utils.retry import with_retry


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    delays = []
    monkeypatch.setattr(retry_module.time, "sleep", delays.append)
    return delays


def test_retries_os_errors_with_doubling_delay(no_backoff):
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise OSError("busy")
        return "ok"

    assert with_retry(flaky, max_retries=3, initial_delay=0.5) == "ok"
    assert no_backoff == [0.5, 1.0]


def test_gives_up_after_max_retries():
    def always_fails():
        raise OSError("disk gone")

    with pytest.raises(OSError):
        with_retry(always_fails, max_retries=2)


def test_other_exceptions_are_not_retried(no_backoff):
    attempts = []

    def broken():
        attempts.append(1)
        raise ValueError("bug")

    with pytest.raises(ValueError):
        with_retry(broken)
    assert len(attempts) == 1
    assert no_backoff == []
