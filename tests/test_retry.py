import pytest

from codexline_installer.download import with_retry
from codexline_installer.exceptions import RetryExhaustedError
from codexline_installer.models import RetryPolicy


class FlakyTask:
    def __init__(self, failures: int, result="ok"):
        self.failures = failures
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"boom #{self.calls}")
        return self.result


@pytest.mark.asyncio
async def test_returns_value_after_two_failures_with_linear_backoff(sleeps):
    task = FlakyTask(failures=2)

    result = await with_retry("binary download", RetryPolicy(attempts=3), task, sleep=sleeps)

    assert result == "ok"
    assert task.calls == 3
    assert len(sleeps.recorded) == 2
    assert sleeps.recorded[1] == 2 * sleeps.recorded[0]


@pytest.mark.asyncio
async def test_first_success_does_not_sleep(sleeps):
    task = FlakyTask(failures=0)

    assert await with_retry("op", RetryPolicy(attempts=3), task, sleep=sleeps) == "ok"
    assert sleeps.recorded == []


@pytest.mark.asyncio
@pytest.mark.parametrize("attempts", [1, 3, 5])
async def test_always_failing_task_runs_exactly_n_times(attempts, sleeps):
    task = FlakyTask(failures=100)

    with pytest.raises(RetryExhaustedError) as excinfo:
        await with_retry("checksum download", RetryPolicy(attempts=attempts), task, sleep=sleeps)

    assert task.calls == attempts
    # 最后一次失败后不再等待
    assert len(sleeps.recorded) == attempts - 1
    message = str(excinfo.value)
    assert f"after {attempts} attempts" in message
    assert "checksum download" in message
    assert f"boom #{attempts}" in message
    assert isinstance(excinfo.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_warning_names_operation_attempt_and_cause(sleeps, log_messages):
    task = FlakyTask(failures=1)

    await with_retry("binary download", RetryPolicy(attempts=3), task, sleep=sleeps)

    warnings = [m for m in log_messages if "retrying" in m]
    assert len(warnings) == 1
    assert "binary download" in warnings[0]
    assert "(1/3)" in warnings[0]
    assert "boom #1" in warnings[0]


@pytest.mark.asyncio
async def test_delay_uses_base_delay(sleeps):
    task = FlakyTask(failures=3)

    await with_retry("op", RetryPolicy(attempts=4, base_delay_ms=250), task, sleep=sleeps)

    assert sleeps.recorded == [0.25, 0.5, 0.75]


@pytest.mark.asyncio
async def test_fatal_errors_propagate_without_retry(sleeps):
    calls = []

    async def disk_full():
        calls.append(1)
        raise OSError(28, "No space left on device")

    with pytest.raises(OSError, match="No space left"):
        await with_retry("op", RetryPolicy(attempts=3), disk_full, sleep=sleeps, fatal=(OSError,))

    assert calls == [1]
    assert sleeps.recorded == []
