import time

import pytest

from invoicepay.crypto.ratelimit import RequestThrottle, backoff_delay_seconds


def test_throttle_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        RequestThrottle(0)


@pytest.mark.asyncio
async def test_first_request_is_not_delayed():
    throttle = RequestThrottle(1)
    start = time.monotonic()
    await throttle.wait()
    assert time.monotonic() - start < 0.5


@pytest.mark.asyncio
async def test_requests_are_spaced():
    throttle = RequestThrottle(20)  # 50ms apart
    start = time.monotonic()
    for _ in range(3):
        await throttle.wait()
    assert time.monotonic() - start >= 0.09


@pytest.mark.parametrize(
    "attempt, expected",
    [(1, 1.0), (2, 2.0), (3, 4.0), (4, 8.0), (5, 8.0)],
)
def test_backoff_doubles_up_to_cap(attempt, expected):
    assert backoff_delay_seconds(attempt, base_delay=1.0, max_delay=8.0) == expected
