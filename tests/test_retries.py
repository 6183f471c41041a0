import asyncio
import httpx
import pytest
from storefront.common.retries import is_recoverable_exception, retry_async


def _status_error(code):
    request = httpx.Request("GET", "https://api.paystack.co/transaction/verify/x")
    return httpx.HTTPStatusError("boom", request=request, response=httpx.Response(code, request=request))


def test_recoverable_exceptions():
    assert is_recoverable_exception(httpx.ReadTimeout("slow"))
    assert is_recoverable_exception(httpx.ConnectError("refused"))
    assert is_recoverable_exception(_status_error(503))
    assert not is_recoverable_exception(_status_error(404))
    assert not is_recoverable_exception(ValueError("bad json"))
    assert not is_recoverable_exception(asyncio.CancelledError())


@pytest.mark.asyncio
async def test_retry_until_success():
    attempts = []

    @retry_async(attempts=3, base_delay=0.01)
    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ReadTimeout("slow")
        return "ok"

    assert await flaky() == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_non_recoverable_error_is_raised_at_once():
    attempts = []

    @retry_async(attempts=5, base_delay=0.01)
    async def broken():
        attempts.append(1)
        raise KeyError("data")

    with pytest.raises(KeyError):
        await broken()
    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_last_error_is_raised_when_attempts_run_out():
    attempts = []

    @retry_async(attempts=2, base_delay=0.01, if_retryable=lambda exc: True)
    async def always_down():
        attempts.append(1)
        raise RuntimeError(f"down {len(attempts)}")

    with pytest.raises(RuntimeError, match="down 2"):
        await always_down()
    assert len(attempts) == 2
