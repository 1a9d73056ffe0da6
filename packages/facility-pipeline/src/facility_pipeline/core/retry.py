import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from facility_pipeline.core.exceptions import ProviderError, ProviderRequestError

T = TypeVar("T")
logger = logging.getLogger(__name__)


def _as_provider_error(exc: Exception) -> ProviderError:
    if isinstance(exc, ProviderError):
        return exc
    return ProviderRequestError(str(exc))


async def with_exponential_backoff(
    operation: Callable[[], Awaitable[T]],
    retries: int = 3,
    base_delay_seconds: float = 0.1,
    on_retry: Callable[[int, float], None] | None = None,
    should_retry: Callable[[Exception], bool] | None = None,
) -> T:
    """Run ``operation`` until it succeeds or ``retries`` attempts are spent.

    Failures surface as ``ProviderError``; errors that already are provider
    errors keep their class so callers can report the failure kind.
    """
    if retries < 1:
        raise ValueError("retries must be >= 1")
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            attempt += 1
            if should_retry and not should_retry(exc):
                raise _as_provider_error(exc) from exc
            if attempt >= retries:
                raise _as_provider_error(exc) from exc
            delay = base_delay_seconds * (2 ** (attempt - 1))
            logger.info("provider_retry_scheduled", extra={"attempt": attempt, "delay_seconds": delay})
            if on_retry:
                on_retry(attempt, delay)
            await asyncio.sleep(delay)
