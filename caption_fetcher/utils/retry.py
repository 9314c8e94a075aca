import time
from typing import Callable, Optional, TypeVar
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type
from caption_fetcher.config import settings

T = TypeVar("T")

def with_retry(
    operation: Callable[[], T],
    max_attempts: Optional[int] = None,
    initial_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``operation`` with exponential backoff: ``initial_delay * 2**n`` seconds between attempts.

    Any exception triggers a retry; the last one is re-raised unchanged once attempts run out.
    Return values are never inspected, so "not found" results come straight back.
    """
    if max_attempts is None:
        max_attempts = settings.MAX_ATTEMPTS
    if initial_delay is None:
        initial_delay = settings.INITIAL_DELAY_MS / 1000
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_delay, exp_base=2, min=0),
        retry=retry_if_exception_type(Exception),
        sleep=sleep,
        reraise=True,
    )
    return retrying(operation)
