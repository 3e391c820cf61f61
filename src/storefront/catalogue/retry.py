"""Bounded retry policy for calls to the product catalogue."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from storefront.errors import CatalogueUnavailableError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry a call a fixed number of times with a fixed delay.

    Only exceptions listed in ``retry_on`` are retried; anything else, and
    the last transient failure once retries are exhausted, propagates.
    """

    max_retries: int = 3
    delay: float = 2.0
    retry_on: tuple[type[Exception], ...] = (CatalogueUnavailableError,)
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)

    def call(self, fn: Callable, *args, **kwargs):
        attempt = 0
        while True:
            try:
                return fn(*args, **kwargs)
            except self.retry_on as exc:
                if attempt >= self.max_retries:
                    logger.warning(
                        "Giving up after retries",
                        attempts=attempt + 1,
                        error=str(exc),
                    )
                    raise
                attempt += 1
                logger.info(
                    "Retrying after transient failure",
                    attempt=attempt,
                    max_retries=self.max_retries,
                    delay=self.delay,
                    error=str(exc),
                )
                self.sleep(self.delay)


NO_RETRY = RetryPolicy(max_retries=0)
