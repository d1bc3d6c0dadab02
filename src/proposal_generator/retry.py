"""Retry wrapper that rotates API keys when a quota is exhausted."""

from typing import Callable, Optional, TypeVar

from .cancellation import CancellationToken, check_cancelled
from .errors import QuotaExceeded
from .key_pool import KeyPool
from .logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Run a model call, retrying on the next key after quota errors.

    The executor holds no state of its own between calls; its only effect
    is on the shared key pool cursor.
    """

    def __init__(self, key_pool: KeyPool):
        self.key_pool = key_pool

    def _is_quota_error(self, error: Exception) -> bool:
        return isinstance(error, QuotaExceeded) or self.key_pool.classify_quota_error(error)

    def execute(
        self,
        work: Callable[[str], T],
        max_attempts: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> T:
        """Call work until it succeeds or retrying is pointless.

        Args:
            work: Callable that performs one model call with the API key it
                is given. Each attempt gets the key the pool cursor held when
                the attempt started.
            max_attempts: Attempt limit (default: one attempt per key in the pool)
            cancel_token: Checked before every attempt

        Returns:
            Whatever work returns

        Raises:
            NoCredentialsConfigured: If the pool is empty
            The last error raised by work, unchanged
        """
        if max_attempts is None:
            max_attempts = max(self.key_pool.size, 1)

        attempt = 0
        while True:
            attempt += 1
            check_cancelled(cancel_token)
            # Index and key come from one read so a rotation elsewhere cannot split them
            key_index, api_key = self.key_pool.snapshot()

            try:
                return work(api_key)
            except Exception as e:
                if attempt >= max_attempts:
                    raise

                if not self._is_quota_error(e):
                    raise

                logger.warning(
                    "Quota error on attempt %d/%d with key index %d: %s",
                    attempt,
                    max_attempts,
                    key_index,
                    e,
                )
                if not self.key_pool.rotate(expected_index=key_index):
                    raise

                logger.info("Retrying with key index %d", self.key_pool.cursor)

    def complete(
        self,
        model_service,
        prompt: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """Send a prompt to the model service using the pool's current key."""
        return self.execute(
            lambda api_key: model_service.complete(prompt, api_key=api_key),
            cancel_token=cancel_token,
        )
