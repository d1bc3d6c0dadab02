"""API key pool with rotation on quota exhaustion."""

import threading
from typing import Iterable, Optional, Sequence, Tuple

from .errors import NoCredentialsConfigured
from .logging_config import get_logger

logger = get_logger(__name__)

# Substrings that mark an error as rate limiting or quota exhaustion
DEFAULT_QUOTA_PATTERNS: Tuple[str, ...] = (
    "quota",
    "rate limit",
    "resource exhausted",
    "too many requests",
    "429",
    "quota exceeded",
    "rate_limit_exceeded",
    "insufficient quota",
)


def is_quota_error(error: Optional[BaseException], patterns: Sequence[str] = DEFAULT_QUOTA_PATTERNS) -> bool:
    """Check whether an error signals quota exhaustion or rate limiting.

    Matching is case-insensitive and covers both the exception type name
    and its message.

    Args:
        error: The exception raised by the model call
        patterns: Substrings that identify a quota error

    Returns:
        True if any pattern appears in the error text
    """
    if error is None:
        return False

    error_text = f"{type(error).__name__}: {error}".lower()
    return any(pattern.lower() in error_text for pattern in patterns if pattern)


class KeyPool:
    """Ordered set of API keys with a shared, thread-safe cursor.

    The cursor starts at the first key and only moves when a caller
    rotates after a quota error. It is never persisted.
    """

    def __init__(self, keys: Iterable[str], quota_patterns: Sequence[str] = DEFAULT_QUOTA_PATTERNS):
        """Initialize the key pool.

        Args:
            keys: API keys in the order they should be tried. Blank entries are dropped.
            quota_patterns: Substrings used by classify_quota_error
        """
        self._keys = tuple(key.strip() for key in keys if key and key.strip())
        self._cursor = 0
        self._lock = threading.Lock()
        self.quota_patterns = tuple(quota_patterns)

        if not self._keys:
            logger.warning("No API keys configured; model calls will fail")
        else:
            logger.info("Key pool initialized with %d key(s)", len(self._keys))

    @property
    def size(self) -> int:
        return len(self._keys)

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    def current_credential(self) -> str:
        """Return the API key the cursor points at.

        Raises:
            NoCredentialsConfigured: If the pool is empty
        """
        with self._lock:
            if not self._keys:
                raise NoCredentialsConfigured(
                    "No API keys available. Set MODEL_API_KEYS in your .env file."
                )
            return self._keys[self._cursor]

    def snapshot(self) -> Tuple[int, str]:
        """Return the cursor and the key it points at, read together.

        Pass the index to ``rotate(expected_index=...)`` if the key fails.

        Raises:
            NoCredentialsConfigured: If the pool is empty
        """
        with self._lock:
            if not self._keys:
                raise NoCredentialsConfigured(
                    "No API keys available. Set MODEL_API_KEYS in your .env file."
                )
            return self._cursor, self._keys[self._cursor]

    def rotate(self, expected_index: Optional[int] = None) -> bool:
        """Advance the cursor to the next key, wrapping around.

        Args:
            expected_index: Cursor position the caller saw when its call failed.
                If another caller already rotated away from it, the cursor is
                left where it is.

        Returns:
            False if there is no other key to rotate to, True otherwise
        """
        with self._lock:
            if len(self._keys) <= 1:
                logger.warning("No additional API keys available for rotation")
                return False

            if expected_index is not None and expected_index != self._cursor:
                logger.debug(
                    "Key already rotated from index %d to %d by another request",
                    expected_index,
                    self._cursor,
                )
                return True

            previous = self._cursor
            self._cursor = (self._cursor + 1) % len(self._keys)
            logger.info("Rotated API key from index %d to %d", previous, self._cursor)
            return True

    def classify_quota_error(self, error: Optional[BaseException]) -> bool:
        """Check an error against this pool's quota patterns."""
        return is_quota_error(error, self.quota_patterns)

    def reset(self) -> None:
        """Move the cursor back to the first key."""
        with self._lock:
            self._cursor = 0
        logger.info("API key index reset to 0")
