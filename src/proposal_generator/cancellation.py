"""Cooperative cancellation for generation and revision runs."""

import threading
from typing import Optional

from .errors import RunCancelled


class CancellationToken:
    """Flag a caller sets to abandon a run.

    The pipeline checks the token at every stage boundary and before every
    model call, so an abandoned run stops before its next request.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RunCancelled("Run was cancelled")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise RunCancelled if a token was given and has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()
