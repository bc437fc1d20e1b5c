"""
Cooperative Cancellation
========================

A ``CancellationToken`` is shared between the caller that may want to
abort a long-running operation and the operation itself. The operation
calls ``raise_if_cancelled`` at each natural iteration boundary (one data
record while decoding, one spectrogram window); the caller calls
``cancel`` from wherever it likes (a UI callback, a progress callback,
another thread).

Example Usage:
    ```python
    token = CancellationToken()

    def on_progress(current, total):
        if user_pressed_stop():
            token.cancel()

    try:
        result = spectrogram(buffer, fs, cancel_token=token,
                             progress_callback=on_progress)
    except CancelledOperationError:
        result = None
    ```
"""

import logging
import threading
from typing import Optional

from eegengine.core.exceptions import CancelledOperationError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe cancellation flag."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        if not self._event.is_set():
            logger.debug("Cancellation requested")
        self._event.set()

    def reset(self) -> None:
        """Clear a previous request so the token can be reused."""
        self._event.clear()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, operation: str, progress: str = '') -> None:
        """
        Checkpoint: abort the current operation if cancellation was requested.

        Raises:
            CancelledOperationError: If ``cancel`` has been called
        """
        if self._event.is_set():
            raise CancelledOperationError(operation, progress)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"


def check_cancelled(token: Optional[CancellationToken],
                    operation: str,
                    progress: str = '') -> None:
    """Checkpoint that tolerates a missing token."""
    if token is not None:
        token.raise_if_cancelled(operation, progress)
