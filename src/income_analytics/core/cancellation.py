#!/usr/bin/env python3
"""
Cooperative Cancellation

A thread-safe flag that long-running work checks between stages (grouping
passes, simulation batches). Nothing is interrupted mid-computation.
"""

import threading

from .results import OperationCancelled


class CancellationToken:
    """Cancellation signal shared between a caller and an engine call."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """
        Raise when cancellation has been requested.

        Raises:
            OperationCancelled: If cancel() has been called
        """
        if self._event.is_set():
            raise OperationCancelled("Operation cancelled by caller")
