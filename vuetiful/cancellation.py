"""Cooperative cancellation for extraction runs."""

from vuetiful.errors import ExtractionCancelled


class CancellationToken:
    """Signal shared by every await in one extraction run.

    The extractor owns the token and calls ``cancel()``; everything else
    only checks it after resuming from a suspension point.
    """

    __slots__ = ("_cancelled", "reason")

    def __init__(self):
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "superseded") -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self) -> None:
        """Unwind the current run if the token has been cancelled.

        Raises:
            ExtractionCancelled: The token was cancelled.
        """
        if self._cancelled:
            raise ExtractionCancelled(self.reason or "cancelled")


def check(token: CancellationToken | None) -> None:
    """``raise_if_cancelled`` that tolerates a missing token."""
    if token is not None:
        token.raise_if_cancelled()
