"""
Cooperative cancellation signal passed through reads, evaluations and writes.
"""

from typing import Optional

from review_service.errors import OperationCancelledError


class CancellationToken:
    """
    Flag checked at every suspension point of a review operation.

    Example:
        ct = CancellationToken()
        task = asyncio.create_task(service.try_request_review(ct))
        ct.cancel()
    """

    def __init__(self) -> None:
        self._cancelled = False

    @classmethod
    def none(cls) -> "CancellationToken":
        """Token that is never cancelled."""
        return cls()

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, operation: Optional[str] = None) -> None:
        """Raise OperationCancelledError if cancel() was called."""
        if self._cancelled:
            raise OperationCancelledError(operation)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


def ensure_token(ct: Optional[CancellationToken]) -> CancellationToken:
    """Return ct, or a fresh never-cancelled token when ct is None."""
    return ct if ct is not None else CancellationToken.none()
