"""
The ReconcileContext carries cancellation for a single reconciliation pass.
Store implementations check it before every cluster call so that a cancelled
pass stops before it can write.
"""

# Standard
from typing import Optional
import threading

# First Party
import alog

# Local
from .exceptions import CancelledError

log = alog.use_channel("RCCTX")


class ReconcileContext:
    """Cancellation handle shared by every call made during one pass"""

    def __init__(
        self,
        reconciliation_id: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            reconciliation_id:  Optional[str]
                Identifier used in log lines for this pass
            cancel_event:  Optional[threading.Event]
                An externally owned event. If given, setting it cancels this
                context. Useful when a controller thread already has a
                shutdown event.
        """
        self.reconciliation_id = reconciliation_id
        self._cancelled = cancel_event or threading.Event()

    def cancel(self):
        """Mark this context as cancelled"""
        log.debug("Cancelling reconciliation [%s]", self.reconciliation_id)
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def check(self, operation: str = ""):
        """Raise CancelledError if this context has been cancelled

        Args:
            operation:  str
                Description of the call about to be made, used in the error
        """
        if self._cancelled.is_set():
            log.debug2(
                "Reconciliation [%s] cancelled before %s",
                self.reconciliation_id,
                operation,
            )
            raise CancelledError(
                f"Reconciliation cancelled before {operation or 'store call'}"
            )
