import threading

from ..models.errors import OperationCancelled


class CancellationToken:
    """
    Cooperative cancellation flag.  The pipeline checks it at the top of each
    stage; a stage already running is never interrupted.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "") -> None:
        if self._event.is_set():
            where = f" before {stage}" if stage else ""
            raise OperationCancelled(f"Operation cancelled{where}")
