import logging
from typing import Optional

from core.models import AnalysisOutcome

logger = logging.getLogger(__name__)

IDLE = "idle"
BUSY = "busy"
READY = "ready"


class AnalysisSession:
    """
    Holds the current preview and the single current result of one browser
    session.

    Every submission takes a request id from `begin()`. Only the latest id may
    change the visible result; replies to older requests are dropped, so the
    most recent analysis is the one shown regardless of completion order.

    Handlers run on Gradio's event loop and no method awaits, so each check
    and swap completes without interleaving. The object is stored in
    `gr.State`, which deep-copies it, so it holds plain data only.
    """

    def __init__(self):
        self._latest_id = 0
        self._pending_id: Optional[int] = None
        self._outcome: Optional[AnalysisOutcome] = None
        self.preview: Optional[str] = None

    @property
    def outcome(self) -> Optional[AnalysisOutcome]:
        return self._outcome

    @property
    def latest_request_id(self) -> int:
        return self._latest_id

    @property
    def status(self) -> str:
        if self._pending_id is not None:
            return BUSY
        return READY if self._outcome is not None else IDLE

    @property
    def is_busy(self) -> bool:
        return self.status == BUSY

    @property
    def can_clear(self) -> bool:
        return self.preview is not None and not self.is_busy

    def show_preview(self, path: str) -> None:
        self.preview = path

    def clear_preview(self) -> None:
        self.preview = None

    def begin(self) -> int:
        self._latest_id += 1
        self._pending_id = self._latest_id
        return self._latest_id

    def resolve(self, request_id: int, outcome: AnalysisOutcome) -> bool:
        """Apply a finished analysis. Returns False if it was stale."""
        if request_id != self._latest_id:
            logger.warning(f"⚠️ Discarding stale analysis #{request_id} (latest #{self._latest_id})")
            return False
        self._outcome = outcome
        self._pending_id = None
        return True

    def reject(self, request_id: int, error: Exception) -> bool:
        """
        Record a failed analysis. The previous result, if any, stays visible.
        Returns False if the failure belonged to a stale request.
        """
        if request_id != self._latest_id:
            logger.info(f"Ignoring failure of stale analysis #{request_id}: {error}")
            return False
        self._pending_id = None
        return True
