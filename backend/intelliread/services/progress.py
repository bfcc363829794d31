"""Progress notifications for document ingestion"""
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union
from ..models.response import IngestionStage, ProgressEvent

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], Union[None, Awaitable[Any]]]


class ProgressReporter:
    """
    Deliver progress events to an optional sync or async callback.

    The callback is a notification channel only: its failures are logged
    and never reach the pipeline.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None, document_id: Optional[str] = None):
        self.callback = callback
        self.document_id = document_id

    async def report(
        self,
        stage: IngestionStage,
        message: str = "",
        current_page: int = 0,
        total_pages: int = 0
    ) -> ProgressEvent:
        event = ProgressEvent(
            stage=stage,
            document_id=self.document_id,
            current_page=current_page,
            total_pages=total_pages,
            message=message
        )
        logger.debug(f"[{stage.value}] {message}")

        if self.callback is not None:
            try:
                result = self.callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")
        return event
