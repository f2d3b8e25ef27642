"""File response that owns the render job's scratch directory."""

import logging
from collections.abc import Callable
from pathlib import Path

from starlette.responses import FileResponse
from starlette.types import Receive, Scope, Send

from beatloop.common.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class RenderFileResponse(FileResponse):
    """Streams the final video, then releases the job's scratch files.

    Cleanup runs whether or not the transport write succeeds. A failed
    write is logged as a delivery error for this job only.
    """

    def __init__(
        self,
        path: Path,
        *,
        job_id: str,
        filename: str,
        on_close: Callable[[], None],
    ) -> None:
        super().__init__(path, media_type="video/mp4", filename=filename)
        self.job_id = job_id
        self.on_close = on_close

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
            logger.info("[job=%s] Video delivered", self.job_id)
        except Exception as e:
            error = DeliveryError("error downloading file", log_message=str(e))
            logger.error("[job=%s] %s: %s", self.job_id, error.message, error.log_message)
        finally:
            self.on_close()
