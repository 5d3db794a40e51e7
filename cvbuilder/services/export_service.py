"""Export jobs: render a CV to PDF or Markdown with timeout and cancellation."""

import asyncio
from enum import Enum
from typing import Callable, Optional

from loguru import logger
from pydantic import BaseModel

from cvbuilder.config import get_settings
from cvbuilder.errors import ExportCancelledError, ExportError, ExportTimeoutError
from cvbuilder.models.cv_models import CVDocument
from cvbuilder.services.markdown_exporter import export_to_markdown
from cvbuilder.services.pdf_generator import PDFGenerator
from cvbuilder.utils.template_helpers import export_filename


class ExportFormat(str, Enum):
    """Supported export formats."""

    PDF = "pdf"
    MARKDOWN = "markdown"


class ExportStatus(str, Enum):
    """State of an export job."""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILURE = "failure"


MEDIA_TYPES = {
    ExportFormat.PDF: "application/pdf",
    ExportFormat.MARKDOWN: "text/markdown; charset=utf-8",
}

EXTENSIONS = {
    ExportFormat.PDF: "pdf",
    ExportFormat.MARKDOWN: "md",
}


class ExportResult(BaseModel):
    """A finished export artifact."""

    filename: str
    media_type: str
    content: bytes


class ExportJob:
    """
    One export attempt at a time, tracked as a small state machine.

    idle -> in_progress -> success | failure. ``reset`` returns a finished
    job to idle so the user can retry. ``cancel`` aborts an in-flight run
    and returns the job to idle.
    """

    def __init__(
        self,
        pdf_generator: Optional[PDFGenerator] = None,
        markdown_renderer: Callable[[CVDocument], str] = export_to_markdown,
        timeout: Optional[float] = None,
    ):
        self.pdf_generator = pdf_generator or PDFGenerator()
        self.markdown_renderer = markdown_renderer
        self.timeout = timeout if timeout is not None else get_settings().export_timeout
        self.status = ExportStatus.IDLE
        self.result: Optional[ExportResult] = None
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Future] = None
        self._cancel_requested = False

    def _render(self, document: CVDocument, fmt: ExportFormat) -> ExportResult:
        if fmt == ExportFormat.PDF:
            content = self.pdf_generator.generate_pdf(document)
        else:
            content = self.markdown_renderer(document).encode("utf-8")
        return ExportResult(
            filename=export_filename(document.personalInfo.fullName, EXTENSIONS[fmt]),
            media_type=MEDIA_TYPES[fmt],
            content=content,
        )

    def _fail(self, message: str) -> None:
        self.status = ExportStatus.FAILURE
        self.error = message
        logger.error(message)

    async def run(self, document: CVDocument, fmt: ExportFormat = ExportFormat.PDF) -> ExportResult:
        """
        Render ``document`` in a worker thread.

        Raises:
            ExportError: If a run is already in progress or rendering fails
            ExportTimeoutError: If rendering exceeds the timeout
            ExportCancelledError: If ``cancel`` was called during the run
        """
        if self.status == ExportStatus.IN_PROGRESS:
            raise ExportError("An export is already in progress")

        fmt = ExportFormat(fmt)
        self.status = ExportStatus.IN_PROGRESS
        self.result = None
        self.error = None
        self._cancel_requested = False
        self._task = asyncio.ensure_future(
            asyncio.wait_for(asyncio.to_thread(self._render, document, fmt), self.timeout)
        )

        try:
            result = await self._task
        except asyncio.CancelledError:
            self.status = ExportStatus.IDLE
            if not self._cancel_requested:
                raise
            logger.info(f"{fmt.value} export of CV {document.id} cancelled")
            raise ExportCancelledError("Export was cancelled")
        except asyncio.TimeoutError:
            self._fail(f"{fmt.value} export timed out after {self.timeout:g}s")
            raise ExportTimeoutError(self.error)
        except ExportError as e:
            self._fail(str(e))
            raise
        except Exception as e:
            self._fail(f"{fmt.value} export failed: {e}")
            raise ExportError(self.error) from e
        finally:
            self._task = None

        self.status = ExportStatus.SUCCESS
        self.result = result
        logger.info(f"Exported CV {document.id} as {result.filename} ({len(result.content)} bytes)")
        return result

    def cancel(self) -> bool:
        """Cancel an in-flight export. Returns False when nothing was running."""
        if self._task is None or self._task.done():
            return False
        self._cancel_requested = True
        self._task.cancel()
        return True

    def reset(self) -> None:
        """Return a finished (successful or failed) job to idle."""
        if self.status == ExportStatus.IN_PROGRESS:
            raise ExportError("Cannot reset an export that is still running")
        self.status = ExportStatus.IDLE
        self.result = None
        self.error = None
