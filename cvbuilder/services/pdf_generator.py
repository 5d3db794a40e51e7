"""Service for generating PDF from HTML."""

from loguru import logger
from cvbuilder.errors import ExportError
from cvbuilder.models.cv_models import CVDocument
from cvbuilder.services.cv_generator import CVGenerator

PAGE_CSS = """
    @page {
        size: A4;
        margin: 18mm 16mm;
        @bottom-right {
            content: counter(page) " / " counter(pages);
            font-size: 8pt;
            color: #9ca3af;
        }
    }
"""


class PDFGenerator:
    """Service to generate PDF from HTML using WeasyPrint."""

    def __init__(self, cv_generator: CVGenerator = None):
        """
        Initialize the PDF generator.

        Args:
            cv_generator: CV generator instance. If None, creates a new one.
        """
        if cv_generator is None:
            cv_generator = CVGenerator()
        self.cv_generator = cv_generator

    def generate_pdf(self, data: CVDocument) -> bytes:
        """
        Generate PDF from CV data.

        WeasyPrint lays the HTML out directly onto A4 pages, so text stays
        selectable and every block lands on exactly one page.

        Args:
            data: CV document

        Returns:
            bytes: PDF file as bytes

        Raises:
            ExportError: If rendering fails; no partial document is returned
        """
        # WeasyPrint loads the native Pango/Cairo libraries at import time
        from weasyprint import HTML as WeasyHTML, CSS

        try:
            html_content = self.cv_generator.generate_html(data)
            html = WeasyHTML(string=html_content)
            pdf_bytes = html.write_pdf(stylesheets=[CSS(string=PAGE_CSS)])
        except Exception as e:
            logger.error(f"PDF rendering failed for CV {data.id}: {e}")
            raise ExportError(f"Failed to render PDF: {e}") from e

        return pdf_bytes
