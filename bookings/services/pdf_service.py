"""
PDF Service - Renders invoice documents to PDF.

Responsibilities:
- Invoice PDF generation through the bookings/invoice_pdf.html template
- Download filename for rendered invoices
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.template.loader import render_to_string

from ..validation import PDFUnavailable

if TYPE_CHECKING:
    from .document_service import InvoiceDocument

logger = logging.getLogger(__name__)


class PDFService:
    """Handles PDF generation with a unified rendering pipeline."""

    TEMPLATE_NAME = "bookings/invoice_pdf.html"

    @staticmethod
    def is_available() -> bool:
        try:
            from weasyprint import HTML  # noqa: F401
            return True
        except (ImportError, OSError):
            return False

    @classmethod
    def render_html(cls, document: "InvoiceDocument") -> str:
        context = {
            "document": document,
            "base_url": getattr(settings, "SITE_URL", ""),
            "branding_color": "#4f46e5",
        }
        return render_to_string(cls.TEMPLATE_NAME, context)

    @classmethod
    def generate_pdf_bytes(cls, document: "InvoiceDocument") -> bytes:
        """
        Generate PDF bytes for an invoice document.

        Raises:
            PDFUnavailable: WeasyPrint or its system libraries are missing,
                or the renderer failed.
        """
        try:
            from weasyprint import HTML
            from weasyprint.text.fonts import FontConfiguration
        except (ImportError, OSError):
            raise PDFUnavailable(
                "PDF generation is currently unavailable due to missing system dependencies."
            )

        html = HTML(
            string=cls.render_html(document),
            base_url=getattr(settings, "SITE_URL", ""),
        )

        try:
            pdf_bytes = html.write_pdf(font_config=FontConfiguration())
        except Exception as e:
            logger.error(f"PDF generation failed for invoice {document.meta.number}: {e}")
            raise PDFUnavailable("PDF generation failed. Please try again later.")

        logger.info(f"Generated PDF for invoice {document.meta.number}")
        return pdf_bytes

    @staticmethod
    def get_invoice_filename(document: "InvoiceDocument") -> str:
        return f"Invoice-{document.meta.number}.pdf"
