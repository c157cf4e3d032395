"""
GigPro Services Layer

Business logic lives here, separated as:
- Models: data + constraints
- Services: ownership checks, validation, transactions, logging
- API: request parsing, authentication, response mapping

Views never touch the ORM for writes; they go through these services.
"""

from .client_service import ClientService
from .document_service import DocumentService, InvoiceDocument
from .gig_service import GigService
from .invoice_service import InvoiceService
from .ownership import get_owned_or_raise, require_user
from .pdf_service import PDFService
from .user_service import ProfileService, UserService

__all__ = [
    "ClientService",
    "DocumentService",
    "GigService",
    "InvoiceDocument",
    "InvoiceService",
    "PDFService",
    "ProfileService",
    "UserService",
    "get_owned_or_raise",
    "require_user",
]
