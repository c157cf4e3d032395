"""
Document Service - Printable invoice model.

Responsibilities:
- Assemble issuer, bill-to, line and footer blocks from stored records
- Compose the service description line for gig-backed invoices
- Refuse to build a document for an invoice that cannot be rendered

Building a document performs no I/O; rendering to PDF lives in PDFService.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..models import Client, Gig, Invoice
from ..utils import CurrencyHelper, DateHelper
from ..validation import InvalidDocument
from .ownership import get_owned_or_raise

logger = logging.getLogger(__name__)

A4_TEXT_WIDTH_MM = 170
THANK_YOU_LINE = "Thank you for your business!"


@dataclass(frozen=True)
class IssuerBlock:
    business_name: str
    dj_name: str
    email: str = ""
    website: str = ""
    business_address: str = ""
    tax_id: str = ""


@dataclass(frozen=True)
class InvoiceMeta:
    number: str
    issued_date: date
    due_date: date
    status: str


@dataclass(frozen=True)
class BillTo:
    client_name: str
    client_email: str = ""
    client_phone: str = ""


@dataclass(frozen=True)
class DocumentLine:
    description: str
    quantity: str
    rate: str
    amount: str


@dataclass(frozen=True)
class Footer:
    contact_email: str = ""
    thank_you: str = THANK_YOU_LINE


@dataclass(frozen=True)
class InvoiceDocument:
    issuer: IssuerBlock
    meta: InvoiceMeta
    bill_to: BillTo
    service_description: str
    line_total: str
    lines: List[DocumentLine] = field(default_factory=list)
    payment_instructions: Optional[str] = None
    payment_terms: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    footer: Footer = field(default_factory=Footer)
    wrap_width_mm: int = A4_TEXT_WIDTH_MM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issuer": vars(self.issuer).copy(),
            "meta": {
                "number": self.meta.number,
                "issued_date": self.meta.issued_date.isoformat(),
                "due_date": self.meta.due_date.isoformat(),
                "status": self.meta.status,
            },
            "bill_to": vars(self.bill_to).copy(),
            "service_description": self.service_description,
            "lines": [vars(line).copy() for line in self.lines],
            "line_total": self.line_total,
            "payment_instructions": self.payment_instructions,
            "payment_terms": self.payment_terms,
            "payment_method": self.payment_method,
            "notes": self.notes,
            "footer": vars(self.footer).copy(),
            "wrap_width_mm": self.wrap_width_mm,
        }


class DocumentService:
    """Builds InvoiceDocument values from invoice, owner, client and gig records."""

    @staticmethod
    def describe_service(gig: Optional[Gig]) -> str:
        """
        "DJ Services - {title} at {location} on {Month D, YYYY} ({start}-{end})",
        each part only when present.
        """
        description = "DJ Services"
        if gig is None:
            return description
        if gig.title:
            description += f" - {gig.title}"
        if gig.location:
            description += f" at {gig.location}"
        if gig.date:
            description += f" on {DateHelper.long_format(gig.date)}"
        if gig.start_time and gig.end_time:
            description += f" ({gig.start_time}-{gig.end_time})"
        return description

    @staticmethod
    def _checked_total(invoice: Invoice) -> Decimal:
        try:
            total = CurrencyHelper.to_money(invoice.amount)
        except ValueError:
            raise InvalidDocument(f"Invoice {invoice.invoice_number} has an invalid total")
        if not total.is_finite() or total < 0:
            raise InvalidDocument(f"Invoice {invoice.invoice_number} has an invalid total")
        return total

    @staticmethod
    def _issuer(user) -> IssuerBlock:
        profile = getattr(user, "dj_profile", None)
        if profile is not None:
            dj_name = profile.display_name
        else:
            dj_name = user.get_full_name() or user.email.split("@")[0]

        business_name = (profile.business_name if profile else "") or f"{dj_name}'s DJ Services"
        return IssuerBlock(
            business_name=business_name,
            dj_name=dj_name,
            email=user.email or "",
            website=profile.website if profile else "",
            business_address=profile.business_address if profile else "",
            tax_id=profile.tax_id if profile else "",
        )

    @staticmethod
    def _lines(invoice: Invoice) -> List[DocumentLine]:
        lines = []
        for item in invoice.line_items:
            lines.append(DocumentLine(
                description=str(item.get("description", "")),
                quantity=str(item.get("quantity", "")),
                rate=CurrencyHelper.format_amount(item.get("rate", 0)),
                amount=CurrencyHelper.format_amount(item.get("amount", 0)),
            ))
        return lines

    @classmethod
    def build_document(
        cls,
        invoice: Invoice,
        user,
        client: Optional[Client],
        gig: Optional[Gig] = None,
    ) -> InvoiceDocument:
        if client is None:
            raise InvalidDocument(f"Invoice {invoice.invoice_number} has no client to bill")
        total = cls._checked_total(invoice)
        profile = getattr(user, "dj_profile", None)

        return InvoiceDocument(
            issuer=cls._issuer(user),
            meta=InvoiceMeta(
                number=invoice.invoice_number,
                issued_date=invoice.issued_date,
                due_date=invoice.due_date,
                status=invoice.effective_status,
            ),
            bill_to=BillTo(
                client_name=client.name,
                client_email=client.email or "",
                client_phone=client.phone or "",
            ),
            service_description=cls.describe_service(gig),
            lines=cls._lines(invoice),
            line_total=f"{total:.2f}",
            payment_instructions=(profile.payment_instructions or None) if profile else None,
            payment_terms=(profile.payment_terms or None) if profile else None,
            payment_method=(profile.payment_method or None) if profile else None,
            notes=invoice.notes or None,
            footer=Footer(contact_email=user.email or ""),
        )

    @classmethod
    def build_for_invoice(cls, invoice_id, user) -> InvoiceDocument:
        queryset = Invoice.objects.select_related("client", "gig", "user", "user__dj_profile")
        invoice = get_owned_or_raise(Invoice, invoice_id, user, queryset=queryset)
        document = cls.build_document(invoice, invoice.user, invoice.client, invoice.gig)
        logger.info(f"Built document for invoice {invoice.id}")
        return document
