from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from bookings.services import DocumentService, PDFService
from bookings.services.invoice_service import InvoiceService
from bookings.utils import today_utc
from bookings.validation import Forbidden, InvalidDocument, PDFUnavailable
from tests.factories import ClientFactory, DJProfileFactory, GigFactory, InvoiceFactory, UserFactory


@pytest.fixture
def profile(db):
    return DJProfileFactory(
        stage_name="DJ Blaze",
        business_name="Blaze Entertainment LLC",
        user__email="blaze@example.com",
        payment_instructions="Account: XXXX-1234",
    )


@pytest.mark.django_db
class TestBuildDocument:
    def test_full_document(self, profile):
        user = profile.user
        client = ClientFactory(user=user, name="Groove Lounge", email="bookings@groovelounge.com", phone="(555) 987-6543")
        gig = GigFactory(
            user=user,
            client=client,
            title="Friday Night",
            location="Groove Lounge",
            date=date(2025, 8, 15),
            start_time="21:00",
            end_time="02:00",
        )
        invoice = InvoiceService.create_invoice(user, {
            "client_id": client.id,
            "gig_id": gig.id,
            "items": [{"description": "DJ set", "quantity": Decimal("1"), "rate": Decimal("800")}],
            "due_date": today_utc() + timedelta(days=14),
            "notes": "Thanks for having me back!",
        })

        document = DocumentService.build_document(invoice, user, client, gig)

        assert document.issuer.business_name == "Blaze Entertainment LLC"
        assert document.issuer.dj_name == "DJ Blaze"
        assert document.issuer.email == "blaze@example.com"
        assert document.meta.number == invoice.invoice_number
        assert document.meta.status == "draft"
        assert document.bill_to.client_name == "Groove Lounge"
        assert document.bill_to.client_email == "bookings@groovelounge.com"
        assert document.service_description == (
            "DJ Services - Friday Night at Groove Lounge on August 15, 2025 (21:00-02:00)"
        )
        assert document.line_total == "800.00"
        assert [line.amount for line in document.lines] == ["800.00"]
        assert document.payment_instructions == "Account: XXXX-1234"
        assert document.payment_terms == "Net 14 days"
        assert document.notes == "Thanks for having me back!"
        assert document.footer.thank_you == "Thank you for your business!"
        assert document.footer.contact_email == "blaze@example.com"
        assert document.wrap_width_mm == 170

    def test_business_name_falls_back_to_display_name(self, profile):
        profile.business_name = ""
        profile.save()
        invoice = InvoiceFactory(user=profile.user)

        document = DocumentService.build_document(invoice, profile.user, invoice.client)
        assert document.issuer.business_name == "DJ Blaze's DJ Services"

    def test_user_without_profile(self):
        user = UserFactory(email="solo@example.com", first_name="", last_name="")
        invoice = InvoiceFactory(user=user)

        document = DocumentService.build_document(invoice, user, invoice.client)
        assert document.issuer.dj_name == "solo"
        assert document.payment_instructions is None

    def test_service_description_without_gig(self, profile):
        invoice = InvoiceFactory(user=profile.user)
        document = DocumentService.build_document(invoice, profile.user, invoice.client)
        assert document.service_description == "DJ Services"

    def test_time_part_needs_start_and_end(self):
        gig = GigFactory.build(title="Wedding", location="", date=date(2025, 6, 1), start_time="18:00", end_time="")
        assert DocumentService.describe_service(gig) == "DJ Services - Wedding on June 1, 2025"

    def test_overdue_invoice_shows_effective_status(self, profile):
        invoice = InvoiceFactory(user=profile.user, status="sent", due_date=today_utc() - timedelta(days=1))
        document = DocumentService.build_document(invoice, profile.user, invoice.client)
        assert document.meta.status == "overdue"

    def test_missing_client_is_invalid(self, profile):
        invoice = InvoiceFactory(user=profile.user, client=None)
        with pytest.raises(InvalidDocument):
            DocumentService.build_document(invoice, profile.user, None)

    @pytest.mark.parametrize("amount", [Decimal("-1.00"), Decimal("NaN"), Decimal("Infinity")])
    def test_bad_total_is_invalid(self, profile, amount):
        invoice = InvoiceFactory.build(user=profile.user, client=ClientFactory(user=profile.user))
        invoice.amount = amount
        with pytest.raises(InvalidDocument):
            DocumentService.build_document(invoice, profile.user, invoice.client)

    def test_to_dict_is_json_ready(self, profile):
        invoice = InvoiceFactory(user=profile.user, issued_date=date(2025, 8, 1), due_date=date(2025, 8, 15))
        data = DocumentService.build_document(invoice, profile.user, invoice.client).to_dict()

        assert data["meta"]["issued_date"] == "2025-08-01"
        assert data["meta"]["due_date"] == "2025-08-15"
        assert data["line_total"] == "500.00"
        assert data["bill_to"]["client_name"] == invoice.client.name
        assert data["footer"]["thank_you"] == "Thank you for your business!"


@pytest.mark.django_db
class TestBuildForInvoice:
    def test_resolves_related_records(self, profile):
        invoice = InvoiceFactory(user=profile.user)
        document = DocumentService.build_for_invoice(invoice.id, profile.user)
        assert document.meta.number == invoice.invoice_number
        assert document.issuer.dj_name == "DJ Blaze"

    def test_other_owner_forbidden(self, profile):
        invoice = InvoiceFactory()
        with pytest.raises(Forbidden):
            DocumentService.build_for_invoice(invoice.id, profile.user)


@pytest.mark.django_db
class TestPDFService:
    def test_filename(self, profile):
        invoice = InvoiceFactory(user=profile.user, invoice_number="INV-2025-0815-01")
        document = DocumentService.build_for_invoice(invoice.id, profile.user)
        assert PDFService.get_invoice_filename(document) == "Invoice-INV-2025-0815-01.pdf"

    def test_template_renders_document(self, profile):
        invoice = InvoiceFactory(user=profile.user, notes="Load-in at 8pm")
        html = PDFService.render_html(DocumentService.build_for_invoice(invoice.id, profile.user))
        assert invoice.invoice_number in html
        assert "Load-in at 8pm" in html
        assert "Thank you for your business!" in html
        assert "170mm" in html

    def test_missing_backend_is_unavailable(self, profile):
        invoice = InvoiceFactory(user=profile.user)
        document = DocumentService.build_for_invoice(invoice.id, profile.user)
        with patch.dict("sys.modules", {"weasyprint": None}):
            with pytest.raises(PDFUnavailable):
                PDFService.generate_pdf_bytes(document)
