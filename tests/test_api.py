"""
API tests: routing, ownership checks, status codes and payload shapes.
"""
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from bookings.models import Client, Gig, Invoice
from bookings.utils import today_utc
from tests.factories import ClientFactory, GigFactory, InvoiceFactory


def _error_code(response):
    body = response.json()
    assert body["success"] is False
    assert body["request_id"]
    return body["error"]["code"]


@pytest.mark.django_db
class TestAuthenticationRequired:
    @pytest.mark.parametrize("url", [
        "/api/clients",
        "/api/gigs",
        "/api/invoices",
        "/api/invoices/stats",
        "/api/gigs/upcoming",
        "/api/auth/user",
    ])
    def test_anonymous_gets_401(self, api_client, url):
        response = api_client.get(url)
        assert response.status_code == 401
        assert _error_code(response) == "AUTHENTICATION_REQUIRED"


@pytest.mark.django_db
class TestClientsAPI:
    def test_create_and_list(self, auth_client, user):
        response = auth_client.post(
            "/api/clients",
            {"name": "Groove Lounge", "email": "bookings@groovelounge.com", "tags": ["nightclub", " friday ", "nightclub"]},
            format="json",
        )
        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Groove Lounge"
        assert body["tags"] == ["nightclub", "friday"]

        ClientFactory(name="Someone Else's Venue")
        listing = auth_client.get("/api/clients").json()
        assert [c["name"] for c in listing] == ["Groove Lounge"]

    def test_blank_name_rejected(self, auth_client, user):
        response = auth_client.post("/api/clients", {"name": ""}, format="json")
        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["fields"][0]["field"] == "name"
        assert not Client.objects.exists()

    def test_retrieve_missing_is_404(self, auth_client):
        response = auth_client.get("/api/clients/999999")
        assert response.status_code == 404
        assert _error_code(response) == "RESOURCE_NOT_FOUND"

    def test_other_users_client_is_403(self, auth_client, other_user):
        foreign = ClientFactory(user=other_user)
        assert auth_client.get(f"/api/clients/{foreign.id}").status_code == 403
        assert auth_client.patch(f"/api/clients/{foreign.id}", {"name": "Hijacked"}, format="json").status_code == 403
        assert auth_client.delete(f"/api/clients/{foreign.id}").status_code == 403
        foreign.refresh_from_db()
        assert foreign.name != "Hijacked"

    def test_partial_update(self, auth_client, user):
        client = ClientFactory(user=user, name="Old Name")
        response = auth_client.patch(f"/api/clients/{client.id}", {"notes": "Ask for Lucy"}, format="json")
        assert response.status_code == 200
        assert response.json()["notes"] == "Ask for Lucy"
        assert response.json()["name"] == "Old Name"

    def test_delete(self, auth_client, user):
        client = ClientFactory(user=user)
        response = auth_client.delete(f"/api/clients/{client.id}")
        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": True}
        assert not Client.objects.filter(id=client.id).exists()

    def test_totals(self, auth_client, user):
        client = ClientFactory(user=user)
        gig = GigFactory(user=user, client=client)
        InvoiceFactory(user=user, client=client, gig=gig, status="paid", amount=Decimal("350"))

        response = auth_client.get(f"/api/clients/{client.id}/totals")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["gig_count"] == 1
        assert data["total_paid"] == "350.00"


@pytest.mark.django_db
class TestGigsAPI:
    def test_create_with_iso_datetime(self, auth_client, user):
        client = ClientFactory(user=user)
        response = auth_client.post("/api/gigs", {
            "title": "Friday Night at Groove Lounge",
            "date": "2025-08-15T00:00:00.000Z",
            "client_id": client.id,
            "start_time": "21:00",
            "end_time": "02:00",
            "fee": "350",
        }, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["date"] == "2025-08-15"
        assert body["fee"] == "350.00"
        assert body["client_name"] == client.name

    def test_foreign_client_reference_is_403(self, auth_client, other_user):
        foreign = ClientFactory(user=other_user)
        response = auth_client.post("/api/gigs", {
            "title": "Stolen booking",
            "date": "2025-08-15",
            "client_id": foreign.id,
        }, format="json")
        assert response.status_code == 403
        assert not Gig.objects.exists()

    def test_other_users_gig_is_403(self, auth_client, other_user):
        foreign = GigFactory(user=other_user, title="Friday Night")
        assert auth_client.get(f"/api/gigs/{foreign.id}").status_code == 403
        assert auth_client.patch(f"/api/gigs/{foreign.id}", {"title": "Hijacked"}, format="json").status_code == 403
        assert auth_client.delete(f"/api/gigs/{foreign.id}").status_code == 403
        foreign.refresh_from_db()
        assert foreign.title == "Friday Night"

    def test_missing_date_rejected(self, auth_client):
        response = auth_client.post("/api/gigs", {"title": "No date"}, format="json")
        assert response.status_code == 400

    def test_gigs_by_month(self, auth_client, user):
        in_month = [
            GigFactory(user=user, date=date(2025, 8, 1)),
            GigFactory(user=user, date=date(2025, 8, 15)),
            GigFactory(user=user, date=date(2025, 8, 31)),
        ]
        GigFactory(user=user, date=date(2025, 7, 31))
        GigFactory(user=user, date=date(2025, 9, 1))
        GigFactory(date=date(2025, 8, 20))

        response = auth_client.get("/api/gigs/month/2025/8")
        assert response.status_code == 200
        assert [g["id"] for g in response.json()["data"]] == [g.id for g in in_month]

    def test_gigs_by_month_out_of_range(self, auth_client):
        response = auth_client.get("/api/gigs/month/2025/13")
        assert response.status_code == 400
        assert _error_code(response) == "VALIDATION_ERROR"

    def test_upcoming(self, auth_client, user):
        today = today_utc()
        GigFactory(user=user, date=today - timedelta(days=1))
        expected = [GigFactory(user=user, date=today + timedelta(days=n)) for n in (0, 3, 10)]

        response = auth_client.get("/api/gigs/upcoming")
        assert [g["id"] for g in response.json()["data"]] == [g.id for g in expected]

        limited = auth_client.get("/api/gigs/upcoming?limit=2")
        assert [g["id"] for g in limited.json()["data"]] == [g.id for g in expected[:2]]

    def test_upcoming_default_limit(self, auth_client, user):
        for n in range(7):
            GigFactory(user=user, date=today_utc() + timedelta(days=n))
        assert len(auth_client.get("/api/gigs/upcoming").json()["data"]) == 5

    def test_upcoming_bad_limit(self, auth_client):
        assert auth_client.get("/api/gigs/upcoming?limit=abc").status_code == 400
        assert auth_client.get("/api/gigs/upcoming?limit=0").status_code == 400


@pytest.mark.django_db
class TestInvoicesAPI:
    def test_create_invoice(self, auth_client, user):
        client = ClientFactory(user=user)
        response = auth_client.post("/api/invoices", {
            "client_id": client.id,
            "due_date": (today_utc() + timedelta(days=14)).isoformat(),
            "items": [{"description": "DJ set", "quantity": "1", "rate": "800"}],
        }, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "draft"
        assert body["effective_status"] == "draft"
        assert body["amount"] == "800.00"
        assert body["items"][0]["amount"] == "800.00"
        assert body["invoice_number"].startswith("INV-")

    def test_create_without_client_or_amount(self, auth_client, user):
        response = auth_client.post("/api/invoices", {
            "due_date": today_utc().isoformat(),
        }, format="json")
        assert response.status_code == 400
        fields = {f["field"] for f in response.json()["error"]["fields"]}
        assert {"client_id", "amount"} <= fields

    def test_nested_item_errors_are_flattened(self, auth_client, user):
        client = ClientFactory(user=user)
        response = auth_client.post("/api/invoices", {
            "client_id": client.id,
            "due_date": today_utc().isoformat(),
            "items": [{"description": "DJ set", "quantity": "1", "rate": "-5"}],
        }, format="json")
        assert response.status_code == 400
        assert response.json()["error"]["fields"][0]["field"] == "items.0.rate"

    def test_oversized_line_items_rejected(self, auth_client, user):
        client = ClientFactory(user=user)
        response = auth_client.post("/api/invoices", {
            "client_id": client.id,
            "due_date": (today_utc() + timedelta(days=14)).isoformat(),
            "items": [{"description": "Residency", "quantity": "99999999.99", "rate": "9999999999.99"}],
        }, format="json")

        assert response.status_code == 400
        assert "items.0.amount" in {f["field"] for f in response.json()["error"]["fields"]}
        assert not Invoice.objects.exists()
        assert auth_client.get("/api/invoices").status_code == 200

    def test_oversized_update_leaves_invoice_untouched(self, auth_client, user):
        invoice = InvoiceFactory(user=user)
        response = auth_client.put(f"/api/invoices/{invoice.id}", {
            "items": [{"description": "Residency", "quantity": "99999999.99", "rate": "9999999999.99"}],
        }, format="json")

        assert response.status_code == 400
        invoice.refresh_from_db()
        assert invoice.amount == Decimal("500.00")
        assert auth_client.get(f"/api/invoices/{invoice.id}").status_code == 200

    def test_other_users_invoice_is_403(self, auth_client, other_user):
        foreign = InvoiceFactory(user=other_user, notes="")
        assert auth_client.get(f"/api/invoices/{foreign.id}").status_code == 403
        assert auth_client.put(f"/api/invoices/{foreign.id}", {"notes": "mine now"}, format="json").status_code == 403
        assert auth_client.patch(f"/api/invoices/{foreign.id}", {"amount": "1"}, format="json").status_code == 403
        foreign.refresh_from_db()
        assert foreign.notes == ""
        assert foreign.amount == Decimal("500.00")

    def test_list_shows_effective_status(self, auth_client, user):
        InvoiceFactory(user=user, status="sent", due_date=today_utc() - timedelta(days=2))
        InvoiceFactory(user=user, status="paid", due_date=today_utc() - timedelta(days=2))
        InvoiceFactory(status="sent")

        listing = auth_client.get("/api/invoices").json()
        assert len(listing) == 2
        assert {(i["status"], i["effective_status"]) for i in listing} == {("sent", "overdue"), ("paid", "paid")}

    def test_update_items_recomputes_amount(self, auth_client, user):
        invoice = InvoiceFactory(
            user=user,
            amount=Decimal("100.00"),
            items=[{"description": "A", "quantity": "1.00", "rate": "100.00", "amount": "100.00"}],
        )
        response = auth_client.patch(f"/api/invoices/{invoice.id}", {
            "items": [
                {"description": "B", "quantity": "2", "rate": "75"},
                {"description": "C", "quantity": "1", "rate": "20.5"},
            ],
        }, format="json")
        assert response.status_code == 200
        assert response.json()["amount"] == "170.50"

    def test_status_endpoint(self, auth_client, user):
        invoice = InvoiceFactory(user=user)
        response = auth_client.put(f"/api/invoices/{invoice.id}/status", {"status": "sent"}, format="json")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "sent"

        response = auth_client.put(f"/api/invoices/{invoice.id}/status", {"status": "draft"}, format="json")
        assert response.status_code == 400
        assert _error_code(response) == "INVALID_STATE_TRANSITION"

    def test_status_endpoint_unknown_status(self, auth_client, user):
        invoice = InvoiceFactory(user=user)
        response = auth_client.put(f"/api/invoices/{invoice.id}/status", {"status": "void"}, format="json")
        assert response.status_code == 400
        assert _error_code(response) == "VALIDATION_ERROR"

    def test_status_endpoint_foreign_invoice(self, auth_client, other_user):
        invoice = InvoiceFactory(user=other_user)
        response = auth_client.put(f"/api/invoices/{invoice.id}/status", {"status": "paid"}, format="json")
        assert response.status_code == 403
        invoice.refresh_from_db()
        assert invoice.status == "draft"

    def test_available_transitions(self, auth_client, user):
        invoice = InvoiceFactory(user=user, status="sent")
        data = auth_client.get(f"/api/invoices/{invoice.id}/available-transitions").json()["data"]
        assert data["current_status"] == "sent"
        assert data["available_transitions"] == ["paid"]

    def test_by_status(self, auth_client, user):
        sent = InvoiceFactory(user=user, status="sent")
        InvoiceFactory(user=user, status="draft")
        response = auth_client.get("/api/invoices/status/sent")
        assert [i["id"] for i in response.json()["data"]] == [sent.id]
        assert auth_client.get("/api/invoices/status/bogus").status_code == 400

    def test_overdue(self, auth_client, user):
        late = InvoiceFactory(user=user, status="sent", due_date=today_utc() - timedelta(days=1))
        InvoiceFactory(user=user, status="sent")
        response = auth_client.get("/api/invoices/overdue")
        assert [i["id"] for i in response.json()["data"]] == [late.id]

    def test_recent(self, auth_client, user):
        invoices = [InvoiceFactory(user=user, issued_date=today_utc() - timedelta(days=n)) for n in range(7)]
        response = auth_client.get("/api/invoices/recent")
        assert [i["id"] for i in response.json()["data"]] == [i.id for i in invoices[:5]]

    def test_stats(self, auth_client, user):
        past = today_utc() - timedelta(days=1)
        InvoiceFactory(user=user, status="paid", amount=Decimal("500"), due_date=past)
        InvoiceFactory(user=user, status="sent", amount=Decimal("300"), due_date=past)
        InvoiceFactory(user=user, status="sent", amount=Decimal("200"))
        InvoiceFactory(user=user, status="draft", amount=Decimal("100"))

        data = auth_client.get("/api/invoices/stats").json()["data"]
        assert data == {
            "paid_total": "500.00",
            "pending_total": "500.00",
            "overdue_total": "300.00",
            "draft_count": 1,
            "sent_count": 2,
            "paid_count": 1,
            "overdue_count": 1,
        }

    def test_document(self, auth_client, user):
        invoice = InvoiceFactory(user=user)
        response = auth_client.get(f"/api/invoices/{invoice.id}/document")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["meta"]["number"] == invoice.invoice_number
        assert data["issuer"]["dj_name"] == "DJ Blaze"

    def test_document_without_client_is_422(self, auth_client, user):
        invoice = InvoiceFactory(user=user, client=None)
        response = auth_client.get(f"/api/invoices/{invoice.id}/document")
        assert response.status_code == 422
        assert _error_code(response) == "INVOICE_INVALID"

    def test_pdf(self, auth_client, user):
        invoice = InvoiceFactory(user=user, invoice_number="INV-2025-0815-01")
        with patch("bookings.api.views.PDFService.generate_pdf_bytes", return_value=b"%PDF-1.7 test") as render:
            response = auth_client.get(f"/api/invoices/{invoice.id}/pdf")

        assert response.status_code == 200
        assert response["Content-Type"] == "application/pdf"
        assert "Invoice-INV-2025-0815-01.pdf" in response["Content-Disposition"]
        assert b"".join(response.streaming_content) == b"%PDF-1.7 test"
        render.assert_called_once()

    def test_pdf_backend_missing_is_503(self, auth_client, user):
        invoice = InvoiceFactory(user=user)
        with patch.dict("sys.modules", {"weasyprint": None}):
            response = auth_client.get(f"/api/invoices/{invoice.id}/pdf")
        assert response.status_code == 503
        assert _error_code(response) == "SERVICE_UNAVAILABLE"

    def test_delete(self, auth_client, user):
        invoice = InvoiceFactory(user=user)
        response = auth_client.delete(f"/api/invoices/{invoice.id}")
        assert response.status_code == 200
        assert not Invoice.objects.filter(id=invoice.id).exists()

    def test_delete_foreign_invoice_is_403(self, auth_client, other_user):
        invoice = InvoiceFactory(user=other_user)
        assert auth_client.delete(f"/api/invoices/{invoice.id}").status_code == 403
        assert Invoice.objects.filter(id=invoice.id).exists()


@pytest.mark.django_db
def test_crud_returns_resource_and_actions_return_envelope(auth_client, user):
    gig = GigFactory(user=user, date=today_utc())

    detail = auth_client.get(f"/api/gigs/{gig.id}").json()
    assert detail["id"] == gig.id
    assert "success" not in detail

    upcoming = auth_client.get("/api/gigs/upcoming").json()
    assert upcoming["success"] is True
    assert upcoming["message"]
    assert [g["id"] for g in upcoming["data"]] == [gig.id]


@pytest.mark.django_db
def test_request_id_header_is_echoed(auth_client):
    response = auth_client.get("/api/clients", HTTP_X_REQUEST_ID="req-123")
    assert response["X-Request-ID"] == "req-123"


@pytest.mark.django_db
def test_health_endpoints(api_client):
    assert api_client.get("/health/").json()["status"] == "healthy"
    ready = api_client.get("/health/ready/")
    assert ready.status_code == 200
    assert ready.json()["database"] == "up"
    assert ready.json()["pdf"] in ("up", "down")
