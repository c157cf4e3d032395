from io import BytesIO
from typing import Any, Dict, Optional, cast

from django.conf import settings
from django.http import FileResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from bookings.models import Client, Gig, Invoice
from bookings.services import (
    ClientService,
    DocumentService,
    GigService,
    InvoiceService,
    PDFService,
    get_owned_or_raise,
)
from bookings.validation import ValidationError

from .permissions import IsOwner
from .response import APIResponse
from .serializers import (
    ClientSerializer,
    ClientTotalsSerializer,
    GigSerializer,
    InvoiceCreateSerializer,
    InvoiceSerializer,
    InvoiceStatsSerializer,
    InvoiceStatusSerializer,
    InvoiceUpdateSerializer,
)


def _id_param(label: str) -> OpenApiParameter:
    return OpenApiParameter(
        name="pk",
        description=f"{label} ID",
        required=True,
        type=OpenApiTypes.INT,
        location=OpenApiParameter.PATH,
    )


CLIENT_ID_PARAM = _id_param("Client")
GIG_ID_PARAM = _id_param("Gig")
INVOICE_ID_PARAM = _id_param("Invoice")

LIMIT_PARAM = OpenApiParameter(
    name="limit",
    description="Maximum number of results",
    required=False,
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
)

# CRUD reads and writes answer with the resource itself; delete and custom
# actions answer with the APIResponse envelope.
RESOURCE_BODY = "Responds with the bare resource (no envelope)."
ENVELOPE_BODY = "Responds with the {success, message, data} envelope."


def _describe(text: str, body: str) -> str:
    return f"{text} {body}" if text else body


def parse_limit(request: Request, default: int) -> int:
    raw = request.query_params.get("limit")
    if raw in (None, ""):
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValidationError.for_field("limit", "Limit must be a whole number")
    if limit < 1:
        raise ValidationError.for_field("limit", "Limit must be at least 1", code="FIELD_OUT_OF_RANGE")
    return limit


class OwnedObjectMixin:
    """
    Detail routes resolve through get_owned_or_raise so a missing id is a 404
    and another user's id is a 403. List routes filter by owner instead.
    """

    model = None
    permission_classes = [IsAuthenticated, IsOwner]
    lookup_value_regex = r"\d+"

    def get_object(self):
        obj = get_owned_or_raise(self.model, self.kwargs[self.lookup_url_kwarg or self.lookup_field], self.request.user)
        self.check_object_permissions(self.request, obj)
        return obj

    def validated(self, serializer_class, partial: bool = False) -> Dict[str, Any]:
        serializer = serializer_class(data=self.request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        return cast(Dict[str, Any], serializer.validated_data)


# ------------------------------
# Client ViewSet
# ------------------------------
@extend_schema_view(
    list=extend_schema(summary="List clients", description=_describe("All clients of the authenticated DJ, by name.", RESOURCE_BODY)),
    retrieve=extend_schema(summary="Get client", description=RESOURCE_BODY, parameters=[CLIENT_ID_PARAM]),
    create=extend_schema(summary="Create client", description=RESOURCE_BODY),
    update=extend_schema(summary="Update client", description=RESOURCE_BODY, parameters=[CLIENT_ID_PARAM]),
    partial_update=extend_schema(summary="Partial update client", description=RESOURCE_BODY, parameters=[CLIENT_ID_PARAM]),
    destroy=extend_schema(summary="Delete client", description=ENVELOPE_BODY, parameters=[CLIENT_ID_PARAM]),
)
class ClientViewSet(OwnedObjectMixin, viewsets.GenericViewSet):
    model = Client
    queryset = Client.objects.none()
    serializer_class = ClientSerializer

    def list(self, request: Request) -> Response:
        clients = ClientService.list_clients(request.user)
        return Response(ClientSerializer(clients, many=True).data)

    def retrieve(self, request: Request, pk: Optional[int] = None) -> Response:
        return Response(ClientSerializer(self.get_object()).data)

    def create(self, request: Request) -> Response:
        client = ClientService.create_client(request.user, self.validated(ClientSerializer))
        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: Optional[int] = None, partial: bool = False) -> Response:
        self.get_object()
        data = self.validated(ClientSerializer, partial=partial)
        client = ClientService.update_client(pk, request.user, data)
        return Response(ClientSerializer(client).data)

    def partial_update(self, request: Request, pk: Optional[int] = None) -> Response:
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request: Request, pk: Optional[int] = None) -> Response:
        ClientService.delete_client(pk, request.user)
        return APIResponse.deleted(message="Client deleted.")

    @extend_schema(
        summary="Client totals",
        description=_describe("Distinct gigs linked to the client and the sum of its paid invoices.", ENVELOPE_BODY),
        responses={200: ClientTotalsSerializer},
        parameters=[CLIENT_ID_PARAM],
    )
    @action(detail=True, methods=["get"], url_path="totals")
    def totals(self, request: Request, pk: Optional[int] = None) -> Response:
        totals = InvoiceService.per_client_totals(request.user, pk)
        return APIResponse.success(
            data=ClientTotalsSerializer(totals).data,
            message="Client totals retrieved.",
        )


# ------------------------------
# Gig ViewSet
# ------------------------------
@extend_schema_view(
    list=extend_schema(summary="List gigs", description=_describe("All gigs of the authenticated DJ, soonest first.", RESOURCE_BODY)),
    retrieve=extend_schema(summary="Get gig", description=RESOURCE_BODY, parameters=[GIG_ID_PARAM]),
    create=extend_schema(summary="Create gig", description=_describe("Date accepts YYYY-MM-DD or an ISO 8601 datetime.", RESOURCE_BODY)),
    update=extend_schema(summary="Update gig", description=RESOURCE_BODY, parameters=[GIG_ID_PARAM]),
    partial_update=extend_schema(summary="Partial update gig", description=RESOURCE_BODY, parameters=[GIG_ID_PARAM]),
    destroy=extend_schema(summary="Delete gig", description=ENVELOPE_BODY, parameters=[GIG_ID_PARAM]),
)
class GigViewSet(OwnedObjectMixin, viewsets.GenericViewSet):
    model = Gig
    queryset = Gig.objects.none()
    serializer_class = GigSerializer

    def list(self, request: Request) -> Response:
        return Response(GigSerializer(GigService.list_gigs(request.user), many=True).data)

    def retrieve(self, request: Request, pk: Optional[int] = None) -> Response:
        return Response(GigSerializer(self.get_object()).data)

    def create(self, request: Request) -> Response:
        gig = GigService.create_gig(request.user, self.validated(GigSerializer))
        return Response(GigSerializer(gig).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: Optional[int] = None, partial: bool = False) -> Response:
        self.get_object()
        gig = GigService.update_gig(pk, request.user, self.validated(GigSerializer, partial=partial))
        return Response(GigSerializer(gig).data)

    def partial_update(self, request: Request, pk: Optional[int] = None) -> Response:
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request: Request, pk: Optional[int] = None) -> Response:
        GigService.delete_gig(pk, request.user)
        return APIResponse.deleted(message="Gig deleted.")

    @extend_schema(
        summary="Gigs in a month",
        description=_describe("Gigs dated within the given calendar month (1-12).", ENVELOPE_BODY),
        responses={200: GigSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path=r"month/(?P<year>\d{4})/(?P<month>\d{1,2})")
    def by_month(self, request: Request, year: str, month: str) -> Response:
        gigs = GigService.gigs_by_month(request.user, int(year), int(month))
        return APIResponse.success(
            data=GigSerializer(gigs, many=True).data,
            message="Gigs retrieved.",
        )

    @extend_schema(
        summary="Upcoming gigs",
        description=_describe("Gigs from today onward, soonest first.", ENVELOPE_BODY),
        responses={200: GigSerializer(many=True)},
        parameters=[LIMIT_PARAM],
    )
    @action(detail=False, methods=["get"], url_path="upcoming")
    def upcoming(self, request: Request) -> Response:
        limit = parse_limit(request, settings.UPCOMING_GIGS_DEFAULT_LIMIT)
        gigs = GigService.upcoming_gigs(request.user, limit)
        return APIResponse.success(
            data=GigSerializer(gigs, many=True).data,
            message="Upcoming gigs retrieved.",
        )


# ------------------------------
# Invoice ViewSet
# ------------------------------
@extend_schema_view(
    list=extend_schema(summary="List invoices", description=_describe("All invoices of the authenticated DJ, most recently issued first.", RESOURCE_BODY)),
    retrieve=extend_schema(summary="Get invoice details", description=RESOURCE_BODY, parameters=[INVOICE_ID_PARAM]),
    create=extend_schema(
        summary="Create invoice",
        description=_describe("Create a draft invoice. Line item amounts and the invoice total are computed server side.", RESOURCE_BODY),
        request=InvoiceCreateSerializer,
        responses={201: InvoiceSerializer},
    ),
    update=extend_schema(
        summary="Update invoice",
        description=_describe("Items, when sent, replace the whole list. Status is changed through the status endpoint.", RESOURCE_BODY),
        request=InvoiceUpdateSerializer,
        responses={200: InvoiceSerializer},
        parameters=[INVOICE_ID_PARAM],
    ),
    partial_update=extend_schema(
        summary="Partial update invoice",
        description=RESOURCE_BODY,
        request=InvoiceUpdateSerializer,
        responses={200: InvoiceSerializer},
        parameters=[INVOICE_ID_PARAM],
    ),
    destroy=extend_schema(summary="Delete invoice", description=ENVELOPE_BODY, parameters=[INVOICE_ID_PARAM]),
)
class InvoiceViewSet(OwnedObjectMixin, viewsets.GenericViewSet):
    model = Invoice
    queryset = Invoice.objects.none()
    serializer_class = InvoiceSerializer

    def list(self, request: Request) -> Response:
        return Response(InvoiceSerializer(InvoiceService.list_invoices(request.user), many=True).data)

    def retrieve(self, request: Request, pk: Optional[int] = None) -> Response:
        return Response(InvoiceSerializer(self.get_object()).data)

    def create(self, request: Request) -> Response:
        invoice = InvoiceService.create_invoice(request.user, self.validated(InvoiceCreateSerializer))
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: Optional[int] = None) -> Response:
        # every field is optional, so PUT and PATCH share one code path
        self.get_object()
        data = self.validated(InvoiceUpdateSerializer)
        invoice = InvoiceService.update_invoice(pk, request.user, data)
        return Response(InvoiceSerializer(invoice).data)

    def partial_update(self, request: Request, pk: Optional[int] = None) -> Response:
        return self.update(request, pk=pk)

    def destroy(self, request: Request, pk: Optional[int] = None) -> Response:
        InvoiceService.delete_invoice(pk, request.user)
        return APIResponse.deleted(message="Invoice deleted.")

    @extend_schema(
        summary="Update invoice status",
        description=_describe("Move an invoice along draft -> sent -> paid. Overdue is derived from the due date and cannot be set.", ENVELOPE_BODY),
        request=InvoiceStatusSerializer,
        responses={200: InvoiceSerializer},
        parameters=[INVOICE_ID_PARAM],
    )
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: Optional[int] = None) -> Response:
        data = self.validated(InvoiceStatusSerializer)
        invoice = InvoiceService.update_status(pk, request.user, data["status"])
        return APIResponse.success(
            data=InvoiceSerializer(invoice).data,
            message="Invoice status updated.",
        )

    @extend_schema(
        summary="Get available status transitions",
        description=ENVELOPE_BODY,
        responses={200: {"type": "object", "properties": {"current_status": {"type": "string"}, "available_transitions": {"type": "array", "items": {"type": "string"}}}}},
        parameters=[INVOICE_ID_PARAM],
    )
    @action(detail=True, methods=["get"], url_path="available-transitions")
    def available_transitions(self, request: Request, pk: Optional[int] = None) -> Response:
        invoice = self.get_object()
        return APIResponse.success(
            data={
                "current_status": invoice.status,
                "effective_status": invoice.effective_status,
                "available_transitions": InvoiceService.available_transitions(invoice),
            },
            message="Available transitions retrieved.",
        )

    @extend_schema(
        summary="Invoices by stored status",
        description=ENVELOPE_BODY,
        responses={200: InvoiceSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path=r"status/(?P<status_value>[^/.]+)")
    def by_status(self, request: Request, status_value: str) -> Response:
        invoices = InvoiceService.list_by_status(request.user, status_value)
        return APIResponse.success(
            data=InvoiceSerializer(invoices, many=True).data,
            message="Invoices retrieved.",
        )

    @extend_schema(
        summary="Overdue invoices",
        description=_describe("Unpaid invoices whose due date has passed, oldest due date first.", ENVELOPE_BODY),
        responses={200: InvoiceSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="overdue")
    def overdue(self, request: Request) -> Response:
        invoices = InvoiceService.list_overdue(request.user)
        return APIResponse.success(
            data=InvoiceSerializer(invoices, many=True).data,
            message="Overdue invoices retrieved.",
        )

    @extend_schema(
        summary="Recent invoices",
        description=_describe("Most recently issued first.", ENVELOPE_BODY),
        responses={200: InvoiceSerializer(many=True)},
        parameters=[LIMIT_PARAM],
    )
    @action(detail=False, methods=["get"], url_path="recent")
    def recent(self, request: Request) -> Response:
        limit = parse_limit(request, settings.RECENT_INVOICES_DEFAULT_LIMIT)
        invoices = InvoiceService.recent_invoices(request.user, limit)
        return APIResponse.success(
            data=InvoiceSerializer(invoices, many=True).data,
            message="Recent invoices retrieved.",
        )

    @extend_schema(
        summary="Get dashboard statistics",
        description=_describe("Paid, pending and overdue totals with per-status counts.", ENVELOPE_BODY),
        responses={200: InvoiceStatsSerializer},
    )
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request: Request) -> Response:
        totals = InvoiceService.aggregate_totals(request.user)
        return APIResponse.success(
            data=InvoiceStatsSerializer(totals).data,
            message="Dashboard statistics retrieved.",
        )

    @extend_schema(
        summary="Invoice document",
        description=_describe("The printable invoice as structured JSON.", ENVELOPE_BODY),
        parameters=[INVOICE_ID_PARAM],
    )
    @action(detail=True, methods=["get"], url_path="document")
    def document(self, request: Request, pk: Optional[int] = None) -> Response:
        document = DocumentService.build_for_invoice(pk, request.user)
        return APIResponse.success(
            data=document.to_dict(),
            message="Invoice document built.",
        )

    @extend_schema(
        summary="Generate PDF",
        description="Generate and download the PDF for an invoice. Responds with the PDF file, or the error envelope.",
        responses={200: {"type": "string", "format": "binary"}},
        parameters=[INVOICE_ID_PARAM],
    )
    @action(detail=True, methods=["get"], url_path="pdf")
    def generate_pdf(self, request: Request, pk: Optional[int] = None) -> FileResponse:
        document = DocumentService.build_for_invoice(pk, request.user)
        pdf_bytes = PDFService.generate_pdf_bytes(document)
        return FileResponse(
            BytesIO(pdf_bytes),
            as_attachment=True,
            filename=PDFService.get_invoice_filename(document),
            content_type="application/pdf",
        )
