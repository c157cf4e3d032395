from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from bookings.models import Client, DJProfile, Gig, Invoice

from .fields import IsoDateField


class ClientSerializer(serializers.ModelSerializer):
    tags = serializers.ListField(
        child=serializers.CharField(max_length=100, allow_blank=True),
        required=False,
    )

    class Meta:
        model = Client
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "type",
            "notes",
            "tags",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ClientTotalsSerializer(serializers.Serializer):
    client_id = serializers.IntegerField()
    gig_count = serializers.IntegerField()
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)


class GigSerializer(serializers.ModelSerializer):
    client_id = serializers.IntegerField(allow_null=True, required=False)
    client_name = serializers.SerializerMethodField()
    date = IsoDateField()
    fee = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        allow_null=True,
        required=False,
    )

    class Meta:
        model = Gig
        fields = [
            "id",
            "client_id",
            "client_name",
            "title",
            "date",
            "start_time",
            "end_time",
            "location",
            "fee",
            "notes",
            "reminder_set",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "client_name", "created_at", "updated_at"]

    def get_client_name(self, obj) -> str:
        return obj.client.name if obj.client else None


class LineItemSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=500)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"), default=Decimal("1"))
    rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class InvoiceSerializer(serializers.ModelSerializer):
    client_id = serializers.IntegerField(read_only=True, allow_null=True)
    client_name = serializers.SerializerMethodField()
    gig_id = serializers.IntegerField(read_only=True, allow_null=True)
    effective_status = serializers.CharField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)
    days_overdue = serializers.IntegerField(read_only=True)
    items = LineItemSerializer(many=True, read_only=True, source="line_items")

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "client_id",
            "client_name",
            "gig_id",
            "status",
            "effective_status",
            "is_overdue",
            "days_overdue",
            "issued_date",
            "due_date",
            "amount",
            "items",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_client_name(self, obj) -> str:
        return obj.client.name if obj.client else None


class InvoiceCreateSerializer(serializers.Serializer):
    client_id = serializers.IntegerField(required=False, allow_null=True)
    gig_id = serializers.IntegerField(required=False, allow_null=True)
    invoice_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    issued_date = IsoDateField(required=False)
    due_date = IsoDateField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False)
    items = LineItemSerializer(many=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class InvoiceUpdateSerializer(InvoiceCreateSerializer):
    """Every field optional; status changes go through the status endpoint."""

    due_date = IsoDateField(required=False)


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)


class InvoiceStatsSerializer(serializers.Serializer):
    paid_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    overdue_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    draft_count = serializers.IntegerField()
    sent_count = serializers.IntegerField()
    paid_count = serializers.IntegerField()
    overdue_count = serializers.IntegerField()


class DJProfileSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = DJProfile
        fields = [
            "display_name",
            "stage_name",
            "phone",
            "location",
            "business_name",
            "tax_id",
            "business_address",
            "website",
            "payment_terms",
            "payment_method",
            "payment_instructions",
            "logo_url",
        ]


class UserSerializer(serializers.ModelSerializer):
    profile = serializers.SerializerMethodField()

    class Meta:
        model = get_user_model()
        fields = ["id", "email", "first_name", "last_name", "profile"]
        read_only_fields = fields

    def get_profile(self, obj) -> dict:
        profile = getattr(obj, "dj_profile", None)
        return DJProfileSerializer(profile).data if profile else None


class ProfileUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    stage_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    business_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    tax_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    business_address = serializers.CharField(required=False, allow_blank=True)
    website = serializers.CharField(max_length=255, required=False, allow_blank=True)
    payment_terms = serializers.CharField(max_length=255, required=False, allow_blank=True)
    payment_method = serializers.CharField(max_length=255, required=False, allow_blank=True)
    payment_instructions = serializers.CharField(required=False, allow_blank=True)
    logo_url = serializers.CharField(max_length=500, required=False, allow_blank=True)


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8, style={"input_type": "password"})
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    business_name = serializers.CharField(max_length=255, required=False, allow_blank=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})
