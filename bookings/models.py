from __future__ import annotations

from decimal import Decimal
from typing import List

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from .utils import today_utc


class OwnedQuerySet(models.QuerySet):
    """Every owned entity is listed through its owner."""

    def owned_by(self, user):
        return self.filter(user=user)


class DJProfile(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="dj_profile")
    stage_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    location = models.CharField(max_length=255, blank=True)

    # Business Details
    business_name = models.CharField(max_length=255, blank=True)
    tax_id = models.CharField(max_length=100, blank=True)
    business_address = models.TextField(blank=True)
    website = models.CharField(max_length=255, blank=True)

    # Invoicing Defaults
    payment_terms = models.CharField(max_length=255, blank=True, default="Net 14 days")
    payment_method = models.CharField(max_length=255, blank=True, default="Bank Transfer")
    payment_instructions = models.TextField(blank=True)

    logo_url = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.display_name}'s Profile"

    @property
    def display_name(self) -> str:
        if self.stage_name:
            return self.stage_name
        full_name = self.user.get_full_name()
        if full_name:
            return full_name
        return self.user.email.split("@")[0]


class Client(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="clients")
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    type = models.CharField(max_length=100, blank=True)  # Venue, Promoter, ...
    notes = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ['name', 'id']

    def __str__(self):
        return self.name


class Gig(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="gigs")
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name="gigs")
    title = models.CharField(max_length=255)
    date = models.DateField(db_index=True)
    start_time = models.CharField(max_length=20, blank=True)
    end_time = models.CharField(max_length=20, blank=True)
    location = models.CharField(max_length=255, blank=True)
    fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    notes = models.TextField(blank=True)
    reminder_set = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ['date', 'id']
        indexes = [
            models.Index(fields=['user', 'date'], name='bookings_gi_user_id_5d1c2b_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.date.isoformat()})"


class Invoice(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        SENT = "sent", "Sent"
        PAID = "paid", "Paid"
        OVERDUE = "overdue", "Overdue"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="invoices")
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name="invoices")
    gig = models.ForeignKey(Gig, on_delete=models.SET_NULL, null=True, blank=True, related_name="invoices")
    invoice_number = models.CharField(max_length=50, db_index=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True)

    issued_date = models.DateField(default=today_utc)
    due_date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    # [{description, quantity, rate, amount}], replaced as a whole on edit
    items = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ['-issued_date', '-id']
        constraints = [
            models.UniqueConstraint(fields=['user', 'invoice_number'], name='unique_invoice_number_per_user'),
        ]
        indexes = [
            models.Index(fields=['user', 'status'], name='bookings_in_user_id_8a4f0e_idx'),
            models.Index(fields=['user', 'due_date'], name='bookings_in_user_id_3c7e91_idx'),
        ]

    def __str__(self):
        client_name = self.client.name if self.client else "No client"
        return f"{self.invoice_number} - {client_name}"

    @property
    def is_overdue(self) -> bool:
        if self.status == self.Status.PAID:
            return False
        return self.due_date < today_utc()

    @property
    def effective_status(self) -> str:
        if self.status == self.Status.PAID:
            return self.Status.PAID.value
        if self.is_overdue:
            return self.Status.OVERDUE.value
        return self.status

    @property
    def days_overdue(self) -> int:
        if not self.is_overdue:
            return 0
        return (today_utc() - self.due_date).days

    @property
    def line_items(self) -> List[dict]:
        return list(self.items or [])
