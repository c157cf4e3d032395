import logging
from typing import Any, Dict

from django.db import transaction
from django.db.models import QuerySet

from ..models import Client, Gig
from ..utils import CurrencyHelper, DateHelper, today_utc
from ..validation import ValidationError, format_validation_errors
from .ownership import get_owned_or_raise, require_user

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("start_time", "end_time", "location", "notes")


class GigService:

    @staticmethod
    def _apply(gig: Gig, user, data: Dict[str, Any], errors: Dict[str, list]) -> None:
        if "title" in data:
            title = (data.get("title") or "").strip()
            if not title:
                errors["title"] = ["Title is required"]
            gig.title = title
        if "date" in data:
            if not data["date"]:
                errors["date"] = ["Date is required"]
            else:
                gig.date = data["date"]
        if "client_id" in data:
            client_id = data["client_id"]
            gig.client = get_owned_or_raise(Client, client_id, user) if client_id is not None else None
        if "fee" in data:
            if data["fee"] is None:
                gig.fee = None
            else:
                fee = CurrencyHelper.validate_amount(data["fee"])
                if fee is None or not fee.is_finite() or fee < 0:
                    errors["fee"] = ["Fee must be a non-negative number"]
                else:
                    gig.fee = fee
        for field in TEXT_FIELDS:
            if field in data:
                setattr(gig, field, data[field] or "")
        if "reminder_set" in data:
            gig.reminder_set = bool(data["reminder_set"])

    @staticmethod
    def _raise_if_errors(errors: Dict[str, list]) -> None:
        if errors:
            raise ValidationError(message="Gig validation failed", fields=format_validation_errors(errors))

    @classmethod
    @transaction.atomic
    def create_gig(cls, user, data: Dict[str, Any]) -> Gig:
        require_user(user)
        errors: Dict[str, list] = {}
        if not (data.get("title") or "").strip():
            errors["title"] = ["Title is required"]
        if not data.get("date"):
            errors["date"] = ["Date is required"]

        gig = Gig(user=user)
        cls._apply(gig, user, data, errors)
        cls._raise_if_errors(errors)
        gig.save()

        logger.info(f"Gig {gig.id} created by user {user.id} for {gig.date}")
        return gig

    @classmethod
    @transaction.atomic
    def update_gig(cls, gig_id, user, data: Dict[str, Any]) -> Gig:
        gig = get_owned_or_raise(Gig, gig_id, user)
        errors: Dict[str, list] = {}
        cls._apply(gig, user, data, errors)
        cls._raise_if_errors(errors)
        gig.save()

        logger.info(f"Gig {gig.id} updated by user {user.id}")
        return gig

    @staticmethod
    @transaction.atomic
    def delete_gig(gig_id, user) -> bool:
        """Invoices raised for the gig are kept with the gig reference unset."""
        gig = get_owned_or_raise(Gig, gig_id, user)
        gig.delete()
        logger.info(f"Gig {gig_id} deleted by user {user.id}")
        return True

    @staticmethod
    def get_gig(gig_id, user) -> Gig:
        return get_owned_or_raise(Gig, gig_id, user)

    @staticmethod
    def list_gigs(user) -> QuerySet:
        require_user(user)
        return Gig.objects.owned_by(user).select_related("client").order_by("date", "id")

    @staticmethod
    def gigs_by_month(user, year: int, month: int) -> QuerySet:
        """Gigs dated within a calendar month; month is 1-12."""
        require_user(user)
        try:
            first, last = DateHelper.month_bounds(year, month)
        except ValueError as e:
            raise ValidationError.for_field("month", str(e), code="FIELD_OUT_OF_RANGE")
        return Gig.objects.owned_by(user).select_related("client").filter(date__range=(first, last)).order_by("date", "id")

    @staticmethod
    def upcoming_gigs(user, limit: int = 5) -> QuerySet:
        """Gigs from today (UTC) onward, soonest first."""
        require_user(user)
        if limit < 1:
            raise ValidationError.for_field("limit", "Limit must be at least 1", code="FIELD_OUT_OF_RANGE")
        return Gig.objects.owned_by(user).select_related("client").filter(date__gte=today_utc()).order_by("date", "id")[:limit]
