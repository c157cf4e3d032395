"""
User Service - Business logic for DJ accounts.

Responsibilities:
- Registration with hashed passwords
- DJ profile defaults and updates
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from ..models import DJProfile
from ..validation import FieldError, ValidationError

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
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
)


class UserService:
    """Service for account creation."""

    @staticmethod
    @transaction.atomic
    def register(email: str, password: str, name: str = "", business_name: str = "") -> "User":
        User = get_user_model()
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError.for_field("email", "Email is required", code="FIELD_REQUIRED")
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError.for_field("email", "An account with this email already exists", code="RESOURCE_ALREADY_EXISTS")

        try:
            validate_password(password)
        except DjangoValidationError as e:
            raise ValidationError(
                message="Password does not meet requirements",
                fields=[FieldError(field="password", code="FIELD_INVALID", message=m) for m in e.messages],
            )

        first_name, _, last_name = (name or "").strip().partition(" ")
        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            first_name=first_name[:150],
            last_name=last_name.strip()[:150],
        )
        ProfileService.get_or_create_profile(user, stage_name=(name or "").strip(), business_name=business_name or "")

        logger.info(f"Registered user {user.id}")
        return user


class ProfileService:
    """Service for managing DJ profiles."""

    @staticmethod
    def get_or_create_profile(user: "User", **defaults: Any) -> DJProfile:
        profile, created = DJProfile.objects.get_or_create(user=user, defaults=defaults)
        if created:
            logger.info(f"Created profile for user {user.id}")
        return profile

    @classmethod
    @transaction.atomic
    def update_profile(cls, user: "User", data: Dict[str, Any]) -> DJProfile:
        """Update name fields on the user and business details on the profile."""
        profile = cls.get_or_create_profile(user)

        user_fields = []
        for field in ("first_name", "last_name"):
            if field in data:
                setattr(user, field, data[field] or "")
                user_fields.append(field)
        if user_fields:
            user.save(update_fields=user_fields)

        for field in PROFILE_FIELDS:
            if field in data:
                setattr(profile, field, data[field] or "")
        profile.save()

        logger.info(f"Updated profile for user {user.id}")
        return profile
