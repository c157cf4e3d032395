"""
Client Service - Business logic for the DJ's address book.

Responsibilities:
- Client CRUD scoped to the owning user
- Tag normalization
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from django.db import transaction
from django.db.models import QuerySet

from ..models import Client
from ..validation import ValidationError
from .ownership import get_owned_or_raise, require_user

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "type", "notes")


class ClientService:
    """Service for managing clients (venues, promoters, private hosts)."""

    @staticmethod
    def normalize_tags(tags: Any) -> List[str]:
        if tags is None:
            return []
        if not isinstance(tags, (list, tuple)):
            raise ValidationError.for_field("tags", "Tags must be a list of strings")
        normalized = []
        for tag in tags:
            if not isinstance(tag, str):
                raise ValidationError.for_field("tags", "Tags must be a list of strings")
            tag = tag.strip()
            if tag and tag not in normalized:
                normalized.append(tag)
        return normalized

    @staticmethod
    def list_clients(user) -> QuerySet:
        require_user(user)
        return Client.objects.owned_by(user).order_by("name", "id")

    @staticmethod
    def get_client(client_id, user) -> Client:
        return get_owned_or_raise(Client, client_id, user)

    @classmethod
    @transaction.atomic
    def create_client(cls, user, data: Dict[str, Any]) -> Client:
        require_user(user)
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError.for_field("name", "Client name is required", code="FIELD_REQUIRED")

        client = Client(user=user, name=name, tags=cls.normalize_tags(data.get("tags")))
        for field in EDITABLE_FIELDS[1:]:
            setattr(client, field, data.get(field) or "")
        client.save()

        logger.info(f"Client {client.id} created by user {user.id}")
        return client

    @classmethod
    @transaction.atomic
    def update_client(cls, client_id, user, data: Dict[str, Any]) -> Client:
        client = get_owned_or_raise(Client, client_id, user)

        if "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError.for_field("name", "Client name is required", code="FIELD_REQUIRED")
            client.name = name
        for field in EDITABLE_FIELDS[1:]:
            if field in data:
                setattr(client, field, data[field] or "")
        if "tags" in data:
            client.tags = cls.normalize_tags(data["tags"])

        client.save()
        logger.info(f"Client {client.id} updated by user {user.id}")
        return client

    @staticmethod
    @transaction.atomic
    def delete_client(client_id, user) -> bool:
        """Gigs and invoices that referenced the client keep existing with client unset."""
        client = get_owned_or_raise(Client, client_id, user)
        client.delete()
        logger.info(f"Client {client_id} deleted by user {user.id}")
        return True
