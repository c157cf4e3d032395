"""
Ownership checks shared by every single-resource operation.

A missing id is NotFound; a record owned by someone else is Forbidden.
Storage itself never filters by owner on single-record reads.
"""

from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar

from django.db import models

from ..validation import Forbidden, NotFound, Unauthorized

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=models.Model)


def require_user(user) -> None:
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthorized()


def get_owned_or_raise(model: Type[M], pk, user, queryset: Optional[models.QuerySet] = None) -> M:
    require_user(user)
    label = model._meta.verbose_name.title()
    qs = queryset if queryset is not None else model._default_manager.all()
    try:
        obj = qs.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} not found")

    if obj.user_id != user.id:
        logger.warning(f"User {user.id} denied access to {label} {pk} owned by user {obj.user_id}")
        raise Forbidden(f"You do not have access to this {label.lower()}")
    return obj
