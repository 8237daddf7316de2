"""
Permission helpers for ownership checks.

Admins may act on any question or event; everyone else only on their own.
"""
from typing import Optional

from campus_connect.db import models
from campus_connect.utils.roles import ROLE_ADMIN


def is_admin(user: Optional[models.User]) -> bool:
    return bool(user is not None and user.role == ROLE_ADMIN)


def can_modify(owner_id: Optional[int], user: Optional[models.User]) -> bool:
    """True when ``user`` owns the resource or is an admin."""
    if user is None:
        return False
    if is_admin(user):
        return True
    return owner_id is not None and owner_id == user.id
