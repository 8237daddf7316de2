"""
User role constants.

Roles gate route authorization; the values are stored verbatim in
``users.role``.
"""

from typing import FrozenSet

ROLE_STUDENT = "student"
ROLE_MENTOR = "mentor"
ROLE_ADMIN = "admin"

ALL_ROLES: FrozenSet[str] = frozenset({ROLE_STUDENT, ROLE_MENTOR, ROLE_ADMIN})
