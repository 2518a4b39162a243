# app/dependencies.py
"""
Organization context for org-scoped routes.

Authentication happens upstream (API gateway / auth service); it forwards the
caller's organization and role as headers, which are trusted here as-is.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from app.config import settings
from app.exceptions import ForbiddenError


@dataclass
class OrgContext:
    organization_id: int
    role: str


def get_org_context(
    org_id: int,
    x_organization_id: Optional[int] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> OrgContext:
    """Requires an organization admin acting on their own organization."""
    if x_organization_id is None:
        raise ForbiddenError("Missing organization context")
    if x_user_role != settings.ORG_ADMIN_ROLE:
        raise ForbiddenError("Organization admin role required")
    if org_id != x_organization_id:
        raise ForbiddenError("Cannot act on another organization")
    return OrgContext(organization_id=x_organization_id, role=x_user_role)
