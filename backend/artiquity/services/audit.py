"""Audit Trail — append-only records of license lifecycle actions.

Invariants:
    - record_audit only adds to the session; the caller commits together with
      the change being audited, so an action and its audit row land atomically
"""

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.core.domain_types import AuditAction
from artiquity.models.audit_entry import AuditEntry


def client_ip(request: Request | None) -> str | None:
    if request is None or request.client is None:
        return None
    return request.client.host


def record_audit(
    db: AsyncSession,
    action: AuditAction,
    *,
    license_row_id: str | None = None,
    user_id: str | None = None,
    request: Request | None = None,
    details: dict | None = None,
) -> AuditEntry:
    entry = AuditEntry(
        license_id=license_row_id,
        user_id=user_id,
        action=action.value,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent") if request is not None else None,
        details=details,
    )
    db.add(entry)
    return entry
