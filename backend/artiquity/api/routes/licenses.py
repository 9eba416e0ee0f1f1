"""License Routes — RSL license management for licensors (JWT) and the public XML endpoint.

Invariants:
    - Every stored license has XML that passed validate_rsl_xml
    - Only the owner reads, updates, deactivates or inspects a license;
      GET answers 403 to other users, the mutating routes answer 404
    - Updates merge present sections into the stored document and re-render it
    - Each mutation writes its audit row in the same commit
    - license.created / license.updated webhooks are dispatched after the
      response, to the owner's endpoints

Design Decisions:
    - The stored XML is the source of truth for partial updates (parse, merge,
      re-render): the JSON columns are projections for querying and listing
    - /rsl/{id} lives on a separate router without the /api/v1 prefix so the
      URLs advertised in Link headers, robots.txt and RSS stay short
"""

import logging
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from fastapi.responses import Response
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.api.dependencies import CurrentUser, get_current_user, get_webhook_dispatcher
from artiquity.core.domain_types import (
    AuditAction, LicenseStatus, TransactionStatus, WebhookEventType,
)
from artiquity.core.errors import (
    ConflictError, InvalidRslDocumentError, PermissionDeniedError,
    ResourceNotFoundError, ValidationFailedError,
)
from artiquity.core.distribution import build_link_headers
from artiquity.core.rsl_document import create_rsl_document
from artiquity.core.rsl_xml import generate_rsl_xml, parse_rsl_xml, validate_rsl_xml
from artiquity.core.timestamps import as_utc, iso, utc_now
from artiquity.infrastructure.database import get_db
from artiquity.models.audit_entry import AuditEntry
from artiquity.models.license_template import LicenseTemplate
from artiquity.models.payment_transaction import PaymentTransaction
from artiquity.models.rsl_license import RslLicense
from artiquity.schemas.common import Pagination
from artiquity.schemas.license import (
    ActivityEntry, DraftRequest, LicenseCreated, LicenseDetail, LicenseList,
    LicenseStats, LicenseSummary, LicenseTemplateOut, LicenseUpdate, RslDocument,
)
from artiquity.services.audit import client_ip, record_audit
from artiquity.services.webhook_dispatch import WebhookDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/licenses", tags=["licenses"])
public_router = APIRouter(tags=["rsl"])

RSL_XML_MEDIA_TYPE = "application/xml"
RECENT_ACTIVITY = 10
STATS_WINDOW = 100


# ─── Helpers ────────────────────────────────────────────────────

def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def _render(document: dict) -> str:
    xml = generate_rsl_xml(document)
    validation = validate_rsl_xml(xml)
    if not validation["valid"]:
        raise InvalidRslDocumentError(validation["errors"])
    return xml


def _apply_document(row: RslLicense, document: dict, xml: str) -> None:
    """Project the document onto the queryable columns."""
    content = document["content"]
    metadata = document.get("metadata") or {}
    row.content_id = content["hash"]
    row.title = content["title"]
    row.description = content.get("description")
    row.file_type = content["fileType"]
    row.file_size = content.get("fileSize") or 0
    row.file_hash = content["hash"]
    row.content_url = content.get("url")
    row.xml_content = xml
    row.permissions = document.get("permissions") or []
    row.user_types = document.get("userTypes") or []
    row.geographic_restrictions = document.get("geographicRestrictions") or []
    row.payment_model = document.get("paymentModel") or {}
    row.warranty_declaration = metadata.get("warranty") or {}
    row.disclaimer_config = metadata.get("disclaimer") or {}
    row.expires_at = _parse_timestamp(document.get("expiresAt"))


async def _find_license(db: AsyncSession, license_id: str) -> RslLicense | None:
    return await db.scalar(select(RslLicense).where(RslLicense.license_id == license_id))


async def get_owned_license_or_404(
    db: AsyncSession, license_id: str, user: CurrentUser,
) -> RslLicense:
    row = await _find_license(db, license_id)
    if row is None or row.user_id != user.id:
        raise ResourceNotFoundError("License", license_id, code="LICENSE_NOT_FOUND")
    return row


def _summary(row: RslLicense) -> LicenseSummary:
    return LicenseSummary(
        id=row.license_id,
        title=row.title,
        description=row.description,
        file_type=row.file_type,
        file_size=row.file_size,
        created_at=as_utc(row.created_at),
        expires_at=as_utc(row.expires_at),
        is_active=row.is_active,
    )


def _status_filter(query, license_status: LicenseStatus):
    now = utc_now()
    if license_status == LicenseStatus.ACTIVE:
        return query.where(
            RslLicense.is_active.is_(True),
            or_(RslLicense.expires_at.is_(None), RslLicense.expires_at > now),
        )
    if license_status == LicenseStatus.EXPIRED:
        return query.where(
            RslLicense.expires_at.is_not(None), RslLicense.expires_at <= now,
        )
    if license_status == LicenseStatus.INACTIVE:
        return query.where(RslLicense.is_active.is_(False))
    return query


# ─── Routes ─────────────────────────────────────────────────────

@router.post("/draft")
async def draft_license(
    body: DraftRequest,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
):
    """Build a license document from wizard options without storing it."""
    document = create_rsl_document(
        body.options.to_options(),
        body.file_info.model_dump(exclude_none=True),
        {
            "id": user.id,
            "email": user.email,
            "ipAddress": client_ip(request),
            "userAgent": request.headers.get("user-agent"),
        },
    )
    xml = generate_rsl_xml(document)
    return {"document": document, "xmlContent": xml, "validation": validate_rsl_xml(xml)}


@router.post("", response_model=LicenseCreated, status_code=status.HTTP_201_CREATED)
async def create_license(
    body: RslDocument,
    request: Request,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(get_current_user),
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
    db: AsyncSession = Depends(get_db),
):
    document = body.to_document()
    xml = _render(document)
    if await _find_license(db, body.license_id) is not None:
        raise ConflictError(
            f"License '{body.license_id}' already exists", code="LICENSE_EXISTS",
        )

    row = RslLicense(license_id=body.license_id, user_id=user.id)
    _apply_document(row, document, xml)
    db.add(row)
    await db.flush()
    record_audit(
        db, AuditAction.LICENSE_CREATED,
        license_row_id=row.id, user_id=user.id, request=request,
        details={"licenseId": body.license_id, "title": body.content.title},
    )
    await db.commit()
    logger.info(
        f"RSL license created: {body.content.title}",
        extra={"license_id": body.license_id, "user_id": user.id},
    )
    background_tasks.add_task(
        dispatcher.dispatch, user.id, WebhookEventType.LICENSE_CREATED.value,
        {"licenseId": body.license_id, "title": body.content.title},
    )
    return LicenseCreated(
        license_id=body.license_id, xml_content=xml, expires_at=body.expires_at,
    )


@router.get("", response_model=LicenseList)
async def list_licenses(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    license_status: LicenseStatus = Query(LicenseStatus.ALL, alias="status"),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's licenses, newest first."""
    base = _status_filter(
        select(RslLicense).where(RslLicense.user_id == user.id), license_status,
    )
    total = await db.scalar(select(func.count()).select_from(base.subquery()))
    rows = (await db.scalars(
        base.order_by(RslLicense.created_at.desc())
        .limit(limit).offset((page - 1) * limit)
    )).all()
    return LicenseList(
        licenses=[_summary(r) for r in rows],
        pagination=Pagination.of(page, limit, total or 0),
    )


@router.get("/templates", response_model=list[LicenseTemplateOut])
async def list_templates(db: AsyncSession = Depends(get_db)):
    """License templates, default first, then by name."""
    rows = (await db.scalars(
        select(LicenseTemplate).order_by(
            LicenseTemplate.is_default.desc(), LicenseTemplate.name.asc(),
        )
    )).all()
    return [
        LicenseTemplateOut(
            id=t.id,
            name=t.name,
            description=t.description,
            permissions=t.permissions,
            user_types=t.user_types,
            payment_model=t.payment_model,
            geographic_restrictions=t.geographic_restrictions,
            is_default=t.is_default,
        )
        for t in rows
    ]


@router.get("/{license_id}", response_model=LicenseDetail)
async def get_license(
    license_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await _find_license(db, license_id)
    if row is None or not row.is_active:
        raise ResourceNotFoundError("License", license_id, code="LICENSE_NOT_FOUND")
    if row.user_id != user.id:
        raise PermissionDeniedError("You do not have access to this license")
    return LicenseDetail(
        **_summary(row).model_dump(),
        file_hash=row.file_hash,
        content_url=row.content_url,
        xml_content=row.xml_content,
        permissions=row.permissions,
        user_types=row.user_types,
        geographic_restrictions=row.geographic_restrictions,
        payment_model=row.payment_model,
        warranty_declaration=row.warranty_declaration,
        disclaimer_config=row.disclaimer_config,
    )


@router.put("/{license_id}")
async def update_license(
    license_id: str,
    body: LicenseUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(get_current_user),
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
    db: AsyncSession = Depends(get_db),
):
    """Partial update: present sections replace the stored ones."""
    changes = body.changes()
    if not changes:
        raise ValidationFailedError("No valid updates provided", code="NO_UPDATES")
    row = await get_owned_license_or_404(db, license_id, user)

    document = {**parse_rsl_xml(row.xml_content), **changes}
    if document.get("expiresAt") is None:
        document.pop("expiresAt", None)
    xml = _render(document)
    _apply_document(row, document, xml)
    row.updated_at = utc_now()
    record_audit(
        db, AuditAction.LICENSE_UPDATED,
        license_row_id=row.id, user_id=user.id, request=request,
        details={"licenseId": license_id, "changes": sorted(changes)},
    )
    await db.commit()
    logger.info("RSL license updated", extra={"license_id": license_id, "user_id": user.id})
    background_tasks.add_task(
        dispatcher.dispatch, user.id, WebhookEventType.LICENSE_UPDATED.value,
        {"licenseId": license_id, "changes": sorted(changes)},
    )
    return {
        "success": True,
        "licenseId": license_id,
        "xmlContent": xml,
        "message": "License updated successfully",
    }


@router.delete("/{license_id}")
async def deactivate_license(
    license_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await get_owned_license_or_404(db, license_id, user)
    row.is_active = False
    row.updated_at = utc_now()
    record_audit(
        db, AuditAction.LICENSE_DEACTIVATED,
        license_row_id=row.id, user_id=user.id, request=request,
        details={"licenseId": license_id},
    )
    await db.commit()
    logger.info("RSL license deactivated", extra={"license_id": license_id, "user_id": user.id})
    return {"success": True, "message": "License deactivated successfully"}


@router.get("/{license_id}/stats", response_model=LicenseStats)
async def license_stats(
    license_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Views, downloads and revenue from the audit trail and transactions."""
    row = await get_owned_license_or_404(db, license_id, user)
    entries = (await db.scalars(
        select(AuditEntry).where(AuditEntry.license_id == row.id)
        .order_by(AuditEntry.timestamp.desc()).limit(STATS_WINDOW)
    )).all()
    payments = (await db.scalars(
        select(PaymentTransaction).where(PaymentTransaction.license_id == row.id)
    )).all()
    return LicenseStats(
        total_views=sum(e.action == AuditAction.LICENSE_VIEWED.value for e in entries),
        total_downloads=sum(e.action == AuditAction.LICENSE_DOWNLOADED.value for e in entries),
        total_payments=len(payments),
        total_revenue=round(sum(
            float(p.amount) for p in payments
            if p.status == TransactionStatus.COMPLETED.value
        ), 2),
        recent_activity=[
            ActivityEntry(
                action=e.action,
                timestamp=as_utc(e.timestamp),
                ip_address=e.ip_address,
                details=e.details or {},
            )
            for e in entries[:RECENT_ACTIVITY]
        ],
    )


# ─── Public license document ────────────────────────────────────

@public_router.get("/rsl/{license_id}")
async def public_license(
    license_id: str,
    request: Request,
    download: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """The license XML as served to crawlers and licensees."""
    row = await _find_license(db, license_id)
    if row is None or not row.is_active:
        raise ResourceNotFoundError("License", license_id, code="LICENSE_NOT_FOUND")

    action = AuditAction.LICENSE_DOWNLOADED if download else AuditAction.LICENSE_VIEWED
    record_audit(
        db, action, license_row_id=row.id, request=request,
        details={"licenseId": license_id, "at": iso(utc_now())},
    )
    await db.commit()

    headers = build_link_headers(license_id)
    if download:
        headers["Content-Disposition"] = f'attachment; filename="{license_id}.xml"'
    return Response(row.xml_content, media_type=RSL_XML_MEDIA_TYPE, headers=headers)
