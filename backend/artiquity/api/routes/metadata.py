"""Metadata Routes — embed licenses into files, extract them, and publish them.

Invariants:
    - embed: 400 NO_FILE, 413 over max_upload_bytes, 404 unknown/inactive license
    - The embedded payload is always the stored license XML; the compact
      summary is rebuilt from the stored document
    - Each embed writes one file_metadata row with the format actually used
      (after any sidecar fallback) and one metadata_embedded audit row
    - extract is public, never mutates state, 413 over max_upload_bytes

Design Decisions:
    - Embedding is synchronous CPU work on an in-memory upload; uploads are
      bounded by max_upload_bytes, so no thread offloading
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.api.dependencies import OAuthPrincipal, get_oauth_principal, user_rate_limit
from artiquity.config import get_settings
from artiquity.core.distribution import build_link_headers, build_robots_txt, build_rss_feed
from artiquity.core.domain_types import AuditAction, MetadataFormat
from artiquity.core.errors import (
    PayloadTooLargeError, ResourceNotFoundError, ValidationFailedError,
)
from artiquity.core.rsl_document import license_options_from_document
from artiquity.core.rsl_metadata import create_rsl_metadata, detect_format
from artiquity.core.rsl_xml import parse_rsl_xml, validate_rsl_xml
from artiquity.infrastructure.database import get_db
from artiquity.models.file_metadata import FileMetadata
from artiquity.models.rsl_license import RslLicense
from artiquity.schemas.metadata import (
    LinkHeadersRequest, LinkHeadersResponse, RobotsTxtRequest, RssFeedRequest,
)
from artiquity.services.audit import record_audit
from artiquity.services.metadata_embedder import embed
from artiquity.services.metadata_extractor import extract

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/metadata", tags=["metadata"])


async def get_active_license_or_404(db: AsyncSession, license_id: str) -> RslLicense:
    row = await db.scalar(
        select(RslLicense).where(
            RslLicense.license_id == license_id,
            RslLicense.is_active.is_(True),
        )
    )
    if row is None:
        raise ResourceNotFoundError("License", license_id, code="LICENSE_NOT_FOUND")
    return row


async def _read_upload(file: UploadFile | None, limit: int) -> bytes:
    if file is None or not file.filename:
        raise ValidationFailedError("No file provided", field="file", code="NO_FILE")
    data = await file.read()
    if len(data) > limit:
        raise PayloadTooLargeError(len(data), limit)
    return data


def _attachment(file_name: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{file_name}"'}


@router.post("/embed", dependencies=[Depends(user_rate_limit)])
async def embed_metadata(
    request: Request,
    file: UploadFile | None = File(None),
    license_id: str = Form(..., alias="licenseId"),
    format: MetadataFormat | None = Form(None),
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    """Return the uploaded file with the license embedded (or its sidecar)."""
    settings = get_settings()
    data = await _read_upload(file, settings.max_upload_bytes)
    row = await get_active_license_or_404(db, license_id)

    mime_type = file.content_type or "application/octet-stream"
    fmt = format or detect_format(mime_type)
    document = parse_rsl_xml(row.xml_content)
    metadata = create_rsl_metadata(
        license_options_from_document(document),
        license_server=settings.license_server_url,
        contact=settings.contact_email,
    )
    result = embed(data, file.filename, mime_type, row.xml_content, metadata, fmt)

    db.add(FileMetadata(
        license_id=row.id,
        file_path=file.filename,
        metadata_type=result.metadata_type,
        embedded_data=row.xml_content,
        position=result.position,
        size=result.size,
    ))
    record_audit(
        db, AuditAction.METADATA_EMBEDDED,
        license_row_id=row.id, user_id=principal.id, request=request,
        details={
            "fileName": file.filename,
            "fileSize": len(data),
            "metadataType": result.metadata_type,
            "format": fmt.value,
        },
    )
    await db.commit()
    logger.info(
        f"Embedded {result.metadata_type} metadata into {file.filename}",
        extra={"license_id": license_id, "user_id": principal.owner_id},
    )
    return Response(
        result.data, media_type=result.mime_type, headers=_attachment(result.file_name),
    )


@router.post("/extract")
async def extract_metadata(file: UploadFile | None = File(None)):
    data = await _read_upload(file, get_settings().max_upload_bytes)
    xml = extract(data, file.filename, file.content_type)
    if xml is None:
        raise ResourceNotFoundError("RSL metadata", file.filename, code="NO_METADATA")

    body = {
        "success": True,
        "metadata": xml,
        "validation": validate_rsl_xml(xml),
        "fileInfo": {"name": file.filename, "size": len(data), "type": file.content_type},
    }
    try:
        body["document"] = parse_rsl_xml(xml)
    except ValueError as e:
        logger.info(f"Extracted metadata from {file.filename} is not parseable: {e}")
    return body


@router.post("/robots-txt", dependencies=[Depends(user_rate_limit)])
async def robots_txt(
    body: RobotsTxtRequest,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    row = await get_active_license_or_404(db, body.license_id)
    content = build_robots_txt(
        body.domain, row.license_id, row.created_at, row.expires_at,
        body.additional_directives,
    )
    return Response(content, media_type="text/plain", headers=_attachment("robots.txt"))


@router.post(
    "/link-headers", response_model=LinkHeadersResponse,
    dependencies=[Depends(user_rate_limit)],
)
async def link_headers(
    body: LinkHeadersRequest,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    row = await get_active_license_or_404(db, body.license_id)
    return LinkHeadersResponse(
        headers=build_link_headers(row.license_id, body.content_type),
        license_id=row.license_id,
    )


@router.post("/rss-feed", dependencies=[Depends(user_rate_limit)])
async def rss_feed(
    body: RssFeedRequest,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    rows = (await db.scalars(
        select(RslLicense)
        .where(
            RslLicense.license_id.in_(body.license_ids),
            RslLicense.is_active.is_(True),
        )
        .order_by(RslLicense.created_at.desc())
    )).all()
    if not rows:
        raise ResourceNotFoundError(
            "Licenses", ", ".join(body.license_ids), code="LICENSE_NOT_FOUND",
        )
    feed = build_rss_feed(
        [
            {
                "licenseId": r.license_id,
                "title": r.title,
                "description": r.description,
                "createdAt": r.created_at,
                "fileType": r.file_type,
                "fileSize": r.file_size,
                "permissions": r.permissions,
                "paymentModel": r.payment_model,
            }
            for r in rows
        ],
        title=body.feed_title,
        description=body.feed_description,
        feed_url=body.feed_url or get_settings().public_base_url,
    )
    return Response(
        feed, media_type="application/rss+xml", headers=_attachment("rsl-feed.rss"),
    )
