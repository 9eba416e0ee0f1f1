"""Webhook Routes — endpoint management, test delivery and delivery history (OAuth).

Invariants:
    - Endpoints belong to the principal's owner id; other owners get 404
    - Each endpoint gets a fresh 32-byte hex signing secret, shown once at registration
    - events must be a non-empty subset of WebhookEventType
    - Deleting an endpoint deletes its delivery history

Design Decisions:
    - Test deliveries go through the same deliver() as domain events, so they
      are signed and recorded exactly like real ones
"""

import json
import logging
import secrets
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.api.dependencies import (
    OAuthPrincipal, get_oauth_principal, get_webhook_sender, user_rate_limit,
)
from artiquity.core.domain_types import WebhookEventType
from artiquity.core.errors import ResourceNotFoundError, ValidationFailedError
from artiquity.core.timestamps import as_utc, iso, utc_now
from artiquity.infrastructure.database import get_db
from artiquity.infrastructure.webhook_sender import WebhookSender
from artiquity.models.webhook_endpoint import WebhookDelivery, WebhookEndpoint
from artiquity.schemas.common import Pagination
from artiquity.schemas.webhook import (
    DeliveryHistory, DeliveryOut, WebhookCreate, WebhookCreated, WebhookOut,
    WebhookUpdate,
)
from artiquity.services.webhook_dispatch import build_event, deliver

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/webhooks", tags=["webhooks"],
    dependencies=[Depends(user_rate_limit)],
)

TEST_EVENT_TYPE = "webhook.test"
_VALID_EVENTS = {e.value for e in WebhookEventType}


def check_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationFailedError("Invalid webhook URL", field="url", code="INVALID_URL")
    return url


def check_events(events: list[str]) -> list[str]:
    invalid = [e for e in events if e not in _VALID_EVENTS]
    if invalid:
        raise ValidationFailedError(
            f"Invalid events: {', '.join(invalid)}", field="events", code="INVALID_EVENTS",
        )
    if not events:
        raise ValidationFailedError(
            "At least one event is required", field="events", code="INVALID_EVENTS",
        )
    return list(dict.fromkeys(events))


async def get_webhook_or_404(
    db: AsyncSession, webhook_id: str, principal: OAuthPrincipal,
) -> WebhookEndpoint:
    endpoint = await db.scalar(
        select(WebhookEndpoint).where(
            WebhookEndpoint.id == webhook_id,
            WebhookEndpoint.owner_id == principal.owner_id,
        )
    )
    if endpoint is None:
        raise ResourceNotFoundError("Webhook", webhook_id, code="WEBHOOK_NOT_FOUND")
    return endpoint


@router.post("/register", response_model=WebhookCreated, status_code=status.HTTP_201_CREATED)
async def register_webhook(
    body: WebhookCreate,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    url = check_url(body.url)
    events = check_events(body.events)
    endpoint = WebhookEndpoint(
        owner_id=principal.owner_id,
        url=url,
        events=events,
        secret=secrets.token_hex(32),
    )
    db.add(endpoint)
    await db.commit()
    logger.info(
        f"Webhook endpoint registered for {', '.join(events)}",
        extra={"user_id": principal.owner_id},
    )
    return WebhookCreated(
        webhook_id=endpoint.id, secret=endpoint.secret, url=url, events=events,
    )


@router.get("/list", response_model=list[WebhookOut])
async def list_webhooks(
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    rows = (await db.scalars(
        select(WebhookEndpoint)
        .where(WebhookEndpoint.owner_id == principal.owner_id)
        .order_by(WebhookEndpoint.created_at.desc())
    )).all()
    return [
        WebhookOut(
            id=w.id, url=w.url, events=w.events,
            is_active=w.is_active, created_at=as_utc(w.created_at),
        )
        for w in rows
    ]


@router.put("/{webhook_id}")
async def update_webhook(
    webhook_id: str,
    body: WebhookUpdate,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise ValidationFailedError("No valid updates provided", code="NO_UPDATES")
    endpoint = await get_webhook_or_404(db, webhook_id, principal)
    if body.url is not None:
        endpoint.url = check_url(body.url)
    if body.events is not None:
        endpoint.events = check_events(body.events)
    if body.is_active is not None:
        endpoint.is_active = body.is_active
    await db.commit()
    logger.info(f"Webhook {webhook_id} updated: {sorted(changes)}")
    return {"success": True, "message": "Webhook endpoint updated successfully"}


@router.delete("/{webhook_id}")
async def delete_webhook(
    webhook_id: str,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    await get_webhook_or_404(db, webhook_id, principal)
    await db.execute(delete(WebhookDelivery).where(WebhookDelivery.webhook_id == webhook_id))
    await db.execute(delete(WebhookEndpoint).where(WebhookEndpoint.id == webhook_id))
    await db.commit()
    logger.info(f"Webhook {webhook_id} deleted", extra={"user_id": principal.owner_id})
    return {"success": True, "message": "Webhook endpoint deleted successfully"}


@router.post("/{webhook_id}/test")
async def test_webhook(
    webhook_id: str,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    sender: WebhookSender = Depends(get_webhook_sender),
    db: AsyncSession = Depends(get_db),
):
    """Send a signed webhook.test event right now and report the outcome."""
    endpoint = await get_webhook_or_404(db, webhook_id, principal)
    event = build_event(TEST_EVENT_TYPE, {
        "message": "This is a test webhook event",
        "timestamp": iso(utc_now()),
        "webhookId": endpoint.id,
    })
    outcome = await deliver(db, sender, endpoint, event)
    return {"success": True, "testEvent": event, "result": outcome.to_dict()}


@router.get("/{webhook_id}/history", response_model=DeliveryHistory)
async def delivery_history(
    webhook_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    await get_webhook_or_404(db, webhook_id, principal)
    total = await db.scalar(
        select(func.count()).select_from(WebhookDelivery)
        .where(WebhookDelivery.webhook_id == webhook_id)
    )
    rows = (await db.scalars(
        select(WebhookDelivery)
        .where(WebhookDelivery.webhook_id == webhook_id)
        .order_by(WebhookDelivery.created_at.desc())
        .limit(limit).offset((page - 1) * limit)
    )).all()
    return DeliveryHistory(
        events=[
            DeliveryOut(
                id=d.id,
                event_type=d.event_type,
                status=d.status,
                attempts=d.attempts,
                response_status=d.response_status,
                last_attempt_at=as_utc(d.last_attempt_at),
                created_at=as_utc(d.created_at),
                payload=json.loads(d.payload),
            )
            for d in rows
        ],
        pagination=Pagination.of(page, limit, total or 0),
    )
