"""Webhook Dispatch — fans domain events out to subscribed endpoints.

Invariants:
    - Only active endpoints of the event's owner that subscribe to the event
      type receive it
    - Every delivery attempt (success or failure) leaves exactly one
      webhook_events row with the signed payload
    - dispatch() never raises on delivery failure: it runs as a background
      task after the response was sent

Design Decisions:
    - Own session per dispatch (session_factory), not the request session:
      background tasks outlive the request scope
    - Sequential delivery per event: endpoints per owner are few and the
      per-request timeout bounds the total
"""

import logging
import uuid
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.core.domain_types import DeliveryStatus
from artiquity.core.timestamps import iso, utc_now
from artiquity.infrastructure.webhook_sender import (
    DeliveryOutcome, WebhookSender, serialize_event,
)
from artiquity.models.webhook_endpoint import WebhookDelivery, WebhookEndpoint

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def build_event(event_type: str, data: dict) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "type": event_type,
        "data": data,
        "timestamp": iso(utc_now()),
    }


async def deliver(
    session: AsyncSession,
    sender: WebhookSender,
    endpoint: WebhookEndpoint,
    event: dict,
) -> DeliveryOutcome:
    """Send one event to one endpoint and record the attempt."""
    body = serialize_event(event)
    outcome = await sender.send(endpoint.url, endpoint.secret, event["type"], body)
    session.add(WebhookDelivery(
        webhook_id=endpoint.id,
        event_type=event["type"],
        payload=body,
        status=(DeliveryStatus.SENT if outcome.success else DeliveryStatus.FAILED).value,
        attempts=1,
        response_status=outcome.status_code,
        last_attempt_at=utc_now(),
    ))
    await session.commit()
    logger.info(
        f"Webhook {event['type']} to {endpoint.url}: "
        f"{'sent' if outcome.success else 'failed'}",
        extra={"status_code": outcome.status_code},
    )
    return outcome


class WebhookDispatcher:
    def __init__(self, session_factory: SessionFactory, sender: WebhookSender):
        self.session_factory = session_factory
        self.sender = sender

    async def dispatch(self, owner_id: str, event_type: str, data: dict) -> int:
        """Deliver event to every subscribed endpoint of owner. Returns the number attempted."""
        event = build_event(event_type, data)
        attempted = 0
        try:
            async with self.session_factory() as session:
                endpoints = (await session.scalars(
                    select(WebhookEndpoint).where(
                        WebhookEndpoint.owner_id == owner_id,
                        WebhookEndpoint.is_active.is_(True),
                    )
                )).all()
                for endpoint in endpoints:
                    if event_type not in (endpoint.events or []):
                        continue
                    await deliver(session, self.sender, endpoint, event)
                    attempted += 1
        except Exception as e:
            # Background task: nothing upstream can handle it
            logger.error(f"Webhook dispatch of {event_type} failed: {e}")
        return attempted
