"""Webhook Schemas — endpoint registration, updates and delivery history.

Invariants:
    - url and events are checked by the route (INVALID_URL / INVALID_EVENTS),
      not here, so the client gets a specific error code
"""

from datetime import datetime

from pydantic import Field

from artiquity.schemas.common import CamelModel, Pagination


class WebhookCreate(CamelModel):
    url: str
    events: list[str] = Field(min_length=1)


class WebhookUpdate(CamelModel):
    url: str | None = None
    events: list[str] | None = None
    is_active: bool | None = None


class WebhookCreated(CamelModel):
    success: bool = True
    webhook_id: str
    secret: str
    url: str
    events: list[str]


class WebhookOut(CamelModel):
    id: str
    url: str
    events: list[str]
    is_active: bool
    created_at: datetime


class DeliveryOut(CamelModel):
    id: str
    event_type: str
    status: str
    attempts: int
    response_status: int | None = None
    last_attempt_at: datetime | None = None
    created_at: datetime
    payload: dict


class DeliveryHistory(CamelModel):
    events: list[DeliveryOut]
    pagination: Pagination
