"""Webhook Sender — signs and POSTs event payloads to subscriber endpoints.

Invariants:
    - The signed bytes are exactly the bytes sent (body serialized once)
    - X-RSL-Signature is "sha256=" + hex HMAC-SHA256(secret, body)
    - send() never raises on delivery failure: the outcome is returned so the
      caller can record a failed delivery row

Design Decisions:
    - transport injectable: tests pass httpx.MockTransport instead of patching
"""

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "RSL-Platform-Webhook/1.0"
SIGNATURE_HEADER = "X-RSL-Signature"
EVENT_HEADER = "X-RSL-Event"


def serialize_event(event: dict) -> str:
    return json.dumps(event, separators=(",", ":"), default=str)


def sign_payload(secret: str, body: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256)
    return f"sha256={digest.hexdigest()}"


def verify_signature(secret: str, body: str, signature: str) -> bool:
    return hmac.compare_digest(sign_payload(secret, body), signature)


@dataclass(frozen=True)
class DeliveryOutcome:
    success: bool
    status_code: int | None = None
    response_text: str = ""
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"success": False, "error": self.error}
        return {
            "success": self.success,
            "status": self.status_code,
            "response": self.response_text,
        }


class WebhookSender:
    def __init__(
        self,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def send(self, url: str, secret: str, event_type: str, body: str) -> DeliveryOutcome:
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: sign_payload(secret, body),
            EVENT_HEADER: event_type,
            "User-Agent": USER_AGENT,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport,
            ) as client:
                response = await client.post(url, content=body.encode("utf-8"), headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Webhook delivery to {url} failed: {e}")
            return DeliveryOutcome(success=False, error=str(e) or type(e).__name__)

        return DeliveryOutcome(
            success=response.is_success,
            status_code=response.status_code,
            response_text=response.text[:2000],
        )
