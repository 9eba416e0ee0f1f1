"""Webhook Sender — signed POSTs through an httpx.MockTransport.

Invariants:
    - The signature covers exactly the bytes sent
    - Transport failures become a failed outcome, never an exception
"""

import json

import httpx

from artiquity.infrastructure.webhook_sender import (
    DeliveryOutcome, WebhookSender, serialize_event, sign_payload, verify_signature,
)

SECRET = "whsec"


def test_serialize_is_compact():
    assert serialize_event({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'


def test_sign_and_verify():
    body = serialize_event({"event": "license.created"})
    signature = sign_payload(SECRET, body)
    assert signature.startswith("sha256=")
    assert verify_signature(SECRET, body, signature)
    assert not verify_signature(SECRET, body + " ", signature)


async def test_send_signs_the_body_it_posts():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="ok")

    sender = WebhookSender(transport=httpx.MockTransport(handler))
    body = serialize_event({"event": "payment.completed", "data": {"amount": 1}})
    outcome = await sender.send("https://hooks.example/rsl", SECRET, "payment.completed", body)

    assert outcome == DeliveryOutcome(success=True, status_code=200, response_text="ok")
    request = seen[0]
    assert request.headers["X-RSL-Event"] == "payment.completed"
    assert request.headers["User-Agent"] == "RSL-Platform-Webhook/1.0"
    assert verify_signature(SECRET, request.content.decode(), request.headers["X-RSL-Signature"])
    assert json.loads(request.content)["data"] == {"amount": 1}


async def test_non_2xx_is_unsuccessful():
    sender = WebhookSender(transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")))
    outcome = await sender.send("https://hooks.example", SECRET, "license.created", "{}")
    assert outcome.to_dict() == {"success": False, "status": 500, "response": "boom"}


async def test_transport_error_becomes_outcome():
    def handler(request):
        raise httpx.ConnectError("refused")

    sender = WebhookSender(transport=httpx.MockTransport(handler))
    outcome = await sender.send("https://hooks.example", SECRET, "license.created", "{}")
    assert outcome.to_dict() == {"success": False, "error": "refused"}
