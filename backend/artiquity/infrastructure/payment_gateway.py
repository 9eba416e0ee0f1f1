"""Mock Payment Gateway — simulated charges and refunds for license purchases.

Invariants:
    - Supported methods: stripe, paypal, crypto; anything else fails without raising
    - Transaction ids are "<method>_<32 hex>"; refund ids "refund_<32 hex>"
    - The charged amount is the license price, or 0.01 when the model has none
"""

import logging
import uuid

from artiquity.core.domain_types import PaymentMethod
from artiquity.core.provider_protocols import ChargeResult, RefundResult

logger = logging.getLogger(__name__)

DEFAULT_AMOUNT = 0.01
DEFAULT_CURRENCY = "USD"


class MockPaymentGateway:
    """Stands in for Stripe/PayPal/crypto processors; no network calls."""

    async def charge(self, method: str, amount: float | None, currency: str | None) -> ChargeResult:
        if method not in {m.value for m in PaymentMethod}:
            return ChargeResult(success=False, error="Unsupported payment method")
        result = ChargeResult(
            success=True,
            transaction_id=f"{method}_{uuid.uuid4().hex}",
            amount=amount or DEFAULT_AMOUNT,
            currency=currency or DEFAULT_CURRENCY,
        )
        logger.info(f"Mock charge {result.transaction_id} for {result.amount} {result.currency}")
        return result

    async def refund(self, transaction_id: str) -> RefundResult:
        return RefundResult(success=True, refund_id=f"refund_{uuid.uuid4().hex}")
