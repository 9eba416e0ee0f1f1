"""Payment Routes — licensees buy access to licensed content (OAuth).

Invariants:
    - Access checks run in order: license exists (404), user type (403),
      geography (403), payment (402)
    - Payment is required iff a requested-and-allowed permission carries the
      payment condition; without paymentInfo the 402 lists those permissions
    - A granted access always issues a fresh rsl_<hex> token with scope
      "license" and the configured TTL
    - A transaction row exists only when a charge succeeded
    - Only completed transactions of the caller can be refunded

Design Decisions:
    - The payer is the OAuth principal (token user, or the client for
      client_credentials tokens); the body's userId is only recorded in the audit
    - Charges go through the PaymentGateway protocol; the mock gateway is the
      only implementation
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.api.dependencies import (
    OAuthPrincipal, get_oauth_principal, get_payment_gateway,
    get_webhook_dispatcher, user_rate_limit,
)
from artiquity.config import get_settings
from artiquity.core.access_policy import (
    collect_restrictions, evaluate_access, needs_payment, required_permissions,
)
from artiquity.core.domain_types import (
    AuditAction, TransactionStatus, WebhookEventType,
)
from artiquity.core.errors import (
    PaymentFailedError, PaymentRequiredError, PermissionDeniedError,
    ResourceNotFoundError, ValidationFailedError,
)
from artiquity.core.provider_protocols import PaymentGateway
from artiquity.core.timestamps import as_utc, utc_now
from artiquity.infrastructure.database import get_db
from artiquity.infrastructure.security import new_access_token
from artiquity.models.oauth_token import OAuthToken
from artiquity.models.payment_transaction import PaymentTransaction
from artiquity.models.rsl_license import RslLicense
from artiquity.schemas.common import Pagination
from artiquity.schemas.payment import (
    AccessGranted, AccessRequest, ChargeSummary, RefundResponse,
    TransactionHistory, TransactionOut,
)
from artiquity.services.audit import record_audit
from artiquity.services.webhook_dispatch import WebhookDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/payments", tags=["payments"],
    dependencies=[Depends(user_rate_limit)],
)

LICENSE_SCOPE = "license"


@router.post("/process", response_model=AccessGranted)
async def process_payment(
    body: AccessRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
    db: AsyncSession = Depends(get_db),
):
    """Check the license terms, charge when required and issue an access token."""
    license_row = await db.scalar(
        select(RslLicense).where(
            RslLicense.content_id == body.content_id,
            RslLicense.is_active.is_(True),
        )
    )
    if license_row is None:
        raise ResourceNotFoundError("License for content", body.content_id, code="LICENSE_NOT_FOUND")

    terms = {
        "userTypes": license_row.user_types,
        "geographicRestrictions": license_row.geographic_restrictions,
    }
    denied = evaluate_access(terms, body.user_type.value, body.country_code)
    if denied:
        raise PermissionDeniedError(denied["message"], code=denied["error_code"])

    requested = [p.value for p in body.permissions]
    granted = required_permissions(license_row.permissions or [], requested)
    payment_model = license_row.payment_model or {}

    charge = None
    if needs_payment(granted):
        if body.payment_info is None:
            raise PaymentRequiredError([p["type"] for p in granted], payment_model)
        charge = await gateway.charge(
            body.payment_info.method.value,
            payment_model.get("amount"),
            payment_model.get("currency"),
        )
        if not charge.success:
            raise PaymentFailedError(charge.error or "Payment failed")

    payer_id = principal.owner_id
    expires_at = utc_now() + timedelta(seconds=get_settings().oauth_token_ttl_seconds)
    token = OAuthToken(
        access_token=new_access_token(),
        client_id=principal.client_row_id,
        user_id=principal.id,
        scope=LICENSE_SCOPE,
        expires_at=expires_at,
    )
    db.add(token)
    if charge is not None:
        db.add(PaymentTransaction(
            license_id=license_row.id,
            user_id=payer_id,
            amount=charge.amount,
            currency=charge.currency,
            payment_method=body.payment_info.method.value,
            payment_provider=body.payment_info.method.value,
            provider_transaction_id=charge.transaction_id,
            status=TransactionStatus.COMPLETED.value,
            completed_at=utc_now(),
        ))
    record_audit(
        db, AuditAction.LICENSE_ACCESSED,
        license_row_id=license_row.id, user_id=payer_id, request=request,
        details={
            "permissions": requested,
            "userType": body.user_type.value,
            "countryCode": body.country_code,
            "requestedBy": body.user_id,
            "paymentMade": charge is not None,
        },
    )
    await db.commit()
    logger.info(
        "License access granted",
        extra={"license_id": license_row.license_id, "user_id": payer_id},
    )

    if charge is not None:
        background_tasks.add_task(
            dispatcher.dispatch, license_row.user_id,
            WebhookEventType.PAYMENT_COMPLETED.value,
            {
                "licenseId": license_row.license_id,
                "transactionId": charge.transaction_id,
                "amount": charge.amount,
                "currency": charge.currency,
            },
        )
    return AccessGranted(
        license_id=license_row.license_id,
        access_token=token.access_token,
        expires_at=expires_at,
        permissions=[p["type"] for p in granted],
        restrictions=collect_restrictions(granted),
        payment_info=ChargeSummary(
            amount=charge.amount,
            currency=charge.currency,
            transaction_id=charge.transaction_id,
        ) if charge else None,
    )


@router.get("/history", response_model=TransactionHistory)
async def payment_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    db: AsyncSession = Depends(get_db),
):
    payer_id = principal.owner_id
    total = await db.scalar(
        select(func.count()).select_from(PaymentTransaction)
        .where(PaymentTransaction.user_id == payer_id)
    )
    rows = (await db.execute(
        select(PaymentTransaction, RslLicense.license_id, RslLicense.title)
        .join(RslLicense, PaymentTransaction.license_id == RslLicense.id)
        .where(PaymentTransaction.user_id == payer_id)
        .order_by(PaymentTransaction.created_at.desc())
        .limit(limit).offset((page - 1) * limit)
    )).all()
    return TransactionHistory(
        transactions=[
            TransactionOut(
                id=tx.id,
                license_id=license_id,
                title=title,
                amount=float(tx.amount),
                currency=tx.currency,
                payment_method=tx.payment_method,
                status=tx.status,
                created_at=as_utc(tx.created_at),
                completed_at=as_utc(tx.completed_at),
            )
            for tx, license_id, title in rows
        ],
        pagination=Pagination.of(page, limit, total or 0),
    )


@router.post("/refund/{transaction_id}", response_model=RefundResponse)
async def refund_payment(
    transaction_id: str,
    request: Request,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    tx = await db.scalar(
        select(PaymentTransaction).where(
            PaymentTransaction.id == transaction_id,
            PaymentTransaction.user_id == principal.owner_id,
        )
    )
    if tx is None:
        raise ResourceNotFoundError("Transaction", transaction_id, code="TRANSACTION_NOT_FOUND")
    if tx.status != TransactionStatus.COMPLETED.value:
        raise ValidationFailedError(
            "Only completed transactions can be refunded",
            code="INVALID_TRANSACTION_STATUS",
        )

    refund = await gateway.refund(tx.provider_transaction_id or tx.id)
    if not refund.success:
        raise PaymentFailedError(refund.error or "Refund failed")

    tx.status = TransactionStatus.REFUNDED.value
    record_audit(
        db, AuditAction.PAYMENT_REFUNDED,
        license_row_id=tx.license_id, user_id=principal.owner_id, request=request,
        details={
            "transactionId": transaction_id,
            "amount": float(tx.amount),
            "currency": tx.currency,
        },
    )
    await db.commit()
    logger.info(f"Payment {transaction_id} refunded", extra={"user_id": principal.owner_id})
    return RefundResponse(
        refund_id=refund.refund_id, amount=float(tx.amount), currency=tx.currency,
    )
