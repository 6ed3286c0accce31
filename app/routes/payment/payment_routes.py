"""
Payment Routes
API endpoints for entry payments
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.database import Database, get_database
from app.models.auth.user import normalize_email
from app.models.payment.payment import PaymentCreate, PaymentIntentRequest
from app.routes.auth.dependencies import authorize, get_payment_gateway
from app.services.auth.policy import Caller
from app.services.payment.gateways.base import BasePaymentGateway
from app.services.payment.payment_service import PaymentService
from app.utils.exceptions import PaymentGatewayError
from app.utils.response import success_response, write_result_to_json
from app.utils.serializers import serialize_documents

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


@router.post("/create-payment-intent")
async def create_payment_intent(
    intent: PaymentIntentRequest,
    caller: Caller = Depends(authorize("payments:create_intent")),
    gateway: Optional[BasePaymentGateway] = Depends(get_payment_gateway)
):
    """
    Create a card payment intent for a contest entry fee.

    The price is converted to minor units (cents) and forwarded to the
    gateway; the client confirms the payment with the returned secret.
    """
    if gateway is None:
        raise PaymentGatewayError("Payment gateway is not configured")

    result = await gateway.create_payment_intent(
        amount=gateway.to_minor_units(intent.price),
        currency=gateway.config.get("currency", "usd"),
        metadata={"email": caller.email}
    )

    if not result.success:
        logger.warning("Payment intent for %s failed: %s", caller.email, result.error_message)
        raise PaymentGatewayError(result.error_message or "Failed to create payment intent")

    return success_response(
        message="Payment intent created",
        data={"clientSecret": result.client_secret}
    )


@router.post("/payments")
async def record_payment(
    payment_data: PaymentCreate,
    caller: Caller = Depends(authorize("payments:record")),
    db: Database = Depends(get_database)
):
    """
    Record a confirmed entry payment.

    Security:
    - Participant email comes from the token, never from the body
    - The contest must exist
    - Participation count is incremented together with the insert
    """
    results = await PaymentService(db).record_payment(payment_data, caller.email)

    return success_response(
        message="Payment recorded successfully",
        data={
            "paymentResult": write_result_to_json(results["payment_result"]),
            "contestResult": write_result_to_json(results["contest_result"])
        },
        status_code=201
    )


@router.get("/payments")
async def get_payments(
    email: str = Query(..., description="Participant email (must be the caller's)"),
    caller: Caller = Depends(authorize("payments:list_own")),
    db: Database = Depends(get_database)
):
    """Caller's entries with contest name, type, image, prize and deadline."""
    payments = await PaymentService(db).get_user_payments(normalize_email(email))

    return success_response(
        message="Payments retrieved successfully",
        data={"payments": serialize_documents(payments)}
    )


@router.get("/payments/user/{email}")
async def get_user_payments(
    email: str,
    caller: Caller = Depends(authorize("payments:list_own")),
    db: Database = Depends(get_database)
):
    """Same as ``GET /payments?email=``."""
    payments = await PaymentService(db).get_user_payments(normalize_email(email))

    return success_response(
        message="Payments retrieved successfully",
        data={"payments": serialize_documents(payments)}
    )
