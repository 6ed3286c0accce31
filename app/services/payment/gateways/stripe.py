"""
Stripe Payment Gateway Implementation
Implements the BasePaymentGateway for Stripe PaymentIntents (card payments)
"""
import logging
import httpx
from typing import Dict, Any, Optional

from app.services.payment.gateways.base import (
    BasePaymentGateway,
    PaymentIntentResult
)

logger = logging.getLogger(__name__)


class StripeGateway(BasePaymentGateway):
    """
    Stripe Payment Gateway Implementation

    Talks to the REST API directly: form-encoded requests authenticated
    with the secret key as the basic-auth username.
    """

    gateway_id = "stripe"
    gateway_name = "Stripe"

    DEFAULT_API_BASE = "https://api.stripe.com"
    TIMEOUT_SECONDS = 30.0

    def __init__(
        self,
        config: Dict[str, Any],
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Stripe gateway.

        Args:
            config: ``secret_key`` plus optional ``api_base``
            transport: httpx transport override (tests use ``httpx.MockTransport``)
        """
        config = {"api_base": self.DEFAULT_API_BASE, **config}
        super().__init__(config)

        self.secret_key = config["secret_key"]
        self.transport = transport

    def _validate_config(self):
        """Validate required Stripe configuration"""
        if not self.config.get("secret_key"):
            raise ValueError("STRIPE_SECRET_KEY is required")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=(self.secret_key, ""),
            timeout=self.TIMEOUT_SECONDS,
            transport=self.transport
        )

    async def create_payment_intent(
        self,
        amount: int,
        currency: str = "usd",
        metadata: Optional[Dict[str, str]] = None
    ) -> PaymentIntentResult:
        """Create a card PaymentIntent and return its client secret"""
        payload = {
            "amount": str(amount),
            "currency": currency,
            "payment_method_types[]": "card",
        }
        for key, value in (metadata or {}).items():
            payload[f"metadata[{key}]"] = value

        try:
            async with self._client() as client:
                response = await client.post(
                    self.get_api_url("/v1/payment_intents"),
                    data=payload
                )
                response_data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Stripe request failed: %s", e)
            return PaymentIntentResult(success=False, error_message=str(e))

        if response.status_code == 200:
            return PaymentIntentResult(
                success=True,
                client_secret=response_data.get("client_secret"),
                gateway_intent_id=response_data.get("id"),
                amount=response_data.get("amount"),
                currency=response_data.get("currency"),
                raw_response=response_data
            )

        error_msg = response_data.get("error", {}).get("message", "Unknown error")
        logger.warning("Stripe rejected payment intent (%s): %s", response.status_code, error_msg)
        return PaymentIntentResult(
            success=False,
            error_message=error_msg,
            raw_response=response_data
        )
