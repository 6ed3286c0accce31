"""
Base Payment Gateway
Abstract class defining the interface for all payment gateways
"""
from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class PaymentIntentResult:
    """Result of creating a payment intent"""
    success: bool
    client_secret: Optional[str] = None
    gateway_intent_id: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    error_message: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None


class BasePaymentGateway(ABC):
    """
    Abstract base class for payment gateways.
    All payment gateways must implement these methods.
    """

    gateway_id: str = "base"
    gateway_name: str = "Base Gateway"

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize gateway with configuration.

        Args:
            config: Gateway configuration including API keys, endpoints, etc.
        """
        self.config = config
        self._validate_config()

    @abstractmethod
    def _validate_config(self):
        """Validate required configuration parameters"""
        pass

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> PaymentIntentResult:
        """
        Create a payment intent the client confirms with the gateway's SDK.

        Args:
            amount: Amount in minor currency units (cents)
            currency: ISO currency code, lowercase
            metadata: Additional metadata stored with the intent

        Returns:
            PaymentIntentResult with the client secret on success
        """
        pass

    @staticmethod
    def to_minor_units(amount: float) -> int:
        """
        Convert a major-unit price to integer minor units.

        Goes through the decimal string so 19.99 becomes 1999, not 1998.
        """
        cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return int(cents)

    def get_api_url(self, endpoint: str) -> str:
        """Get full API URL for endpoint"""
        base_url = self.config.get("api_base", "")
        return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"
