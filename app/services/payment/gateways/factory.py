"""
Payment Gateway Factory
Creates payment gateway instances from application settings
"""
from typing import Dict, Any, Optional, Type

from app.core.config import Settings
from app.services.payment.gateways.base import BasePaymentGateway
from app.services.payment.gateways.stripe import StripeGateway


class PaymentGatewayFactory:
    """
    Factory for creating payment gateway instances.
    Supports dynamic gateway registration.
    """

    # Registry of available gateways
    _gateways: Dict[str, Type[BasePaymentGateway]] = {
        "stripe": StripeGateway,
    }

    @classmethod
    def register_gateway(cls, gateway_id: str, gateway_class: Type[BasePaymentGateway]):
        """
        Register a new payment gateway.

        Args:
            gateway_id: Unique identifier for the gateway
            gateway_class: Gateway class implementing BasePaymentGateway
        """
        cls._gateways[gateway_id] = gateway_class

    @classmethod
    def get_available_gateways(cls) -> list:
        """Get list of available gateway IDs"""
        return list(cls._gateways.keys())

    @classmethod
    def get_gateway(cls, gateway_id: str, config: Dict[str, Any], **kwargs) -> BasePaymentGateway:
        """
        Get a payment gateway instance.

        Raises:
            ValueError: If gateway is not registered or misconfigured
        """
        if gateway_id not in cls._gateways:
            raise ValueError(f"Unknown payment gateway: {gateway_id}. Available: {cls.get_available_gateways()}")

        return cls._gateways[gateway_id](config, **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional[BasePaymentGateway]:
        """
        Gateway configured by the environment, or ``None`` when its secret
        key is missing (payment-intent requests then fail with 502).
        """
        if not settings.stripe_secret_key:
            return None

        return cls.get_gateway(
            settings.payment_gateway,
            {
                "secret_key": settings.stripe_secret_key,
                "api_base": settings.stripe_api_base,
                "currency": settings.payment_currency,
            }
        )
