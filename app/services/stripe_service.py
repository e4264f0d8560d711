"""
Stripe payment gateway - PaymentIntent creation and retrieval for bookings.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import stripe

from app.core.errors import ConfigurationError, ProcessorError
from app.core.logger import logger


def to_minor_units(amount: float) -> int:
    """1500.00 -> 150000, rounding half up like the processor's dashboard"""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_dict(obj) -> Dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return dict(obj)
    return obj.to_dict()


@dataclass
class PaymentAuthorization:
    """What the booking flow needs from a PaymentIntent."""
    id: str
    status: str
    client_secret: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    charge_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    @classmethod
    def from_intent(cls, intent) -> "PaymentAuthorization":
        latest_charge = getattr(intent, "latest_charge", None)
        if latest_charge is not None and not isinstance(latest_charge, str):
            latest_charge = getattr(latest_charge, "id", None)
        return cls(
            id=intent.id,
            status=intent.status,
            client_secret=getattr(intent, "client_secret", None),
            amount=getattr(intent, "amount", None),
            currency=getattr(intent, "currency", None),
            metadata=_as_dict(getattr(intent, "metadata", None)),
            charge_id=latest_charge,
        )


class StripeGateway:
    """
    Thin wrapper over the Stripe PaymentIntent API.
    Every network call is bounded by the configured timeout; any Stripe
    failure surfaces as ProcessorError.
    """

    def __init__(self, api_key: Optional[str], currency: str = "pkr",
                 timeout_seconds: float = 20, max_network_retries: int = 2):
        self.api_key = api_key
        self.currency = currency

        if self.api_key:
            stripe.api_key = self.api_key
            stripe.max_network_retries = max_network_retries
            stripe.default_http_client = stripe.RequestsClient(timeout=timeout_seconds)
            logger.info("[Stripe] Gateway initialized")
        else:
            logger.warning("[Stripe] API key not configured")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def create_payment_intent(self, amount: float, metadata: Dict[str, str],
                              description: str) -> PaymentAuthorization:
        if not self.is_configured:
            raise ConfigurationError("Payment processor is not configured")
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_minor_units(amount),
                currency=self.currency,
                metadata=metadata,
                description=description,
            )
        except stripe.StripeError as e:
            logger.error(f"[Stripe] PaymentIntent creation failed: {e}")
            raise ProcessorError("Failed to create payment order", [getattr(e, "user_message", None) or "stripe error"])
        logger.info(f"[Stripe] PaymentIntent {intent.id} created")
        return PaymentAuthorization.from_intent(intent)

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentAuthorization:
        if not self.is_configured:
            raise ConfigurationError("Payment processor is not configured")
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            logger.error(f"[Stripe] PaymentIntent {payment_intent_id} retrieval failed: {e}")
            raise ProcessorError("Failed to verify payment", [getattr(e, "user_message", None) or "stripe error"])
        return PaymentAuthorization.from_intent(intent)
