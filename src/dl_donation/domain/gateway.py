"""External payment-gateway collaborator.

The core only builds the checkout request and interprets the outcome; the
checkout UI and the provider SDK live behind PaymentGatewayProtocol.
"""

from dataclasses import dataclass, field
from typing import Protocol

from config.settings import settings
from src.dl_common.money import apply_surcharge
from src.dl_session.domain.models import Actor


class GatewayCancelled(Exception):
    """The donor closed the checkout. Not a failure."""


class GatewayFailure(Exception):
    """Any checkout outcome other than success or cancellation."""

    def __init__(self, detail: str = "Payment failed") -> None:
        self.detail = detail
        super().__init__(detail)


@dataclass(frozen=True)
class CheckoutRequest:
    amount: int  # minor units, surcharge included
    currency: str
    description: str
    merchant_name: str
    key_id: str
    prefill: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckoutResult:
    settlement_reference: str


class PaymentGatewayProtocol(Protocol):
    async def open_checkout(self, request: CheckoutRequest) -> CheckoutResult:
        """Return on settlement; raise GatewayCancelled or GatewayFailure otherwise."""
        ...


def build_checkout_request(
    donor_amount: int,
    description: str,
    actor: Actor | None = None,
) -> CheckoutRequest:
    """Checkout for `donor_amount` minor units plus the gateway surcharge."""
    prefill: dict[str, str] = {}
    if actor is not None:
        if actor.name:
            prefill["name"] = actor.name
        if actor.phone:
            prefill["contact"] = actor.phone
    return CheckoutRequest(
        amount=apply_surcharge(donor_amount, settings.GATEWAY_SURCHARGE_BPS),
        currency=settings.GATEWAY_CURRENCY,
        description=description,
        merchant_name=settings.MERCHANT_NAME,
        key_id=settings.GATEWAY_KEY_ID,
        prefill=prefill,
    )
