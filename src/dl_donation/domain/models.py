"""Donation attempt state. Transient; never persisted."""

from dataclasses import dataclass
from enum import Enum

from src.dl_common.enums import DonationPaymentMethod
from src.dl_ledger.domain.models import Subcategory


class FlowState(str, Enum):
    IDLE = "idle"
    MODE_SELECT = "mode_select"
    ONLINE_AMOUNT_ENTRY = "online_amount_entry"
    OFFLINE_MANAGER_BROWSE = "offline_manager_browse"
    GATEWAY_SETTLEMENT = "gateway_settlement"
    OFFLINE_PAYMENT_DETAILS = "offline_payment_details"
    RECORD_CREATION = "record_creation"
    SETTLED_NOT_RECORDED = "settled_not_recorded"


# States in which an attempt is considered active (single-flight guard).
ACTIVE_STATES = frozenset(
    {
        FlowState.MODE_SELECT,
        FlowState.ONLINE_AMOUNT_ENTRY,
        FlowState.OFFLINE_MANAGER_BROWSE,
        FlowState.GATEWAY_SETTLEMENT,
        FlowState.OFFLINE_PAYMENT_DETAILS,
        FlowState.RECORD_CREATION,
    }
)


@dataclass
class DonationAttempt:
    subcategory: Subcategory
    mode: DonationPaymentMethod | None = None
    amount: int | None = None             # donor amount, minor units, never surcharged
    manager_id: str | None = None         # offline only
    correlation_id: str | None = None     # gateway settlement reference, online only
