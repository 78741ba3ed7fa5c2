"""Domain models for dl_mapping: manager ↔ subcategory assignments."""

from dataclasses import dataclass, field
from datetime import datetime

from src.dl_common.enums import ManagerPaymentMethod


@dataclass(frozen=True)
class AssignmentDetails:
    """How an assigned manager collects offline donations."""

    payment_method: ManagerPaymentMethod | None = None
    account_holder_name: str | None = None
    payment_image: str | None = None  # opaque reference (URL or upload id)
    use_number_for_upi: bool = False


@dataclass(frozen=True)
class ManagerAssignment:
    manager_id: str
    subcategory_id: str
    manager_name: str | None = None
    manager_phone: str | None = None
    details: AssignmentDetails = field(default_factory=AssignmentDetails)
    mapped_at: datetime | None = None

    @property
    def payment_instructions(self) -> str:
        """Short text shown to a donor who picked this manager."""
        d = self.details
        who = self.manager_name or self.manager_id
        if d.payment_method == ManagerPaymentMethod.UPI:
            if d.use_number_for_upi and self.manager_phone:
                return f"Pay {who} via UPI to {self.manager_phone}"
            return f"Pay {who} via UPI using the shared QR code"
        if d.payment_method == ManagerPaymentMethod.BANK_ACCOUNT:
            holder = d.account_holder_name or who
            return f"Transfer to the bank account of {holder}"
        return f"Contact {who} to arrange the donation"


@dataclass(frozen=True)
class ReconcilePlan:
    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove
