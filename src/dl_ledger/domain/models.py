"""Domain models for dl_ledger: pure dataclasses, no pydantic/httpx dependency.

Amounts are int minor units and always positive magnitudes; direction comes
from the entry kind (Donation = income, Expense = outflow).
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.dl_common.enums import (
    DonationPaymentMethod,
    ExpensePaymentMethod,
    ExpenseStatus,
    LifecycleStatus,
    PaymentStatus,
    SubcategoryType,
)


@dataclass(frozen=True)
class Subcategory:
    id: str
    title: str
    type: SubcategoryType
    category_id: str
    description: str | None = None
    fixed_amount: int | None = None  # minor units; set iff type is SPECIFIC_AMOUNT
    status: LifecycleStatus = LifecycleStatus.ACTIVE
    category_status: LifecycleStatus = LifecycleStatus.ACTIVE
    category_name: str | None = None

    @property
    def is_accepting_donations(self) -> bool:
        return (
            self.status == LifecycleStatus.ACTIVE
            and self.category_status == LifecycleStatus.ACTIVE
        )


@dataclass(frozen=True)
class DonorIdentity:
    """Either a registered user reference or a free-text offline donor."""

    user_id: str | None = None
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    father_name: str | None = None

    @property
    def is_registered(self) -> bool:
        return self.user_id is not None

    @property
    def display_name(self) -> str:
        return self.name or self.phone or self.user_id or "Anonymous"


@dataclass(frozen=True)
class Donation:
    id: str
    subcategory_id: str
    amount: int                      # minor units, > 0
    payment_method: DonationPaymentMethod
    payment_status: PaymentStatus
    donor: DonorIdentity
    transaction_ref: str | None
    created_at: datetime | None
    manager_id: str | None = None    # creating manager, offline only
    subcategory_title: str | None = None
    category_id: str | None = None


@dataclass(frozen=True)
class Expense:
    id: str
    subcategory_id: str
    title: str
    amount: int                      # minor units, > 0
    payment_method: ExpensePaymentMethod
    status: ExpenseStatus
    transaction_ref: str | None
    created_at: datetime | None
    description: str | None = None
    manager_id: str | None = None


LedgerEntry = Donation | Expense


@dataclass(frozen=True)
class LedgerTotals:
    income: int
    expense: int

    @property
    def net(self) -> int:
        return self.income - self.expense


@dataclass(frozen=True)
class DonorDonationSummary:
    total_count: int = 0
    total_amount: int = 0
    success_count: int = 0
    success_amount: int = 0
    pending_count: int = 0
    pending_amount: int = 0
    failed_count: int = 0
    failed_amount: int = 0


@dataclass(frozen=True)
class SubcategorySummary:
    subcategory: Subcategory
    total_income: int = 0
    total_expense: int = 0


@dataclass(frozen=True)
class CategorySummary:
    id: str
    name: str
    overall_income: int
    overall_expense: int
    subcategories: list[SubcategorySummary] = field(default_factory=list)
    manager_ids: frozenset[str] = field(default_factory=frozenset)
    updated_at: datetime | None = None
