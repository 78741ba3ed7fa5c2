"""Global enums: values must match the remote API payloads exactly."""

from enum import Enum


class AccountType(str, Enum):
    COMMON = "COMMON"
    MANAGEMENT = "MANAGEMENT"


class Role(str, Enum):
    ADMIN = "ADMIN"
    SUB_ADMIN = "SUB_ADMIN"
    HELPER = "HELPER"
    DONATION_MANAGER = "DONATION_MANAGER"
    USER = "USER"


class SubcategoryType(str, Enum):
    OPEN_DONATION = "open_donation"      # donor chooses the amount
    SPECIFIC_AMOUNT = "specific_amount"  # amount fixed on the subcategory


class LifecycleStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class DonationPaymentMethod(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class ExpensePaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"
    CHEQUE = "cheque"


class ExpenseStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ManagerPaymentMethod(str, Enum):
    UPI = "UPI"
    BANK_ACCOUNT = "BANK_ACCOUNT"


class SortKey(str, Enum):
    AMOUNT = "amount"
    DATE = "date"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


# Statuses visible to actors without management visibility
PUBLIC_DONATION_STATUS = PaymentStatus.SUCCESS
PUBLIC_EXPENSE_STATUS = ExpenseStatus.APPROVED
