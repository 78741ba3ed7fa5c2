"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Session/Capability
  2xxx: Validation
  3xxx: Remote API / fetch
  4xxx: Manager mapping
  5xxx: Donation flow / settlement
  9xxx: System

Every error carries a short notification title plus a specific message so
callers can forward it to the notification sink unchanged.
"""

from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "VALIDATION"
    CAPABILITY = "CAPABILITY"
    TRANSIENT = "TRANSIENT"
    PARTIAL_FAILURE = "PARTIAL_FAILURE"
    SETTLEMENT_UNRECORDED = "SETTLEMENT_UNRECORDED"
    FLOW = "FLOW"
    INTERNAL = "INTERNAL"


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        title: str = "Error",
    ) -> None:
        self.code = code
        self.message = message
        self.category = category
        self.title = title
        super().__init__(message)


# --- 1xxx: Session/Capability ---

class NotAuthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            1001, "Please log in again to continue", ErrorCategory.CAPABILITY, "Session expired"
        )


class CapabilityDeniedError(AppError):
    def __init__(self, action: str) -> None:
        super().__init__(
            1002,
            f"You do not have permission to {action}",
            ErrorCategory.CAPABILITY,
            "Access denied",
        )


# --- 2xxx: Validation ---

class InvalidAmountError(AppError):
    def __init__(self, detail: str = "Enter an amount greater than zero") -> None:
        super().__init__(2001, detail, ErrorCategory.VALIDATION, "Invalid amount")


class MissingDonorNameError(AppError):
    def __init__(self) -> None:
        super().__init__(
            2002, "Provide the donor name to continue", ErrorCategory.VALIDATION, "Missing donor name"
        )


class ConfirmationMismatchError(AppError):
    def __init__(self, expected: str) -> None:
        super().__init__(
            2003,
            f"Type {expected} to confirm deletion",
            ErrorCategory.VALIDATION,
            "Confirmation required",
        )


class FixedAmountRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            2004,
            "Provide a valid amount for a specific-amount subcategory",
            ErrorCategory.VALIDATION,
            "Invalid amount",
        )


class MissingFieldError(AppError):
    def __init__(self, field: str) -> None:
        super().__init__(2005, f"{field} is required", ErrorCategory.VALIDATION, "Missing field")


# --- 3xxx: Remote API / fetch ---

class RemoteApiError(AppError):
    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(3001, detail, ErrorCategory.TRANSIENT, "Unable to load data")


# --- 4xxx: Manager mapping ---

class PartialMappingFailureError(AppError):
    def __init__(self, failed: list[str], succeeded: list[str]) -> None:
        self.failed = failed
        self.succeeded = succeeded
        super().__init__(
            4001,
            f"{len(failed)} of {len(failed) + len(succeeded)} mapping changes failed: "
            + ", ".join(failed),
            ErrorCategory.PARTIAL_FAILURE,
            "Some changes were not saved",
        )


class NoManagerAssignedError(AppError):
    def __init__(self, subcategory_id: str) -> None:
        super().__init__(
            4002,
            f"No donation manager is assigned to subcategory {subcategory_id}",
            ErrorCategory.FLOW,
            "Offline donation unavailable",
        )


class ManagerNotAssignedError(AppError):
    def __init__(self, manager_id: str, subcategory_id: str) -> None:
        super().__init__(
            4003,
            f"Manager {manager_id} is not assigned to subcategory {subcategory_id}",
            ErrorCategory.VALIDATION,
            "Unknown manager",
        )


# --- 5xxx: Donation flow / settlement ---

class SubcategoryInactiveError(AppError):
    def __init__(self, subcategory_id: str) -> None:
        super().__init__(
            5001,
            f"Donations are closed for subcategory {subcategory_id}",
            ErrorCategory.FLOW,
            "Donations closed",
        )


class AttemptInProgressError(AppError):
    def __init__(self) -> None:
        super().__init__(
            5002,
            "Finish or cancel the current donation before starting another",
            ErrorCategory.FLOW,
            "Donation in progress",
        )


class InvalidTransitionError(AppError):
    def __init__(self, action: str, state: str) -> None:
        super().__init__(
            5003, f"Cannot {action} while in state {state}", ErrorCategory.FLOW, "Action unavailable"
        )


class GatewayFailureError(AppError):
    def __init__(self, detail: str = "Payment failed") -> None:
        super().__init__(5004, detail, ErrorCategory.TRANSIENT, "Payment failed")


class PaymentNotRecordedError(AppError):
    """Money moved at the gateway but the ledger entry could not be created."""

    def __init__(self, settlement_reference: str, detail: str) -> None:
        self.settlement_reference = settlement_reference
        super().__init__(
            5005,
            f"Payment captured but not recorded (reference {settlement_reference}): {detail}",
            ErrorCategory.SETTLEMENT_UNRECORDED,
            "Payment captured but not recorded",
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Something went wrong. Please try again.") -> None:
        super().__init__(9002, detail, ErrorCategory.INTERNAL, "Error")
