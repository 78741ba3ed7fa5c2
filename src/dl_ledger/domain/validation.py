"""Local validation rules: all run before any network call."""

from src.dl_common.enums import SubcategoryType
from src.dl_common.errors import (
    ConfirmationMismatchError,
    FixedAmountRequiredError,
    InvalidAmountError,
    MissingDonorNameError,
    MissingFieldError,
)
from src.dl_common.money import to_minor_units

DELETE_CONFIRMATION_TOKEN = "CONFIRM"


def parse_positive_amount(raw: object) -> int:
    """Parse a donor/manager-entered major-unit amount into positive minor units."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InvalidAmountError()
    try:
        minor = to_minor_units(raw)
    except ValueError as exc:
        raise InvalidAmountError() from exc
    if minor <= 0:
        raise InvalidAmountError()
    return minor


def require_donor_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise MissingDonorNameError()
    return cleaned


def require_text(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise MissingFieldError(field)
    return cleaned


def check_delete_confirmation(token: str | None) -> None:
    """Case-insensitive exact match; whitespace is significant."""
    if token is None or token.upper() != DELETE_CONFIRMATION_TOKEN:
        raise ConfirmationMismatchError(DELETE_CONFIRMATION_TOKEN)


def resolve_fixed_amount(sub_type: SubcategoryType, amount_minor: int | None) -> int | None:
    """Amount rule for subcategory create/edit.

    open_donation   -> amount is cleared (None), whatever was supplied
    specific_amount -> amount is mandatory and > 0
    """
    if sub_type == SubcategoryType.OPEN_DONATION:
        return None
    if amount_minor is None or amount_minor <= 0:
        raise FixedAmountRequiredError()
    return amount_minor
