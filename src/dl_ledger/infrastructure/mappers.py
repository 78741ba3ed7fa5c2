"""Payload → domain mappers. The only place donor identity is derived.

Donor resolution order:
  1. nested `donor` object (registered user: id, name, phone, ...)
  2. `donor` given as a bare id string
  3. flat offline fields: `Donor_name` / `donor_name`, `donor_phone`,
     `donor_address`, `donor_father_name`
A nested donor without an id is treated as free-text.
"""

from src.dl_common.enums import (
    DonationPaymentMethod,
    ExpensePaymentMethod,
    ExpenseStatus,
    LifecycleStatus,
    PaymentStatus,
    SubcategoryType,
)
from src.dl_common.errors import RemoteApiError
from src.dl_common.money import to_minor_units
from src.dl_common.response import parse_payload, parse_wire_enum, parse_wire_timestamp
from src.dl_ledger.application.schemas import (
    CategorySummaryPayload,
    DonationPayload,
    ExpensePayload,
    RefPayload,
    SubcategoryPayload,
)
from src.dl_ledger.domain.models import (
    CategorySummary,
    Donation,
    DonorIdentity,
    Expense,
    Subcategory,
    SubcategorySummary,
)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _amount(value: float | str | None) -> int:
    if value is None:
        return 0
    try:
        return to_minor_units(value)
    except ValueError as exc:
        raise RemoteApiError(f"Malformed amount in response: {value!r}") from exc


def _donation_method(raw: str) -> DonationPaymentMethod:
    # Older records carry the combined value "online offline" (manual bank
    # transfer entered by a manager); it is bookkept as offline.
    normalised = raw.strip().lower()
    if normalised == DonationPaymentMethod.ONLINE.value:
        return DonationPaymentMethod.ONLINE
    if DonationPaymentMethod.OFFLINE.value in normalised:
        return DonationPaymentMethod.OFFLINE
    raise RemoteApiError(f"Unknown donation payment method: {raw!r}")


def _lifecycle(raw: str | None) -> LifecycleStatus:
    if raw is None:
        return LifecycleStatus.ACTIVE
    return LifecycleStatus.INACTIVE if raw.strip().lower() == "inactive" else LifecycleStatus.ACTIVE


def normalize_donor(p: DonationPayload) -> DonorIdentity:
    flat_name = _clean(p.Donor_name) or _clean(p.donor_name)
    if isinstance(p.donor, RefPayload):
        d = p.donor
        return DonorIdentity(
            user_id=d.ref_id or p.donor_id,
            name=_clean(d.name) or flat_name,
            phone=_clean(d.phone) or _clean(p.donor_phone),
            address=_clean(d.address) or _clean(p.donor_address),
            father_name=_clean(d.father_name) or _clean(p.donor_father_name),
        )
    user_id = p.donor if isinstance(p.donor, str) else p.donor_id
    return DonorIdentity(
        user_id=_clean(user_id),
        name=flat_name,
        phone=_clean(p.donor_phone),
        address=_clean(p.donor_address),
        father_name=_clean(p.donor_father_name),
    )


def payload_to_donation(raw: dict) -> Donation:
    p = parse_payload(DonationPayload, raw, "donation")
    entry_id = p.entry_id
    if not entry_id:
        raise RemoteApiError("Donation without id in response")
    category_id = None
    if isinstance(p.subcategory, RefPayload) and p.subcategory.category is not None:
        cat = p.subcategory.category
        category_id = cat if isinstance(cat, str) else cat.ref_id
    return Donation(
        id=entry_id,
        subcategory_id=p.subcategory_ref or "",
        amount=_amount(p.amount),
        payment_method=_donation_method(p.payment_method),
        payment_status=parse_wire_enum(PaymentStatus, p.payment_status, "donation payment status"),
        donor=normalize_donor(p),
        transaction_ref=_clean(p.transaction_id),
        created_at=parse_wire_timestamp(p.createdAt),
        manager_id=p.manager_ref,
        subcategory_title=p.subcategory.title if isinstance(p.subcategory, RefPayload) else None,
        category_id=category_id,
    )


def payload_to_expense(raw: dict) -> Expense:
    p = parse_payload(ExpensePayload, raw, "expense")
    entry_id = p.entry_id
    if not entry_id:
        raise RemoteApiError("Expense without id in response")
    return Expense(
        id=entry_id,
        subcategory_id=p.subcategory_ref or "",
        title=p.expense_title,
        amount=_amount(p.amount),
        payment_method=parse_wire_enum(ExpensePaymentMethod, p.payment_method, "expense payment method"),
        status=parse_wire_enum(ExpenseStatus, p.status, "expense status"),
        transaction_ref=_clean(p.transaction_id),
        created_at=parse_wire_timestamp(p.createdAt),
        description=_clean(p.expense_description),
        manager_id=p.manager_ref,
    )


def payload_to_subcategory(
    raw: dict | SubcategoryPayload,
    category_id: str | None = None,
    category_status: str | None = None,
    category_name: str | None = None,
) -> Subcategory:
    if isinstance(raw, SubcategoryPayload):
        p = raw
    else:
        p = parse_payload(SubcategoryPayload, raw, "subcategory")
    sub_type = parse_wire_enum(SubcategoryType, p.type, "subcategory type")
    parent = category_id or p.category_id
    if parent is None and p.category is not None:
        parent = p.category if isinstance(p.category, str) else p.category.ref_id
        if isinstance(p.category, RefPayload):
            category_status = category_status or p.category.status
            category_name = category_name or p.category.name
    fixed = _amount(p.amount) if sub_type == SubcategoryType.SPECIFIC_AMOUNT and p.amount else None
    return Subcategory(
        id=p.entry_id or "",
        title=p.title,
        type=sub_type,
        category_id=parent or "",
        description=_clean(p.description),
        fixed_amount=fixed,
        status=_lifecycle(p.status),
        category_status=_lifecycle(category_status),
        category_name=category_name,
    )


def payload_to_category_summary(raw: dict) -> CategorySummary:
    p = parse_payload(CategorySummaryPayload, raw, "category summary")
    cat_id = p.entry_id or ""
    subs = [
        SubcategorySummary(
            subcategory=payload_to_subcategory(s, cat_id, p.status, p.name),
            total_income=_amount(s.totalIncome),
            total_expense=_amount(s.totalExpense),
        )
        for s in p.subcategories
    ]
    return CategorySummary(
        id=cat_id,
        name=p.name,
        overall_income=_amount(p.overallIncome),
        overall_expense=_amount(p.overallExpense),
        subcategories=subs,
        manager_ids=frozenset(m.ref_id for m in p.managers if m.ref_id),
        updated_at=parse_wire_timestamp(p.updatedAt or p.createdAt),
    )
