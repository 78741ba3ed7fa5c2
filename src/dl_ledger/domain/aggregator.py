"""LedgerAggregator: totals, visibility filtering and stable sorting.

Visibility: an actor without management visibility only ever sees
`success` donations and `approved` expenses. The same predicate is applied
to query results (lists) and to totals, so the two can never disagree.

Net = income - expense, exact in minor units. Amounts are stored positive;
the sign of net only drives presentation (surplus/deficit).
"""

from collections.abc import Iterable, Sequence
from typing import TypeVar

from src.dl_access.domain.capabilities import can_view_all_statuses
from src.dl_common.datetime_utils import to_epoch_ms
from src.dl_common.enums import (
    PUBLIC_DONATION_STATUS,
    PUBLIC_EXPENSE_STATUS,
    PaymentStatus,
    SortKey,
    SortOrder,
)
from src.dl_ledger.domain.models import (
    CategorySummary,
    Donation,
    DonorDonationSummary,
    Expense,
    LedgerTotals,
)
from src.dl_session.domain.models import Actor

E = TypeVar("E", Donation, Expense)


def is_publicly_visible(entry: Donation | Expense) -> bool:
    if isinstance(entry, Donation):
        return entry.payment_status == PUBLIC_DONATION_STATUS
    return entry.status == PUBLIC_EXPENSE_STATUS


def visible_entries(
    entries: Iterable[E],
    actor: Actor | None,
    assigned_manager_ids: Iterable[str] = (),
) -> list[E]:
    if can_view_all_statuses(actor, assigned_manager_ids):
        return list(entries)
    return [e for e in entries if is_publicly_visible(e)]


def _sum(entries: Iterable[Donation | Expense]) -> int:
    return sum(e.amount for e in entries)


def aggregate(
    donations: Iterable[Donation],
    expenses: Iterable[Expense],
    actor: Actor | None,
    assigned_manager_ids: Iterable[str] = (),
) -> LedgerTotals:
    """Totals over what this actor is allowed to see."""
    assigned = frozenset(assigned_manager_ids)
    return LedgerTotals(
        income=_sum(visible_entries(donations, actor, assigned)),
        expense=_sum(visible_entries(expenses, actor, assigned)),
    )


def aggregate_filtered(
    donations: Iterable[Donation],
    expenses: Iterable[Expense],
) -> LedgerTotals:
    """Totals over an already filtered/sorted client view."""
    return LedgerTotals(income=_sum(donations), expense=_sum(expenses))


def sort_entries(
    entries: Sequence[E],
    sort_key: SortKey = SortKey.DATE,
    sort_order: SortOrder = SortOrder.DESC,
) -> list[E]:
    """Stable sort; ties keep fetch order in both directions.

    reverse=True would flip the order of equal keys, so descending order
    negates the key instead.
    """
    sign = -1 if sort_order == SortOrder.DESC else 1
    if sort_key == SortKey.AMOUNT:
        return sorted(entries, key=lambda e: sign * e.amount)
    return sorted(entries, key=lambda e: sign * to_epoch_ms(e.created_at))


def summarize_donor_donations(donations: Iterable[Donation]) -> DonorDonationSummary:
    counts = {s: 0 for s in PaymentStatus}
    amounts = {s: 0 for s in PaymentStatus}
    for d in donations:
        counts[d.payment_status] += 1
        amounts[d.payment_status] += d.amount
    return DonorDonationSummary(
        total_count=sum(counts.values()),
        total_amount=sum(amounts.values()),
        success_count=counts[PaymentStatus.SUCCESS],
        success_amount=amounts[PaymentStatus.SUCCESS],
        pending_count=counts[PaymentStatus.PENDING],
        pending_amount=amounts[PaymentStatus.PENDING],
        failed_count=counts[PaymentStatus.FAILED],
        failed_amount=amounts[PaymentStatus.FAILED],
    )


def aggregate_categories(summaries: Iterable[CategorySummary]) -> LedgerTotals:
    """Overview totals across every category summary."""
    income = 0
    expense = 0
    for s in summaries:
        income += s.overall_income
        expense += s.overall_expense
    return LedgerTotals(income=income, expense=expense)
