"""Ledger report export (CSV text) for actors allowed to download it."""

import csv
import io
import logging
from collections.abc import Iterable, Sequence

from src.dl_access.domain.capabilities import can_download_report
from src.dl_common.errors import CapabilityDeniedError, NotAuthenticatedError
from src.dl_common.money import to_major_units
from src.dl_ledger.domain.aggregator import aggregate
from src.dl_ledger.domain.models import Donation, Expense, Subcategory
from src.dl_session.domain.models import Actor

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "kind",
    "id",
    "date",
    "title",
    "amount",
    "payment_method",
    "status",
    "transaction_ref",
]


def _date(entry: Donation | Expense) -> str:
    return entry.created_at.isoformat() if entry.created_at else ""


def build_ledger_report(
    actor: Actor | None,
    subcategory: Subcategory,
    donations: Sequence[Donation],
    expenses: Sequence[Expense],
    assigned_manager_ids: Iterable[str] = (),
) -> str:
    """Render donations, expenses and totals as CSV.

    Raises CapabilityDeniedError unless the actor manages the subcategory and
    there is at least one entry to export.
    """
    if actor is None:
        raise NotAuthenticatedError()
    assigned = frozenset(assigned_manager_ids)
    if not can_download_report(actor, subcategory.id, assigned, len(donations) + len(expenses)):
        raise CapabilityDeniedError("download this report")

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)
    for d in donations:
        writer.writerow([
            "donation",
            d.id,
            _date(d),
            d.donor.display_name,
            str(to_major_units(d.amount)),
            d.payment_method.value,
            d.payment_status.value,
            d.transaction_ref or "",
        ])
    for e in expenses:
        writer.writerow([
            "expense",
            e.id,
            _date(e),
            e.title,
            str(to_major_units(e.amount)),
            e.payment_method.value,
            e.status.value,
            e.transaction_ref or "",
        ])

    totals = aggregate(donations, expenses, actor, assigned)
    writer.writerow([])
    writer.writerow(["total_income", str(to_major_units(totals.income))])
    writer.writerow(["total_expense", str(to_major_units(totals.expense))])
    writer.writerow(["net", str(to_major_units(totals.net))])

    logger.info(
        "Report built: subcategory=%s donations=%d expenses=%d by=%s",
        subcategory.id,
        len(donations),
        len(expenses),
        actor.id,
    )
    return buf.getvalue()
