"""SubcategoryLedgerView: everything one subcategory ledger screen needs.

Wires a donations list, an expenses list, the manager registry and the
aggregator around a single subcategory. Capabilities are recomputed from
the registry's current snapshot each time they are read.
"""

import asyncio
import logging
from collections.abc import Iterable

from src.dl_access.domain.capabilities import (
    CapabilitySet,
    can_view_all_statuses,
    resolve_capabilities,
    union_manager_ids,
)
from src.dl_common.enums import ExpenseStatus, PaymentStatus
from src.dl_common.errors import AppError, InternalError
from src.dl_common.notifications import LoggingNotificationSink, NotificationSink, notify_error
from src.dl_ledger.application.lists import subcategory_donations_list, subcategory_expenses_list
from src.dl_ledger.application.report import build_ledger_report
from src.dl_ledger.domain.aggregator import aggregate, aggregate_filtered, sort_entries, visible_entries
from src.dl_ledger.domain.models import Donation, Expense, LedgerTotals, Subcategory
from src.dl_ledger.domain.repository import LedgerRepositoryProtocol
from src.dl_listing.domain.models import ListFilters
from src.dl_mapping.application.registry import ManagerMappingRegistry
from src.dl_session.domain.models import Actor

logger = logging.getLogger(__name__)


class SubcategoryLedgerView:
    def __init__(
        self,
        subcategory: Subcategory,
        actor: Actor | None,
        ledger: LedgerRepositoryProtocol,
        registry: ManagerMappingRegistry,
        summary_manager_ids: Iterable[str] = (),
        notifier: NotificationSink | None = None,
    ) -> None:
        self.subcategory = subcategory
        self.actor = actor
        self._registry = registry
        self._summary_manager_ids = frozenset(summary_manager_ids)
        self._notifier: NotificationSink = notifier or LoggingNotificationSink()
        self.donations = subcategory_donations_list(
            ledger, subcategory.id, actor, self.assigned_manager_ids
        )
        self.expenses = subcategory_expenses_list(
            ledger, subcategory.id, actor, self.assigned_manager_ids
        )

    def assigned_manager_ids(self) -> frozenset[str]:
        """Union of the summary payload's managers and the registry snapshot."""
        return union_manager_ids(
            self._summary_manager_ids,
            self._registry.assigned_manager_ids(self.subcategory.id),
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> list[AppError]:
        """Initial load: donations, expenses and assignments concurrently.

        Waits for all three; each failure is notified on its own and returned.
        A successful part stays usable when another part fails. If the
        refreshed assignments grant full status visibility that the list
        fetches did not have, both lists are fetched again.
        """
        privileged_before = can_view_all_statuses(self.actor, self.assigned_manager_ids())
        results = await asyncio.gather(
            self.donations.fetch(1),
            self.expenses.fetch(1),
            self._registry.refresh(self.subcategory.id),
            return_exceptions=True,
        )
        errors = self._collect_failures(("donations", "expenses", "managers"), results)

        if not privileged_before and can_view_all_statuses(self.actor, self.assigned_manager_ids()):
            logger.debug("Visibility widened during load: subcategory=%s", self.subcategory.id)
            results = await asyncio.gather(
                self.donations.refresh(), self.expenses.refresh(), return_exceptions=True
            )
            errors.extend(self._collect_failures(("donations", "expenses"), results))
        return errors

    def _collect_failures(self, parts: tuple[str, ...], results: list) -> list[AppError]:
        errors: list[AppError] = []
        for part, result in zip(parts, results):
            if not isinstance(result, BaseException):
                continue
            if not isinstance(result, Exception):
                raise result
            err = result if isinstance(result, AppError) else InternalError(str(result))
            logger.warning(
                "Initial load failed: subcategory=%s part=%s error=%s",
                self.subcategory.id,
                part,
                err.message,
            )
            notify_error(self._notifier, err)
            errors.append(err)
        return errors

    async def apply_filters(
        self,
        filters: ListFilters,
        donation_status: PaymentStatus | None = None,
        expense_status: ExpenseStatus | None = None,
    ) -> None:
        """Reset both lists to page 1 under the new filters."""
        results = await asyncio.gather(
            self.donations.set_filters(
                filters.with_status(donation_status.value if donation_status else None)
            ),
            self.expenses.set_filters(
                filters.with_status(expense_status.value if expense_status else None)
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                if isinstance(result, AppError):
                    notify_error(self._notifier, result)
                raise result

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def capabilities(self) -> CapabilitySet:
        assigned = self.assigned_manager_ids()
        return resolve_capabilities(
            self.actor,
            self.subcategory.id,
            assigned,
            visible_entry_count=len(self.visible_donations()) + len(self.visible_expenses()),
        )

    def visible_donations(self) -> list[Donation]:
        return visible_entries(self.donations.entries, self.actor, self.assigned_manager_ids())

    def visible_expenses(self) -> list[Expense]:
        return visible_entries(self.expenses.entries, self.actor, self.assigned_manager_ids())

    def totals(self) -> LedgerTotals:
        return aggregate(
            self.donations.entries,
            self.expenses.entries,
            self.actor,
            self.assigned_manager_ids(),
        )

    def sorted_donations(self) -> list[Donation]:
        f = self.donations.filters
        return sort_entries(self.visible_donations(), f.sort_key, f.sort_order)

    def sorted_expenses(self) -> list[Expense]:
        f = self.expenses.filters
        return sort_entries(self.visible_expenses(), f.sort_key, f.sort_order)

    def filtered_totals(self) -> LedgerTotals:
        return aggregate_filtered(self.sorted_donations(), self.sorted_expenses())

    def export_report(self) -> str:
        return build_ledger_report(
            self.actor,
            self.subcategory,
            self.sorted_donations(),
            self.sorted_expenses(),
            self.assigned_manager_ids(),
        )
