"""List factories: one PaginatedListCoordinator per logical ledger list.

Visibility is applied at the query boundary. For an actor without full
status visibility the status filter sent to the API is forced to the public
status, and whatever comes back is filtered again before it reaches the
cursor, so privileged and unprivileged actors never share a result set.
"""

from collections.abc import Callable, Iterable

from src.dl_access.domain.capabilities import can_view_all_statuses
from src.dl_common.enums import PUBLIC_DONATION_STATUS, PUBLIC_EXPENSE_STATUS
from src.dl_ledger.domain.aggregator import is_publicly_visible, summarize_donor_donations
from src.dl_ledger.domain.models import Donation, DonorDonationSummary, Expense
from src.dl_ledger.domain.repository import LedgerRepositoryProtocol
from src.dl_listing.application.coordinator import Fetcher, PaginatedListCoordinator
from src.dl_listing.domain.models import ListFilters, PageResult
from src.dl_session.domain.models import Actor


def _public_only(fetch: Fetcher, public_status: str) -> Fetcher:
    async def fetcher(subject_id: str, page: int, limit: int, filters: ListFilters) -> PageResult:
        result = await fetch(subject_id, page, limit, filters.with_status(public_status))
        return PageResult(
            items=[e for e in result.items if is_publicly_visible(e)],
            page=result.page,
            total_pages=result.total_pages,
        )

    return fetcher


def _visibility_fetcher(
    fetch: Fetcher,
    public_status: str,
    privileged: Callable[[], bool],
) -> Fetcher:
    restricted = _public_only(fetch, public_status)

    async def fetcher(subject_id: str, page: int, limit: int, filters: ListFilters) -> PageResult:
        if privileged():
            return await fetch(subject_id, page, limit, filters)
        return await restricted(subject_id, page, limit, filters)

    return fetcher


def subcategory_donations_list(
    repo: LedgerRepositoryProtocol,
    subcategory_id: str,
    actor: Actor | None,
    assigned_manager_ids: Callable[[], Iterable[str]],
    filters: ListFilters | None = None,
) -> PaginatedListCoordinator[Donation]:
    """`assigned_manager_ids` is read on every fetch so a mapping edit is
    picked up by the next page without rebuilding the list."""
    return PaginatedListCoordinator(
        name=f"donations:{subcategory_id}",
        subject_id=subcategory_id,
        fetcher=_visibility_fetcher(
            repo.list_donations,
            PUBLIC_DONATION_STATUS.value,
            lambda: can_view_all_statuses(actor, assigned_manager_ids()),
        ),
        filters=filters,
    )


def subcategory_expenses_list(
    repo: LedgerRepositoryProtocol,
    subcategory_id: str,
    actor: Actor | None,
    assigned_manager_ids: Callable[[], Iterable[str]],
    filters: ListFilters | None = None,
) -> PaginatedListCoordinator[Expense]:
    return PaginatedListCoordinator(
        name=f"expenses:{subcategory_id}",
        subject_id=subcategory_id,
        fetcher=_visibility_fetcher(
            repo.list_expenses,
            PUBLIC_EXPENSE_STATUS.value,
            lambda: can_view_all_statuses(actor, assigned_manager_ids()),
        ),
        filters=filters,
    )


def _owns_history(actor: Actor | None, user_ref: str) -> bool:
    return actor is not None and user_ref in (actor.id, actor.phone)


def donor_category_donations_list(
    repo: LedgerRepositoryProtocol,
    user_ref: str,
    category_id: str,
    actor: Actor | None,
    filters: ListFilters | None = None,
) -> PaginatedListCoordinator[Donation]:
    """A donor's history within one category. `user_ref` is a user id or phone.

    The donor sees every status of their own donations; anyone else only
    sees successful ones unless they hold an admin role.
    """

    async def fetch(subject_id: str, page: int, limit: int, f: ListFilters) -> PageResult[Donation]:
        return await repo.list_user_donations_by_category(subject_id, category_id, page, limit, f)

    return PaginatedListCoordinator(
        name=f"donor:{user_ref}:category:{category_id}",
        subject_id=user_ref,
        fetcher=_visibility_fetcher(
            fetch,
            PUBLIC_DONATION_STATUS.value,
            lambda: _owns_history(actor, user_ref) or can_view_all_statuses(actor),
        ),
        filters=filters,
    )


def donor_overall_donations_list(
    repo: LedgerRepositoryProtocol,
    user_ref: str,
    actor: Actor | None,
    filters: ListFilters | None = None,
) -> PaginatedListCoordinator[Donation]:
    return PaginatedListCoordinator(
        name=f"donor:{user_ref}:overall",
        subject_id=user_ref,
        fetcher=_visibility_fetcher(
            repo.list_user_donations_overall,
            PUBLIC_DONATION_STATUS.value,
            lambda: _owns_history(actor, user_ref) or can_view_all_statuses(actor),
        ),
        filters=filters,
    )


def donor_history_summary(lst: PaginatedListCoordinator[Donation]) -> DonorDonationSummary:
    """Per-status counts and amounts over the donor entries loaded so far.

    Computed from the cursor rather than taken from the server, so it always
    matches what the list shows.
    """
    return summarize_donor_donations(lst.entries)
