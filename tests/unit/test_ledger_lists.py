"""Tests for the ledger list factories: visibility at the query boundary."""

from unittest.mock import AsyncMock

from src.dl_common.enums import ExpenseStatus, PaymentStatus
from src.dl_ledger.application.lists import (
    donor_category_donations_list,
    donor_history_summary,
    donor_overall_donations_list,
    subcategory_donations_list,
    subcategory_expenses_list,
)
from src.dl_listing.domain.models import ListFilters, PageResult
from src.dl_session.domain.models import Actor
from tests.factories import make_donation, make_expense


def _repo() -> AsyncMock:
    repo = AsyncMock()
    # A misbehaving backend that ignores the status filter.
    repo.list_donations.return_value = PageResult(
        items=[
            make_donation("d1", status=PaymentStatus.SUCCESS),
            make_donation("d2", status=PaymentStatus.PENDING),
        ],
        page=1,
        total_pages=1,
    )
    repo.list_expenses.return_value = PageResult(
        items=[
            make_expense("e1", status=ExpenseStatus.APPROVED),
            make_expense("e2", status=ExpenseStatus.REJECTED),
        ],
        page=1,
        total_pages=1,
    )
    repo.list_user_donations_by_category.return_value = repo.list_donations.return_value
    repo.list_user_donations_overall.return_value = repo.list_donations.return_value
    return repo


class TestSubcategoryLists:
    async def test_unprivileged_forced_to_public_status(self, donor: Actor) -> None:
        repo = _repo()
        lst = subcategory_donations_list(repo, "sub-1", donor, lambda: ())

        await lst.fetch(1, ListFilters(status="pending"))

        sent_filters = repo.list_donations.call_args.args[3]
        assert sent_filters.status == "success"
        assert [d.id for d in lst.entries] == ["d1"]
        # The user's own filter snapshot is kept on the cursor.
        assert lst.filters.status == "pending"

    async def test_privileged_passes_filters_through(self, admin: Actor) -> None:
        repo = _repo()
        lst = subcategory_donations_list(repo, "sub-1", admin, lambda: ())

        await lst.fetch(1)

        assert repo.list_donations.call_args.args[3].status is None
        assert [d.id for d in lst.entries] == ["d1", "d2"]

    async def test_assignment_read_on_every_fetch(self, manager: Actor) -> None:
        repo = _repo()
        assigned: set[str] = set()
        lst = subcategory_donations_list(repo, "sub-1", manager, lambda: assigned)

        await lst.fetch(1)
        assert [d.id for d in lst.entries] == ["d1"]

        assigned.add("mgr-1")
        await lst.refresh()
        assert [d.id for d in lst.entries] == ["d1", "d2"]

    async def test_expenses_public_status(self, donor: Actor) -> None:
        repo = _repo()
        lst = subcategory_expenses_list(repo, "sub-1", donor, lambda: ())

        await lst.fetch(1)

        assert repo.list_expenses.call_args.args[3].status == "approved"
        assert [e.id for e in lst.entries] == ["e1"]


class TestDonorLists:
    async def test_donor_sees_own_history(self, donor: Actor) -> None:
        repo = _repo()
        lst = donor_category_donations_list(repo, "donor-1", "cat-1", donor)

        await lst.fetch(1)

        args = repo.list_user_donations_by_category.call_args.args
        assert args[:3] == ("donor-1", "cat-1", 1)
        assert [d.id for d in lst.entries] == ["d1", "d2"]

    async def test_donor_by_phone(self, donor: Actor) -> None:
        repo = _repo()
        lst = donor_overall_donations_list(repo, donor.phone, donor)
        await lst.fetch(1)
        assert len(lst.entries) == 2

    async def test_other_donor_history_public_only(self, donor: Actor) -> None:
        repo = _repo()
        lst = donor_overall_donations_list(repo, "someone-else", donor)

        await lst.fetch(1)

        assert repo.list_user_donations_overall.call_args.args[3].status == "success"
        assert [d.id for d in lst.entries] == ["d1"]

    async def test_history_summary_follows_loaded_entries(self, donor: Actor) -> None:
        repo = _repo()
        lst = donor_overall_donations_list(repo, "donor-1", donor)
        await lst.fetch(1)

        summary = donor_history_summary(lst)

        assert (summary.total_count, summary.total_amount) == (2, 20000)
        assert (summary.success_count, summary.pending_count) == (1, 1)
