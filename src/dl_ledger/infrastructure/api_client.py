"""LedgerApiClient: implements LedgerRepositoryProtocol over the remote ledger API.

List endpoints answer `{<items>: [...], pagination: {page, totalPages}}`;
everything else answers a single record (or null) in `data`.
"""

from typing import Any

from src.dl_common.datetime_utils import format_api_date
from src.dl_common.errors import RemoteApiError
from src.dl_common.http_client import RemoteApi
from src.dl_common.response import total_pages_of
from src.dl_ledger.application.schemas import (
    CreateCategoryRequest,
    CreateDonationRequest,
    CreateExpenseRequest,
    ListPage,
    SubcategoryRequest,
    UpdateDonationRequest,
    UpdateExpenseRequest,
)
from src.dl_ledger.domain.models import CategorySummary, Donation, Expense, Subcategory
from src.dl_ledger.infrastructure.mappers import (
    payload_to_category_summary,
    payload_to_donation,
    payload_to_expense,
    payload_to_subcategory,
)
from src.dl_listing.domain.models import ListFilters, PageResult

DONATIONS_PATH = "/api/donations"
EXPENSES_PATH = "/api/expenses"
SUBCATEGORIES_PATH = "/api/subcategories"
CATEGORIES_PATH = "/api/donation-categories"
CATEGORIES_SUMMARY_PATH = f"{CATEGORIES_PATH}/summary"


def _filter_params(
    filters: ListFilters, page: int, limit: int, status_param: str
) -> dict[str, Any]:
    return {
        "page": page,
        "limit": limit,
        "startDate": format_api_date(filters.start_date) if filters.start_date else None,
        "endDate": format_api_date(filters.end_date) if filters.end_date else None,
        status_param: filters.status,
    }


def _list_page(data: Any, items_key: str) -> ListPage:
    if data is None:
        return ListPage(items=[], pagination=None)
    if not isinstance(data, dict):
        raise RemoteApiError(f"Unexpected list payload for '{items_key}'")
    return ListPage(items=data.get(items_key) or [], pagination=data.get("pagination"))


class LedgerApiClient(RemoteApi):
    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    async def _list_donations(
        self, path: str, params: dict[str, Any], page: int, fallback: str
    ) -> PageResult[Donation]:
        data = await self.call("GET", path, fallback, params=params)
        listing = _list_page(data, "donations")
        return PageResult(
            items=[payload_to_donation(item) for item in listing.items],
            page=page,
            total_pages=total_pages_of(listing.pagination, page),
        )

    async def list_donations(
        self, subcategory_id: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Donation]:
        params = {"subcategory_id": subcategory_id}
        params.update(_filter_params(filters, page, limit, "payment_status"))
        return await self._list_donations(
            DONATIONS_PATH, params, page, "Failed to fetch donations"
        )

    async def list_expenses(
        self, subcategory_id: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Expense]:
        params = {"subcategory_id": subcategory_id}
        params.update(_filter_params(filters, page, limit, "status"))
        data = await self.call("GET", EXPENSES_PATH, "Failed to fetch expenses", params=params)
        listing = _list_page(data, "expenses")
        return PageResult(
            items=[payload_to_expense(item) for item in listing.items],
            page=page,
            total_pages=total_pages_of(listing.pagination, page),
        )

    async def list_user_donations_by_category(
        self, user_ref: str, category_id: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Donation]:
        return await self._list_donations(
            f"{DONATIONS_PATH}/user/{user_ref}/category/{category_id}",
            _filter_params(filters, page, limit, "payment_status"),
            page,
            "Failed to fetch user donations by category",
        )

    async def list_user_donations_overall(
        self, user_ref: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Donation]:
        return await self._list_donations(
            f"{DONATIONS_PATH}/user/{user_ref}/overall",
            _filter_params(filters, page, limit, "payment_status"),
            page,
            "Failed to fetch user donations",
        )

    # ------------------------------------------------------------------
    # Donations
    # ------------------------------------------------------------------

    async def create_donation(self, request: CreateDonationRequest) -> Donation | None:
        data = await self.call(
            "POST", DONATIONS_PATH, "Failed to create donation", json=request.to_json()
        )
        return payload_to_donation(data) if data else None

    async def update_donation(
        self, donation_id: str, request: UpdateDonationRequest
    ) -> Donation | None:
        data = await self.call(
            "PUT",
            f"{DONATIONS_PATH}/{donation_id}",
            "Failed to update donation",
            json=request.to_json(),
        )
        return payload_to_donation(data) if data else None

    async def delete_donation(self, donation_id: str) -> None:
        await self.call("DELETE", f"{DONATIONS_PATH}/{donation_id}", "Failed to delete donation")

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def create_expense(self, request: CreateExpenseRequest) -> Expense | None:
        data = await self.call(
            "POST", EXPENSES_PATH, "Failed to create expense", json=request.to_json()
        )
        return payload_to_expense(data) if data else None

    async def update_expense(
        self, expense_id: str, request: UpdateExpenseRequest
    ) -> Expense | None:
        data = await self.call(
            "PUT",
            f"{EXPENSES_PATH}/{expense_id}",
            "Failed to update expense",
            json=request.to_json(),
        )
        return payload_to_expense(data) if data else None

    async def delete_expense(self, expense_id: str) -> None:
        await self.call("DELETE", f"{EXPENSES_PATH}/{expense_id}", "Failed to delete expense")

    # ------------------------------------------------------------------
    # Categories / subcategories
    # ------------------------------------------------------------------

    async def get_categories_summary(self) -> list[CategorySummary]:
        data = await self.call("GET", CATEGORIES_SUMMARY_PATH, "Failed to fetch donation summary")
        return [payload_to_category_summary(item) for item in data or []]

    async def create_category(self, request: CreateCategoryRequest) -> CategorySummary | None:
        data = await self.call(
            "POST", CATEGORIES_PATH, "Failed to create category", json=request.to_json()
        )
        return payload_to_category_summary(data) if data else None

    async def create_subcategory(self, request: SubcategoryRequest) -> Subcategory | None:
        data = await self.call(
            "POST", SUBCATEGORIES_PATH, "Failed to create subcategory", json=request.to_json()
        )
        return payload_to_subcategory(data, category_id=request.category_id) if data else None

    async def update_subcategory(
        self, subcategory_id: str, request: SubcategoryRequest
    ) -> Subcategory | None:
        data = await self.call(
            "PUT",
            f"{SUBCATEGORIES_PATH}/{subcategory_id}",
            "Failed to update subcategory",
            json=request.to_json(),
        )
        return payload_to_subcategory(data) if data else None
