"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation (LedgerApiClient).
"""

from typing import Protocol

from src.dl_ledger.application.schemas import (
    CreateCategoryRequest,
    CreateDonationRequest,
    CreateExpenseRequest,
    SubcategoryRequest,
    UpdateDonationRequest,
    UpdateExpenseRequest,
)
from src.dl_ledger.domain.models import CategorySummary, Donation, Expense, Subcategory
from src.dl_listing.domain.models import ListFilters, PageResult


class LedgerRepositoryProtocol(Protocol):
    async def list_donations(
        self, subcategory_id: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Donation]: ...

    async def list_expenses(
        self, subcategory_id: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Expense]: ...

    async def list_user_donations_by_category(
        self, user_ref: str, category_id: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Donation]: ...

    async def list_user_donations_overall(
        self, user_ref: str, page: int, limit: int, filters: ListFilters
    ) -> PageResult[Donation]: ...

    async def create_donation(self, request: CreateDonationRequest) -> Donation | None: ...

    async def update_donation(
        self, donation_id: str, request: UpdateDonationRequest
    ) -> Donation | None: ...

    async def delete_donation(self, donation_id: str) -> None: ...

    async def create_expense(self, request: CreateExpenseRequest) -> Expense | None: ...

    async def update_expense(
        self, expense_id: str, request: UpdateExpenseRequest
    ) -> Expense | None: ...

    async def delete_expense(self, expense_id: str) -> None: ...

    async def get_categories_summary(self) -> list[CategorySummary]: ...

    async def create_category(self, request: CreateCategoryRequest) -> CategorySummary | None: ...

    async def create_subcategory(self, request: SubcategoryRequest) -> Subcategory | None: ...

    async def update_subcategory(
        self, subcategory_id: str, request: SubcategoryRequest
    ) -> Subcategory | None: ...
