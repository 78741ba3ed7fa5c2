"""LedgerApplicationService: thin composition layer over the ledger API.

Every mutating operation validates locally and checks capability before the
first network call; a rejected request never reaches the repository.
"""

import logging
from collections.abc import Iterable

from src.dl_access.domain.guards import check_can_edit_subcategory, check_can_manage
from src.dl_common.enums import (
    DonationPaymentMethod,
    ExpensePaymentMethod,
    ExpenseStatus,
    LifecycleStatus,
    PaymentStatus,
    SubcategoryType,
)
from src.dl_common.errors import InternalError, InvalidAmountError, MissingFieldError
from src.dl_common.money import to_wire_amount
from src.dl_ledger.application.schemas import (
    CreateCategoryRequest,
    CreateExpenseRequest,
    SubcategoryRequest,
    UpdateDonationRequest,
    UpdateExpenseRequest,
)
from src.dl_ledger.domain.aggregator import aggregate_categories
from src.dl_ledger.domain.models import (
    CategorySummary,
    Donation,
    Expense,
    LedgerTotals,
    Subcategory,
)
from src.dl_ledger.domain.repository import LedgerRepositoryProtocol
from src.dl_ledger.domain.validation import (
    check_delete_confirmation,
    parse_positive_amount,
    require_text,
    resolve_fixed_amount,
)
from src.dl_ledger.infrastructure.api_client import LedgerApiClient
from src.dl_session.domain.models import Actor

logger = logging.getLogger(__name__)


def _optional_amount(raw: object | None) -> int | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return parse_positive_amount(raw)


class LedgerApplicationService:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerApiClient()

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def create_expense(
        self,
        actor: Actor | None,
        subcategory_id: str,
        assigned_manager_ids: Iterable[str],
        title: str,
        raw_amount: object,
        payment_method: ExpensePaymentMethod,
        description: str | None = None,
        transaction_ref: str | None = None,
    ) -> Expense:
        clean_title = require_text(title, "Expense title")
        amount = parse_positive_amount(raw_amount)
        actor = check_can_manage(actor, subcategory_id, assigned_manager_ids, "add expenses")

        request = CreateExpenseRequest(
            subcategory_id=subcategory_id,
            expense_title=clean_title,
            expense_description=(description or "").strip() or None,
            manager_id=actor.id,
            amount=to_wire_amount(amount),
            payment_method=payment_method.value,
            transaction_id=(transaction_ref or "").strip() or None,
        )
        expense = await self._repo.create_expense(request)
        if expense is None:
            raise InternalError("Expense created but not returned by the server")
        logger.info(
            "Expense created: id=%s subcategory=%s amount=%d by=%s",
            expense.id,
            subcategory_id,
            amount,
            actor.id,
        )
        return expense

    async def update_expense(
        self,
        actor: Actor | None,
        expense: Expense,
        assigned_manager_ids: Iterable[str],
        title: str | None = None,
        raw_amount: object | None = None,
        payment_method: ExpensePaymentMethod | None = None,
        status: ExpenseStatus | None = None,
        description: str | None = None,
        transaction_ref: str | None = None,
    ) -> Expense:
        clean_title = require_text(title, "Expense title") if title is not None else None
        amount = _optional_amount(raw_amount)
        check_can_manage(actor, expense.subcategory_id, assigned_manager_ids, "edit expenses")

        request = UpdateExpenseRequest(
            expense_title=clean_title,
            expense_description=description,
            amount=to_wire_amount(amount) if amount is not None else None,
            payment_method=payment_method.value if payment_method else None,
            transaction_id=transaction_ref,
            status=status.value if status else None,
        )
        updated = await self._repo.update_expense(expense.id, request)
        logger.info("Expense updated: id=%s", expense.id)
        return updated or expense

    async def delete_expense(
        self,
        actor: Actor | None,
        expense: Expense,
        assigned_manager_ids: Iterable[str],
        confirmation: str | None,
    ) -> None:
        check_delete_confirmation(confirmation)
        actor = check_can_manage(
            actor, expense.subcategory_id, assigned_manager_ids, "delete expenses"
        )
        await self._repo.delete_expense(expense.id)
        logger.info("Expense deleted: id=%s by=%s", expense.id, actor.id)

    # ------------------------------------------------------------------
    # Donations
    # ------------------------------------------------------------------

    async def update_donation(
        self,
        actor: Actor | None,
        donation: Donation,
        assigned_manager_ids: Iterable[str],
        raw_amount: object | None = None,
        payment_method: DonationPaymentMethod | None = None,
        payment_status: PaymentStatus | None = None,
        transaction_ref: str | None = None,
    ) -> Donation:
        amount = _optional_amount(raw_amount)
        check_can_manage(actor, donation.subcategory_id, assigned_manager_ids, "edit donations")

        request = UpdateDonationRequest(
            amount=to_wire_amount(amount) if amount is not None else None,
            payment_method=payment_method.value if payment_method else None,
            payment_status=payment_status.value if payment_status else None,
            transaction_id=transaction_ref,
        )
        updated = await self._repo.update_donation(donation.id, request)
        logger.info("Donation updated: id=%s", donation.id)
        return updated or donation

    async def delete_donation(
        self,
        actor: Actor | None,
        donation: Donation,
        assigned_manager_ids: Iterable[str],
        confirmation: str | None,
    ) -> None:
        check_delete_confirmation(confirmation)
        actor = check_can_manage(
            actor, donation.subcategory_id, assigned_manager_ids, "delete donations"
        )
        await self._repo.delete_donation(donation.id)
        logger.info("Donation deleted: id=%s by=%s", donation.id, actor.id)

    # ------------------------------------------------------------------
    # Categories / subcategories
    # ------------------------------------------------------------------

    async def get_categories_overview(self) -> tuple[list[CategorySummary], LedgerTotals]:
        summaries = await self._repo.get_categories_summary()
        return summaries, aggregate_categories(summaries)

    async def create_category(
        self, actor: Actor | None, name: str, description: str | None = None
    ) -> CategorySummary:
        clean_name = require_text(name, "Category name")
        actor = check_can_edit_subcategory(actor)
        request = CreateCategoryRequest(name=clean_name, description=(description or "").strip() or None)
        created = await self._repo.create_category(request)
        if created is None:
            raise InternalError("Category created but not returned by the server")
        logger.info("Category created: id=%s by=%s", created.id, actor.id)
        return created

    async def create_subcategory(
        self,
        actor: Actor | None,
        category_id: str,
        title: str,
        sub_type: SubcategoryType,
        raw_amount: object | None = None,
        description: str | None = None,
    ) -> Subcategory:
        if not category_id:
            raise MissingFieldError("Category")
        clean_title = require_text(title, "Subcategory title")
        fixed = resolve_fixed_amount(sub_type, _amount_or_none(sub_type, raw_amount))
        actor = check_can_edit_subcategory(actor)

        request = SubcategoryRequest(
            category_id=category_id,
            title=clean_title,
            description=(description or "").strip() or None,
            type=sub_type.value,
            amount=to_wire_amount(fixed) if fixed is not None else None,
        )
        created = await self._repo.create_subcategory(request)
        if created is None:
            raise InternalError("Subcategory created but not returned by the server")
        logger.info("Subcategory created: id=%s category=%s by=%s", created.id, category_id, actor.id)
        return created

    async def edit_subcategory(
        self,
        actor: Actor | None,
        subcategory: Subcategory,
        title: str | None = None,
        sub_type: SubcategoryType | None = None,
        raw_amount: object | None = None,
        description: str | None = None,
        status: LifecycleStatus | None = None,
    ) -> Subcategory:
        """Edit a subcategory. Switching to open_donation clears the amount;
        switching to (or staying on) specific_amount requires one."""
        new_type = sub_type or subcategory.type
        clean_title = require_text(title, "Subcategory title") if title is not None else subcategory.title
        if raw_amount is None and new_type == SubcategoryType.SPECIFIC_AMOUNT:
            candidate = subcategory.fixed_amount
        else:
            candidate = _amount_or_none(new_type, raw_amount)
        fixed = resolve_fixed_amount(new_type, candidate)
        actor = check_can_edit_subcategory(actor)

        request = SubcategoryRequest(
            title=clean_title,
            description=description if description is not None else subcategory.description,
            type=new_type.value,
            amount=to_wire_amount(fixed) if fixed is not None else None,
            status=(status or subcategory.status).value,
        )
        updated = await self._repo.update_subcategory(subcategory.id, request)
        logger.info(
            "Subcategory edited: id=%s type=%s amount=%s by=%s",
            subcategory.id,
            new_type.value,
            fixed,
            actor.id,
        )
        return updated or Subcategory(
            id=subcategory.id,
            title=clean_title,
            type=new_type,
            category_id=subcategory.category_id,
            description=request.description,
            fixed_amount=fixed,
            status=status or subcategory.status,
            category_status=subcategory.category_status,
            category_name=subcategory.category_name,
        )


def _amount_or_none(sub_type: SubcategoryType, raw_amount: object | None) -> int | None:
    """Open-donation subcategories ignore whatever amount was typed."""
    if sub_type == SubcategoryType.OPEN_DONATION:
        return None
    try:
        return _optional_amount(raw_amount)
    except InvalidAmountError:
        # reported as FixedAmountRequiredError by resolve_fixed_amount
        return None
