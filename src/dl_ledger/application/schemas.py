"""Pydantic schemas for the remote ledger API.

Incoming payloads (`*Payload`) are tolerant: the backend sends the donor in
several shapes depending on how the donation was captured (nested `donor`
object for registered users, flat `Donor_name` / `donor_name` / `donor_phone`
fields for offline entries) and references either as ids or nested objects.
They are turned into domain dataclasses once, in infrastructure/mappers.py.

Outgoing requests (`*Request`) carry major-unit amounts as JSON numbers.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RefPayload(_Payload):
    """A nested reference: {"id": ...} or Mongo-style {"_id": ...}."""

    id: str | None = None
    mongo_id: str | None = Field(default=None, alias="_id")
    name: str | None = None
    title: str | None = None
    phone: str | None = None
    address: str | None = None
    father_name: str | None = None
    role: str | list[str] | None = None
    type: str | None = None
    amount: float | str | None = None
    status: str | None = None
    category: "RefPayload | str | None" = None

    @property
    def ref_id(self) -> str | None:
        return self.id or self.mongo_id


RefPayload.model_rebuild()


def _id_of(value: RefPayload | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return value.ref_id


# ---------------------------------------------------------------------------
# Incoming: donations / expenses
# ---------------------------------------------------------------------------


class DonationPayload(_Payload):
    id: str | None = None
    mongo_id: str | None = Field(default=None, alias="_id")
    subcategory: RefPayload | str | None = None
    subcategory_id: str | None = None
    amount: float | str
    payment_method: str
    payment_status: str = "pending"
    transaction_id: str | None = None
    createdAt: str | None = None  # noqa: N815

    # Donor, in every shape the backend has used
    donor: RefPayload | str | None = None
    donor_id: str | None = None
    Donor_name: str | None = None  # noqa: N815
    donor_name: str | None = None
    donor_phone: str | None = None
    donor_address: str | None = None
    donor_father_name: str | None = None

    manager: RefPayload | str | None = None
    manager_id: str | None = None

    @property
    def entry_id(self) -> str | None:
        return self.id or self.mongo_id

    @property
    def subcategory_ref(self) -> str | None:
        return _id_of(self.subcategory) or self.subcategory_id

    @property
    def manager_ref(self) -> str | None:
        return _id_of(self.manager) or self.manager_id


class ExpensePayload(_Payload):
    id: str | None = None
    mongo_id: str | None = Field(default=None, alias="_id")
    subcategory: RefPayload | str | None = None
    subcategory_id: str | None = None
    expense_title: str
    expense_description: str | None = None
    amount: float | str
    payment_method: str
    status: str = "pending"
    transaction_id: str | None = None
    createdAt: str | None = None  # noqa: N815
    manager: RefPayload | str | None = None
    manager_id: str | None = None

    @property
    def entry_id(self) -> str | None:
        return self.id or self.mongo_id

    @property
    def subcategory_ref(self) -> str | None:
        return _id_of(self.subcategory) or self.subcategory_id

    @property
    def manager_ref(self) -> str | None:
        return _id_of(self.manager) or self.manager_id


class SubcategoryPayload(_Payload):
    id: str | None = None
    mongo_id: str | None = Field(default=None, alias="_id")
    title: str
    description: str | None = None
    type: str = "open_donation"
    amount: float | str | None = None
    status: str | None = None
    category: RefPayload | str | None = None
    category_id: str | None = None
    totalIncome: float | str | None = None  # noqa: N815
    totalExpense: float | str | None = None  # noqa: N815

    @property
    def entry_id(self) -> str | None:
        return self.id or self.mongo_id


class CategorySummaryPayload(_Payload):
    id: str | None = None
    mongo_id: str | None = Field(default=None, alias="_id")
    name: str
    status: str | None = None
    overallIncome: float | str | None = None  # noqa: N815
    overallExpense: float | str | None = None  # noqa: N815
    subcategories: list[SubcategoryPayload] = Field(default_factory=list)
    managers: list[RefPayload] = Field(default_factory=list)
    updatedAt: str | None = None  # noqa: N815
    createdAt: str | None = None  # noqa: N815

    @field_validator("subcategories", "managers", mode="before")
    @classmethod
    def none_to_empty(cls, v: object) -> object:
        return [] if v is None else v

    @property
    def entry_id(self) -> str | None:
        return self.id or self.mongo_id


class ListPage(_Payload):
    """`data` of a list endpoint: one list field plus an optional pagination block."""

    items: list[dict[str, Any]]
    pagination: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Outgoing requests
# ---------------------------------------------------------------------------


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateDonationRequest(_Request):
    subcategory_id: str
    amount: float = Field(..., gt=0)
    payment_method: str
    payment_status: str
    transaction_id: str | None = None
    donor_id: str | None = None
    donor_name: str | None = Field(default=None, serialization_alias="Donor_name")
    donor_father_name: str | None = None
    donor_address: str | None = None
    donor_phone: str | None = None
    manager_id: str | None = None


class UpdateDonationRequest(_Request):
    amount: float | None = Field(default=None, gt=0)
    payment_method: str | None = None
    payment_status: str | None = None
    transaction_id: str | None = None


class CreateExpenseRequest(_Request):
    subcategory_id: str
    expense_title: str
    expense_description: str | None = None
    manager_id: str | None = None
    amount: float = Field(..., gt=0)
    payment_method: str
    transaction_id: str | None = None
    status: str | None = None


class UpdateExpenseRequest(_Request):
    expense_title: str | None = None
    expense_description: str | None = None
    amount: float | None = Field(default=None, gt=0)
    payment_method: str | None = None
    transaction_id: str | None = None
    status: str | None = None


class CreateCategoryRequest(_Request):
    name: str
    description: str | None = None


class SubcategoryRequest(_Request):
    """Create (category_id set) or edit payload. amount=None with type
    open_donation is sent explicitly so the server clears the stored amount."""

    category_id: str | None = None
    title: str | None = None
    description: str | None = None
    type: str
    amount: float | None = None
    status: str | None = None

    def to_json(self) -> dict[str, Any]:
        body = self.model_dump(by_alias=True, exclude_none=True)
        if self.amount is None:
            body["amount"] = None
        return body
