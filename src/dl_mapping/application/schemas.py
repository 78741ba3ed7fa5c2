"""Pydantic schemas for the donation-manager mapping endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.dl_common.enums import ManagerPaymentMethod


class AssignedManagerPayload(BaseModel):
    """One entry of `donation_managers` in the by-subcategory listing."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = None
    mongo_id: str | None = Field(default=None, alias="_id")
    name: str | None = None
    phone: str | None = None
    paymentMethod: ManagerPaymentMethod | None = None  # noqa: N815
    paymentImage: str | None = None  # noqa: N815
    accountHolderName: str | None = None  # noqa: N815
    useNumberForUpi: bool = False  # noqa: N815
    mappedAt: str | None = None  # noqa: N815

    @property
    def manager_id(self) -> str | None:
        return self.id or self.mongo_id


class CreateMappingRequest(BaseModel):
    donation_manager_id: str
    subcategory_id: str
    paymentMethod: ManagerPaymentMethod | None = None  # noqa: N815
    paymentImage: str | None = None  # noqa: N815
    accountHolderName: str | None = None  # noqa: N815
    useNumberForUpi: bool | None = None  # noqa: N815

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class DeleteMappingRequest(BaseModel):
    donation_manager_id: str
    subcategory_id: str

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
