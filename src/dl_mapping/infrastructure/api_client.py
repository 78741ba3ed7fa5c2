"""MappingApiClient: implements MappingRepositoryProtocol over the remote API."""

from src.dl_common.errors import RemoteApiError
from src.dl_common.http_client import RemoteApi
from src.dl_common.response import parse_payload, parse_wire_timestamp, total_pages_of
from src.dl_mapping.application.schemas import (
    AssignedManagerPayload,
    CreateMappingRequest,
    DeleteMappingRequest,
)
from src.dl_mapping.domain.models import AssignmentDetails, ManagerAssignment

MAPPINGS_PATH = "/api/donation-manager-mappings"
MANAGERS_BY_SUBCATEGORY_PATH = "/api/donation-managers/subcategory"
_PAGE_LIMIT = 100


def payload_to_assignment(raw: dict, subcategory_id: str) -> ManagerAssignment:
    p = parse_payload(AssignedManagerPayload, raw, "manager assignment")
    if not p.manager_id:
        raise RemoteApiError("Assigned manager without id in response")
    return ManagerAssignment(
        manager_id=p.manager_id,
        subcategory_id=subcategory_id,
        manager_name=p.name,
        manager_phone=p.phone,
        details=AssignmentDetails(
            payment_method=p.paymentMethod,
            account_holder_name=p.accountHolderName,
            payment_image=p.paymentImage,
            use_number_for_upi=p.useNumberForUpi,
        ),
        mapped_at=parse_wire_timestamp(p.mappedAt),
    )


class MappingApiClient(RemoteApi):
    async def list_for_subcategory(self, subcategory_id: str) -> list[ManagerAssignment]:
        """Every assignment of the subcategory, following pagination to the end."""
        assignments: list[ManagerAssignment] = []
        page = 1
        while True:
            data = await self.call(
                "GET",
                f"{MANAGERS_BY_SUBCATEGORY_PATH}/{subcategory_id}",
                "Failed to fetch donation managers for subcategory",
                params={"page": page, "limit": _PAGE_LIMIT},
            )
            data = data or {}
            for item in data.get("donation_managers") or []:
                assignments.append(payload_to_assignment(item, subcategory_id))
            if page >= total_pages_of(data.get("pagination"), page):
                return assignments
            page += 1

    async def create(
        self, manager_id: str, subcategory_id: str, details: AssignmentDetails
    ) -> None:
        request = CreateMappingRequest(
            donation_manager_id=manager_id,
            subcategory_id=subcategory_id,
            paymentMethod=details.payment_method,
            paymentImage=details.payment_image,
            accountHolderName=details.account_holder_name,
            useNumberForUpi=details.use_number_for_upi or None,
        )
        await self.call("POST", MAPPINGS_PATH, "Failed to create mapping", json=request.to_json())

    async def delete(self, manager_id: str, subcategory_id: str) -> None:
        request = DeleteMappingRequest(donation_manager_id=manager_id, subcategory_id=subcategory_id)
        await self.call("DELETE", MAPPINGS_PATH, "Failed to delete mapping", json=request.to_json())
