"""Repository Protocol for manager assignments.

The remote store keys an assignment by (manager id, subcategory id).
"""

from typing import Protocol

from src.dl_mapping.domain.models import AssignmentDetails, ManagerAssignment


class MappingRepositoryProtocol(Protocol):
    async def list_for_subcategory(self, subcategory_id: str) -> list[ManagerAssignment]: ...

    async def create(
        self, manager_id: str, subcategory_id: str, details: AssignmentDetails
    ) -> None: ...

    async def delete(self, manager_id: str, subcategory_id: str) -> None: ...
