"""ManagerMappingRegistry: the in-memory view of manager assignments.

The remote store is the source of truth. After every mutation the affected
subcategory's snapshot is re-read from it rather than patched locally, so a
half-applied batch never leaves the registry believing the attempted diff.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping

from src.dl_access.domain.guards import check_can_assign_managers
from src.dl_common.errors import AppError, PartialMappingFailureError
from src.dl_mapping.domain.models import AssignmentDetails, ManagerAssignment, ReconcilePlan
from src.dl_mapping.domain.reconcile import reconcile
from src.dl_mapping.domain.repository import MappingRepositoryProtocol
from src.dl_mapping.infrastructure.api_client import MappingApiClient
from src.dl_session.domain.models import Actor

logger = logging.getLogger(__name__)


class ManagerMappingRegistry:
    def __init__(self, repo: MappingRepositoryProtocol | None = None) -> None:
        self._repo: MappingRepositoryProtocol = repo or MappingApiClient()
        self._snapshots: dict[str, list[ManagerAssignment]] = {}

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    async def list_assigned(self, subcategory_id: str) -> list[ManagerAssignment]:
        if subcategory_id not in self._snapshots:
            return await self.refresh(subcategory_id)
        return list(self._snapshots[subcategory_id])

    async def refresh(self, subcategory_id: str) -> list[ManagerAssignment]:
        assignments = await self._repo.list_for_subcategory(subcategory_id)
        self._snapshots[subcategory_id] = assignments
        logger.debug("Mappings refreshed: subcategory=%s count=%d", subcategory_id, len(assignments))
        return list(assignments)

    def assigned_manager_ids(self, subcategory_id: str) -> frozenset[str]:
        """Ids from the current snapshot; empty if the subcategory was never loaded."""
        return frozenset(a.manager_id for a in self._snapshots.get(subcategory_id, ()))

    def get_assignment(self, subcategory_id: str, manager_id: str) -> ManagerAssignment | None:
        for a in self._snapshots.get(subcategory_id, ()):
            if a.manager_id == manager_id:
                return a
        return None

    # ------------------------------------------------------------------
    # Single mutations
    # ------------------------------------------------------------------

    async def set_assignment(
        self,
        actor: Actor | None,
        manager_id: str,
        subcategory_id: str,
        details: AssignmentDetails | None = None,
    ) -> list[ManagerAssignment]:
        check_can_assign_managers(actor)
        try:
            await self._repo.create(manager_id, subcategory_id, details or AssignmentDetails())
        finally:
            await self._refresh_after_write(subcategory_id)
        logger.info("Manager assigned: manager=%s subcategory=%s", manager_id, subcategory_id)
        return self._snapshots.get(subcategory_id, [])

    async def remove_assignment(
        self, actor: Actor | None, manager_id: str, subcategory_id: str
    ) -> list[ManagerAssignment]:
        check_can_assign_managers(actor)
        try:
            await self._repo.delete(manager_id, subcategory_id)
        finally:
            await self._refresh_after_write(subcategory_id)
        logger.info("Manager unassigned: manager=%s subcategory=%s", manager_id, subcategory_id)
        return self._snapshots.get(subcategory_id, [])

    async def update_details(
        self,
        actor: Actor | None,
        manager_id: str,
        subcategory_id: str,
        details: AssignmentDetails,
    ) -> list[ManagerAssignment]:
        """Explicit detail edit. The store keys assignments by pair, so the
        old assignment is removed and re-created with the new details."""
        check_can_assign_managers(actor)
        try:
            await self._repo.delete(manager_id, subcategory_id)
            await self._repo.create(manager_id, subcategory_id, details)
        finally:
            await self._refresh_after_write(subcategory_id)
        logger.info("Manager details updated: manager=%s subcategory=%s", manager_id, subcategory_id)
        return self._snapshots.get(subcategory_id, [])

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    async def apply_desired(
        self,
        actor: Actor | None,
        subcategory_id: str,
        desired: Iterable[str],
        details_by_manager: Mapping[str, AssignmentDetails] | None = None,
    ) -> ReconcilePlan:
        """Bring the subcategory's assignments to `desired`.

        Adds and removes run concurrently. If any of them fails the others
        still complete, the snapshot is re-read, and PartialMappingFailureError
        names the failed operations.
        """
        check_can_assign_managers(actor)
        current = await self.list_assigned(subcategory_id)
        plan = reconcile(desired, (a.manager_id for a in current))
        if plan.is_empty:
            return plan

        details_by_manager = details_by_manager or {}
        labels: list[str] = []
        ops = []
        for manager_id in sorted(plan.to_add):
            labels.append(f"add {manager_id}")
            ops.append(
                self._repo.create(
                    manager_id,
                    subcategory_id,
                    details_by_manager.get(manager_id, AssignmentDetails()),
                )
            )
        for manager_id in sorted(plan.to_remove):
            labels.append(f"remove {manager_id}")
            ops.append(self._repo.delete(manager_id, subcategory_id))

        try:
            results = await asyncio.gather(*ops, return_exceptions=True)
        finally:
            await self._refresh_after_write(subcategory_id)

        failed: list[str] = []
        succeeded: list[str] = []
        for label, result in zip(labels, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failed.append(label)
                logger.warning(
                    "Mapping change failed: subcategory=%s op=%s error=%s",
                    subcategory_id,
                    label,
                    result.message if isinstance(result, AppError) else result,
                )
            else:
                succeeded.append(label)

        if failed:
            raise PartialMappingFailureError(failed=failed, succeeded=succeeded)
        logger.info(
            "Mappings reconciled: subcategory=%s added=%d removed=%d",
            subcategory_id,
            len(plan.to_add),
            len(plan.to_remove),
        )
        return plan

    async def _refresh_after_write(self, subcategory_id: str) -> None:
        try:
            await self.refresh(subcategory_id)
        except AppError as exc:
            # Next list_assigned() re-reads instead of trusting a stale snapshot.
            self._snapshots.pop(subcategory_id, None)
            logger.error(
                "Mapping refresh failed after write: subcategory=%s error=%s",
                subcategory_id,
                exc.message,
            )
