"""Tests for ManagerMappingRegistry and reconcile."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.dl_common.enums import ManagerPaymentMethod
from src.dl_common.errors import CapabilityDeniedError, PartialMappingFailureError, RemoteApiError
from src.dl_mapping.application.registry import ManagerMappingRegistry
from src.dl_mapping.domain.models import AssignmentDetails, ManagerAssignment
from src.dl_mapping.domain.reconcile import reconcile
from src.dl_session.domain.models import Actor


class FakeMappingStore:
    """In-memory remote store keyed by (manager, subcategory)."""

    def __init__(self, initial: dict[str, AssignmentDetails] | None = None) -> None:
        self.rows: dict[tuple[str, str], AssignmentDetails] = {
            (m, "sub-1"): d for m, d in (initial or {}).items()
        }
        self.fail_ops: set[str] = set()
        self.calls: list[str] = []
        self.list_calls = 0

    async def list_for_subcategory(self, subcategory_id: str) -> list[ManagerAssignment]:
        self.list_calls += 1
        return [
            ManagerAssignment(manager_id=m, subcategory_id=s, details=d)
            for (m, s), d in sorted(self.rows.items())
            if s == subcategory_id
        ]

    async def create(self, manager_id: str, subcategory_id: str, details: AssignmentDetails) -> None:
        self.calls.append(f"add {manager_id}")
        await asyncio.sleep(0)
        if f"add {manager_id}" in self.fail_ops:
            raise RemoteApiError("Failed to create mapping")
        self.rows[(manager_id, subcategory_id)] = details

    async def delete(self, manager_id: str, subcategory_id: str) -> None:
        self.calls.append(f"remove {manager_id}")
        await asyncio.sleep(0)
        if f"remove {manager_id}" in self.fail_ops:
            raise RemoteApiError("Failed to delete mapping")
        self.rows.pop((manager_id, subcategory_id), None)


UPI = AssignmentDetails(payment_method=ManagerPaymentMethod.UPI, use_number_for_upi=True)


class TestReconcile:
    def test_minimal_diff(self) -> None:
        plan = reconcile({"a", "b", "c"}, {"b", "c", "d"})
        assert plan.to_add == frozenset({"a"})
        assert plan.to_remove == frozenset({"d"})

    def test_identical_sets(self) -> None:
        assert reconcile(["a"], ["a"]).is_empty

    def test_from_empty(self) -> None:
        plan = reconcile(["a", "b"], [])
        assert plan.to_add == frozenset({"a", "b"})
        assert not plan.to_remove


class TestReadSide:
    async def test_list_loads_once(self) -> None:
        store = FakeMappingStore({"m1": UPI})
        registry = ManagerMappingRegistry(store)

        await registry.list_assigned("sub-1")
        await registry.list_assigned("sub-1")

        assert store.list_calls == 1
        assert registry.assigned_manager_ids("sub-1") == frozenset({"m1"})
        assert registry.get_assignment("sub-1", "m1").details == UPI

    def test_unknown_subcategory_is_empty(self) -> None:
        assert ManagerMappingRegistry(FakeMappingStore()).assigned_manager_ids("sub-x") == frozenset()


class TestApplyDesired:
    async def test_untouched_entries_keep_details(self, admin: Actor) -> None:
        store = FakeMappingStore({"m1": UPI, "m2": AssignmentDetails()})
        registry = ManagerMappingRegistry(store)

        plan = await registry.apply_desired(admin, "sub-1", {"m1", "m3"})

        assert plan.to_add == frozenset({"m3"})
        assert plan.to_remove == frozenset({"m2"})
        assert sorted(store.calls) == ["add m3", "remove m2"]
        assert registry.get_assignment("sub-1", "m1").details == UPI
        assert registry.assigned_manager_ids("sub-1") == frozenset({"m1", "m3"})

    async def test_details_for_new_managers(self, admin: Actor) -> None:
        store = FakeMappingStore()
        registry = ManagerMappingRegistry(store)
        await registry.apply_desired(admin, "sub-1", ["m1"], {"m1": UPI})
        assert store.rows[("m1", "sub-1")] == UPI

    async def test_no_change_no_calls(self, admin: Actor) -> None:
        store = FakeMappingStore({"m1": UPI})
        registry = ManagerMappingRegistry(store)
        await registry.apply_desired(admin, "sub-1", ["m1"])
        assert store.calls == []

    async def test_partial_failure_reports_and_refreshes(self, admin: Actor) -> None:
        store = FakeMappingStore({"m1": UPI})
        store.fail_ops = {"add m3"}
        registry = ManagerMappingRegistry(store)
        await registry.list_assigned("sub-1")

        with pytest.raises(PartialMappingFailureError) as exc_info:
            await registry.apply_desired(admin, "sub-1", {"m2", "m3"})

        err = exc_info.value
        assert err.failed == ["add m3"]
        assert sorted(err.succeeded) == ["add m2", "remove m1"]
        # The other operations still ran and the view reflects the store, not the attempted diff.
        assert registry.assigned_manager_ids("sub-1") == frozenset({"m2"})
        assert store.list_calls == 2

    async def test_requires_admin(self, manager: Actor) -> None:
        store = FakeMappingStore()
        with pytest.raises(CapabilityDeniedError):
            await ManagerMappingRegistry(store).apply_desired(manager, "sub-1", ["m1"])
        assert store.calls == []


class TestSingleMutations:
    async def test_set_and_remove(self, sub_admin: Actor) -> None:
        store = FakeMappingStore()
        registry = ManagerMappingRegistry(store)

        await registry.set_assignment(sub_admin, "m1", "sub-1", UPI)
        assert registry.assigned_manager_ids("sub-1") == frozenset({"m1"})

        await registry.remove_assignment(sub_admin, "m1", "sub-1")
        assert registry.assigned_manager_ids("sub-1") == frozenset()

    async def test_update_details_replaces_pair(self, admin: Actor) -> None:
        store = FakeMappingStore({"m1": AssignmentDetails()})
        registry = ManagerMappingRegistry(store)
        bank = AssignmentDetails(
            payment_method=ManagerPaymentMethod.BANK_ACCOUNT, account_holder_name="Temple Trust"
        )

        await registry.update_details(admin, "m1", "sub-1", bank)

        assert store.calls == ["remove m1", "add m1"]
        assert registry.get_assignment("sub-1", "m1").details == bank

    async def test_failed_write_still_refreshes(self, admin: Actor) -> None:
        store = FakeMappingStore({"m1": UPI})
        store.fail_ops = {"remove m1"}
        registry = ManagerMappingRegistry(store)

        with pytest.raises(RemoteApiError):
            await registry.remove_assignment(admin, "m1", "sub-1")

        assert registry.assigned_manager_ids("sub-1") == frozenset({"m1"})

    async def test_refresh_failure_drops_snapshot(self, admin: Actor) -> None:
        store = FakeMappingStore({"m1": UPI})
        registry = ManagerMappingRegistry(store)
        await registry.list_assigned("sub-1")
        store.list_for_subcategory = AsyncMock(side_effect=RemoteApiError("down"))

        await registry.set_assignment(admin, "m2", "sub-1")

        assert registry.assigned_manager_ids("sub-1") == frozenset()


class TestPaymentInstructions:
    def test_upi_number(self) -> None:
        a = ManagerAssignment("m1", "sub-1", "Suresh", "9000", UPI)
        assert "9000" in a.payment_instructions

    def test_bank(self) -> None:
        a = ManagerAssignment(
            "m1",
            "sub-1",
            "Suresh",
            details=AssignmentDetails(
                payment_method=ManagerPaymentMethod.BANK_ACCOUNT, account_holder_name="Trust"
            ),
        )
        assert "Trust" in a.payment_instructions
