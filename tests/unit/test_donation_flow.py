"""Tests for DonationFlowStateMachine transitions and settlement outcomes."""

from unittest.mock import AsyncMock

import pytest

from src.dl_common.enums import LifecycleStatus, NotificationKind, SubcategoryType
from src.dl_common.errors import (
    AttemptInProgressError,
    FixedAmountRequiredError,
    GatewayFailureError,
    InvalidAmountError,
    InvalidTransitionError,
    ManagerNotAssignedError,
    NoManagerAssignedError,
    PaymentNotRecordedError,
    RemoteApiError,
    SubcategoryInactiveError,
)
from src.dl_donation.application.state_machine import DonationFlowStateMachine
from src.dl_donation.domain.gateway import (
    CheckoutRequest,
    CheckoutResult,
    GatewayCancelled,
    GatewayFailure,
    build_checkout_request,
)
from src.dl_donation.domain.models import FlowState
from src.dl_mapping.application.registry import ManagerMappingRegistry
from src.dl_mapping.domain.models import ManagerAssignment
from src.dl_session.domain.models import Actor
from tests.factories import RecordingSink, make_donation, make_subcategory


class FakeGateway:
    def __init__(self, outcome: Exception | str = "pay_001") -> None:
        self.outcome = outcome
        self.requests: list[CheckoutRequest] = []

    async def open_checkout(self, request: CheckoutRequest) -> CheckoutResult:
        self.requests.append(request)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return CheckoutResult(settlement_reference=self.outcome)


def _machine(
    gateway: FakeGateway | None = None,
    managers: list[ManagerAssignment] | None = None,
    sink: RecordingSink | None = None,
    mapping_error: Exception | None = None,
) -> tuple[DonationFlowStateMachine, FakeGateway, AsyncMock, RecordingSink]:
    gateway = gateway or FakeGateway()
    ledger = AsyncMock()
    ledger.create_donation.return_value = make_donation("don-new")
    mapping_store = AsyncMock()
    mapping_store.list_for_subcategory.return_value = managers or []
    mapping_store.list_for_subcategory.side_effect = mapping_error
    sink = sink or RecordingSink()
    machine = DonationFlowStateMachine(
        gateway, ledger, ManagerMappingRegistry(mapping_store), sink
    )
    return machine, gateway, ledger, sink


FIXED_500 = make_subcategory("sub-fixed", SubcategoryType.SPECIFIC_AMOUNT, 50000)
OPEN = make_subcategory("sub-open")


class TestStart:
    def test_start_enters_mode_select(self) -> None:
        machine, *_ = _machine()
        attempt = machine.start(OPEN)
        assert machine.state == FlowState.MODE_SELECT
        assert attempt.amount is None

    @pytest.mark.parametrize(
        "sub",
        [
            make_subcategory(status=LifecycleStatus.INACTIVE),
            make_subcategory(category_status=LifecycleStatus.INACTIVE),
        ],
    )
    def test_inactive_blocked(self, sub) -> None:
        machine, _, _, sink = _machine()
        with pytest.raises(SubcategoryInactiveError):
            machine.start(sub)
        assert machine.state == FlowState.IDLE
        assert sink.kinds == [NotificationKind.ERROR]

    def test_single_flight(self) -> None:
        machine, *_ = _machine()
        machine.start(OPEN)
        with pytest.raises(AttemptInProgressError):
            machine.start(FIXED_500)
        assert machine.attempt.subcategory is OPEN

    async def test_new_attempt_resets_previous_state(self) -> None:
        managers = [ManagerAssignment("m1", "sub-open")]
        machine, *_ = _machine(managers=managers)
        machine.start(OPEN)
        await machine.choose_offline()
        machine.select_manager("m1")
        machine.finish_offline()

        attempt = machine.start(OPEN)

        assert attempt.manager_id is None
        assert attempt.mode is None
        assert attempt.correlation_id is None


class TestOnline:
    async def test_specific_amount_goes_straight_to_gateway(self, donor: Actor) -> None:
        machine, gateway, ledger, sink = _machine()
        machine.start(FIXED_500, donor)

        donation = await machine.choose_online()

        assert donation.id == "don-new"
        assert gateway.requests[0].amount == 51000
        request = ledger.create_donation.call_args.args[0]
        assert request.amount == 500.0
        assert request.payment_method == "online"
        assert request.payment_status == "success"
        assert request.transaction_id == "pay_001"
        assert request.donor_id == "donor-1"
        assert machine.state == FlowState.IDLE
        assert sink.kinds == [NotificationKind.SUCCESS]

    async def test_open_donation_waits_for_amount(self) -> None:
        machine, gateway, *_ = _machine()
        machine.start(OPEN)

        assert await machine.choose_online() is None
        assert machine.state == FlowState.ONLINE_AMOUNT_ENTRY
        assert gateway.requests == []

        await machine.submit_amount("250")
        assert gateway.requests[0].amount == 25500
        assert machine.state == FlowState.IDLE

    @pytest.mark.parametrize("raw", ["0", "-10", "abc", ""])
    async def test_invalid_amount_stays_in_entry(self, raw: str) -> None:
        machine, gateway, *_ = _machine()
        machine.start(OPEN)
        await machine.choose_online()

        with pytest.raises(InvalidAmountError):
            await machine.submit_amount(raw)

        assert machine.state == FlowState.ONLINE_AMOUNT_ENTRY
        assert gateway.requests == []

    async def test_cancellation_is_silent(self) -> None:
        machine, _, ledger, sink = _machine(FakeGateway(GatewayCancelled()))
        machine.start(FIXED_500)

        assert await machine.choose_online() is None

        assert machine.state == FlowState.IDLE
        assert machine.attempt is None
        assert sink.messages == []
        ledger.create_donation.assert_not_called()

    async def test_gateway_failure_returns_to_mode_select(self) -> None:
        machine, _, ledger, sink = _machine(FakeGateway(GatewayFailure("Card declined")))
        machine.start(FIXED_500)

        with pytest.raises(GatewayFailureError, match="Card declined"):
            await machine.choose_online()

        assert machine.state == FlowState.MODE_SELECT
        assert sink.kinds == [NotificationKind.ERROR]
        ledger.create_donation.assert_not_called()

    async def test_record_failure_after_charge(self) -> None:
        machine, _, ledger, sink = _machine(FakeGateway("pay_777"))
        ledger.create_donation.side_effect = RemoteApiError("timeout")
        machine.start(FIXED_500)

        with pytest.raises(PaymentNotRecordedError) as exc_info:
            await machine.choose_online()

        assert exc_info.value.settlement_reference == "pay_777"
        assert machine.state == FlowState.SETTLED_NOT_RECORDED
        assert sink.messages[0][1] == "Payment captured but not recorded"
        # A labelled outcome, not an active attempt: a new donation can start.
        machine.start(OPEN)
        assert machine.state == FlowState.MODE_SELECT

    async def test_record_returned_nothing_after_charge(self) -> None:
        machine, _, ledger, sink = _machine(FakeGateway("pay_778"))
        ledger.create_donation.return_value = None
        machine.start(FIXED_500)

        with pytest.raises(PaymentNotRecordedError) as exc_info:
            await machine.choose_online()

        assert exc_info.value.settlement_reference == "pay_778"
        assert "not returned by the server" in exc_info.value.message
        assert machine.state == FlowState.SETTLED_NOT_RECORDED
        assert sink.kinds == [NotificationKind.ERROR]

    async def test_specific_amount_without_fixed_amount(self) -> None:
        for fixed in (None, 0):
            machine, gateway, ledger, sink = _machine()
            machine.start(make_subcategory("sub-broken", SubcategoryType.SPECIFIC_AMOUNT, fixed))

            with pytest.raises(FixedAmountRequiredError):
                await machine.choose_online()

            assert machine.state == FlowState.MODE_SELECT
            assert machine.attempt.amount is None
            assert gateway.requests == []
            ledger.create_donation.assert_not_called()
            assert sink.kinds == [NotificationKind.ERROR]

    async def test_handle_donate_now(self) -> None:
        machine, gateway, *_ = _machine()
        donation = await machine.handle_donate_now(FIXED_500)
        assert donation is not None
        assert gateway.requests[0].amount == 51000

    async def test_handle_donate_now_open_with_amount(self) -> None:
        machine, gateway, *_ = _machine()
        await machine.handle_donate_now(OPEN, raw_amount="100")
        assert gateway.requests[0].amount == 10200


class TestOffline:
    async def test_no_manager_blocked(self) -> None:
        machine, _, _, sink = _machine(managers=[])
        machine.start(OPEN)

        with pytest.raises(NoManagerAssignedError):
            await machine.choose_offline()

        assert machine.state == FlowState.MODE_SELECT
        assert sink.kinds == [NotificationKind.ERROR]

    async def test_mapping_fetch_failure_is_notified(self) -> None:
        machine, _, _, sink = _machine(mapping_error=RemoteApiError("Unable to load managers"))
        machine.start(OPEN)

        with pytest.raises(RemoteApiError):
            await machine.choose_offline()

        assert machine.state == FlowState.MODE_SELECT
        assert sink.messages == [(NotificationKind.ERROR, "Unable to load data", "Unable to load managers")]

    async def test_browse_and_select(self) -> None:
        managers = [ManagerAssignment("m1", "sub-open", "Suresh"), ManagerAssignment("m2", "sub-open")]
        machine, *_ = _machine(managers=managers)
        machine.start(OPEN)

        listed = await machine.choose_offline()
        assert [m.manager_id for m in listed] == ["m1", "m2"]
        assert machine.state == FlowState.OFFLINE_MANAGER_BROWSE

        chosen = machine.select_manager("m1")
        assert chosen.manager_name == "Suresh"
        assert machine.state == FlowState.OFFLINE_PAYMENT_DETAILS
        assert machine.attempt.manager_id == "m1"

        machine.finish_offline()
        assert machine.state == FlowState.IDLE

    async def test_unknown_manager(self) -> None:
        machine, *_ = _machine(managers=[ManagerAssignment("m1", "sub-open")])
        machine.start(OPEN)
        await machine.choose_offline()
        with pytest.raises(ManagerNotAssignedError):
            machine.select_manager("m9")


class TestCancelAndGuards:
    async def test_cancel_from_any_user_step(self) -> None:
        machine, *_ = _machine()
        machine.start(OPEN)
        await machine.choose_online()
        machine.cancel()
        assert machine.state == FlowState.IDLE
        assert machine.attempt is None

    def test_cancel_when_idle_is_noop(self) -> None:
        machine, *_ = _machine()
        machine.cancel()
        assert machine.state == FlowState.IDLE

    async def test_out_of_order_actions(self) -> None:
        machine, *_ = _machine()
        with pytest.raises(InvalidTransitionError):
            await machine.choose_online()
        with pytest.raises(InvalidTransitionError):
            await machine.submit_amount("10")
        with pytest.raises(InvalidTransitionError):
            machine.select_manager("m1")


class TestCheckoutRequest:
    def test_surcharge_and_prefill(self, donor: Actor) -> None:
        req = build_checkout_request(50000, "Donation for Temple", donor)
        assert req.amount == 51000
        assert req.currency == "INR"
        assert req.merchant_name == "MyKuttam"
        assert req.prefill == {"name": "Name donor-1", "contact": "9000000001"}

    def test_anonymous_prefill(self) -> None:
        assert build_checkout_request(100, "d").prefill == {}
