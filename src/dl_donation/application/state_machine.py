"""DonationFlowStateMachine: one donation attempt from mode selection to record.

    IDLE ─start─▶ MODE_SELECT ─choose_online─▶ ONLINE_AMOUNT_ENTRY ─submit_amount─┐
                      │               (specific_amount skips amount entry)     ▼
                      │                                            GATEWAY_SETTLEMENT
                      │                                                        │
                      └─choose_offline─▶ OFFLINE_MANAGER_BROWSE               ▼
                                          ─select_manager─▶            RECORD_CREATION
                                          OFFLINE_PAYMENT_DETAILS              │
                                          ─finish_offline─▶ IDLE   ◀──────────┘

Outcomes of settlement:
  - gateway cancelled      → IDLE, silently
  - gateway failure        → MODE_SELECT, notified
  - record creation failed or returned no entry
                           → SETTLED_NOT_RECORDED, PaymentNotRecordedError
    (money moved, the ledger does not know about it)

The gateway is charged the donor amount plus the surcharge; the ledger
entry always records the donor amount.

One attempt at a time: start() while an attempt is active is rejected.
Every AppError raised here has already been sent to the notification sink.
"""

import logging

from src.dl_common.enums import DonationPaymentMethod, PaymentStatus, SubcategoryType
from src.dl_common.errors import (
    AppError,
    AttemptInProgressError,
    FixedAmountRequiredError,
    GatewayFailureError,
    InvalidTransitionError,
    ManagerNotAssignedError,
    NoManagerAssignedError,
    PaymentNotRecordedError,
    SubcategoryInactiveError,
)
from src.dl_common.money import to_wire_amount
from src.dl_common.notifications import LoggingNotificationSink, NotificationSink, notify_error, notify_success
from src.dl_donation.domain.gateway import (
    GatewayCancelled,
    GatewayFailure,
    PaymentGatewayProtocol,
    build_checkout_request,
)
from src.dl_donation.domain.models import ACTIVE_STATES, DonationAttempt, FlowState
from src.dl_ledger.application.schemas import CreateDonationRequest
from src.dl_ledger.domain.models import Donation, Subcategory
from src.dl_ledger.domain.repository import LedgerRepositoryProtocol
from src.dl_ledger.domain.validation import parse_positive_amount
from src.dl_mapping.application.registry import ManagerMappingRegistry
from src.dl_mapping.domain.models import ManagerAssignment
from src.dl_session.domain.models import Actor

logger = logging.getLogger(__name__)

# Money may be moving; the gateway's own cancel path is the only way out.
_NON_CANCELLABLE = frozenset({FlowState.GATEWAY_SETTLEMENT, FlowState.RECORD_CREATION})


class DonationFlowStateMachine:
    def __init__(
        self,
        gateway: PaymentGatewayProtocol,
        ledger: LedgerRepositoryProtocol,
        registry: ManagerMappingRegistry,
        notifier: NotificationSink | None = None,
    ) -> None:
        self._gateway = gateway
        self._ledger = ledger
        self._registry = registry
        self._notifier: NotificationSink = notifier or LoggingNotificationSink()
        self._state = FlowState.IDLE
        self._attempt: DonationAttempt | None = None
        self._actor: Actor | None = None

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def attempt(self) -> DonationAttempt | None:
        return self._attempt

    @property
    def is_active(self) -> bool:
        return self._state in ACTIVE_STATES

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, subcategory: Subcategory, actor: Actor | None = None) -> DonationAttempt:
        if self.is_active:
            raise self._reject(AttemptInProgressError())
        if not subcategory.is_accepting_donations:
            raise self._reject(SubcategoryInactiveError(subcategory.id))
        # A fresh attempt: nothing from a previous one survives.
        self._attempt = DonationAttempt(subcategory=subcategory)
        self._actor = actor
        self._state = FlowState.MODE_SELECT
        logger.debug("Donation attempt started: subcategory=%s", subcategory.id)
        return self._attempt

    async def choose_online(self) -> Donation | None:
        """Online mode. A specific-amount subcategory goes straight to the
        gateway and the result of settlement is returned; otherwise the
        machine waits in ONLINE_AMOUNT_ENTRY and None is returned."""
        attempt = self._expect(FlowState.MODE_SELECT, "choose online donation")
        sub = attempt.subcategory
        fixed = sub.type == SubcategoryType.SPECIFIC_AMOUNT
        if fixed and not sub.fixed_amount:
            raise self._reject(FixedAmountRequiredError())
        attempt.mode = DonationPaymentMethod.ONLINE
        if fixed:
            attempt.amount = sub.fixed_amount
            return await self._settle()
        self._state = FlowState.ONLINE_AMOUNT_ENTRY
        return None

    async def submit_amount(self, raw_amount: object) -> Donation | None:
        attempt = self._expect(FlowState.ONLINE_AMOUNT_ENTRY, "submit an amount")
        try:
            attempt.amount = parse_positive_amount(raw_amount)
        except AppError as exc:
            raise self._reject(exc) from None
        return await self._settle()

    async def choose_offline(self) -> list[ManagerAssignment]:
        attempt = self._expect(FlowState.MODE_SELECT, "choose offline donation")
        try:
            managers = await self._registry.list_assigned(attempt.subcategory.id)
        except AppError as exc:
            raise self._reject(exc) from None
        if not managers:
            raise self._reject(NoManagerAssignedError(attempt.subcategory.id))
        attempt.mode = DonationPaymentMethod.OFFLINE
        self._state = FlowState.OFFLINE_MANAGER_BROWSE
        return managers

    def select_manager(self, manager_id: str) -> ManagerAssignment:
        """Pick the manager to pay; returns the assignment with payment instructions."""
        attempt = self._expect(FlowState.OFFLINE_MANAGER_BROWSE, "select a manager")
        assignment = self._registry.get_assignment(attempt.subcategory.id, manager_id)
        if assignment is None:
            raise self._reject(ManagerNotAssignedError(manager_id, attempt.subcategory.id))
        attempt.manager_id = manager_id
        self._state = FlowState.OFFLINE_PAYMENT_DETAILS
        return assignment

    def finish_offline(self) -> None:
        """The donor has the payment instructions; the manager records the
        donation later through direct entry."""
        self._expect(FlowState.OFFLINE_PAYMENT_DETAILS, "finish offline donation")
        self._reset()

    def cancel(self) -> None:
        if self._state in _NON_CANCELLABLE:
            raise InvalidTransitionError("cancel", self._state.value)
        if self._state != FlowState.IDLE:
            logger.debug("Donation attempt cancelled in state %s", self._state.value)
        self._reset()

    async def handle_donate_now(
        self,
        subcategory: Subcategory,
        actor: Actor | None = None,
        raw_amount: object | None = None,
    ) -> Donation | None:
        """start → online → settlement in one call.

        For an open-donation subcategory without `raw_amount` the machine is
        left waiting in ONLINE_AMOUNT_ENTRY.
        """
        self.start(subcategory, actor)
        donation = await self.choose_online()
        if self._state == FlowState.ONLINE_AMOUNT_ENTRY and raw_amount is not None:
            donation = await self.submit_amount(raw_amount)
        return donation

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def _settle(self) -> Donation | None:
        attempt = self._attempt
        assert attempt is not None and attempt.amount is not None
        sub = attempt.subcategory
        self._state = FlowState.GATEWAY_SETTLEMENT

        request = build_checkout_request(
            attempt.amount, f"Donation for {sub.title}", self._actor
        )
        logger.info(
            "Opening checkout: subcategory=%s amount=%d gross=%d",
            sub.id,
            attempt.amount,
            request.amount,
        )
        try:
            result = await self._gateway.open_checkout(request)
        except GatewayCancelled:
            logger.info("Checkout cancelled by donor: subcategory=%s", sub.id)
            self._reset()
            return None
        except GatewayFailure as exc:
            attempt.amount = None
            self._state = FlowState.MODE_SELECT
            raise self._reject(GatewayFailureError(exc.detail)) from exc

        attempt.correlation_id = result.settlement_reference
        self._state = FlowState.RECORD_CREATION
        create = CreateDonationRequest(
            subcategory_id=sub.id,
            amount=to_wire_amount(attempt.amount),
            payment_method=DonationPaymentMethod.ONLINE.value,
            payment_status=PaymentStatus.SUCCESS.value,
            transaction_id=result.settlement_reference,
            donor_id=self._actor.id if self._actor else None,
        )
        try:
            donation = await self._ledger.create_donation(create)
        except Exception as exc:
            detail = exc.message if isinstance(exc, AppError) else str(exc)
            raise self._not_recorded(result.settlement_reference, detail) from exc
        if donation is None:
            raise self._not_recorded(
                result.settlement_reference, "Donation created but not returned by the server"
            )

        logger.info(
            "Online donation recorded: subcategory=%s reference=%s",
            sub.id,
            result.settlement_reference,
        )
        notify_success(self._notifier, "Thank you", "Your donation was received")
        self._reset()
        return donation

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _expect(self, state: FlowState, action: str) -> DonationAttempt:
        if self._state != state or self._attempt is None:
            raise InvalidTransitionError(action, self._state.value)
        return self._attempt

    def _reject(self, err: AppError) -> AppError:
        notify_error(self._notifier, err)
        return err

    def _not_recorded(self, reference: str, detail: str) -> AppError:
        """Money moved at the gateway but no ledger entry came back."""
        attempt = self._attempt
        assert attempt is not None and attempt.amount is not None
        self._state = FlowState.SETTLED_NOT_RECORDED
        logger.error(
            "Payment captured but not recorded: subcategory=%s reference=%s amount=%d error=%s",
            attempt.subcategory.id,
            reference,
            attempt.amount,
            detail,
        )
        return self._reject(PaymentNotRecordedError(reference, detail))

    def _reset(self) -> None:
        self._attempt = None
        self._actor = None
        self._state = FlowState.IDLE
