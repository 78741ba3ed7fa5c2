"""Direct entry of an offline donation by a manager or admin.

Offline donations are asserted successful at capture time: there is no
pending offline state.
"""

import logging
from collections.abc import Iterable

from src.dl_access.domain.guards import check_can_manage
from src.dl_common.enums import DonationPaymentMethod, PaymentStatus
from src.dl_common.errors import AppError, InternalError
from src.dl_common.id_generator import generate_offline_txn_ref
from src.dl_common.money import to_wire_amount
from src.dl_common.notifications import (
    LoggingNotificationSink,
    NotificationSink,
    notify_error,
    notify_success,
)
from src.dl_ledger.application.schemas import CreateDonationRequest
from src.dl_ledger.domain.models import Donation
from src.dl_ledger.domain.repository import LedgerRepositoryProtocol
from src.dl_ledger.domain.validation import parse_positive_amount, require_donor_name
from src.dl_session.domain.models import Actor

logger = logging.getLogger(__name__)


class OfflineDonationCapture:
    def __init__(
        self,
        ledger: LedgerRepositoryProtocol,
        notifier: NotificationSink | None = None,
    ) -> None:
        self._ledger = ledger
        self._notifier: NotificationSink = notifier or LoggingNotificationSink()

    async def capture(
        self,
        actor: Actor | None,
        subcategory_id: str,
        assigned_manager_ids: Iterable[str],
        donor_name: str | None,
        raw_amount: object,
        donor_phone: str | None = None,
        donor_address: str | None = None,
        donor_father_name: str | None = None,
        transaction_ref: str | None = None,
    ) -> Donation:
        try:
            actor = check_can_manage(
                actor, subcategory_id, assigned_manager_ids, "record offline donations"
            )
            name = require_donor_name(donor_name)
            amount = parse_positive_amount(raw_amount)
        except AppError as exc:
            notify_error(self._notifier, exc)
            raise

        request = CreateDonationRequest(
            subcategory_id=subcategory_id,
            amount=to_wire_amount(amount),
            payment_method=DonationPaymentMethod.OFFLINE.value,
            payment_status=PaymentStatus.SUCCESS.value,
            transaction_id=(transaction_ref or "").strip() or generate_offline_txn_ref(),
            donor_name=name,
            donor_phone=(donor_phone or "").strip() or None,
            donor_address=(donor_address or "").strip() or None,
            donor_father_name=(donor_father_name or "").strip() or None,
            manager_id=actor.id,
        )
        try:
            donation = await self._ledger.create_donation(request)
        except AppError as exc:
            notify_error(self._notifier, exc)
            raise
        if donation is None:
            raise InternalError("Donation created but not returned by the server")

        logger.info(
            "Offline donation recorded: id=%s subcategory=%s amount=%d ref=%s by=%s",
            donation.id,
            subcategory_id,
            amount,
            request.transaction_id,
            actor.id,
        )
        notify_success(self._notifier, "Donation recorded", f"Recorded donation from {name}")
        return donation
