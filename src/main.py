"""Ledger core entry point: one composition root per process.

    core = LedgerCore(gateway=my_gateway)
    await core.startup()
    view = core.subcategory_view(subcategory, summary_manager_ids)
    ...
    await core.shutdown()
"""

from collections.abc import Iterable

import httpx

from config.settings import settings
from src.dl_common.http_client import close_http_client, get_http_client
from src.dl_common.logging_setup import configure_logging
from src.dl_common.notifications import LoggingNotificationSink, NotificationSink
from src.dl_common.redis_client import close_redis
from src.dl_donation.application.offline_capture import OfflineDonationCapture
from src.dl_donation.application.state_machine import DonationFlowStateMachine
from src.dl_donation.domain.gateway import PaymentGatewayProtocol
from src.dl_ledger.application.service import LedgerApplicationService
from src.dl_ledger.domain.models import Subcategory
from src.dl_ledger.infrastructure.api_client import LedgerApiClient
from src.dl_mapping.application.registry import ManagerMappingRegistry
from src.dl_mapping.infrastructure.api_client import MappingApiClient
from src.dl_session.application.service import SessionService
from src.dl_view.application.view import SubcategoryLedgerView


class LedgerCore:
    """Wires the session, API adapters and coordinators together."""

    def __init__(
        self,
        gateway: PaymentGatewayProtocol,
        notifier: NotificationSink | None = None,
        session: SessionService | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.notifier: NotificationSink = notifier or LoggingNotificationSink()
        self.session = session or SessionService()
        self._gateway = gateway
        self._client = client
        self.ledger_api = LedgerApiClient(client=client, token_provider=self.session.token)
        self.mapping_api = MappingApiClient(client=client, token_provider=self.session.token)
        self.registry = ManagerMappingRegistry(self.mapping_api)
        self.ledger = LedgerApplicationService(self.ledger_api)
        self.offline_capture = OfflineDonationCapture(self.ledger_api, self.notifier)
        self.donation_flow = DonationFlowStateMachine(
            gateway, self.ledger_api, self.registry, self.notifier
        )

    async def startup(self) -> None:
        """Configure logging, open the HTTP pool and restore any cached session."""
        configure_logging(settings.LOG_LEVEL)
        if self._client is None:
            await get_http_client()
        await self.session.restore()

    async def shutdown(self) -> None:
        if self._client is None:
            await close_http_client()
        await close_redis()

    def subcategory_view(
        self,
        subcategory: Subcategory,
        summary_manager_ids: Iterable[str] = (),
    ) -> SubcategoryLedgerView:
        actor = self.session.current.actor if self.session.current else None
        return SubcategoryLedgerView(
            subcategory,
            actor,
            self.ledger_api,
            self.registry,
            summary_manager_ids=summary_manager_ids,
            notifier=self.notifier,
        )
