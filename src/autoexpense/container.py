"""Application wiring: shared clients, storage and the current router."""

import logging

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoexpense.config import Settings
from autoexpense.core.exceptions import SpreadsheetNotConfiguredError
from autoexpense.core.tokens import OAuthRefreshTokenProvider, TokenProvider
from autoexpense.mailbox.gmail import GmailClient
from autoexpense.mailbox.keywords import KeywordStore
from autoexpense.mailbox.retriever import MessageRetriever
from autoexpense.schemas.storage import StorageConfig
from autoexpense.services.ingestion import IngestionService
from autoexpense.services.reference import ReferenceService
from autoexpense.services.review import SenderApprovalGate
from autoexpense.services.setup import StorageSetupService
from autoexpense.services.transactions import TransactionService
from autoexpense.storage.config_store import StorageConfigStore
from autoexpense.storage.crypto import RecordCipher, load_or_create_key
from autoexpense.storage.records import EncryptedRecordStore
from autoexpense.storage.router import StorageRouter
from autoexpense.storage.sheets import SheetsClient

logger = logging.getLogger(__name__)


class AppContainer:
    """Holds long-lived collaborators for one process.

    The storage configuration is loaded once by ``start`` and threaded into
    the router; ``apply`` swaps in a new router after onboarding changes it.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._http = http_client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        key = load_or_create_key(settings.encryption_key, settings.encryption_key_file)
        self.store = EncryptedRecordStore(session_factory, RecordCipher(key))
        self.config_store = StorageConfigStore(self.store)

        self.token_provider = token_provider or OAuthRefreshTokenProvider.from_settings(
            settings, self._http
        )
        self.sheets_client: SheetsClient | None = None
        self.gmail_client: GmailClient | None = None
        if self.token_provider is not None:
            self.sheets_client = SheetsClient(
                self.token_provider, settings.sheets_api_base, self._http
            )
            self.gmail_client = GmailClient(
                self.token_provider, settings.gmail_api_base, self._http
            )

        self.config = StorageConfig()
        self._router: StorageRouter | None = None
        self._router_error: SpreadsheetNotConfiguredError | None = None
        self.apply(self.config)

    async def start(self) -> None:
        self.apply(await self.config_store.load())

    def apply(self, config: StorageConfig) -> None:
        """Rebuild the router for ``config``.

        A remote mode that cannot be served (no spreadsheet id or no signed-in
        account) leaves the router unavailable until onboarding fixes it.
        """
        self.config = config
        try:
            self._router = StorageRouter(
                config,
                self.store,
                self.sheets_client,
                read_timeout=self.settings.remote_read_timeout_seconds,
            )
            self._router_error = None
        except SpreadsheetNotConfiguredError as e:
            logger.error("Storage router unavailable", extra={"mode": config.mode.value})
            self._router = None
            self._router_error = e
        logger.info("Storage mode applied", extra={"mode": config.mode.value})

    @property
    def router(self) -> StorageRouter:
        if self._router is None:
            raise self._router_error or SpreadsheetNotConfiguredError()
        return self._router

    # Service factories (cheap; built per request)

    def transactions(self) -> TransactionService:
        return TransactionService(self.router)

    def reference(self) -> ReferenceService:
        return ReferenceService(self.router)

    def keywords(self) -> KeywordStore:
        return KeywordStore(self.router)

    def review(self) -> SenderApprovalGate:
        return SenderApprovalGate(self.router)

    def retriever(self) -> MessageRetriever:
        return MessageRetriever(
            self.gmail_client,
            self.keywords(),
            search_limit=self.settings.mailbox_search_limit,
            fetch_limit=self.settings.mailbox_fetch_limit,
            lookback_months=self.settings.mailbox_lookback_months,
        )

    def ingestion(self) -> IngestionService:
        return IngestionService(
            self.router,
            self.retriever(),
            gate=self.review(),
            enabled=self.settings.auto_parsing_enabled,
        )

    def setup(self) -> StorageSetupService:
        return StorageSetupService(self.store, self.config_store, self.sheets_client)

    async def aclose(self) -> None:
        await self._http.aclose()
