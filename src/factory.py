"""
factory - Composition root for the banana API.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (REST, CLI) call this factory to get fully
configured services.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    catalog = factory.create_catalog_service()
    page = await catalog.list(BananaFilter())
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.ports import OAuthProviderPort, OracleClientPort
from infrastructure.config import Settings
from infrastructure.demo_data import DemoCatalog
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.account_repo import SQLiteAccountRepository
from infrastructure.persistence.banana_repo import SQLiteBananaRepository
from infrastructure.llm.oracle_client import LangChainOracleClient
from infrastructure.oauth.providers import build_oauth_providers
from application.services.authentication import AuthenticationService
from application.services.catalog import CatalogService
from application.services.entitlement import EntitlementService
from application.services.favorites import FavoritesService
from application.services.identity import IdentityService
from application.services.oracle import OracleService
from application.services.terms import TermsService

logger = logging.getLogger(__name__)

_UNSET = object()


class ServiceFactory:
    """Composition root: wires all dependencies together.

    Call initialize() once at startup, then create services as needed.
    ``oracle`` and ``oauth_providers`` replace the configured collaborators
    (tests pass fakes here); pass ``oracle=None`` to run without an Oracle.
    """

    def __init__(
        self,
        config: Settings,
        *,
        oracle=_UNSET,
        oauth_providers: Optional[dict[str, OAuthProviderPort]] = None,
    ):
        self._config = config
        self._connection = AsyncSQLiteConnection(config.db_path)
        self._demo = DemoCatalog()

        if oracle is _UNSET:
            oracle = LangChainOracleClient(config) if config.oracle_enabled else None
        self._oracle: Optional[OracleClientPort] = oracle

        if oauth_providers is None:
            oauth_providers = build_oauth_providers(config.oauth_clients())
        self._oauth_providers = oauth_providers

        self.db_connected = False

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def connection(self) -> AsyncSQLiteConnection:
        return self._connection

    async def initialize(self) -> None:
        """One-time startup: run migrations.

        A database that cannot be opened is not fatal: the API starts in
        demo mode and reads are served from the fixed demo catalog.
        """
        logger.info("Initializing ServiceFactory...")
        try:
            await run_migrations(self._connection)
            self.db_connected = True
            logger.info("Database migrations complete (%s)", self._config.db_path)
        except Exception as exc:
            self.db_connected = False
            logger.warning("Database unavailable, running in limited mode: %s", exc)

        if self._oracle is None:
            logger.warning("No language model configured - Oracle will be disabled")
        logger.info("ServiceFactory ready")

    # ------------------------------------------------------------------
    # Service creation
    # ------------------------------------------------------------------

    def create_catalog_service(self) -> CatalogService:
        return CatalogService(
            banana_repo=SQLiteBananaRepository(self._connection),
            probe=self._connection,
            demo=self._demo,
        )

    def create_entitlement_service(self) -> EntitlementService:
        return EntitlementService(SQLiteAccountRepository(self._connection))

    def create_identity_service(self) -> IdentityService:
        return IdentityService(
            SQLiteAccountRepository(self._connection),
            enabled_providers=self._oauth_providers.keys(),
        )

    def create_authentication_service(self) -> AuthenticationService:
        """Create an AuthenticationService with all dependencies wired."""
        return AuthenticationService(
            account_repo=SQLiteAccountRepository(self._connection),
            jwt_secret=self._config.jwt_secret,
            jwt_expiry_days=self._config.jwt_expiry_days,
        )

    def create_terms_service(self) -> TermsService:
        return TermsService(SQLiteAccountRepository(self._connection))

    def create_oracle_service(self) -> OracleService:
        return OracleService(self._oracle, self.create_entitlement_service())

    def create_favorites_service(self) -> FavoritesService:
        return FavoritesService(
            SQLiteAccountRepository(self._connection),
            self.create_catalog_service(),
        )

    def get_oauth_provider(self, name: str) -> Optional[OAuthProviderPort]:
        """Return the provider client, or None when it is not enabled."""
        return self._oauth_providers.get(name)
