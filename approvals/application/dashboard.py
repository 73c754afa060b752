"""Application service tying the approval workflow components together."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Iterator, TypeVar

import httpx

from approvals.core.clock import Clock, SystemClock
from approvals.core.settings import Settings
from approvals.domain import (
    AuthError,
    CommandAction,
    Document,
    DocumentKey,
    DocumentKind,
    Identity,
    PendingCommand,
)
from approvals.infrastructure import (
    ApiTransport,
    AuthClient,
    DocumentRepository,
    HttpDocumentRepository,
    SessionStore,
)

from .cache import QueryCache, QueryKey
from .coordinator import ApprovalCoordinator
from .indicators import IndicatorAggregator, Indicators
from .invalidation import InvalidationGraph
from .queries import DocumentQueries
from .tabs import Tab, TabSynchronizer

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class DocumentListView:
    kind: DocumentKind
    tab: Tab
    documents: list[Document] = field(default_factory=list)
    discarded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "tab": self.tab.value,
            "discarded": self.discarded,
            "items": [document.to_dict() for document in self.documents],
        }


class DashboardService:
    """Coordinates the dashboard use cases for one operator."""

    def __init__(
        self,
        repository: DocumentRepository,
        session: SessionStore,
        *,
        auth: AuthClient | None = None,
        transport: ApiTransport | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._session = session
        self._auth = auth
        self._transport = transport
        clock = clock or SystemClock()

        self._cache = QueryCache(clock)
        self._queries = DocumentQueries(repository, self._cache, clock)
        self._tabs = {kind: TabSynchronizer() for kind in DocumentKind}
        self._graph = InvalidationGraph(
            self._cache,
            visible_keys=self._visible_keys,
            on_auth_error=self._expire_session,
        )
        self._coordinator = ApprovalCoordinator(repository, on_settled=self._graph.on_mutation_settled)
        self._aggregator = IndicatorAggregator(self._queries)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
    ) -> "DashboardService":
        session = SessionStore(ttl=timedelta(minutes=settings.session_ttl_minutes), clock=clock)
        transport = ApiTransport(
            settings.api_base,
            token_provider=session.token,
            timeout=settings.http_timeout,
            http_client=http_client,
        )
        repository = HttpDocumentRepository(transport, page_size=settings.page_size)
        return cls(
            repository,
            session,
            auth=AuthClient(transport, session),
            transport=transport,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # collaborators
    # ------------------------------------------------------------------
    @property
    def cache(self) -> QueryCache:
        return self._cache

    @property
    def queries(self) -> DocumentQueries:
        return self._queries

    @property
    def graph(self) -> InvalidationGraph:
        return self._graph

    @property
    def coordinator(self) -> ApprovalCoordinator:
        return self._coordinator

    @property
    def session(self) -> SessionStore:
        return self._session

    # ------------------------------------------------------------------
    # session lifecycle
    # ------------------------------------------------------------------
    def current_identity(self) -> Identity | None:
        return self._session.identity()

    async def login(self, username: str, password: str) -> Identity:
        if self._auth is None:
            raise AuthError("login is not available without an auth client")
        identity = await self._auth.login(username, password)
        self._cache.clear()
        logger.info("%s logged in", identity.username)
        return identity

    def logout(self) -> None:
        if self._auth is not None:
            self._auth.logout()
        else:
            self._session.clear()
        self._cache.clear()
        self._coordinator.reset()

    def _expire_session(self) -> None:
        logger.info("session rejected by the backend, clearing local state")
        self._session.clear()
        self._cache.clear()

    async def _guard(self, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except AuthError:
            self._expire_session()
            raise

    # ------------------------------------------------------------------
    # tabs and lists
    # ------------------------------------------------------------------
    def active_tab(self, kind: DocumentKind) -> Tab:
        return self._tabs[DocumentKind(kind)].active

    def navigate(self, kind: DocumentKind, url_value: str | None) -> Tab:
        return self._tabs[DocumentKind(kind)].on_navigation(url_value)

    def select_tab(self, kind: DocumentKind, tab: Tab | str) -> dict[str, str]:
        return self._tabs[DocumentKind(kind)].select(tab)

    def _visible_keys(self) -> Iterator[QueryKey]:
        identity = self._session.identity()
        for kind, tabs in self._tabs.items():
            key = self._queries.key_for_tab(kind, tabs.active, identity)
            if key is not None:
                yield key

    async def list_documents(self, kind: DocumentKind) -> DocumentListView:
        """Read the active tab's list.

        If the tab changes while the read is in flight the result still
        lands in the cache, but the returned view is marked discarded so it
        is not rendered under the wrong tab.
        """

        kind = DocumentKind(kind)
        tab = self.active_tab(kind)
        identity = self._session.identity()
        documents = await self._guard(self._queries.read_tab(kind, tab, identity))
        if self.active_tab(kind) is not tab:
            logger.debug("discarding %s %s list, tab changed while loading", kind.value, tab.value)
            return DocumentListView(kind=kind, tab=tab, discarded=True)
        return DocumentListView(kind=kind, tab=tab, documents=list(documents))

    # ------------------------------------------------------------------
    # indicators
    # ------------------------------------------------------------------
    async def indicators(self, kind: DocumentKind) -> Indicators:
        return await self._guard(self._aggregator.compute_indicators(kind, self._session.identity()))

    async def overview(self) -> list[Indicators]:
        results = await asyncio.gather(*(self.indicators(kind) for kind in DocumentKind))
        return list(results)

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------
    @property
    def command(self) -> PendingCommand | None:
        return self._coordinator.command

    def request_action(self, kind: DocumentKind, key: DocumentKey, action: CommandAction | str) -> PendingCommand:
        return self._coordinator.request_action(kind, key, action)

    def cancel(self) -> None:
        self._coordinator.cancel()

    async def confirm(self) -> PendingCommand:
        result = await self._coordinator.confirm()
        if result.requires_login:
            self._expire_session()
        return result

    async def aclose(self) -> None:
        await self._graph.drain()
        if self._transport is not None:
            await self._transport.aclose()


_service: DashboardService | None = None


def get_dashboard_service() -> DashboardService:
    """Return the singleton dashboard service for the process."""

    global _service
    if _service is None:
        _service = DashboardService.from_settings(Settings.from_env())
    return _service


def configure_dashboard_service(service: DashboardService) -> None:
    """Install the dashboard service used by the routes."""

    global _service
    _service = service


def reset_dashboard_state() -> None:
    """Drop the singleton (used in tests)."""

    global _service
    _service = None
