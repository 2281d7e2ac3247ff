"""
Sesiones de paginación: fetch -> parse -> merge, una vez por página.

Cada sesión (una por lista que esté mirando el front) es dueña de sus items
acumulados y de su token. Reglas:
  - single-flight: nunca más de un fetch en vuelo por sesión (asyncio.Lock)
  - has_more es monótono: una vez en False no se vuelve a pedir nada
  - si una página no agrega ningún item nuevo se corta (servers que repiten)
  - cancelar se chequea antes de cada fetch; lo acumulado sólo se toca
    cuando el fetch terminó bien, así una sesión cancelada se puede retomar
"""
import asyncio
import logging
import uuid
from collections import OrderedDict
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

from models.content import PaginatedResult
from services.catalog_client import CatalogFetchError
from services.settings import PREFETCH_MAX_PAGES
from utils.classifier import item_identity
from utils.continuation import merge_items

logger = logging.getLogger(__name__)

T = TypeVar("T")

Loader = Callable[[str | None], Awaitable[PaginatedResult]]

# (acumulado, página) -> (nuevo acumulado, items agregados)
Merger = Callable[[list, tuple], tuple[list, list]]


class PaginationSession(Generic[T]):
    def __init__(
        self,
        loader: Loader,
        identity: Callable[[T], Hashable] = item_identity,
        merge: Merger | None = None,
        max_prefetch: int = PREFETCH_MAX_PAGES,
        label: str = "",
    ):
        self.id = uuid.uuid4().hex
        self.label = label
        self.max_prefetch = max_prefetch
        self.pages_loaded = 0
        self._loader = loader
        self._merge: Merger = merge or (lambda accumulated, page: merge_items(accumulated, page, identity))
        self._items: list[T] = []
        self._token: str | None = None
        self._has_more = True
        self._started = False
        self._cancelled = False
        self._lock = asyncio.Lock()

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def continuation_token(self) -> str | None:
        return self._token if self._has_more else None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def snapshot(self) -> PaginatedResult:
        return PaginatedResult(items=self.items, continuation_token=self.continuation_token)

    async def start(self) -> PaginatedResult:
        """Primera página. Llamarlo de nuevo no vuelve a pedir nada."""
        async with self._lock:
            if not self._started:
                await self._load_first()
            return self.snapshot()

    async def load_more(self) -> list[T]:
        """Siguiente página; devuelve sólo los items nuevos."""
        async with self._lock:
            if not self._started:
                await self._load_first()
                return list(self._items)
            if not self._has_more or self._token is None:
                return []
            if self._cancelled:
                logger.debug("[%s] sesión cancelada, no se pide otra página", self.label)
                return []

            try:
                page = await self._loader(self._token)
            except CatalogFetchError as e:
                logger.warning("[%s] falló la continuación (reintentable): %s", self.label, e.detail)
                raise

            merged, new_items = self._merge(self._items, page.items)
            self.pages_loaded += 1

            if not new_items:
                # página repetida: aunque traiga token no seguimos (loop infinito)
                self._has_more = False
                self._token = None
                logger.info("[%s] continuación sin items nuevos (%d recibidos), fin de paginación",
                            self.label, len(page.items))
                return []

            self._items = merged
            self._token = page.continuation_token
            self._has_more = self._token is not None
            logger.info("[%s] +%d items (de %d), total=%d, hasMore=%s",
                        self.label, len(new_items), len(page.items), len(merged), self._has_more)
            return new_items

    async def prefetch(self, max_pages: int | None = None) -> int:
        """
        Pide hasta max_prefetch continuaciones por adelantado. El tope es
        independiente del corte por página repetida.
        """
        limit = self.max_prefetch if max_pages is None else min(max_pages, self.max_prefetch)
        fetched = 0
        while fetched < limit and self._has_more and not self._cancelled:
            try:
                await self.load_more()
            except CatalogFetchError:
                break
            fetched += 1
        logger.info("[%s] prefetch terminado: %d páginas, total=%d", self.label, fetched, len(self._items))
        return fetched

    def cancel(self):
        self._cancelled = True

    def resume(self):
        self._cancelled = False

    async def _load_first(self):
        if self._cancelled:
            return
        page = await self._loader(None)
        self._items, _ = self._merge([], page.items)
        self._token = page.continuation_token
        self._has_more = self._token is not None
        self._started = True
        logger.info("[%s] página inicial: %d items, hasMore=%s", self.label, len(self._items), self._has_more)


class SessionStore:
    """
    Registro de sesiones activas. Se crea uno por app (app.state.sessions)
    y se pasa explícitamente; cuando se llena se descarta la más vieja.
    """

    def __init__(self, max_sessions: int = 256):
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, PaginationSession] = OrderedDict()

    def __len__(self):
        return len(self._sessions)

    def open(self, session: PaginationSession) -> PaginationSession:
        while len(self._sessions) >= self.max_sessions:
            _, oldest = self._sessions.popitem(last=False)
            oldest.cancel()
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> PaginationSession | None:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.cancel()
        return True
