"""
Colaborador HTTP: pide documentos crudos a InnerTube (browse, continuation, search).

Es el único lugar donde puede aparecer un error "de verdad" (red, 4xx/5xx,
JSON inválido). Todo se envuelve en CatalogFetchError, que es reintentable.
"""
import asyncio
import logging

from innertube import InnerTube

from services.response_cache import ResponseCache, stable_cache_key
from services.settings import INNERTUBE_CLIENT
from utils.response_parser import (
    parse_continuation_page,
    parse_initial_page,
    parse_song_continuation,
    parse_song_page,
)

logger = logging.getLogger(__name__)


class CatalogFetchError(Exception):
    """Falló el fetch contra InnerTube. Lo acumulado en la sesión no se toca."""

    def __init__(self, detail: str, *, retryable: bool = True):
        super().__init__(detail)
        self.detail = detail
        self.retryable = retryable


class CatalogClient:
    def __init__(self, innertube=None, cache: ResponseCache | None = None, client_name: str = INNERTUBE_CLIENT):
        self._yt = innertube if innertube is not None else InnerTube(client_name)
        self._cache = cache

    def browse(self, browse_id: str, params: str | None = None) -> dict:
        body = {"browseId": browse_id}
        if params:
            body["params"] = params
        return self._request("browse", body)

    def continuation(self, token: str) -> dict:
        return self._request("browse", {"continuation": token})

    def search(self, query: str, params: str | None = None) -> dict:
        body = {"query": query}
        if params:
            body["params"] = params
        return self._request("search", body)

    def _call(self, endpoint: str, body: dict):
        if endpoint == "search":
            return self._yt.search(body["query"], params=body.get("params"))
        return self._yt.browse(
            body.get("browseId"),
            params=body.get("params"),
            continuation=body.get("continuation"),
        )

    def _request(self, endpoint: str, body: dict) -> dict:
        key = stable_cache_key(endpoint, body)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("cache hit %s", key)
                return cached

        try:
            response = self._call(endpoint, body)
        except Exception as e:
            logger.warning("❌ InnerTube %s falló (%s): %s", endpoint, body, e)
            raise CatalogFetchError(str(e)) from e

        # la forma no es contrato: si no es un objeto, el parser devuelve vacío
        if not isinstance(response, dict):
            logger.debug("InnerTube devolvió %s en vez de un objeto", type(response).__name__)
            response = {}

        if self._cache is not None:
            self._cache.set(key, response)
        return response


# --- loaders para PaginationSession ---

def section_loader(client: CatalogClient, browse_id: str, params: str | None = None):
    """token None -> página inicial; token -> continuación. Devuelve PaginatedResult[Section]."""

    async def load(token: str | None):
        if token is None:
            document = await asyncio.to_thread(client.browse, browse_id, params)
            return parse_initial_page(document)
        document = await asyncio.to_thread(client.continuation, token)
        return parse_continuation_page(document)

    return load


def song_loader(client: CatalogClient, browse_id: str):
    """Igual que section_loader pero para listas planas de canciones."""

    async def load(token: str | None):
        if token is None:
            document = await asyncio.to_thread(client.browse, browse_id)
            return parse_song_page(document)
        document = await asyncio.to_thread(client.continuation, token)
        return parse_song_continuation(document)

    return load
