import asyncio

from fastapi import APIRouter, Query, Path, Request
from fastapi.responses import JSONResponse

from services.catalog_client import CatalogFetchError, section_loader, song_loader
from services.pagination import PaginationSession
from services.settings import BROWSE_IDS
from utils.continuation import merge_sections
from utils.response_parser import parse_search

router = APIRouter()


def _fetch_error(e: CatalogFetchError, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"error": "catalog_fetch_error", "detail": e.detail, "retryable": e.retryable, **extra},
    )


def _unknown_session(session_id: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "unknown_session", "session": session_id})


def _page_payload(session: PaginationSession, items) -> dict:
    return {
        "session": session.id,
        "items": [item.model_dump(by_alias=True) for item in items],
        "continuationToken": session.continuation_token,
        "hasMore": session.has_more,
    }


async def _open_session(request: Request, loader, label: str, merge=None):
    state = request.app.state
    session = state.sessions.open(PaginationSession(loader, merge=merge, label=label))
    try:
        await session.start()
    except CatalogFetchError as e:
        state.sessions.close(session.id)
        return _fetch_error(e, page=label)
    return _page_payload(session, session.items)


# --- SECCIONES (home, explore, charts, moods) ---

@router.get("/browse/{page}")
async def browse_page(request: Request, page: str = Path(..., description="home | explore | charts | moods | new_releases")):
    """
    Abre una sesión de paginación sobre una página de browse y devuelve las
    secciones iniciales. Con el id de sesión se piden las continuaciones.
    """
    browse_id = BROWSE_IDS.get(page)
    if browse_id is None:
        return JSONResponse(status_code=404, content={"error": "unknown_page", "page": page})
    loader = section_loader(request.app.state.catalog, browse_id)
    return await _open_session(request, loader, page, merge_sections)


@router.get("/category")
async def browse_category(
    request: Request,
    browseId: str = Query(..., description="browseId del botón de mood/género"),
    params: str | None = Query(None),
):
    loader = section_loader(request.app.state.catalog, browseId, params)
    return await _open_session(request, loader, f"category:{browseId}", merge_sections)


@router.get("/session/{session_id}/more")
async def session_more(request: Request, session_id: str):
    """Siguiente página de la sesión (sólo los items nuevos)."""
    session = request.app.state.sessions.get(session_id)
    if session is None:
        return _unknown_session(session_id)
    try:
        new_items = await session.load_more()
    except CatalogFetchError as e:
        # lo acumulado sigue ahí, el front puede reintentar
        return _fetch_error(e, session=session_id)
    return _page_payload(session, new_items)


@router.post("/session/{session_id}/prefetch")
async def session_prefetch(request: Request, session_id: str, pages: int | None = Query(None, ge=1)):
    session = request.app.state.sessions.get(session_id)
    if session is None:
        return _unknown_session(session_id)
    fetched = await session.prefetch(pages)
    # devuelve todo lo acumulado: una sección pudo crecer sin cambiar de lugar
    payload = _page_payload(session, session.items)
    payload["pagesFetched"] = fetched
    return payload


@router.get("/session/{session_id}")
async def session_snapshot(request: Request, session_id: str):
    """Todo lo acumulado hasta ahora."""
    session = request.app.state.sessions.get(session_id)
    if session is None:
        return _unknown_session(session_id)
    return _page_payload(session, session.items)


@router.delete("/session/{session_id}")
async def session_close(request: Request, session_id: str):
    if not request.app.state.sessions.close(session_id):
        return _unknown_session(session_id)
    return {"ok": True}


# --- PLAYLIST (lista plana de canciones) ---

@router.get("/playlist")
async def playlist_tracks(request: Request, id: str = Query(..., description="playlistId (con o sin VL)")):
    browse_id = id if id.startswith("VL") else f"VL{id}"
    loader = song_loader(request.app.state.catalog, browse_id)
    return await _open_session(request, loader, f"playlist:{id}")


# --- BÚSQUEDA ---

@router.get("/search")
async def search_music(
    request: Request,
    q: str = Query(..., min_length=1, description="Texto a buscar"),
    params: str | None = Query(None, description="filtro de InnerTube (songs, albums...)"),
):
    """Resultados de búsqueda agrupados por shelf (top result, canciones, artistas...)."""
    try:
        document = await asyncio.to_thread(request.app.state.catalog.search, q, params)
    except CatalogFetchError as e:
        return _fetch_error(e, query=q)

    sections = parse_search(document)
    return {"query": q, "sections": [section.model_dump(by_alias=True) for section in sections]}
