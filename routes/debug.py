from fastapi import APIRouter, Query, Request
from services.catalog_client import CatalogFetchError
from utils.continuation import extract_continuation_token, extract_token
from utils.json_nav import as_dict, renderer_keys
from utils.response_parser import section_list_contents


router = APIRouter()

@router.get("/")
def debug_root():
    return {"message": "DEBUG route OK"}


@router.get("/browse_raw")
def browse_raw(request: Request, id: str = Query(..., description="browseId"), params: str | None = Query(None)):
    """
    Devuelve la respuesta CRUDA de browse + qué renderers trae cada sección.
    Sirve para ver formas nuevas que el parser todavía no reconoce.
    """
    try:
        response = request.app.state.catalog.browse(id, params)
    except CatalogFetchError as e:
        return {"error": "browse_error", "detail": e.detail, "id": id}
    return {
        "browseId": id,
        "continuationToken": extract_token(response),
        "sectionRenderers": [renderer_keys(node) for node in section_list_contents(response)],
        "raw": response,   # 🔴 devolvemos TODO, sin filtrar
    }


@router.get("/continuation_raw")
def continuation_raw(request: Request, token: str = Query(..., description="continuation token")):
    try:
        response = request.app.state.catalog.continuation(token)
    except CatalogFetchError as e:
        return {"error": "continuation_error", "detail": e.detail}
    return {
        "continuationToken": extract_continuation_token(response),
        "continuationKeys": sorted(as_dict(response.get("continuationContents")) or {}),
        "raw": response,
    }
