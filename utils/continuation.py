"""
Tokens de continuación y merge de páginas.

Hay dos formas de documento: la respuesta inicial de browse (token dentro de
sectionListRenderer) y la respuesta de continuación (token dentro de
continuationContents). El caller sabe qué pidió y llama al extractor que
corresponde.
"""
from typing import Callable, Hashable, Iterable, Sequence, TypeVar

from utils.classifier import item_identity
from utils.json_nav import as_dicts, as_str, dig

T = TypeVar("T")

SECTION_LIST_PATH = (
    "contents", "singleColumnBrowseResultsRenderer", "tabs", 0,
    "tabRenderer", "content", "sectionListRenderer",
)

CONTINUATION_KEYS = (
    "sectionListContinuation",
    "musicShelfContinuation",
    "musicPlaylistShelfContinuation",
    "gridContinuation",
)


def next_continuation(renderer) -> str | None:
    """renderer.continuations[0].nextContinuationData.continuation"""
    return as_str(dig(renderer, "continuations", 0, "nextContinuationData", "continuation"))


def continuation_item_token(items) -> str | None:
    """Formato 2025: el último item es un continuationItemRenderer."""
    last = dig(as_dicts(items), -1, "continuationItemRenderer")
    return as_str(dig(last, "continuationEndpoint", "continuationCommand", "token")) \
        or as_str(dig(last, "button", "buttonRenderer", "command", "continuationCommand", "token"))


def extract_token(document) -> str | None:
    """Token de la respuesta inicial (home, explore, charts...)."""
    return next_continuation(dig(document, *SECTION_LIST_PATH))


def extract_continuation_token(document) -> str | None:
    """Token de una respuesta de continuación."""
    for key in CONTINUATION_KEYS:
        token = next_continuation(dig(document, "continuationContents", key))
        if token:
            return token

    for action in as_dicts(dig(document, "onResponseReceivedActions")):
        token = continuation_item_token(dig(action, "appendContinuationItemsAction", "continuationItems"))
        if token:
            return token
    return None


def merge_page(
    accumulated: Iterable[T],
    page: Iterable[T],
    identity: Callable[[T], Hashable],
) -> list[T]:
    """
    Agrega al final los items de `page` cuya identidad no esté ya en
    `accumulated`. Respeta el orden de ambos; duplicados dentro de la misma
    página también se descartan.
    """
    merged = list(accumulated)
    seen = {identity(item) for item in merged}
    for item in page:
        key = identity(item)
        if key in seen:
            continue
        seen.add(key)
        merged.append(item)
    return merged


def merge_items(
    accumulated: Sequence[T],
    page: Iterable[T],
    identity: Callable[[T], Hashable],
) -> tuple[list[T], list[T]]:
    """merge_page + los items que efectivamente se agregaron."""
    merged = merge_page(accumulated, page, identity)
    return merged, merged[len(accumulated):]


def merge_sections(accumulated: Sequence, page: Iterable, identity: Callable = item_identity) -> tuple[list, list]:
    """
    Merge de páginas de secciones. Una sección cuyo título ya existe (el
    carrusel "Charts" que sigue en la continuación) no se agrega de nuevo:
    sus items se mergean dentro de la sección existente, que conserva su id.

    Devuelve (secciones acumuladas, delta). El delta trae sólo los items
    nuevos, con el id de la sección a la que pertenecen; si queda vacío la
    página no aportó nada.
    """
    merged = list(accumulated)
    by_title = {section.title: i for i, section in enumerate(merged)}
    delta = []
    for section in page:
        index = by_title.get(section.title)
        current_items = merged[index].items if index is not None else ()
        items, added = merge_items(current_items, section.items, identity)
        if not added:
            continue

        if index is None:
            by_title[section.title] = len(merged)
            merged.append(section.model_copy(update={"items": tuple(items)}))
        else:
            merged[index] = merged[index].model_copy(update={"items": tuple(items)})
        delta.append(merged[by_title[section.title]].model_copy(update={"items": tuple(added)}))
    return merged, delta
