"""
Normalizador de respuestas completas de browse (home, explore, charts, moods,
playlists) y de sus continuaciones.

Funciones totales: cualquier documento, por roto que esté, devuelve una lista
(posiblemente vacía). Nada de excepciones hacia el caller.
"""
import logging

from models.content import PaginatedResult, Section, Song
from utils.classifier import classify
from utils.continuation import (
    SECTION_LIST_PATH,
    continuation_item_token,
    extract_continuation_token,
    extract_token,
    next_continuation,
)
from utils.json_nav import as_dict, as_dicts, dig
from utils.section_parser import build_section, build_sections, build_shelf

logger = logging.getLogger(__name__)

SONG_SHELF_KEYS = ("musicPlaylistShelfRenderer", "musicShelfRenderer")


def section_list_contents(document) -> list[dict]:
    contents = as_dicts(dig(document, *SECTION_LIST_PATH, "contents"))
    if contents:
        return contents

    # páginas de álbum/playlist: twoColumnBrowseResultsRenderer
    two_column = dig(document, "contents", "twoColumnBrowseResultsRenderer")
    return (
        as_dicts(dig(two_column, "tabs", 0, "tabRenderer", "content", "sectionListRenderer", "contents"))
        + as_dicts(dig(two_column, "secondaryContents", "sectionListRenderer", "contents"))
    )


def _log_unrecognized(document, where: str):
    if isinstance(document, dict):
        logger.debug("%s: estructura no reconocida, top keys=%s contents keys=%s",
                     where, sorted(document), sorted(as_dict(document.get("contents")) or {}))
    else:
        logger.debug("%s: documento no es un objeto (%s)", where, type(document).__name__)


# --- secciones ---

def parse_initial(document) -> list[Section]:
    contents = section_list_contents(document)
    if not contents:
        _log_unrecognized(document, "parse_initial")
        return []
    return build_sections(contents)


def parse_continuation(document) -> list[Section]:
    sections: list[Section] = []
    continuation = as_dict(dig(document, "continuationContents"))
    if continuation is None:
        _log_unrecognized(document, "parse_continuation")
        return sections

    sections.extend(build_sections(dig(continuation, "sectionListContinuation", "contents")))

    shelf = build_shelf(continuation.get("musicShelfContinuation"))
    if shelf is not None:
        sections.append(shelf)
    return sections


def parse_initial_page(document) -> PaginatedResult[Section]:
    return PaginatedResult[Section](items=tuple(parse_initial(document)),
                                    continuation_token=extract_token(document))


def parse_continuation_page(document) -> PaginatedResult[Section]:
    return PaginatedResult[Section](items=tuple(parse_continuation(document)),
                                    continuation_token=extract_continuation_token(document))


def songs_from_sections(sections) -> list[Song]:
    return [item for section in sections for item in section.items if isinstance(item, Song)]


# --- listas planas de canciones (tracks de playlist) ---

def _songs(nodes) -> list[Song]:
    return [item for item in (classify(n) for n in as_dicts(nodes)) if isinstance(item, Song)]


def parse_song_page(document) -> PaginatedResult[Song]:
    """Tracks de una playlist/álbum + token del shelf que los contiene."""
    songs: list[Song] = []
    token = None
    for node in section_list_contents(document):
        for key in SONG_SHELF_KEYS:
            shelf = as_dict(node.get(key))
            if shelf is None:
                continue
            songs.extend(_songs(shelf.get("contents")))
            token = token or next_continuation(shelf) or continuation_item_token(shelf.get("contents"))

    if not songs and token is None:
        # algunos shelves vienen sueltos como sección (wrapper/carousel)
        for node in section_list_contents(document):
            section = build_section(node)
            if section is not None:
                songs.extend(songs_from_sections([section]))
        if not songs:
            _log_unrecognized(document, "parse_song_page")

    # sin token propio del shelf vale el de la sectionList (charts, carruseles)
    token = token or extract_token(document)
    return PaginatedResult[Song](items=tuple(songs), continuation_token=token)


def parse_song_continuation(document) -> PaginatedResult[Song]:
    songs: list[Song] = []
    continuation = as_dict(dig(document, "continuationContents")) or {}
    for key in ("musicPlaylistShelfContinuation", "musicShelfContinuation"):
        songs.extend(_songs(dig(continuation, key, "contents")))
    songs.extend(songs_from_sections(build_sections(dig(continuation, "sectionListContinuation", "contents"))))

    for action in as_dicts(dig(document, "onResponseReceivedActions")):
        songs.extend(_songs(dig(action, "appendContinuationItemsAction", "continuationItems")))

    return PaginatedResult[Song](items=tuple(songs), continuation_token=extract_continuation_token(document))


# --- búsqueda ---

def parse_search(document) -> list[Section]:
    """
    Resultados de /search: cada tab de tabbedSearchResultsRenderer trae su
    sectionList (top result en musicCardShelfRenderer, el resto en
    musicShelfRenderer). Se normalizan igual que las secciones de browse.
    """
    tabs = dig(document, "contents", "tabbedSearchResultsRenderer", "tabs")
    sections: list[Section] = []
    for tab in as_dicts(tabs):
        contents = dig(tab, "tabRenderer", "content", "sectionListRenderer", "contents")
        sections.extend(build_sections(contents))

    if not sections:
        _log_unrecognized(document, "parse_search")
    return sections
