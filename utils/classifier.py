"""
Clasificador de items: un nodo de item -> Song | Album | Playlist | Artist | None.

Las reglas se evalúan en orden estricto (CLASSIFICATION_RULES) y gana la
primera que devuelve algo. Todo es puro: mismo nodo, mismo resultado.
"""
import logging
from dataclasses import dataclass
from typing import Callable

from models.content import Album, AlbumRef, Artist, ArtistRef, Playlist, Song
from utils.extractors import (
    BrowseTarget,
    WatchTarget,
    argb_to_hex,
    extract_album,
    extract_artists,
    extract_author,
    extract_browse_target,
    extract_duration,
    extract_item_title,
    extract_list_item_watch_target,
    extract_subtitle,
    extract_thumbnail_url,
    extract_title,
    extract_watch_target,
    extract_year,
    first_run_text,
    normalize_url,
    parse_track_count,
)
from utils.json_nav import as_dict, as_str, dig, renderer_keys

logger = logging.getLogger(__name__)

PAGE_TYPE_KINDS = {
    "MUSIC_PAGE_TYPE_ALBUM": "album",
    "MUSIC_PAGE_TYPE_PLAYLIST": "playlist",
    "MUSIC_PAGE_TYPE_ARTIST": "artist",
    "MUSIC_PAGE_TYPE_USER_CHANNEL": "artist",
}

BROWSE_PREFIX_KINDS = (
    (("MPRE", "OLAK"), "album"),
    (("VL", "PL", "RD"), "playlist"),
    (("UC",), "artist"),
)


@dataclass(frozen=True)
class ItemFields:
    """Lo que los extractores sacaron de un item, ya independiente del renderer."""
    title: str
    thumbnail_url: str | None
    artists: tuple[ArtistRef, ...]
    album: AlbumRef | None
    duration: int | None
    subtitle: str | None
    author: str | None
    year: str | None
    watch: WatchTarget | None
    browse: BrowseTarget | None


# --- reglas ---

def _build(kind: str, item_id: str, fields: ItemFields):
    if kind == "album":
        return Album(
            id=item_id,
            title=fields.title,
            artists=fields.artists,
            year=fields.year,
            track_count=parse_track_count(fields.subtitle),
            thumbnail_url=fields.thumbnail_url,
        )
    if kind == "playlist":
        return Playlist(
            id=item_id,
            title=fields.title,
            author=fields.author,
            track_count=parse_track_count(fields.subtitle),
            thumbnail_url=fields.thumbnail_url,
        )
    return Artist(id=item_id, name=fields.title, thumbnail_url=fields.thumbnail_url)


def watch_rule(fields: ItemFields):
    """1) watchEndpoint con videoId -> canción (aunque también tenga browse)."""
    if fields.watch is None or not fields.watch.video_id:
        return None
    return Song(
        id=fields.watch.video_id,
        title=fields.title,
        artists=fields.artists,
        album=fields.album,
        duration=fields.duration,
        thumbnail_url=fields.thumbnail_url,
    )


def page_type_rule(fields: ItemFields):
    """2) pageType explícito del browseEndpoint."""
    if fields.browse is None or not fields.browse.page_type:
        return None
    kind = PAGE_TYPE_KINDS.get(fields.browse.page_type)
    if kind is None:
        return None
    return _build(kind, fields.browse.browse_id, fields)


def browse_prefix_rule(fields: ItemFields):
    """3) prefijo del browseId (MPRE.., VL.., UC..)."""
    if fields.browse is None:
        return None
    for prefixes, kind in BROWSE_PREFIX_KINDS:
        if fields.browse.browse_id.startswith(prefixes):
            return _build(kind, fields.browse.browse_id, fields)
    return None


CLASSIFICATION_RULES: tuple[Callable[[ItemFields], object], ...] = (
    watch_rule,
    page_type_rule,
    browse_prefix_rule,
)


def classify_fields(fields: ItemFields):
    for rule in CLASSIFICATION_RULES:
        item = rule(fields)
        if item is not None:
            return item
    # 4) nada reconocible: el caller lo descarta
    return None


# --- extracción por renderer ---

def _two_row_fields(r: dict) -> ItemFields | None:
    title = extract_title(r)
    if not title:
        return None
    return ItemFields(
        title=title,
        thumbnail_url=extract_thumbnail_url(r),
        artists=extract_artists(r),
        album=None,
        duration=None,
        subtitle=extract_subtitle(r),
        author=extract_author(r),
        year=extract_year(r),
        watch=extract_watch_target(r),
        browse=extract_browse_target(r),
    )


def _responsive_fields(r: dict) -> ItemFields:
    return ItemFields(
        title=extract_item_title(r) or "Unknown",
        thumbnail_url=extract_thumbnail_url(r),
        artists=extract_artists(r),
        album=extract_album(r),
        duration=extract_duration(r),
        subtitle=extract_subtitle(r),
        author=extract_author(r),
        year=extract_year(r),
        watch=extract_list_item_watch_target(r),
        browse=extract_browse_target(r),
    )


def navigation_button_item(r: dict) -> Playlist | None:
    """
    Botones de moods/géneros. No tienen tipo clasificable: se modelan como
    Playlist con id = browseId + "_" + params (el mismo browseId se repite
    entre secciones) y el color del botón en description.
    """
    title = first_run_text(dig(r, "buttonText"))
    browse = as_dict(dig(r, "clickCommand", "browseEndpoint"))
    browse_id = as_str(dig(browse, "browseId"))
    if not title or not browse_id:
        return None

    params = as_str(browse.get("params"))
    icon = as_str(dig(r, "iconImage", "thumbnails", -1, "url"))
    return Playlist(
        id=f"{browse_id}_{params}" if params else browse_id,
        title=title,
        description=argb_to_hex(dig(r, "solid", "leftStripeColor")),
        thumbnail_url=normalize_url(icon) if icon else None,
    )


def classify(node: dict):
    """
    Clasifica un nodo de item ({"musicTwoRowItemRenderer": {...}}, etc).
    Devuelve un ContentItem o None; nunca lanza.
    """
    if not isinstance(node, dict):
        return None

    two_row = as_dict(node.get("musicTwoRowItemRenderer"))
    if two_row is not None:
        fields = _two_row_fields(two_row)
        return classify_fields(fields) if fields else None

    responsive = as_dict(node.get("musicResponsiveListItemRenderer"))
    if responsive is not None:
        return classify_fields(_responsive_fields(responsive))

    button = as_dict(node.get("musicNavigationButtonRenderer"))
    if button is not None:
        return navigation_button_item(button)

    keys = renderer_keys(node)
    if keys:
        logger.debug("classify: renderer de item no reconocido %s", keys)
    return None


def item_identity(item) -> str:
    return item.id
