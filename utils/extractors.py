"""
Extractores de campos primitivos sobre nodos "renderer" de InnerTube.

Un mismo campo lógico (título, thumbnail, artistas, duración...) vive en
varias formas físicas según el renderer. Cada extractor prueba las formas
conocidas en un orden fijo y se queda con la primera que funcione. La
ausencia no es un error: se devuelve None o una colección vacía.
"""
import re
from dataclasses import dataclass

from models.content import AlbumRef, ArtistRef
from utils.identity import stable_id
from utils.json_nav import as_dict, as_dicts, as_int, as_str, dig

# runs que sólo separan nombres ("Artista 1 & Artista 2 • Álbum")
SEPARATOR_TOKENS = {"•", "&", ",", "·", ""}

# etiquetas de tipo que YouTube mete al principio del subtitle
TYPE_LABELS = {"Song", "Video", "Album", "Single", "EP", "Playlist", "Artist", "Episode", "Podcast"}

ARTIST_PAGE_TYPES = {"MUSIC_PAGE_TYPE_ARTIST", "MUSIC_PAGE_TYPE_USER_CHANNEL"}
ALBUM_PAGE_TYPE = "MUSIC_PAGE_TYPE_ALBUM"

_TRACK_COUNT_RE = re.compile(r"([\d,.]+)\s+(?:songs?|tracks?|episodes?)", re.IGNORECASE)
_TRACK_COUNT_FRAGMENT_RE = re.compile(r"\s*•?\s*[\d,.]+\s+(?:songs?|tracks?|episodes?)", re.IGNORECASE)
_YEAR_RE = re.compile(r"^\d{4}$")
_LABEL_PARTS = (
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


@dataclass(frozen=True)
class WatchTarget:
    video_id: str
    playlist_id: str | None = None


@dataclass(frozen=True)
class BrowseTarget:
    browse_id: str
    page_type: str | None = None
    params: str | None = None


# --- URLs / thumbnails ---

def normalize_url(url: str) -> str:
    """Las URLs protocol-relative ("//lh3...") vienen sin esquema."""
    if url.startswith("//"):
        return "https:" + url
    return url


def _urls(thumbnails) -> list[str]:
    return [normalize_url(u) for u in (as_str(t.get("url")) for t in as_dicts(thumbnails)) if u]


def extract_thumbnails(node: dict) -> list[str]:
    """
    Todas las URLs de thumbnail, ordenadas por resolución creciente
    (así las manda la API).
    """
    layouts = (
        ("thumbnail", "musicThumbnailRenderer", "thumbnail", "thumbnails"),
        ("thumbnail", "croppedSquareThumbnailRenderer", "thumbnail", "thumbnails"),
        ("thumbnail", "thumbnails"),
        ("thumbnailRenderer", "musicThumbnailRenderer", "thumbnail", "thumbnails"),
        ("thumbnailRenderer", "croppedSquareThumbnailRenderer", "thumbnail", "thumbnails"),
        ("iconImage", "thumbnails"),
    )
    for path in layouts:
        urls = _urls(dig(node, *path))
        if urls:
            return urls
    return []


def extract_thumbnail_url(node: dict) -> str | None:
    # la última es la de mayor resolución
    thumbs = extract_thumbnails(node)
    return thumbs[-1] if thumbs else None


# --- texto ---

def text_of(value) -> str | None:
    """Texto de un campo que puede ser str plano, {simpleText} o {runs:[...]}."""
    if isinstance(value, str):
        return value or None
    simple = as_str(dig(value, "simpleText"))
    if simple:
        return simple
    runs = as_dicts(dig(value, "runs"))
    if runs:
        joined = "".join(as_str(r.get("text")) or "" for r in runs)
        return joined or None
    return None


def first_run_text(value) -> str | None:
    if isinstance(value, str):
        return value or None
    return as_str(dig(value, "runs", 0, "text")) or as_str(dig(value, "simpleText"))


def flex_column_runs(node: dict, index: int) -> list[dict]:
    return as_dicts(
        dig(node, "flexColumns", index, "musicResponsiveListItemFlexColumnRenderer", "text", "runs")
    )


def extract_title(node: dict, key: str = "title") -> str | None:
    return first_run_text(dig(node, key))


def extract_title_from_flex_columns(node: dict) -> str | None:
    runs = flex_column_runs(node, 0)
    return as_str(runs[0].get("text")) if runs else None


def extract_item_title(node: dict) -> str | None:
    """Título plano o en runs primero, después la primera flex column."""
    return extract_title(node) or extract_title_from_flex_columns(node)


def extract_subtitle(node: dict) -> str | None:
    return text_of(dig(node, "subtitle"))


def extract_subtitle_from_flex_columns(node: dict) -> str | None:
    runs = flex_column_runs(node, 1)
    if not runs:
        return None
    return "".join(as_str(r.get("text")) or "" for r in runs) or None


def _subtitle_runs(node: dict) -> list[dict]:
    for path in (("subtitle", "runs"), ("longBylineText", "runs"), ("shortBylineText", "runs")):
        runs = as_dicts(dig(node, *path))
        if runs:
            return runs
    return flex_column_runs(node, 1)


# --- navegación ---

def browse_target_of(endpoint) -> BrowseTarget | None:
    browse = as_dict(dig(endpoint, "browseEndpoint"))
    browse_id = as_str(dig(browse, "browseId"))
    if not browse_id:
        return None
    return BrowseTarget(
        browse_id=browse_id,
        page_type=as_str(dig(
            browse,
            "browseEndpointContextSupportedConfigs",
            "browseEndpointContextMusicConfig",
            "pageType",
        )),
        params=as_str(browse.get("params")),
    )


def watch_target_of(endpoint) -> WatchTarget | None:
    video_id = as_str(dig(endpoint, "watchEndpoint", "videoId"))
    if not video_id:
        return None
    return WatchTarget(video_id=video_id, playlist_id=as_str(dig(endpoint, "watchEndpoint", "playlistId")))


def extract_watch_target(node: dict) -> WatchTarget | None:
    return watch_target_of(dig(node, "navigationEndpoint"))


def extract_list_item_watch_target(node: dict) -> WatchTarget | None:
    """
    Para musicResponsiveListItemRenderer el videoId puede estar en
    playlistItemData, en el endpoint del item, en el botón play del overlay o
    en el run del título.
    """
    video_id = as_str(dig(node, "playlistItemData", "videoId"))
    if video_id:
        return WatchTarget(video_id=video_id)

    candidates = (
        dig(node, "navigationEndpoint"),
        dig(node, "overlay", "musicItemThumbnailOverlayRenderer", "content",
            "musicPlayButtonRenderer", "playNavigationEndpoint"),
        dig(flex_column_runs(node, 0), 0, "navigationEndpoint"),
    )
    for endpoint in candidates:
        target = watch_target_of(endpoint)
        if target:
            return target
    return None


def extract_browse_target(node: dict) -> BrowseTarget | None:
    """Endpoint del item; si no, el del run del título (two-row o flex column)."""
    candidates = (
        dig(node, "navigationEndpoint"),
        dig(node, "title", "runs", 0, "navigationEndpoint"),
        dig(flex_column_runs(node, 0), 0, "navigationEndpoint"),
    )
    for endpoint in candidates:
        target = browse_target_of(endpoint)
        if target:
            return target
    return None


def is_artist_target(target: BrowseTarget) -> bool:
    if target.page_type:
        return target.page_type in ARTIST_PAGE_TYPES
    return target.browse_id.startswith("UC")


def is_album_target(target: BrowseTarget) -> bool:
    if target.page_type:
        return target.page_type == ALBUM_PAGE_TYPE
    return target.browse_id.startswith(("MPRE", "OLAK"))


# --- artistas / álbum ---

def artists_from_runs(runs: list[dict]) -> tuple[ArtistRef, ...]:
    """
    Runs con link a un canal de artista ganan. Si no hay ninguno, se toman
    los nombres del primer grupo (separado por " • ") que no sea una etiqueta
    de tipo ("Song", "Album"...).
    """
    linked: list[ArtistRef] = []
    groups: list[list[str]] = [[]]
    for run in runs:
        text = as_str(run.get("text"))
        if not text:
            continue
        token = text.strip()
        if token in SEPARATOR_TOKENS:
            if token == "•":
                groups.append([])
            continue
        target = browse_target_of(run.get("navigationEndpoint"))
        if target:
            if is_artist_target(target):
                linked.append(ArtistRef(id=target.browse_id, name=text))
            continue
        groups[-1].append(text)

    if linked:
        return tuple(linked)

    for group in groups:
        names = [n for n in group if n not in TYPE_LABELS]
        if names:
            # sin browseId: id estable derivado del nombre
            return tuple(ArtistRef(id=stable_id("artist", n), name=n) for n in names)
    return ()


def extract_artists(node: dict) -> tuple[ArtistRef, ...]:
    return artists_from_runs(_subtitle_runs(node))


def extract_album(node: dict) -> AlbumRef | None:
    """Primer run (en cualquier flex column) que apunte a un álbum."""
    for column in as_dicts(node.get("flexColumns")):
        runs = as_dicts(dig(column, "musicResponsiveListItemFlexColumnRenderer", "text", "runs"))
        for run in runs:
            target = browse_target_of(run.get("navigationEndpoint"))
            text = as_str(run.get("text"))
            if target and text and is_album_target(target):
                return AlbumRef(id=target.browse_id, title=text)
    return None


# --- duración ---

def parse_duration(text: str | None) -> int | None:
    """'3:45' -> 225, '1:02:03' -> 3723. Cualquier otra cosa -> None."""
    if not text:
        return None
    parts = text.strip().split(":")
    if not all(p.isdigit() for p in parts):
        return None
    values = [int(p) for p in parts]
    if len(values) == 2:
        return values[0] * 60 + values[1]
    if len(values) == 3:
        return values[0] * 3600 + values[1] * 60 + values[2]
    return None


def parse_duration_label(label: str | None) -> int | None:
    """'Play X by Y, 4 minutes, 55 seconds' -> 295."""
    if not label:
        return None
    total = 0
    for unit, factor in _LABEL_PARTS:
        match = re.search(rf"(\d+)\s*{unit}s?\b", label, re.IGNORECASE)
        if match:
            total += int(match.group(1)) * factor
    return total or None


def extract_duration(node: dict) -> int | None:
    for key in ("lengthSeconds", "durationSeconds"):
        seconds = as_int(node.get(key))
        if seconds is not None:
            return seconds

    for column in as_dicts(node.get("fixedColumns")):
        text = as_str(dig(column, "musicResponsiveListItemFixedColumnRenderer", "text", "runs", 0, "text")) \
            or as_str(dig(column, "musicResponsiveListItemFixedColumnRenderer", "text", "simpleText"))
        seconds = parse_duration(text)
        if seconds is not None:
            return seconds

    # en páginas de artista la duración suele ir en la última flex column
    for column in reversed(as_dicts(node.get("flexColumns"))):
        runs = as_dicts(dig(column, "musicResponsiveListItemFlexColumnRenderer", "text", "runs"))
        if runs:
            seconds = parse_duration(as_str(runs[-1].get("text")))
            if seconds is not None:
                return seconds

    seconds = parse_duration(text_of(node.get("lengthText")))
    if seconds is not None:
        return seconds

    label = as_str(dig(
        node, "overlay", "musicItemThumbnailOverlayRenderer", "content", "musicPlayButtonRenderer",
        "accessibilityPlayData", "accessibilityData", "label",
    ))
    return parse_duration_label(label)


# --- metadatos sueltos ---

def extract_year(node: dict) -> str | None:
    years = [t for t in (as_str(r.get("text")) for r in _subtitle_runs(node)) if t and _YEAR_RE.match(t)]
    return years[-1] if years else None


def parse_track_count(text: str | None) -> int | None:
    if not text:
        return None
    match = _TRACK_COUNT_RE.search(text)
    if not match:
        return None
    return as_int(match.group(1).replace(".", ""))


def extract_author(node: dict) -> str | None:
    """Subtitle sin la etiqueta 'Playlist •' ni el conteo de canciones."""
    text = extract_subtitle(node) or extract_subtitle_from_flex_columns(node)
    if not text:
        return None
    text = _TRACK_COUNT_FRAGMENT_RE.sub("", text)
    parts = [p.strip() for p in text.split("•")]
    parts = [p for p in parts if p and p not in TYPE_LABELS]
    return " • ".join(parts) or None


def argb_to_hex(value) -> str | None:
    """Color ARGB empaquetado en 32 bits -> '#RRGGBB' (se descarta el alpha)."""
    color = as_int(value)
    if color is None:
        return None
    return "#{:06X}".format(color & 0x00FFFFFF)
