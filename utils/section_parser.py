"""
Armado de secciones (carruseles, shelves, grids...) a partir de un nodo de sección.

Despacho cerrado por renderer: SECTION_SHAPES en orden, gana la primera clave
presente. Lo que no está en la tabla se loguea en debug y se descarta.
"""
import logging
from dataclasses import dataclass

from models.content import Section
from utils.classifier import classify
from utils.extractors import extract_title
from utils.identity import stable_id
from utils.json_nav import as_dict, as_dicts, dig, renderer_keys

logger = logging.getLogger(__name__)

CHART_KEYWORDS = (
    "chart",
    "charts",
    "top 100",
    "top 50",
    "trending",
    "daily top",
    "weekly top",
)

WRAPPER_KEY = "itemSectionRenderer"


@dataclass(frozen=True)
class SectionShape:
    key: str
    header_path: tuple[str, ...]  # dónde está el renderer con el título
    items_key: str
    default_title: str


SECTION_SHAPES = (
    SectionShape("musicCarouselShelfRenderer", ("header", "musicCarouselShelfBasicHeaderRenderer"),
                 "contents", "Unknown Section"),
    SectionShape("musicShelfRenderer", (), "contents", "Unknown Section"),
    SectionShape("musicCardShelfRenderer", ("header", "musicCardShelfHeaderBasicRenderer"),
                 "contents", "Featured"),
    SectionShape("musicImmersiveCarouselShelfRenderer", ("header", "musicCarouselShelfBasicHeaderRenderer"),
                 "contents", "Featured"),
    SectionShape("gridRenderer", ("header", "gridHeaderRenderer"), "items", "Charts"),
)


def is_chart_section(title: str) -> bool:
    """Por título, no por tipo de renderer (un grid no es necesariamente un chart)."""
    lowered = title.lower()
    return any(keyword in lowered for keyword in CHART_KEYWORDS)


def section_id(title: str, items) -> str:
    first_id = items[0].id if items else ""
    return stable_id(title, first_id)


def build_from_shape(shape: SectionShape, renderer: dict) -> Section | None:
    header = dig(renderer, *shape.header_path) if shape.header_path else renderer
    title = (extract_title(header) if isinstance(header, dict) else None) or shape.default_title

    children = as_dicts(renderer.get(shape.items_key))
    items = tuple(item for item in (classify(child) for child in children) if item is not None)
    if not items:
        # una sección vacía no se emite como placeholder
        return None

    return Section(
        id=section_id(title, items),
        title=title,
        items=items,
        is_chart=is_chart_section(title),
    )


def build_section(node: dict) -> Section | None:
    """Nodo de sección -> Section o None. Nunca lanza."""
    if not isinstance(node, dict):
        return None

    for shape in SECTION_SHAPES:
        renderer = as_dict(node.get(shape.key))
        if renderer is not None:
            return build_from_shape(shape, renderer)

    wrapper = as_dict(node.get(WRAPPER_KEY))
    if wrapper is not None:
        # wrapper: devolvemos la primera sección que arme algún hijo
        for inner in as_dicts(wrapper.get("contents")):
            section = build_section(inner)
            if section is not None:
                return section
        return None

    keys = renderer_keys(node)
    if keys:
        logger.debug("build_section: renderer no reconocido %s", keys)
    return None


def build_sections(nodes) -> list[Section]:
    return [s for s in (build_section(n) for n in as_dicts(nodes)) if s is not None]


def build_shelf(renderer: dict) -> Section | None:
    """Para musicShelfContinuation, que trae la forma de musicShelfRenderer sin la clave."""
    if not isinstance(renderer, dict):
        return None
    return build_from_shape(SECTION_SHAPES[1], renderer)
