"""
Modelo de contenido normalizado (lo que devuelve la API, no lo que manda YouTube).

Todos los modelos son inmutables: se construyen en un único parseo y se
entregan al caller. Las secuencias son tuplas.
"""
from typing import Annotated, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    # camelCase hacia afuera (thumbnailUrl, isChart...) como el resto de la API
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ArtistRef(CatalogModel):
    id: str
    name: str


class AlbumRef(CatalogModel):
    id: str
    title: str


class Song(CatalogModel):
    kind: Literal["song"] = "song"
    id: str
    title: str
    artists: tuple[ArtistRef, ...] = ()
    album: AlbumRef | None = None
    duration: int | None = None  # segundos
    thumbnail_url: str | None = None

    @property
    def artists_display(self) -> str:
        return ", ".join(a.name for a in self.artists)


class Album(CatalogModel):
    kind: Literal["album"] = "album"
    id: str
    title: str
    artists: tuple[ArtistRef, ...] = ()
    year: str | None = None
    track_count: int | None = None
    thumbnail_url: str | None = None


class Playlist(CatalogModel):
    kind: Literal["playlist"] = "playlist"
    id: str
    title: str
    description: str | None = None
    author: str | None = None
    track_count: int | None = None
    thumbnail_url: str | None = None


class Artist(CatalogModel):
    kind: Literal["artist"] = "artist"
    id: str
    name: str
    thumbnail_url: str | None = None


ContentItem = Annotated[
    Union[Song, Album, Playlist, Artist],
    Field(discriminator="kind"),
]


class Section(CatalogModel):
    id: str
    title: str
    items: tuple[ContentItem, ...]
    is_chart: bool = False


T = TypeVar("T")


class PaginatedResult(CatalogModel, Generic[T]):
    items: tuple[T, ...] = ()
    continuation_token: str | None = None

    @computed_field
    @property
    def has_more(self) -> bool:
        return self.continuation_token is not None
