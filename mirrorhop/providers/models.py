from enum import Enum
from typing import Annotated, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from mirrorhop.utils.parsing import get_hostname


class ContentKind(str, Enum):
    MOVIE = "Movie"
    TV_SERIES = "TvSeries"


class StructuredPage(BaseModel):
    """Same-site page whose buttons lead to pages holding the real mirror links."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["page"] = "page"
    url: str


class RawFragment(BaseModel):
    """Serialized HTML (or plain text) carrying mirror URL literals."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["fragment"] = "fragment"
    text: str


Payload = Annotated[Union[StructuredPage, RawFragment], Field(discriminator="kind")]


def classify_payload(blob: str, origin_hosts: Iterable[str]) -> Payload:
    blob = (blob or "").strip()
    hostname = get_hostname(blob) if blob.startswith("http") else ""
    if hostname and " " not in blob and "<" not in blob:
        if any(origin in hostname for origin in origin_hosts):
            return StructuredPage(url=blob)
    return RawFragment(text=blob)


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    poster_url: Optional[str] = None
    kind: ContentKind = ContentKind.MOVIE


class HomePage(BaseModel):
    name: str
    items: List[SearchResult] = []


class ContentItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    poster_url: Optional[str] = None
    kind: ContentKind


class SeasonGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    season: int
    name: str
    quality: Optional[str] = None


class EpisodeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    season: int
    episode: int
    name: str
    payload: Payload


class LoadResult(BaseModel):
    item: ContentItem
    seasons: List[SeasonGroup] = []
    episodes: List[EpisodeRecord] = []
    payload: Optional[Payload] = None
