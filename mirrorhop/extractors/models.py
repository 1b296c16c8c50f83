import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from mirrorhop.utils.parsing import get_hostname


class ResolvedMediaLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str  # extractor that produced the link, e.g. "HubCloud"
    name: str  # display name, e.g. "HubCloud [FSL Server]"
    url: str
    quality: str = "unknown"
    headers: Dict[str, str] = {}
    size: Optional[str] = None


class SubtitleFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    lang: str
    url: str


@dataclass
class Sinks:
    on_media_link: Callable[[ResolvedMediaLink], None]
    on_subtitle: Callable[[SubtitleFile], None] = lambda subtitle: None


class HopState(str, Enum):
    START = "start"
    FOLLOWING = "following"
    TERMINAL = "terminal"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class Hop:
    url: str
    index: int = 0
    referer: Optional[str] = None


@dataclass
class HopResult:
    """What one hop learned: either the next URL or the terminal links."""

    next_url: Optional[str] = None
    links: List[ResolvedMediaLink] = field(default_factory=list)
    subtitles: List[SubtitleFile] = field(default_factory=list)
    terminal: bool = False

    @classmethod
    def follow(cls, url: str) -> "HopResult":
        return cls(next_url=url)

    @classmethod
    def done(
        cls,
        links: List[ResolvedMediaLink],
        subtitles: Optional[List[SubtitleFile]] = None,
    ) -> "HopResult":
        return cls(links=list(links), subtitles=list(subtitles or []), terminal=True)


@dataclass
class ExtractionOutcome:
    extractor: str
    url: str
    state: HopState
    hops: int = 0
    links: int = 0
    subtitles: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == HopState.TERMINAL and self.links > 0


@dataclass(frozen=True)
class ExtractorDescriptor:
    """A hostname pattern paired with the extractor that handles it."""

    name: str
    pattern: re.Pattern
    extractor: object

    def matches(self, url: str) -> bool:
        hostname = get_hostname(url)
        return bool(hostname) and self.pattern.search(hostname) is not None
