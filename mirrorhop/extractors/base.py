import asyncio
import re
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup

from mirrorhop.core.constants import subtitle_extensions
from mirrorhop.core.exceptions import (
    FetchError,
    ParseError,
    ResolutionCancelled,
    ResolutionExhausted,
)
from mirrorhop.core.logger import log_extractor_error, logger
from mirrorhop.core.models import settings
from mirrorhop.extractors.models import (
    ExtractionOutcome,
    ExtractorDescriptor,
    Hop,
    HopResult,
    HopState,
    ResolvedMediaLink,
    Sinks,
    SubtitleFile,
)
from mirrorhop.utils.formatting import infer_quality
from mirrorhop.utils.http_client import Document, Fetcher, RawResponse
from mirrorhop.utils.parsing import fix_url, looks_like_media

PIXELDRAIN_ID_PATTERN = re.compile(r"pixeldra[^/]*/(?:u|file)/([A-Za-z0-9]+)")


def pixeldrain_direct(url: str) -> str:
    match = PIXELDRAIN_ID_PATTERN.search(url)
    if not match:
        return url
    return f"https://pixeldrain.dev/api/file/{match.group(1)}?download"


class HopContext:
    """Deadline and cancellation token shared by every hop of one resolution."""

    def __init__(
        self,
        deadline: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.deadline = deadline
        self.cancel_event = cancel_event

    @classmethod
    def with_timeout(
        cls, timeout: Optional[float], cancel_event: Optional[asyncio.Event] = None
    ) -> "HopContext":
        deadline = None
        if timeout:
            deadline = asyncio.get_running_loop().time() + timeout
        return cls(deadline=deadline, cancel_event=cancel_event)

    def checkpoint(self):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ResolutionCancelled("cancelled")
        if (
            self.deadline is not None
            and asyncio.get_running_loop().time() >= self.deadline
        ):
            raise ResolutionCancelled("timed out")


class BaseExtractor(ABC):
    """
    Hop state machine shared by every mirror family.

    Subclasses implement `follow`, which fetches one hop and either names the
    next URL or returns the terminal links. Hops run strictly in sequence.
    """

    name: str = ""
    # Hostname regexes, matched against the end of the URL hostname
    domains: Tuple[str, ...] = ()
    max_hops: Optional[int] = None

    def __init__(self, fetcher: Fetcher, max_hops: Optional[int] = None):
        self.fetcher = fetcher
        self.max_hops = max_hops or type(self).max_hops or settings.EXTRACTOR_MAX_HOPS

    def descriptors(self) -> List[ExtractorDescriptor]:
        return [
            ExtractorDescriptor(
                name=self.name,
                pattern=re.compile(rf"(?:^|\.){domain}$", re.IGNORECASE),
                extractor=self,
            )
            for domain in self.domains
        ]

    @abstractmethod
    async def follow(self, hop: Hop, context: HopContext) -> HopResult:
        pass

    async def resolve(
        self, url: str, sinks: Sinks, context: Optional[HopContext] = None
    ) -> ExtractionOutcome:
        context = context or HopContext()
        state = HopState.START
        hop = Hop(url=url)

        try:
            while True:
                if hop.index >= self.max_hops:
                    raise ResolutionExhausted(self.name, url, hop.index)

                if state == HopState.FOLLOWING and looks_like_media(hop.url):
                    result = HopResult.done(
                        [
                            self.make_link(
                                hop.url,
                                quality=infer_quality(hop.url),
                                headers=self.referer_headers(hop),
                            )
                        ]
                    )
                else:
                    result = await self.follow(hop, context)
                state = HopState.FOLLOWING

                if result.terminal:
                    links, subtitles = self._emit(result, sinks)
                    logger.log(
                        "EXTRACTOR",
                        f"{self.name} resolved {url} in {hop.index + 1} hops: {links} links, {subtitles} subtitles",
                    )
                    return ExtractionOutcome(
                        extractor=self.name,
                        url=url,
                        state=HopState.TERMINAL,
                        hops=hop.index + 1,
                        links=links,
                        subtitles=subtitles,
                    )

                if not result.next_url:
                    return ExtractionOutcome(
                        extractor=self.name,
                        url=url,
                        state=HopState.FAILED,
                        hops=hop.index + 1,
                        error=f"dead end at {hop.url}",
                    )

                logger.debug(f"{self.name} hop {hop.index + 1}: {hop.url} -> {result.next_url}")
                hop = Hop(url=result.next_url, index=hop.index + 1, referer=hop.url)
        except ResolutionExhausted as e:
            logger.log("EXTRACTOR", e.message)
            return ExtractionOutcome(
                extractor=self.name,
                url=url,
                state=HopState.EXHAUSTED,
                hops=e.hops,
                error=e.message,
            )
        except ResolutionCancelled as e:
            logger.log("EXTRACTOR", f"{self.name}: {e.message} while resolving {url}")
            return ExtractionOutcome(
                extractor=self.name,
                url=url,
                state=HopState.CANCELLED,
                hops=hop.index,
                error=e.message,
            )
        except (FetchError, ParseError) as e:
            log_extractor_error(self.name, url, e)
            return ExtractionOutcome(
                extractor=self.name,
                url=url,
                state=HopState.FAILED,
                hops=hop.index + 1,
                error=e.message,
            )

    def _emit(self, result: HopResult, sinks: Sinks):
        links = 0
        for link in result.links:
            try:
                sinks.on_media_link(link)
                links += 1
            except Exception as e:
                logger.warning(f"Media link sink failed for {link.url}: {e}")

        subtitles = 0
        for subtitle in result.subtitles:
            try:
                sinks.on_subtitle(subtitle)
                subtitles += 1
            except Exception as e:
                logger.warning(f"Subtitle sink failed for {subtitle.url}: {e}")

        return links, subtitles

    async def get_document(
        self,
        url: str,
        context: HopContext,
        referer: Optional[str] = None,
        headers: Optional[dict] = None,
    ) -> Document:
        context.checkpoint()
        return await self.fetcher.get_document(url, headers=headers, referer=referer)

    async def get_response(
        self,
        url: str,
        context: HopContext,
        referer: Optional[str] = None,
        allow_redirects: bool = False,
    ) -> RawResponse:
        context.checkpoint()
        return await self.fetcher.get_response(
            url, referer=referer, allow_redirects=allow_redirects
        )

    def make_link(
        self,
        url: str,
        label: Optional[str] = None,
        quality: str = "unknown",
        size: Optional[str] = None,
        headers: Optional[dict] = None,
    ) -> ResolvedMediaLink:
        return ResolvedMediaLink(
            source=self.name,
            name=f"{self.name} [{label}]" if label else self.name,
            url=url,
            quality=quality,
            headers=headers or {},
            size=size or None,
        )

    @staticmethod
    def referer_headers(hop: Hop) -> dict:
        return {"Referer": hop.referer} if hop.referer else {}

    @staticmethod
    def find_subtitles(soup: BeautifulSoup, base_url: str) -> List[SubtitleFile]:
        subtitles = []
        seen = set()
        for anchor in soup.select("a[href]"):
            href = fix_url(anchor.get("href"), base_url)
            path = href.split("?", 1)[0].lower()
            if not path.endswith(subtitle_extensions) or href in seen:
                continue
            seen.add(href)
            lang = anchor.get_text(" ", strip=True) or "Unknown"
            subtitles.append(SubtitleFile(lang=lang, url=href))
        return subtitles

    async def gather_links(self, url: str, tasks: Iterable) -> List[ResolvedMediaLink]:
        """Run terminal-page button lookups concurrently; one failing button never drops the others."""
        links = []
        for result in await asyncio.gather(*tasks, return_exceptions=True):
            if isinstance(result, (ResolutionCancelled, asyncio.CancelledError)):
                raise result
            if isinstance(result, Exception):
                log_extractor_error(self.name, url, result)
                continue
            if result is None:
                continue
            if isinstance(result, ResolvedMediaLink):
                links.append(result)
            else:
                links.extend(result)
        return links
