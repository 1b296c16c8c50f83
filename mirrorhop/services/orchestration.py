import asyncio
from dataclasses import dataclass
from typing import List, Optional

from mirrorhop.core.exceptions import FetchError
from mirrorhop.core.logger import log_extractor_error, logger
from mirrorhop.core.models import settings
from mirrorhop.extractors.base import HopContext
from mirrorhop.extractors.models import ExtractionOutcome, HopState, Sinks
from mirrorhop.extractors.registry import ExtractorRegistry
from mirrorhop.providers.models import Payload, StructuredPage
from mirrorhop.utils.http_client import Fetcher
from mirrorhop.utils.parsing import extract_urls, fix_url


@dataclass
class ResolutionSummary:
    # `success` only says dispatch was attempted; read the counters for results
    success: bool = True
    dispatched: int = 0
    succeeded: int = 0
    failed: int = 0
    unmatched: int = 0
    links: int = 0
    subtitles: int = 0

    def record(self, outcome: Optional[ExtractionOutcome]):
        if outcome is None:
            self.unmatched += 1
            return
        self.links += outcome.links
        self.subtitles += outcome.subtitles
        if outcome.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1


class ResolutionOrchestrator:
    def __init__(
        self,
        registry: ExtractorRegistry,
        fetcher: Fetcher,
        button_selector: str = "h5 > a",
        resolve_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.fetcher = fetcher
        self.button_selector = button_selector
        if resolve_timeout is None:
            resolve_timeout = settings.RESOLVE_TIMEOUT
        self.resolve_timeout = resolve_timeout or None

    async def expand_structured_page(self, url: str) -> List[str]:
        """Buttons of `url` lead to inner pages; the inner pages' buttons are the candidates."""
        try:
            document = await self.fetcher.get_document(url)
        except FetchError as e:
            logger.warning(f"Failed to fetch structured page {url}: {e}")
            return []

        buttons = [
            fix_url(button.get("href"), document.url)
            for button in document.soup.select(self.button_selector)
        ]
        buttons = [button for button in buttons if button]

        pages = await asyncio.gather(
            *[
                self.fetcher.get_document(button, referer=document.url)
                for button in buttons
            ],
            return_exceptions=True,
        )

        candidates = []
        for button, page in zip(buttons, pages):
            if isinstance(page, FetchError):
                logger.warning(f"Failed to fetch inner page {button}: {page}")
                continue
            if isinstance(page, BaseException):
                raise page
            for inner in page.soup.select(self.button_selector):
                candidate = fix_url(inner.get("href"), page.url)
                if candidate and candidate not in candidates:
                    candidates.append(candidate)
        return candidates

    async def collect_candidates(self, payload: Payload) -> List[str]:
        if isinstance(payload, StructuredPage):
            return await self.expand_structured_page(payload.url)
        return extract_urls(payload.text)

    async def resolve(
        self,
        payload: Payload,
        sinks: Sinks,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ResolutionSummary:
        candidates = await self.collect_candidates(payload)
        summary = ResolutionSummary(dispatched=len(candidates))

        tasks = [
            self._resolve_candidate(candidate, sinks, cancel_event)
            for candidate in candidates
        ]
        for future in asyncio.as_completed(tasks):
            summary.record(await future)

        logger.log(
            "RESOLVER",
            f"Resolved {summary.links} links from {summary.dispatched} candidates "
            f"({summary.succeeded} succeeded, {summary.failed} failed, {summary.unmatched} unmatched)",
        )
        return summary

    def extractor_name(self, url: str) -> str:
        descriptor = self.registry.find(url)
        return descriptor.name if descriptor else ""

    async def _resolve_candidate(
        self,
        url: str,
        sinks: Sinks,
        cancel_event: Optional[asyncio.Event],
    ) -> Optional[ExtractionOutcome]:
        context = HopContext.with_timeout(self.resolve_timeout, cancel_event)
        try:
            return await asyncio.wait_for(
                self.registry.resolve(url, sinks, context),
                timeout=self.resolve_timeout,
            )
        except asyncio.TimeoutError:
            name = self.extractor_name(url)
            logger.log("EXTRACTOR", f"{name}: timed out while resolving {url}")
            return ExtractionOutcome(
                extractor=name,
                url=url,
                state=HopState.CANCELLED,
                error="timed out",
            )
        except Exception as e:
            name = self.extractor_name(url)
            log_extractor_error(name, url, e)
            return ExtractionOutcome(
                extractor=name,
                url=url,
                state=HopState.FAILED,
                error=str(e),
            )
