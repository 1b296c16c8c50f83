import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple, Union

from mirrorhop.extractors.models import Sinks
from mirrorhop.providers.models import (
    HomePage,
    LoadResult,
    Payload,
    SearchResult,
    classify_payload,
)
from mirrorhop.services.orchestration import ResolutionOrchestrator, ResolutionSummary
from mirrorhop.utils.http_client import Fetcher
from mirrorhop.utils.parsing import get_hostname


class BaseProvider(ABC):
    name: str = ""
    # category path -> display name, appended to `main_url`
    main_page: Dict[str, str] = {}
    # substrings identifying the provider's own pages in a raw payload blob
    origin_keywords: Tuple[str, ...] = ()

    def __init__(
        self,
        fetcher: Fetcher,
        orchestrator: ResolutionOrchestrator,
        main_url: str,
    ):
        self.fetcher = fetcher
        self.orchestrator = orchestrator
        self.main_url = main_url.rstrip("/")

    @property
    def origin_hosts(self) -> Tuple[str, ...]:
        return (get_hostname(self.main_url),) + self.origin_keywords

    @abstractmethod
    async def get_main_page(self, page: int, category_path: str) -> HomePage:
        pass

    @abstractmethod
    async def search(self, query: str) -> List[SearchResult]:
        pass

    @abstractmethod
    async def load(self, url: str) -> LoadResult:
        pass

    async def load_links(
        self,
        payload: Union[Payload, str],
        sinks: Sinks,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ResolutionSummary:
        if isinstance(payload, str):
            payload = classify_payload(payload, self.origin_hosts)
        return await self.orchestrator.resolve(payload, sinks, cancel_event)
