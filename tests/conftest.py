"""
Shared test doubles.

`FakeFetcher` stands in for `mirrorhop.utils.http_client.Fetcher`: pages and
raw responses are served from dictionaries, unknown URLs fail with HTTP 404
exactly like the real fetcher turns a non-2xx status into `FetchError`.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple, Union

import pytest

from mirrorhop.core.exceptions import FetchError
from mirrorhop.extractors.models import Sinks
from mirrorhop.utils.http_client import Document, RawResponse

PageEntry = Union[str, Tuple[str, str]]


class FakeFetcher:
    def __init__(
        self,
        documents: Optional[Dict[str, PageEntry]] = None,
        responses: Optional[Dict[str, dict]] = None,
        delays: Optional[Dict[str, float]] = None,
        events: Optional[list] = None,
    ):
        self.documents = documents or {}
        self.responses = responses or {}
        self.delays = delays or {}
        self.requests: List[str] = []
        self.referers: Dict[str, Optional[str]] = {}
        self.events = events if events is not None else []

    async def _before(self, url: str, referer: Optional[str]):
        self.requests.append(url)
        self.referers[url] = referer
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)

    async def get_document(self, url, headers=None, referer=None) -> Document:
        await self._before(url, referer)
        if url not in self.documents:
            self.events.append(("fail", url))
            raise FetchError(url, status=404)

        entry = self.documents[url]
        final_url, html = entry if isinstance(entry, tuple) else (url, entry)
        return Document(url=final_url, status=200, headers={}, text=html)

    async def get_response(
        self, url, headers=None, referer=None, allow_redirects=False
    ) -> RawResponse:
        await self._before(url, referer)
        if url not in self.responses:
            self.events.append(("fail", url))
            raise FetchError(url, status=404)

        entry = self.responses[url]
        return RawResponse(
            url=url,
            status=entry.get("status", 200),
            headers={key.lower(): value for key, value in entry.get("headers", {}).items()},
        )


class CollectedSinks:
    def __init__(self, events: Optional[list] = None):
        self.links = []
        self.subtitles = []
        self.events = events if events is not None else []

    def on_media_link(self, link):
        self.links.append(link)
        self.events.append(("link", link.url))

    def on_subtitle(self, subtitle):
        self.subtitles.append(subtitle)

    @property
    def sinks(self) -> Sinks:
        return Sinks(on_media_link=self.on_media_link, on_subtitle=self.on_subtitle)

    @property
    def urls(self):
        return sorted(link.url for link in self.links)


@pytest.fixture()
def collected() -> CollectedSinks:
    return CollectedSinks()
