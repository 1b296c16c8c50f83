import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional

import aiohttp
from bs4 import BeautifulSoup

from mirrorhop.core.constants import DEFAULT_HEADERS, HTTP_TIMEOUT
from mirrorhop.core.exceptions import FetchError
from mirrorhop.core.models import settings


@dataclass
class Document:
    """A fetched HTML page: final URL after redirects plus its parsed tree."""

    url: str
    status: int
    headers: Dict[str, str]
    text: str
    _soup: Optional[BeautifulSoup] = field(default=None, repr=False)

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.text, "html.parser")
        return self._soup


@dataclass
class RawResponse:
    """Status line and headers of a response whose body was not read."""

    url: str
    status: int
    headers: Dict[str, str]

    @property
    def location(self) -> Optional[str]:
        return self.headers.get("location")

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "").lower()

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400 and bool(self.location)


def _lower_headers(headers) -> Dict[str, str]:
    return {key.lower(): value for key, value in headers.items()}


class Fetcher:
    """GET-only fetch capability shared by every provider and extractor."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        headers: Optional[Dict[str, str]] = None,
        proxy: Optional[str] = None,
    ):
        self.session = session
        self.headers = dict(DEFAULT_HEADERS if headers is None else headers)
        self.proxy = proxy

    def _build_headers(self, headers: Optional[dict], referer: Optional[str]):
        merged = dict(self.headers)
        if headers:
            merged.update(headers)
        if referer:
            merged["Referer"] = referer
        return merged

    async def get_document(
        self,
        url: str,
        headers: Optional[dict] = None,
        referer: Optional[str] = None,
    ) -> Document:
        try:
            async with self.session.get(
                url,
                headers=self._build_headers(headers, referer),
                proxy=self.proxy,
                allow_redirects=True,
            ) as response:
                if response.status >= 400:
                    raise FetchError(url, status=response.status)
                text = await response.text(errors="replace")
                return Document(
                    url=str(response.url),
                    status=response.status,
                    headers=_lower_headers(response.headers),
                    text=text,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(url, reason=str(e) or type(e).__name__) from e

    async def get_response(
        self,
        url: str,
        headers: Optional[dict] = None,
        referer: Optional[str] = None,
        allow_redirects: bool = False,
    ) -> RawResponse:
        try:
            async with self.session.get(
                url,
                headers=self._build_headers(headers, referer),
                proxy=self.proxy,
                allow_redirects=allow_redirects,
            ) as response:
                if response.status >= 400:
                    raise FetchError(url, status=response.status)
                return RawResponse(
                    url=str(response.url),
                    status=response.status,
                    headers=_lower_headers(response.headers),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(url, reason=str(e) or type(e).__name__) from e


class HttpClientManager:
    def __init__(self):
        self._session: Optional[aiohttp.ClientSession] = None
        self._lock = asyncio.Lock()

    async def init(self) -> aiohttp.ClientSession:
        async with self._lock:
            if self._session and not self._session.closed:
                return self._session

            connector = aiohttp.TCPConnector(
                limit=settings.HTTP_CLIENT_LIMIT,
                limit_per_host=settings.HTTP_CLIENT_LIMIT_PER_HOST,
                ttl_dns_cache=settings.HTTP_CLIENT_TTL_DNS_CACHE,
                keepalive_timeout=settings.HTTP_CLIENT_KEEPALIVE_TIMEOUT,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector, timeout=HTTP_TIMEOUT
            )
            return self._session

    async def get_fetcher(self) -> Fetcher:
        session = await self.init()
        return Fetcher(session, proxy=settings.HTTP_PROXY_URL)

    async def close(self) -> None:
        async with self._lock:
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None


http_client_manager = HttpClientManager()
