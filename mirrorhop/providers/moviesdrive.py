import re
from typing import List, Optional, Tuple
from urllib.parse import quote_plus

from bs4 import Tag

from mirrorhop.core.exceptions import FetchError
from mirrorhop.core.logger import logger
from mirrorhop.core.models import settings
from mirrorhop.providers.base import BaseProvider
from mirrorhop.providers.models import (
    ContentItem,
    ContentKind,
    EpisodeRecord,
    HomePage,
    LoadResult,
    RawFragment,
    SearchResult,
    SeasonGroup,
    StructuredPage,
)
from mirrorhop.services.orchestration import ResolutionOrchestrator
from mirrorhop.utils.formatting import QUALITY_PATTERN
from mirrorhop.utils.http_client import Document, Fetcher
from mirrorhop.utils.parsing import (
    fix_url,
    is_series_title,
    next_element_sibling,
    previous_element_sibling,
    select_attr,
    strip_download_prefix,
    text_contains,
)

EPISODE_MARKER_PATTERN = re.compile(r"(?i)ep")


class MoviesDriveProvider(BaseProvider):
    name = "MoviesDrive"
    main_page = {
        "/page/": "Home",
        "/category/amzn-prime-video/page/": "Prime Video",
        "/category/netflix/page/": "Netflix",
        "/category/hotstar/page/": "Hotstar",
        "/category/anime/page/": "Anime",
        "/category/k-drama/page/": "K Drama",
    }
    origin_keywords = ("moviesdrive",)
    # host name printed on the episode mirror buttons of season pages
    mirror_label = "HubCloud"
    season_selector = "h5 > a"

    def __init__(
        self,
        fetcher: Fetcher,
        orchestrator: ResolutionOrchestrator,
        main_url: Optional[str] = None,
        max_search_pages: Optional[int] = None,
    ):
        super().__init__(fetcher, orchestrator, main_url or settings.MOVIESDRIVE_URL)
        self.max_search_pages = max_search_pages or settings.SEARCH_MAX_PAGES

    # ------------------------------------------------------------------ #
    # Browsing
    # ------------------------------------------------------------------ #

    def to_search_result(self, element: Tag) -> Optional[SearchResult]:
        href = select_attr(element, "figure > a", "href")
        if not href:
            return None

        title = strip_download_prefix(select_attr(element, "figure > img", "title"))
        poster = select_attr(element, "figure > img", "src")
        return SearchResult(
            title=title,
            url=fix_url(href, self.main_url),
            poster_url=fix_url(poster, self.main_url) or None,
        )

    def parse_listing(self, document: Document) -> List[SearchResult]:
        results = []
        for element in document.soup.select("ul.recent-movies > li"):
            result = self.to_search_result(element)
            if result is not None:
                results.append(result)
        return results

    async def get_main_page(self, page: int = 1, category_path: str = "/page/") -> HomePage:
        document = await self.fetcher.get_document(
            f"{self.main_url}{category_path}{page}"
        )
        return HomePage(
            name=self.main_page.get(category_path, category_path),
            items=self.parse_listing(document),
        )

    async def search(self, query: str) -> List[SearchResult]:
        results = []
        for page in range(1, self.max_search_pages + 1):
            url = f"{self.main_url}/page/{page}/?s={quote_plus(query)}"
            try:
                document = await self.fetcher.get_document(url)
            except FetchError as e:
                logger.warning(f"Search page {page} for {query!r} failed: {e}")
                break

            page_results = self.parse_listing(document)
            if not page_results:
                break
            results.extend(page_results)

        logger.log("PROVIDER", f"{self.name} search {query!r}: {len(results)} results")
        return results

    # ------------------------------------------------------------------ #
    # Detail page traversal
    # ------------------------------------------------------------------ #

    async def load(self, url: str) -> LoadResult:
        document = await self.fetcher.get_document(url)
        soup = document.soup

        raw_title = select_attr(soup, 'meta[property="og:title"]', "content")
        poster = select_attr(soup, 'img[decoding="async"]', "src")
        kind = ContentKind.TV_SERIES if is_series_title(raw_title) else ContentKind.MOVIE
        item = ContentItem(
            title=strip_download_prefix(raw_title),
            url=url,
            poster_url=poster or None,
            kind=kind,
        )

        if kind == ContentKind.MOVIE:
            return LoadResult(item=item, payload=StructuredPage(url=url))

        seasons, episodes = await self.load_seasons(document)
        logger.log(
            "PROVIDER",
            f"{self.name} loaded {item.title!r}: {len(seasons)} seasons, {len(episodes)} episodes",
        )
        return LoadResult(item=item, seasons=seasons, episodes=episodes)

    @staticmethod
    def season_label(button: Tag) -> str:
        heading = previous_element_sibling(button.parent)
        return heading.get_text(" ", strip=True) if heading is not None else ""

    def season_buttons(self, document: Document) -> List[Tag]:
        return [
            button
            for button in document.soup.select(self.season_selector)
            if not text_contains(button, "zip")
        ]

    async def load_seasons(
        self, document: Document
    ) -> Tuple[List[SeasonGroup], List[EpisodeRecord]]:
        seasons: List[SeasonGroup] = []
        episodes: List[EpisodeRecord] = []

        for button in self.season_buttons(document):
            season = len(seasons) + 1
            label = self.season_label(button)
            quality = QUALITY_PATTERN.search(label)
            seasons.append(
                SeasonGroup(
                    season=season,
                    name=label,
                    quality=quality.group(1).lower() if quality else None,
                )
            )

            href = fix_url(button.get("href"), document.url)
            if not href:
                continue
            try:
                season_page = await self.fetcher.get_document(href, referer=document.url)
            except FetchError as e:
                logger.warning(f"Season {season} page {href} failed: {e}")
                continue

            episodes.extend(self.parse_episodes(season_page, season, label))

        return seasons, episodes

    @staticmethod
    def title_block(span: Tag) -> Optional[Tag]:
        block = span.parent
        while block is not None and block.name == "span":
            block = block.parent
        return block

    def episode_title_blocks(self, document: Document) -> List[Tag]:
        """Blocks holding an episode marker span; nested marker spans share one block."""
        blocks = []
        seen = set()
        for span in document.soup.select("span"):
            if not EPISODE_MARKER_PATTERN.search(span.get_text(" ", strip=True)):
                continue
            block = self.title_block(span)
            if block is None or id(block) in seen:
                continue
            seen.add(id(block))
            blocks.append(block)
        return blocks

    def mirror_siblings(self, block: Tag) -> str:
        # one episode may have several mirror buttons as consecutive siblings
        fragment = ""
        link_tag = next_element_sibling(block)
        while link_tag is not None and text_contains(link_tag, self.mirror_label):
            fragment += str(link_tag)
            link_tag = next_element_sibling(link_tag)
        return fragment

    def parse_episodes(
        self, document: Document, season: int, season_label: str
    ) -> List[EpisodeRecord]:
        blocks = self.episode_title_blocks(document)
        if blocks:
            entries = [
                (block.get_text(" ", strip=True), self.mirror_siblings(block))
                for block in blocks
            ]
        else:
            entries = [
                (season_label, str(anchor))
                for anchor in document.soup.select("a")
                if text_contains(anchor, self.mirror_label)
            ]

        episodes = []
        for position, (name, fragment) in enumerate(entries, start=1):
            if fragment:
                episodes.append(
                    EpisodeRecord(
                        season=season,
                        episode=position,
                        name=name,
                        payload=RawFragment(text=fragment),
                    )
                )
        return episodes
