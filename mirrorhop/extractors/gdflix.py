import re
from typing import List, Optional

from bs4 import Tag

from mirrorhop.core.exceptions import ParseError
from mirrorhop.core.logger import logger
from mirrorhop.extractors.base import BaseExtractor, HopContext, pixeldrain_direct
from mirrorhop.extractors.models import Hop, HopResult, ResolvedMediaLink
from mirrorhop.utils.formatting import infer_quality, normalize_size
from mirrorhop.utils.http_client import Document
from mirrorhop.utils.parsing import fix_url, select_attr, select_text, substring_after

REFRESH_URL_PATTERN = re.compile(r"(?i)url\s*=\s*['\"]?([^'\";]+)")


class GDFlix(BaseExtractor):
    """
    gdflix.* file pages.

    An optional meta-refresh hop leads to the file page; its
    `div.text-center a` buttons are the download servers.
    """

    name = "GDFlix"
    domains = (r"gdflix\.[a-z0-9]+",)

    async def follow(self, hop: Hop, context: HopContext) -> HopResult:
        document = await self.get_document(hop.url, context, referer=hop.referer)

        refresh = select_attr(document.soup, 'meta[http-equiv="refresh"]', "content")
        match = REFRESH_URL_PATTERN.search(refresh) if refresh else None
        if match:
            target = fix_url(match.group(1).strip(), document.url)
            if target != document.url:
                return HopResult.follow(target)

        return await self.read_file_page(document, context)

    async def read_file_page(self, document: Document, context: HopContext) -> HopResult:
        soup = document.soup
        file_name = ""
        size = ""
        for item in soup.select("ul > li.list-group-item"):
            text = item.get_text(" ", strip=True)
            if "Name :" in text and not file_name:
                file_name = substring_after(text, "Name :").strip()
            elif "Size :" in text and not size:
                size = normalize_size(text)
        quality = infer_quality(file_name, select_text(soup, "title"))

        anchors = soup.select("div.text-center a")
        if not anchors:
            raise ParseError(document.url, "div.text-center a")

        links = await self.gather_links(
            document.url,
            [
                self.read_file_button(anchor, document.url, quality, size, context)
                for anchor in anchors
            ],
        )
        return HopResult.done(links, self.find_subtitles(soup, document.url))

    async def read_file_button(
        self,
        anchor: Tag,
        page_url: str,
        quality: str,
        size: str,
        context: HopContext,
    ):
        href = fix_url(anchor.get("href"), page_url)
        text = anchor.get_text(" ", strip=True).upper()
        if not href or href.startswith("javascript"):
            return None

        if "DIRECT DL" in text:
            return self.make_link(href, "Direct", quality, size)

        if "CLOUD DOWNLOAD" in text:
            return self.make_link(href, "Cloud Download", quality, size)

        if "PIXELDRAIN" in text or "pixeldra" in href:
            return self.make_link(pixeldrain_direct(href), "PixelDrain", quality, size)

        if "INSTANT DL" in text:
            response = await self.get_response(href, context, referer=page_url)
            if not response.location:
                raise ParseError(href, "location header")
            return self.make_link(
                substring_after(response.location, "url="), "Instant DL", quality, size
            )

        if "INDEX LINKS" in text:
            return await self.read_index_links(href, page_url, quality, size, context)

        logger.debug(f"{self.name}: skipping unsupported button {text!r} ({href})")
        return None

    async def read_index_links(
        self,
        url: str,
        referer: str,
        quality: str,
        size: str,
        context: HopContext,
    ) -> List[ResolvedMediaLink]:
        index_page = await self.get_document(url, context, referer=referer)
        pages = [
            fix_url(button.get("href"), index_page.url)
            for button in index_page.soup.select("a.btn.btn-outline-info")
        ]
        return await self.gather_links(
            index_page.url,
            [
                self.read_index_page(page, index_page.url, quality, size, context)
                for page in pages
                if page
            ],
        )

    async def read_index_page(
        self,
        url: str,
        referer: str,
        quality: str,
        size: str,
        context: HopContext,
    ) -> List[ResolvedMediaLink]:
        document = await self.get_document(url, context, referer=referer)
        links = []
        for anchor in document.soup.select("div.mb-4 > a"):
            href = fix_url(anchor.get("href"), document.url)
            if href:
                links.append(self.make_link(href, "Index", quality, size))
        return links
