from typing import Optional

from bs4 import Tag

from mirrorhop.core.exceptions import ParseError
from mirrorhop.core.logger import logger
from mirrorhop.extractors.base import BaseExtractor, HopContext, pixeldrain_direct
from mirrorhop.extractors.models import Hop, HopResult, ResolvedMediaLink
from mirrorhop.utils.formatting import infer_quality, normalize_size
from mirrorhop.utils.http_client import Document
from mirrorhop.utils.parsing import (
    fix_url,
    looks_like_media,
    select_attr,
    select_text,
    substring_after,
)

SERVER_BUTTON_SELECTOR = "div.card-body h2 a.btn"


class HubCloud(BaseExtractor):
    """
    hubcloud.* file pages.

    Hop 1 reads the `#download` button of the file page, hop 2 is the server
    page listing one button per download server.
    """

    name = "HubCloud"
    domains = (r"hubcloud\.[a-z0-9]+",)

    @staticmethod
    def has_server_buttons(document: Document) -> bool:
        return document.soup.select_one(SERVER_BUTTON_SELECTOR) is not None

    async def follow(self, hop: Hop, context: HopContext) -> HopResult:
        document = await self.get_document(hop.url, context, referer=hop.referer)
        if self.has_server_buttons(document):
            return await self.read_server_page(document, context)

        target = select_attr(document.soup, "#download", "href")
        if not target:
            raise ParseError(document.url, "#download")
        return HopResult.follow(fix_url(target, document.url))

    async def read_server_page(self, document: Document, context: HopContext) -> HopResult:
        soup = document.soup
        size_text = select_text(soup, "i#size")
        size = normalize_size(size_text) or size_text
        quality = infer_quality(
            select_text(soup, "div.card-header"), select_text(soup, "title")
        )

        buttons = soup.select(SERVER_BUTTON_SELECTOR)
        links = await self.gather_links(
            document.url,
            [
                self.read_server_button(button, document.url, quality, size, context)
                for button in buttons
            ],
        )
        return HopResult.done(links, self.find_subtitles(soup, document.url))

    async def read_server_button(
        self,
        button: Tag,
        page_url: str,
        quality: str,
        size: str,
        context: HopContext,
    ) -> Optional[ResolvedMediaLink]:
        href = fix_url(button.get("href"), page_url)
        text = button.get_text(" ", strip=True)
        if not href:
            return None

        if "pixeldra" in href:
            return self.make_link(pixeldrain_direct(href), "PixelDrain", quality, size)

        if "FSL Server" in text:
            return self.make_link(href, "FSL Server", quality, size)

        if "Download File" in text:
            return self.make_link(href, "Download File", quality, size)

        if "BuzzServer" in text:
            response = await self.get_response(
                f"{href.rstrip('/')}/download", context, referer=href
            )
            target = response.headers.get("hx-redirect")
            if not target:
                raise ParseError(href, "hx-redirect header")
            return self.make_link(
                fix_url(target, href),
                "BuzzServer",
                quality,
                size,
                headers={"Referer": href},
            )

        if "10Gbps" in text:
            response = await self.get_response(href, context, referer=page_url)
            if not response.location:
                raise ParseError(href, "location header")
            return self.make_link(
                substring_after(response.location, "link="), "10Gbps", quality, size
            )

        if looks_like_media(href):
            return self.make_link(href, text or None, quality, size)

        logger.debug(f"{self.name}: skipping unsupported server button {text!r} ({href})")
        return None
