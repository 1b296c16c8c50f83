import re

from mirrorhop.core.exceptions import ParseError
from mirrorhop.extractors.base import HopContext
from mirrorhop.extractors.hubcloud import HubCloud
from mirrorhop.extractors.models import Hop, HopResult
from mirrorhop.utils.parsing import fix_url

VAR_URL_PATTERN = re.compile(r"var\s+url\s*=\s*['\"]([^'\"]+)['\"]")


class VCloud(HubCloud):
    """vcloud.* pages hide the server page URL in an inline `var url = '...'` script."""

    name = "VCloud"
    domains = (r"vcloud\.[a-z0-9]+",)

    async def follow(self, hop: Hop, context: HopContext) -> HopResult:
        document = await self.get_document(hop.url, context, referer=hop.referer)
        if self.has_server_buttons(document):
            return await self.read_server_page(document, context)

        match = VAR_URL_PATTERN.search(document.text)
        if not match:
            raise ParseError(document.url, "var url script token")
        return HopResult.follow(fix_url(match.group(1), document.url))
