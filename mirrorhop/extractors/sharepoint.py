from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from mirrorhop.core.constants import media_content_types
from mirrorhop.core.exceptions import ParseError
from mirrorhop.extractors.base import BaseExtractor, HopContext
from mirrorhop.extractors.models import Hop, HopResult
from mirrorhop.utils.formatting import format_bytes, infer_quality
from mirrorhop.utils.parsing import fix_url, get_hostname


def with_download_param(url: str) -> str:
    parsed = urlparse(url)
    query = parse_qsl(parsed.query, keep_blank_values=True)
    if any(key == "download" for key, _ in query):
        return url
    query.append(("download", "1"))
    return urlunparse(parsed._replace(query=urlencode(query)))


class Sharepoint(BaseExtractor):
    name = "Sharepoint"
    domains = (r"[a-z0-9-]+\.sharepoint\.com",)

    async def follow(self, hop: Hop, context: HopContext) -> HopResult:
        url = hop.url
        if get_hostname(url).endswith("sharepoint.com"):
            url = with_download_param(url)

        response = await self.get_response(url, context, referer=hop.referer)
        if response.is_redirect:
            return HopResult.follow(fix_url(response.location, url))

        disposition = response.headers.get("content-disposition", "")
        if (
            response.content_type.startswith(media_content_types)
            or "attachment" in disposition.lower()
        ):
            size = response.headers.get("content-length")
            return HopResult.done(
                [
                    self.make_link(
                        url,
                        quality=infer_quality(disposition, url),
                        size=format_bytes(int(size)) if size and size.isdigit() else None,
                    )
                ]
            )

        raise ParseError(url, "media content type")
