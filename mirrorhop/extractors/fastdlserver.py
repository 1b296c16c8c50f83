from mirrorhop.extractors.base import HopContext
from mirrorhop.extractors.gdflix import GDFlix
from mirrorhop.extractors.models import Hop, HopResult
from mirrorhop.utils.parsing import fix_url


class FastDLServer(GDFlix):
    """fastdlserver.* links redirect once, then land on a GDFlix-style file page."""

    name = "FastDLServer"
    domains = (r"fastdlserver\.[a-z0-9]+",)

    async def follow(self, hop: Hop, context: HopContext) -> HopResult:
        if hop.index == 0:
            response = await self.get_response(hop.url, context, referer=hop.referer)
            if response.is_redirect:
                return HopResult.follow(fix_url(response.location, hop.url))
        return await super().follow(hop, context)
