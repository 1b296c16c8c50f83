from typing import Iterable, List, Optional, Tuple, Type

from mirrorhop.core.exceptions import UnmatchedDomain
from mirrorhop.core.logger import logger
from mirrorhop.extractors.base import BaseExtractor, HopContext
from mirrorhop.extractors.fastdlserver import FastDLServer
from mirrorhop.extractors.gdflix import GDFlix
from mirrorhop.extractors.hubcloud import HubCloud
from mirrorhop.extractors.models import ExtractionOutcome, ExtractorDescriptor, Sinks
from mirrorhop.extractors.sharepoint import Sharepoint
from mirrorhop.extractors.vcloud import VCloud
from mirrorhop.utils.http_client import Fetcher

# Registration order is the tie-break when several patterns match a URL
EXTRACTOR_CLASSES: Tuple[Type[BaseExtractor], ...] = (
    VCloud,
    GDFlix,
    HubCloud,
    FastDLServer,
    Sharepoint,
)


class ExtractorRegistry:
    """
    Ordered (hostname pattern, extractor) pairs.

    Append-only while the process starts, then frozen; lookups never mutate
    it, so concurrent resolutions share it without locking.
    """

    def __init__(self):
        self._descriptors: List[ExtractorDescriptor] = []
        self._frozen = False

    def register(self, descriptor: ExtractorDescriptor):
        if self._frozen:
            raise RuntimeError("Extractor registry is frozen")
        self._descriptors.append(descriptor)

    def register_extractor(self, extractor: BaseExtractor):
        for descriptor in extractor.descriptors():
            self.register(descriptor)

    def freeze(self) -> "ExtractorRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def find(self, url: str) -> Optional[ExtractorDescriptor]:
        for descriptor in self._descriptors:
            if descriptor.matches(url):
                return descriptor
        return None

    def require(self, url: str) -> ExtractorDescriptor:
        descriptor = self.find(url)
        if descriptor is None:
            raise UnmatchedDomain(url)
        return descriptor

    async def resolve(
        self, url: str, sinks: Sinks, context: Optional[HopContext] = None
    ) -> Optional[ExtractionOutcome]:
        descriptor = self.find(url)
        if descriptor is None:
            logger.debug(f"No extractor registered for {url}")
            return None
        return await descriptor.extractor.resolve(url, sinks, context)


def build_registry(
    fetcher: Fetcher,
    extractor_classes: Optional[Iterable[Type[BaseExtractor]]] = None,
) -> ExtractorRegistry:
    registry = ExtractorRegistry()
    for extractor_class in extractor_classes or EXTRACTOR_CLASSES:
        registry.register_extractor(extractor_class(fetcher))
    return registry.freeze()
