class MirrorHopError(Exception):
    """Base exception for link resolution errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ParseError(MirrorHopError):
    """Raised when an expected element or attribute is absent from a page."""

    def __init__(self, url: str, selector: str):
        self.url = url
        self.selector = selector
        super().__init__(f"Nothing matched {selector!r} on {url}")


class FetchError(MirrorHopError):
    """Raised when a request fails (timeout, connection error, non-2xx status)."""

    def __init__(self, url: str, status: int = None, reason: str = None):
        self.url = url
        self.status = status
        detail = f"HTTP {status}" if status is not None else reason or "request failed"
        super().__init__(f"{detail} while fetching {url}")


class ResolutionExhausted(MirrorHopError):
    def __init__(self, extractor: str, url: str, hops: int):
        self.extractor = extractor
        self.url = url
        self.hops = hops
        super().__init__(f"{extractor}: no media found for {url} after {hops} hops")


class ResolutionCancelled(MirrorHopError):
    def __init__(self, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(f"Resolution {reason}")


class UnmatchedDomain(MirrorHopError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No registered extractor handles {url}")
