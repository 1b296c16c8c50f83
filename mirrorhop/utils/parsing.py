import re
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import Tag

from mirrorhop.core.constants import direct_media_hosts, video_extensions

URL_PATTERN = re.compile(r"(?i)https?://[^\s\"'<>]+")
SEASON_PATTERN = re.compile(r"(?i)season\s*\d+")
DOWNLOAD_PREFIX = "Download "


def extract_urls(blob: str) -> List[str]:
    """Every absolute http(s) URL literal in `blob`, first occurrence order, no duplicates."""
    seen = set()
    urls = []
    for match in URL_PATTERN.finditer(blob or ""):
        url = match.group(0).replace("&amp;", "&")
        if url not in seen:
            seen.add(url)
            urls.append(url)
    return urls


def strip_download_prefix(title: Optional[str]) -> str:
    if not title:
        return ""
    return title.replace(DOWNLOAD_PREFIX, "")


def is_series_title(title: Optional[str]) -> bool:
    if not title:
        return False
    lowered = title.lower()
    return (
        "episode" in lowered
        or SEASON_PATTERN.search(title) is not None
        or "series" in lowered
    )


def get_hostname(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def fix_url(url: Optional[str], base_url: str) -> str:
    if not url:
        return ""
    if url.startswith("//"):
        return f"https:{url}"
    return urljoin(base_url, url)


def looks_like_media(url: str) -> bool:
    """True when the URL path or host says the response is the media file itself."""
    if not url:
        return False
    parsed = urlparse(url)
    path = parsed.path.lower()
    if path.endswith(video_extensions):
        return True
    target = f"{parsed.netloc}{parsed.path}".lower()
    return any(host in target for host in direct_media_hosts)


def select_text(node: Optional[Tag], selector: str) -> str:
    if node is None:
        return ""
    element = node.select_one(selector)
    return element.get_text(" ", strip=True) if element else ""


def select_attr(node: Optional[Tag], selector: str, attribute: str) -> str:
    if node is None:
        return ""
    element = node.select_one(selector)
    if element is None:
        return ""
    value = element.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def text_contains(node: Optional[Tag], needle: str) -> bool:
    if node is None:
        return False
    return needle.lower() in node.get_text(" ", strip=True).lower()


def substring_after(value: str, delimiter: str) -> str:
    if delimiter not in value:
        return value
    return value.split(delimiter, 1)[1]


def next_element_sibling(node: Optional[Tag]) -> Optional[Tag]:
    if node is None:
        return None
    for sibling in node.next_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None


def previous_element_sibling(node: Optional[Tag]) -> Optional[Tag]:
    if node is None:
        return None
    for sibling in node.previous_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None
