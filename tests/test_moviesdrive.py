import asyncio

import pytest

from conftest import FakeFetcher

from mirrorhop.core.exceptions import FetchError
from mirrorhop.extractors.registry import ExtractorRegistry
from mirrorhop.providers.models import ContentKind, RawFragment, StructuredPage
from mirrorhop.providers.moviesdrive import MoviesDriveProvider
from mirrorhop.services.orchestration import ResolutionOrchestrator
from mirrorhop.utils.http_client import Document

MAIN_URL = "https://moviesdrive.online"

LISTING_PAGE = """
<ul class="recent-movies">
  <li><figure>
    <img src="https://img.example/bbb.jpg" title="Download Big Buck Bunny (2023) 1080p">
    <a href="https://moviesdrive.online/big-buck-bunny-2023/"></a>
  </figure></li>
  <li><figure>
    <img src="/posters/sintel.jpg" title="Download Sintel Season 1 Complete 720p">
    <a href="/sintel-season-1/"></a>
  </figure></li>
  <li><figure><img title="No link"></figure></li>
</ul>
"""

EMPTY_LISTING = '<ul class="recent-movies"></ul>'

MOVIE_PAGE = """
<html><head>
<meta property="og:title" content="Download Big Buck Bunny (2023) 1080p">
</head><body>
<img decoding="async" src="https://img.example/bbb.jpg">
<h5><a href="https://moviesdrive.online/archives/bbb-1080p">1080p [2.1GB]</a></h5>
</body></html>
"""

SERIES_PAGE = """
<html><head>
<meta property="og:title" content="Download Big Buck Bunny Season 1 Complete 720p">
</head><body>
<img decoding="async" src="https://img.example/bbb-s1.jpg">
<h5>Season 1 720p [400MB/E]</h5>
<h5><a href="https://moviesdrive.online/archives/s1">Single Episode Links</a></h5>
<h5>Season 1 Zip 720p [3GB]</h5>
<h5><a href="https://moviesdrive.online/archives/s1-zip">Zip File</a></h5>
<h5>Season 2 1080p [1GB/E]</h5>
<h5><a href="https://moviesdrive.online/archives/s2">Single Episode Links</a></h5>
</body></html>
"""

SEASON_ONE_PAGE = """
<div class="entry">
<h5><span>Ep1</span></h5>
<h5><a href="https://hubcloud.one/drive/s1e1a">HubCloud [1.2GB]</a></h5>
<h5><a href="https://hubcloud.one/drive/s1e1b">HubCloud Mirror</a></h5>
<h5><a href="https://gdflix.dad/file/s1e1">GDFlix</a></h5>
<h5><span>Ep2</span></h5>
<h5><a href="https://hubcloud.one/drive/s1e2">HubCloud</a></h5>
<hr>
</div>
"""

SEASON_TWO_PAGE = """
<div class="entry">
<p><a href="https://hubcloud.one/drive/s2e1">HubCloud Episode 1</a></p>
<p><a href="https://hubcloud.one/drive/s2e2">HubCloud Episode 2</a></p>
<p><a href="https://example.com/telegram">Join us</a></p>
</div>
"""


def make_provider(fetcher, max_search_pages=3):
    orchestrator = ResolutionOrchestrator(ExtractorRegistry().freeze(), fetcher)
    return MoviesDriveProvider(
        fetcher, orchestrator, main_url=MAIN_URL, max_search_pages=max_search_pages
    )


def test_main_page_listing():
    fetcher = FakeFetcher({f"{MAIN_URL}/category/netflix/page/2": LISTING_PAGE})
    provider = make_provider(fetcher)

    home = asyncio.run(provider.get_main_page(2, "/category/netflix/page/"))

    assert home.name == "Netflix"
    assert [item.title for item in home.items] == [
        "Big Buck Bunny (2023) 1080p",
        "Sintel Season 1 Complete 720p",
    ]
    assert home.items[1].url == f"{MAIN_URL}/sintel-season-1/"
    assert home.items[1].poster_url == f"{MAIN_URL}/posters/sintel.jpg"
    assert all(item.kind == ContentKind.MOVIE for item in home.items)


def test_main_page_fetch_failure_propagates():
    provider = make_provider(FakeFetcher())

    with pytest.raises(FetchError):
        asyncio.run(provider.get_main_page())


def test_search_stops_at_page_limit():
    fetcher = FakeFetcher(
        {
            f"{MAIN_URL}/page/{page}/?s=big+buck": LISTING_PAGE
            for page in range(1, 6)
        }
    )
    provider = make_provider(fetcher, max_search_pages=3)

    results = asyncio.run(provider.search("big buck"))

    assert len(results) == 6
    assert fetcher.requests == [
        f"{MAIN_URL}/page/1/?s=big+buck",
        f"{MAIN_URL}/page/2/?s=big+buck",
        f"{MAIN_URL}/page/3/?s=big+buck",
    ]


def test_search_stops_on_empty_page():
    fetcher = FakeFetcher(
        {
            f"{MAIN_URL}/page/1/?s=sintel": LISTING_PAGE,
            f"{MAIN_URL}/page/2/?s=sintel": EMPTY_LISTING,
            f"{MAIN_URL}/page/3/?s=sintel": LISTING_PAGE,
        }
    )
    provider = make_provider(fetcher)

    results = asyncio.run(provider.search("sintel"))

    assert len(results) == 2
    assert f"{MAIN_URL}/page/3/?s=sintel" not in fetcher.requests


def test_search_stops_on_fetch_error():
    fetcher = FakeFetcher({f"{MAIN_URL}/page/1/?s=sintel": LISTING_PAGE})
    provider = make_provider(fetcher)

    results = asyncio.run(provider.search("sintel"))

    assert len(results) == 2
    assert len(fetcher.requests) == 2


def test_load_movie_returns_structured_page():
    url = f"{MAIN_URL}/big-buck-bunny-2023/"
    provider = make_provider(FakeFetcher({url: MOVIE_PAGE}))

    result = asyncio.run(provider.load(url))

    assert result.item.kind == ContentKind.MOVIE
    assert result.item.title == "Big Buck Bunny (2023) 1080p"
    assert result.item.poster_url == "https://img.example/bbb.jpg"
    assert result.payload == StructuredPage(url=url)
    assert result.seasons == []
    assert result.episodes == []


def test_load_page_without_title_is_a_movie():
    url = f"{MAIN_URL}/untitled/"
    provider = make_provider(FakeFetcher({url: "<html><body></body></html>"}))

    result = asyncio.run(provider.load(url))

    assert result.item.title == ""
    assert result.item.kind == ContentKind.MOVIE


def test_load_series_numbers_seasons_and_skips_zip():
    url = f"{MAIN_URL}/big-buck-bunny-season-1/"
    fetcher = FakeFetcher(
        {
            url: SERIES_PAGE,
            f"{MAIN_URL}/archives/s1": SEASON_ONE_PAGE,
            f"{MAIN_URL}/archives/s2": SEASON_TWO_PAGE,
        }
    )
    provider = make_provider(fetcher)

    result = asyncio.run(provider.load(url))

    assert result.item.kind == ContentKind.TV_SERIES
    assert result.payload is None
    assert [season.season for season in result.seasons] == [1, 2]
    assert result.seasons[0].name == "Season 1 720p [400MB/E]"
    assert result.seasons[0].quality == "720p"
    assert result.seasons[1].quality == "1080p"
    assert f"{MAIN_URL}/archives/s1-zip" not in fetcher.requests
    assert fetcher.referers[f"{MAIN_URL}/archives/s1"] == url


def test_sibling_walk_collects_consecutive_mirror_buttons():
    url = f"{MAIN_URL}/big-buck-bunny-season-1/"
    fetcher = FakeFetcher(
        {
            url: SERIES_PAGE,
            f"{MAIN_URL}/archives/s1": SEASON_ONE_PAGE,
            f"{MAIN_URL}/archives/s2": SEASON_TWO_PAGE,
        }
    )
    provider = make_provider(fetcher)

    episodes = [e for e in asyncio.run(provider.load(url)).episodes if e.season == 1]

    assert [(e.episode, e.name) for e in episodes] == [(1, "Ep1"), (2, "Ep2")]
    first = episodes[0].payload
    assert isinstance(first, RawFragment)
    assert "s1e1a" in first.text
    assert "s1e1b" in first.text
    assert "gdflix" not in first.text
    assert "s1e2" in episodes[1].payload.text


def test_anchor_fallback_when_season_page_has_no_markers():
    url = f"{MAIN_URL}/big-buck-bunny-season-1/"
    fetcher = FakeFetcher(
        {
            url: SERIES_PAGE,
            f"{MAIN_URL}/archives/s1": SEASON_ONE_PAGE,
            f"{MAIN_URL}/archives/s2": SEASON_TWO_PAGE,
        }
    )
    provider = make_provider(fetcher)

    episodes = [e for e in asyncio.run(provider.load(url)).episodes if e.season == 2]

    assert [e.episode for e in episodes] == [1, 2]
    assert all(e.name == "Season 2 1080p [1GB/E]" for e in episodes)
    assert "s2e1" in episodes[0].payload.text
    assert "s2e2" in episodes[1].payload.text


def test_failed_season_page_keeps_numbering():
    url = f"{MAIN_URL}/big-buck-bunny-season-1/"
    fetcher = FakeFetcher(
        {url: SERIES_PAGE, f"{MAIN_URL}/archives/s2": SEASON_TWO_PAGE}
    )
    provider = make_provider(fetcher)

    result = asyncio.run(provider.load(url))

    assert [season.season for season in result.seasons] == [1, 2]
    assert {e.season for e in result.episodes} == {2}


NESTED_SPAN_SEASON_PAGE = """
<div class="entry">
<h5><span style="color: #ff0000;"><span>Ep1</span></span></h5>
<h5><a href="https://hubcloud.one/drive/n1a">HubCloud [1.2GB]</a></h5>
<h5><a href="https://hubcloud.one/drive/n1b">HubCloud Mirror</a></h5>
<h5><span style="color: #ff0000;"><span>Ep2</span></span></h5>
<h5><a href="https://hubcloud.one/drive/n2">HubCloud</a></h5>
</div>
"""

GLUED_MARKER_SEASON_PAGE = """
<div class="entry">
<h5><span>S01EP01</span></h5>
<h5><a href="https://hubcloud.one/drive/g1a">HubCloud</a></h5>
<h5><a href="https://hubcloud.one/drive/g1b">HubCloud Mirror</a></h5>
<h5><span>S01EP02</span></h5>
<h5><a href="https://hubcloud.one/drive/g2">HubCloud</a></h5>
</div>
"""


def parse_season_page(html):
    provider = make_provider(FakeFetcher())
    document = Document(url=f"{MAIN_URL}/archives/s1", status=200, headers={}, text=html)
    return provider.parse_episodes(document, 1, "S1")


def test_nested_marker_spans_share_one_episode():
    episodes = parse_season_page(NESTED_SPAN_SEASON_PAGE)

    assert [(e.episode, e.name) for e in episodes] == [(1, "Ep1"), (2, "Ep2")]
    assert "n1a" in episodes[0].payload.text
    assert "n1b" in episodes[0].payload.text
    assert "n2" not in episodes[0].payload.text
    assert "n2" in episodes[1].payload.text


def test_glued_episode_markers_keep_sibling_grouping():
    episodes = parse_season_page(GLUED_MARKER_SEASON_PAGE)

    assert [e.name for e in episodes] == ["S01EP01", "S01EP02"]
    assert "g1a" in episodes[0].payload.text
    assert "g1b" in episodes[0].payload.text
    assert "g2" in episodes[1].payload.text


def test_search_keeps_first_two_pages_when_third_is_empty():
    fetcher = FakeFetcher(
        {
            f"{MAIN_URL}/page/1/?s=bunny": LISTING_PAGE,
            f"{MAIN_URL}/page/2/?s=bunny": LISTING_PAGE,
            f"{MAIN_URL}/page/3/?s=bunny": EMPTY_LISTING,
        }
    )
    provider = make_provider(fetcher, max_search_pages=3)

    results = asyncio.run(provider.search("bunny"))

    assert len(results) == 4
    assert len(fetcher.requests) == 3
