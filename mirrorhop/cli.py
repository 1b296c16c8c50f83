import argparse
import asyncio
import sys
from contextlib import asynccontextmanager
from dataclasses import asdict
from pathlib import Path

import orjson

from mirrorhop.core.exceptions import MirrorHopError
from mirrorhop.core.logger import log_startup_info, logger
from mirrorhop.core.models import settings
from mirrorhop.extractors.models import Sinks
from mirrorhop.extractors.registry import build_registry
from mirrorhop.providers.moviesdrive import MoviesDriveProvider
from mirrorhop.services.orchestration import ResolutionOrchestrator
from mirrorhop.utils.http_client import http_client_manager


def emit(data):
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    sys.stdout.write(orjson.dumps(data).decode("utf-8") + "\n")
    sys.stdout.flush()


def printing_sinks() -> Sinks:
    return Sinks(
        on_media_link=lambda link: emit({"type": "link", **link.model_dump(mode="json")}),
        on_subtitle=lambda subtitle: emit(
            {"type": "subtitle", **subtitle.model_dump(mode="json")}
        ),
    )


@asynccontextmanager
async def open_provider():
    fetcher = await http_client_manager.get_fetcher()
    try:
        registry = build_registry(fetcher)
        orchestrator = ResolutionOrchestrator(
            registry, fetcher, button_selector=MoviesDriveProvider.season_selector
        )
        yield MoviesDriveProvider(fetcher, orchestrator)
    finally:
        await http_client_manager.close()


async def home_command(page: int, category: str):
    async with open_provider() as provider:
        emit(await provider.get_main_page(page, category))


async def search_command(query: str):
    async with open_provider() as provider:
        for result in await provider.search(query):
            emit(result)


async def load_command(url: str):
    async with open_provider() as provider:
        emit(await provider.load(url))


async def links_command(payload: str):
    async with open_provider() as provider:
        summary = await provider.load_links(payload, printing_sinks())
        emit({"type": "summary", **asdict(summary)})


async def extract_command(url: str):
    async with open_provider() as provider:
        registry = provider.orchestrator.registry
        descriptor = registry.require(url)
        logger.log("EXTRACTOR", f"{url} -> {descriptor.name}")
        outcome = await registry.resolve(url, printing_sinks())
        emit({"type": "outcome", **asdict(outcome)})


def read_payload(value: str) -> str:
    if value == "-":
        return sys.stdin.read()
    if value.startswith("@"):
        return Path(value[1:]).read_text(encoding="utf-8")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse download listing sites and resolve mirror links into playable media URLs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mirrorhop search "big buck bunny"
  mirrorhop load https://moviesdrive.online/big-buck-bunny-2023/
  mirrorhop links https://moviesdrive.online/big-buck-bunny-2023/
  mirrorhop links @episode.html
  mirrorhop extract https://hubcloud.one/drive/abc123
        """,
    )
    parser.add_argument("--verbose", action="store_true", help="Log effective settings")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    home_parser = subparsers.add_parser("home", help="List a browse category page")
    home_parser.add_argument(
        "--category",
        default="/page/",
        choices=list(MoviesDriveProvider.main_page),
        help="Category path (default: home)",
    )
    home_parser.add_argument("--page", type=int, default=1, help="Page number")

    search_parser = subparsers.add_parser("search", help="Search titles")
    search_parser.add_argument("query", help="Search query")

    load_parser = subparsers.add_parser("load", help="Load a title's metadata and episodes")
    load_parser.add_argument("url", help="Detail page URL")

    links_parser = subparsers.add_parser(
        "links", help="Resolve a movie page or episode payload into media links"
    )
    links_parser.add_argument(
        "payload", help="Detail page URL, raw fragment, @file or - for stdin"
    )

    extract_parser = subparsers.add_parser(
        "extract", help="Resolve a single mirror URL through the extractor registry"
    )
    extract_parser.add_argument("url", help="Mirror URL")

    return parser


async def run(args: argparse.Namespace):
    if args.command == "home":
        await home_command(args.page, args.category)
    elif args.command == "search":
        await search_command(args.query)
    elif args.command == "load":
        await load_command(args.url)
    elif args.command == "links":
        await links_command(read_payload(args.payload))
    elif args.command == "extract":
        await extract_command(args.url)


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        log_startup_info(settings)

    try:
        asyncio.run(run(args))
    except MirrorHopError as e:
        logger.error(e.message)
        return 1
    except KeyboardInterrupt:
        logger.log("MIRRORHOP", "Interrupted by user")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
