import sys

from loguru import logger

from mirrorhop.core.log_levels import CUSTOM_LOG_LEVELS, STANDARD_LOG_LEVELS
from mirrorhop.core.models import settings

LOG_FORMAT = (
    "<white>{time:YYYY-MM-DD}</white> <magenta>{time:HH:mm:ss}</magenta> | "
    "<level>{level.icon}</level> <level>{level}</level> | "
    "<cyan>{module}</cyan>.<cyan>{function}</cyan> - <level>{message}</level>"
)


def register_levels():
    for level_name, level_config in CUSTOM_LOG_LEVELS.items():
        logger.level(
            level_name,
            no=level_config["no"],
            icon=level_config["icon"],
            color=level_config["loguru_color"],
        )

    for level_name, level_config in STANDARD_LOG_LEVELS.items():
        logger.level(
            level_name, icon=level_config["icon"], color=level_config["loguru_color"]
        )


def setupLogger(level: str, sink=None):
    # records reach the sink before logger.log returns
    logger.configure(
        handlers=[
            {
                "sink": sink or sys.stderr,
                "level": level,
                "format": LOG_FORMAT,
                "backtrace": False,
                "diagnose": False,
            }
        ]
    )


register_levels()
setupLogger(settings.LOG_LEVEL)


def log_extractor_error(extractor_name: str, url: str, error: Exception):
    logger.warning(
        f"Exception while resolving {url} with {extractor_name}, the mirror layout may have changed: {error}"
    )


def log_startup_info(settings):
    logger.log("MIRRORHOP", f"MoviesDrive URL: {settings.MOVIESDRIVE_URL}")
    logger.log("MIRRORHOP", f"HTTP Proxy: {settings.HTTP_PROXY_URL}")
    logger.log(
        "MIRRORHOP",
        f"HTTP Client: timeout={settings.HTTP_CLIENT_TIMEOUT_TOTAL}s - limit={settings.HTTP_CLIENT_LIMIT} - limit_per_host={settings.HTTP_CLIENT_LIMIT_PER_HOST}",
    )
    logger.log("MIRRORHOP", f"Search Max Pages: {settings.SEARCH_MAX_PAGES}")
    logger.log(
        "MIRRORHOP",
        f"Extractor Max Hops: {settings.EXTRACTOR_MAX_HOPS} - Resolve Timeout: {settings.RESOLVE_TIMEOUT}s",
    )
