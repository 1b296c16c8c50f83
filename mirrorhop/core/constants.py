import aiohttp

from mirrorhop.core.models import settings

HTTP_TIMEOUT = aiohttp.ClientTimeout(total=settings.HTTP_CLIENT_TIMEOUT_TOTAL)

DEFAULT_HEADERS = {
    "User-Agent": settings.USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

video_extensions: tuple = (
    ".mkv", ".mp4", ".avi", ".mov", ".flv", ".wmv", ".webm", ".mpg", ".mpeg",
    ".m4v", ".3gp", ".ts", ".m3u8",
)

subtitle_extensions: tuple = (".srt", ".vtt", ".ass", ".ssa", ".sub")

# Hosts whose URLs are served as the media file itself
direct_media_hosts: tuple = (
    "r2.dev",
    "r2.cloudflarestorage.com",
    "pixeldrain.com/api/file/",
    "pixeldrain.dev/api/file/",
    "workers.dev",
    "busycdn.xyz",
    "fsl-buckets",
    "fsl.gdboka",
    "storage.googleapis.com",
)

media_content_types: tuple = (
    "video/",
    "audio/",
    "application/octet-stream",
    "application/x-matroska",
    "application/vnd.apple.mpegurl",
    "application/x-mpegurl",
)
