import re

from RTN import parse

QUALITY_PATTERN = re.compile(r"(?i)\b(480p|720p|1080p|2160p)\b")
SIZE_PATTERN = re.compile(r"(?i)([\d.,]+)\s*(KB|MB|GB|TB)")

UNKNOWN_QUALITY = "unknown"


def infer_quality(*texts: str) -> str:
    """Best-effort resolution tag from the first text that carries one."""
    for text in texts:
        if not text:
            continue
        match = QUALITY_PATTERN.search(text)
        if match:
            return match.group(1).lower()

    for text in texts:
        if not text or not text.strip():
            continue
        resolution = parse(text).resolution
        if resolution and resolution != UNKNOWN_QUALITY:
            return resolution

    return UNKNOWN_QUALITY


def normalize_size(text: str) -> str:
    if not text:
        return ""
    match = SIZE_PATTERN.search(text)
    if not match:
        return ""
    return f"{match.group(1)} {match.group(2).upper()}"


def format_bytes(bytes_value):
    if bytes_value is None:
        return ""

    bytes_value = float(bytes_value)

    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if bytes_value < 1024.0:
            return f"{bytes_value:.1f} {unit}"
        bytes_value /= 1024.0
    return f"{bytes_value:.1f} PB"
