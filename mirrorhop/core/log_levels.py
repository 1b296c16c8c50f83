STANDARD_LOG_LEVELS = {
    "DEBUG": {"color": "#DC5F00", "icon": "🕸️", "loguru_color": "<fg #DC5F00>"},
    "INFO": {"color": "#FC5F39", "icon": "📰", "loguru_color": "<fg #FC5F39>"},
    "WARNING": {"color": "#DC5F00", "icon": "⚠️", "loguru_color": "<fg #DC5F00>"},
    "ERROR": {"color": "#ff0000", "icon": "❌", "loguru_color": "<fg #ff0000>"},
    "CRITICAL": {"color": "#ff0000", "icon": "💀", "loguru_color": "<fg #ff0000>"},
}

CUSTOM_LOG_LEVELS = {
    "MIRRORHOP": {
        "color": "#7871d6",
        "icon": "🔗",
        "loguru_color": "<fg #7871d6>",
        "no": 50,
    },
    "PROVIDER": {
        "color": "#006989",
        "icon": "🎬",
        "loguru_color": "<fg #006989>",
        "no": 35,
    },
    "RESOLVER": {
        "color": "#d171d6",
        "icon": "🌠",
        "loguru_color": "<fg #d171d6>",
        "no": 32,
    },
    "EXTRACTOR": {
        "color": "#d6bb71",
        "icon": "👻",
        "loguru_color": "<fg #d6bb71>",
        "no": 25,
    },
}
