import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from app.core.config import Settings

# third-party loggers and the level they are pinned to (None = follow the app level)
_LIBRARY_LEVELS = {
    "uvicorn.access": None,
    "uvicorn.error": None,
    "sqlalchemy.engine": logging.WARNING,
    "passlib": logging.ERROR,
}


def build_formatter(settings: Settings) -> JsonFormatter:
    return JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"levelname": "level", "name": "logger", "asctime": "ts"},
        static_fields={"service": settings.app_name, "env": settings.environment},
    )


def configure_logging(settings: Settings) -> None:
    """
    One JSON line per record on stdout. Safe to call again (tests, reloads):
    existing root handlers are replaced.
    """
    level = getattr(logging, settings.log_level, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(settings))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name, pinned in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(pinned if pinned is not None else level)
