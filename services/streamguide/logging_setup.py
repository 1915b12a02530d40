import logging
import os
import sys
from contextvars import ContextVar
from pythonjsonlogger import jsonlogger


LOG_FORMAT = os.getenv("LOG_FORMAT", "json").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


_PAGE_URL: ContextVar[str | None] = ContextVar("page_url", default=None)


class PageUrlFilter(logging.Filter):
    """Stamps records with the page being processed. Each asyncio task sees its own value."""

    def set(self, page_url: str | None):
        _PAGE_URL.set(page_url)

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore
        record.page_url = _PAGE_URL.get()
        return True


page_url_filter = PageUrlFilter()


def configure_logging():
    """Call once at process start; library code only logs through module loggers."""
    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(page_url_filter)
    if LOG_FORMAT == "json":
        fmt = jsonlogger.JsonFormatter("%(levelname)s %(message)s %(asctime)s %(name)s %(page_url)s")
        handler.setFormatter(fmt)
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] [page=%(page_url)s] %(message)s")
        handler.setFormatter(fmt)

    root.addHandler(handler)


def set_page_url(value: str | None):
    page_url_filter.set(value)
