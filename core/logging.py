"""Process-wide logging setup.

Every module logs through ``logging.getLogger(__name__)``; this module
attaches a single JSON stream handler to the root logger so records from
the app, Celery tasks and uvicorn end up in one structured stream.
"""

import logging

from pythonjsonlogger import jsonlogger

from core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    if any(getattr(h, "_storefront", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    handler._storefront = True
    root.addHandler(handler)
    root.setLevel(level or settings.LOG_LEVEL)
