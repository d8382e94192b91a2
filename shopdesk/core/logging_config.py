"""
Logging setup for the API process

Modules log through logging.getLogger(__name__); this only decides format
and level once, at start-up.
"""
import logging

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)

    # psycopg2/httpx chatter is only useful when debugging connections
    if level_name != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("hpack").setLevel(logging.WARNING)
