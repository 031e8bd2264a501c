"""Logging setup shared by the API and the CLI."""

import logging

from storefront.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None):
    """Configure the root logger once. Safe to call repeatedly."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    # uvicorn's access log duplicates request lines we don't need at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
