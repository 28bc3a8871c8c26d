"""
Logging setup shared by the API process and alembic.
Level comes from LOG_LEVEL; uvicorn loggers follow the same level so the
access log is not duplicated with a different format.
"""
import logging

from matatu.core.config_env import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | None = None) -> None:
    lvl = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    for uv_logger in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(uv_logger).setLevel(lvl)
