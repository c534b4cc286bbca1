import logging

from renewals.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process and the Celery worker."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL or "INFO").upper(),
        format=LOG_FORMAT,
    )
