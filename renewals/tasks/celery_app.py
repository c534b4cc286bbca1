from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging
from renewals.core.config import settings
from renewals.core.logging import setup_logging


def _redis_url_for_celery(url: str) -> str:
    """Celery requires ssl_cert_reqs for rediss:// (e.g. Upstash TLS)."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        new_query = urlencode(qs, doseq=True)
        return urlunparse(parsed._replace(query=new_query))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "renewals",
    broker=_redis_url,
    backend=_redis_url,
    include=["renewals.tasks.jobs"],
)

# Reminder timestamps are midnight UTC; keep beat on the same clock
celery.conf.timezone = "UTC"


@celery_setup_logging.connect
def on_setup_logging(**kwargs):
    setup_logging()


celery.conf.beat_schedule = {
    "send-due-reminders": {
        "task": "renewals.tasks.jobs.send_due_reminders",
        "schedule": settings.REMINDER_RUN_INTERVAL_SECONDS,
        "kwargs": {"dry_run": False},
    },
}
