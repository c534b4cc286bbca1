from renewals.tasks.celery_app import celery
from renewals.tasks import worker_jobs

@celery.task(name="renewals.tasks.jobs.send_due_reminders")
def send_due_reminders(dry_run: bool = False):
    return worker_jobs.send_due_reminders(dry_run=dry_run)
