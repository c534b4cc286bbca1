from datetime import date, datetime, timezone

from renewals.models.customer import Customer
from renewals.models.reminder import Reminder
from renewals.models.send_log import SendLog
from renewals.services import customer_service
from renewals.services.delivery_service import render_reminder, run_once
from renewals.services.reminder_service import regenerate_reminders
from tests.utils import naive

NOW = datetime(2025, 1, 13, 9, 0, tzinfo=timezone.utc)


class FakeSender:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []

    def __call__(self, to, cc, subject, body):
        if to in self.fail_for:
            raise RuntimeError(f"rejected recipient {to}")
        self.sent.append((to, cc, subject, body))
        return f"msg-{len(self.sent)}"


def _schedule(db, customer, offsets):
    regenerate_reminders(db, customer.id, customer.expires_on, offsets)
    db.commit()


def _snapshot(db):
    reminders = [
        (r.id, r.customer_id, naive(r.scheduled_at), r.status, naive(r.sent_at), r.provider_message_id)
        for r in db.query(Reminder).order_by(Reminder.id)
    ]
    customers = [
        (c.id, c.primary_email, c.expires_on, c.paused, c.last_reminder_status, naive(c.last_reminder_sent_at),
         naive(c.updated_at))
        for c in db.query(Customer).order_by(Customer.id)
    ]
    return reminders, customers


def test_render_uses_customer_fields():
    c = Customer(company_name="Acme", contact_name="Jane", plan_name="Pro",
                 primary_email="jane@acme.io", expires_on=date(2025, 1, 20),
                 renew_link="https://acme.io/renew")
    subject, body = render_reminder(c, date(2025, 1, 13))

    assert subject == "Renewal Reminder: Pro expires in 7 days"
    assert "Hello Jane," in body
    assert "<strong>Acme</strong>" in body
    assert "January 20, 2025" in body
    assert 'href="https://acme.io/renew"' in body


def test_render_placeholders_and_past_expiry():
    c = Customer(primary_email="x@acme.io", expires_on=date(2025, 1, 12))
    subject, body = render_reminder(c, date(2025, 1, 13))

    assert subject == "Renewal Reminder: your plan expired 1 day ago"
    assert "Hello Customer," in body
    assert "your account" in body
    assert "Renew Now" not in body


def test_render_on_expiry_day():
    c = Customer(primary_email="x@acme.io", plan_name="Basic", expires_on=date(2025, 1, 13))
    subject, _ = render_reminder(c, date(2025, 1, 13))
    assert subject == "Renewal Reminder: Basic expires today"


def test_successful_send_marks_sent_and_updates_customer(db, make_customer):
    c = make_customer(email="jane@acme.io", expires_on=date(2025, 1, 20), cc_emails=["boss@acme.io"])
    _schedule(db, c, [-7])
    sender = FakeSender()

    result = run_once(db, now=NOW, send=sender)

    assert result == {"sent": 1, "failed": 0, "skipped": 0, "total": 1, "dryRun": False}
    assert sender.sent[0][0] == "jane@acme.io"
    assert sender.sent[0][1] == ["boss@acme.io"]
    r = db.query(Reminder).one()
    assert r.status == "sent"
    assert r.provider_message_id == "msg-1"
    assert naive(r.sent_at) == naive(NOW)
    db.refresh(c)
    assert c.last_reminder_status == "sent"
    assert naive(c.last_reminder_sent_at) == naive(NOW)
    log = db.query(SendLog).one()
    assert (log.status, log.reminder_id, log.customer_id, log.days_until_expiry) == ("sent", r.id, c.id, 7)


def test_failure_is_isolated_per_reminder(db, make_customer):
    bad = make_customer(email="bad@acme.io", expires_on=date(2025, 1, 15))
    good = make_customer(email="good@acme.io", expires_on=date(2025, 1, 15))
    _schedule(db, bad, [-3])
    _schedule(db, good, [-3])
    sender = FakeSender(fail_for={"bad@acme.io"})

    result = run_once(db, now=NOW, send=sender)

    assert result["sent"] == 1
    assert result["failed"] == 1
    by_customer = {r.customer_id: r for r in db.query(Reminder)}
    assert by_customer[bad.id].status == "failed"
    assert naive(by_customer[bad.id].sent_at) == naive(NOW)
    assert by_customer[bad.id].provider_message_id is None
    assert by_customer[good.id].status == "sent"

    failed_log = db.query(SendLog).filter(SendLog.status == "failed").one()
    assert failed_log.customer_id == bad.id
    assert "rejected recipient" in failed_log.error
    db.refresh(bad)
    assert bad.last_reminder_status is None
    assert bad.last_reminder_sent_at is None


def test_failed_reminders_are_not_retried(db, make_customer):
    c = make_customer(email="bad@acme.io", expires_on=date(2025, 1, 15))
    _schedule(db, c, [-3])
    run_once(db, now=NOW, send=FakeSender(fail_for={"bad@acme.io"}))

    sender = FakeSender()
    result = run_once(db, now=NOW, send=sender)

    assert result["total"] == 0
    assert sender.sent == []


def test_dry_run_leaves_state_untouched(db, make_customer):
    c = make_customer(email="jane@acme.io", expires_on=date(2025, 1, 15))
    _schedule(db, c, [-7, -3, 1])
    before = _snapshot(db)
    sender = FakeSender()

    result = run_once(db, now=NOW, dry_run=True, send=sender)

    assert result == {"sent": 2, "failed": 0, "skipped": 0, "total": 2, "dryRun": True}
    assert sender.sent == []
    db.expire_all()
    assert _snapshot(db) == before
    logs = db.query(SendLog).all()
    assert [log.status for log in logs] == ["dry-run", "dry-run"]


def test_paused_customer_is_not_contacted(db, make_customer):
    c = make_customer(email="jane@acme.io", expires_on=date(2025, 1, 15), paused=True)
    _schedule(db, c, [-3])
    sender = FakeSender()

    result = run_once(db, now=NOW, send=sender)

    assert result["total"] == 0
    assert db.query(Reminder).one().status == "pending"


def test_reminder_claimed_by_another_run_is_skipped(db, make_customer, session_factory):
    c = make_customer(email="jane@acme.io", expires_on=date(2025, 1, 15))
    _schedule(db, c, [-3])
    other = session_factory()

    def racing_sender(to, cc, subject, body):
        # a concurrent run delivers the same reminder first
        r = other.query(Reminder).one()
        r.status = "sent"
        r.provider_message_id = "other-run"
        other.commit()
        return "this-run"

    result = run_once(db, now=NOW, send=racing_sender)
    other.close()

    assert result["skipped"] == 1
    assert result["sent"] == 0
    db.expire_all()
    assert db.query(Reminder).one().provider_message_id == "other-run"
    assert db.query(SendLog).count() == 0


def test_renewal_and_delete_during_run_skip_only_those_reminders(db, make_customer, session_factory):
    a = make_customer(email="a@acme.io", expires_on=date(2025, 1, 15))
    b = make_customer(email="b@acme.io", expires_on=date(2025, 1, 15))
    c = make_customer(email="c@acme.io", expires_on=date(2025, 1, 15))
    a_id, b_id, c_id = a.id, b.id, c.id
    for customer in (a, b, c):
        _schedule(db, customer, [-3])
    other = session_factory()
    sent = []

    def sender(to, cc, subject, body):
        if not sent:
            # an admin renews b and deletes c while a is being delivered
            customer_service.renew_customer(other, b_id, [-3], term="+12m")
            customer_service.delete_customer(other, c_id)
        sent.append(to)
        return f"msg-{len(sent)}"

    result = run_once(db, now=NOW, send=sender)
    other.close()

    assert result == {"sent": 1, "failed": 0, "skipped": 2, "total": 3, "dryRun": False}
    assert sent == ["a@acme.io"]
    db.expire_all()
    b_reminder = db.query(Reminder).filter(Reminder.customer_id == b_id).one()
    assert b_reminder.status == "pending"
    assert naive(b_reminder.scheduled_at) == datetime(2026, 1, 12)
    assert db.query(Reminder).filter(Reminder.customer_id == c_id).count() == 0
    assert [log.customer_id for log in db.query(SendLog).filter(SendLog.status == "sent")] == [a_id]


def test_replacement_row_reusing_a_claimed_id_is_not_marked_sent(db, make_customer, session_factory):
    c = make_customer(email="jane@acme.io", expires_on=date(2025, 1, 15))
    customer_id = c.id
    _schedule(db, c, [-3])
    reminder_id = db.query(Reminder).one().id
    other = session_factory()

    def sender(to, cc, subject, body):
        # the pending row is purged and a future reminder lands on the same id
        other.query(Reminder).filter(Reminder.id == reminder_id).delete()
        other.add(Reminder(id=reminder_id, customer_id=customer_id, offset_days=-3,
                           scheduled_at=datetime(2026, 1, 12, tzinfo=timezone.utc), status="pending"))
        other.commit()
        return "msg-1"

    result = run_once(db, now=NOW, send=sender)
    other.close()

    assert result["skipped"] == 1
    db.expire_all()
    replacement = db.get(Reminder, reminder_id)
    assert replacement.status == "pending"
    assert replacement.provider_message_id is None
