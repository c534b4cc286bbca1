import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

import requests

from renewals.core.config import settings

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailTransportError(RuntimeError):
    pass


def send_email(to_email: str, cc: list[str] | None, subject: str, body: str) -> str:
    """Send an HTML email via SendGrid if configured, otherwise SMTP (MailHog recommended for local).

    Returns the provider message id. Any delivery problem raises.
    """
    cc = [c for c in (cc or []) if c and c.lower() != to_email.lower()]
    if settings.SENDGRID_API_KEY:
        return _send_via_sendgrid(to_email, cc, subject, body)
    return _send_via_smtp(to_email, cc, subject, body)


def _from_address() -> str:
    return formataddr((settings.MAIL_FROM_NAME, settings.SENDGRID_FROM_EMAIL or settings.SMTP_FROM))


def _send_via_smtp(to_email: str, cc: list[str], subject: str, body: str) -> str:
    msg = EmailMessage()
    msg["From"] = _from_address()
    msg["To"] = to_email
    if cc:
        msg["Cc"] = ", ".join(cc)
    msg["Subject"] = subject
    message_id = make_msgid(domain=(settings.SMTP_FROM.split("@", 1) + ["localhost"])[1])
    msg["Message-ID"] = message_id
    msg.set_content("This reminder requires an HTML-capable mail client.")
    msg.add_alternative(body, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            if settings.SMTP_USERNAME:
                smtp.starttls()
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise EmailTransportError(f"SMTP error: {e}") from e
    return message_id


def _send_via_sendgrid(to_email: str, cc: list[str], subject: str, body: str) -> str:
    from_email = settings.SENDGRID_FROM_EMAIL or settings.SMTP_FROM
    personalization = {"to": [{"email": to_email}]}
    if cc:
        personalization["cc"] = [{"email": c} for c in cc]
    payload = {
        "personalizations": [personalization],
        "from": {"email": from_email, "name": settings.MAIL_FROM_NAME},
        "subject": subject,
        "content": [{"type": "text/html", "value": body}],
    }

    try:
        r = requests.post(
            SENDGRID_URL,
            json=payload,
            headers={"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"},
            timeout=20,
        )
    except requests.RequestException as e:
        raise EmailTransportError(f"SendGrid request failed: {e}") from e
    if r.status_code >= 400:
        raise EmailTransportError(f"SendGrid error {r.status_code}: {r.text}")
    return r.headers.get("X-Message-Id") or ""
