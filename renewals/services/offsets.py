"""
Reminder offset policy.

Offsets are signed day counts relative to a customer's expires_on:
negative = before expiry, positive = after. Configured as a comma-separated
string (REMINDER_OFFSETS). Malformed tokens are dropped; only an unset or
blank value falls back to the defaults.
"""
from renewals.core.config import settings

DEFAULT_OFFSETS = [-30, -7, -3, -1, 1]


def parse_offsets(raw: str | None) -> list[int]:
    if raw is None or not raw.strip():
        return DEFAULT_OFFSETS.copy()
    offsets = []
    for token in raw.split(","):
        try:
            offsets.append(int(token.strip()))
        except ValueError:
            continue
    return offsets


def get_offsets() -> list[int]:
    return parse_offsets(settings.REMINDER_OFFSETS)
