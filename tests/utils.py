OFFSETS = [-30, -7, -3, -1, 1]


def naive(dt):
    """SQLite hands DateTime(timezone=True) back without tzinfo."""
    return dt.replace(tzinfo=None) if dt is not None else None
