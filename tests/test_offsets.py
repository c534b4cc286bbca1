from renewals.services.offsets import DEFAULT_OFFSETS, parse_offsets


def test_malformed_tokens_are_dropped_and_whitespace_trimmed():
    assert parse_offsets(" -30, -7,bad,-1 ") == [-30, -7, -1]


def test_missing_or_blank_value_uses_default():
    assert parse_offsets(None) == [-30, -7, -3, -1, 1]
    assert parse_offsets("   ") == DEFAULT_OFFSETS


def test_default_is_not_shared_between_calls():
    offsets = parse_offsets("")
    offsets.append(99)
    assert parse_offsets("") == [-30, -7, -3, -1, 1]


def test_order_and_positive_offsets_are_kept():
    assert parse_offsets("1,+3,-2, 14") == [1, 3, -2, 14]


def test_all_tokens_malformed_schedules_nothing():
    assert parse_offsets("x,,y") == []
