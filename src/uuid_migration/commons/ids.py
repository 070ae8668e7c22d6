"""
Deterministic integer <-> UUID encoding.

Legacy integer ids are zero-padded into the last segment of an otherwise zero
UUID. The SQL fragment returned by `to_uuid_sql` performs the same transform
inside the database, so values encoded in Python and values converted by
`ALTER ... USING` agree bit for bit.

Known limitations:
- ids with 13 or more decimal digits do not fit the last segment and are
  rejected rather than truncated.
- staged legacy columns are PostgreSQL `integer`, so a `bigserial` key above
  2147483647 fails when its old value is copied aside, even though it would
  still encode.
"""

from __future__ import annotations

from uuid import UUID

from uuid_migration.commons.exceptions import BaseUnProcessableException

MAX_LEGACY_ID = 10**12 - 1


class UnsupportedLegacyIdError(BaseUnProcessableException):
    pass

_PREFIX = "00000000-0000-0000-0000-"


def int_to_uuid(num: int) -> str:
    """Convert a legacy integer id to a UUID formatted string."""
    value = int(num)
    if value < 0 or value > MAX_LEGACY_ID:
        raise UnsupportedLegacyIdError(
            "Legacy id cannot be encoded as UUID",
            f"expected 0 <= id <= {MAX_LEGACY_ID}, got {value}",
        )
    return _PREFIX + "%012d" % value


def uuid_to_int(value: str | UUID) -> int:
    text = str(value).lower()
    if not text.startswith(_PREFIX) or not text[len(_PREFIX) :].isdigit():
        raise UnsupportedLegacyIdError(
            "UUID was not produced by the legacy id encoding", text
        )
    return int(text[len(_PREFIX) :])


def to_uuid_sql(expression: str) -> str:
    # Accepts integer, text or uuid values; hyphens are stripped before padding.
    return f"uuid(lpad(replace(text({expression}),'-',''), 32, '0'))"
