"""Clock-skew and expiry checks for parsed signatures."""

from __future__ import annotations

import math
from datetime import timezone
from email.utils import parsedate_to_datetime

from fedisig._errors import ExpiredRequestError, InvalidHeaderError

DEFAULT_CLOCK_SKEW = 300


def parse_http_date(value: str) -> float:
    """Return the POSIX timestamp of an RFC 1123 ``Date`` header value.

    Raises ``InvalidHeaderError`` if the value is not an HTTP date.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        raise InvalidHeaderError(f"Date header {value!r} is not a valid HTTP date")  # noqa: B904
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def check_freshness(
    *,
    created: int | None,
    expires: int | None,
    date: str | None,
    clock_skew: float = DEFAULT_CLOCK_SKEW,
    now: float,
) -> None:
    """Reject a signature whose timestamps fall outside the allowed clock skew.

    ``now`` is the caller's single clock snapshot for the whole request.
    Raises ``ExpiredRequestError`` on the first failing check.
    """
    now_seconds = math.floor(now)

    if created is not None:
        skew = created - now_seconds
        if skew > clock_skew:
            raise ExpiredRequestError(
                f"Created lies in the future (with skew {skew}s greater than allowed {clock_skew}s)"
            )

    if expires is not None:
        expired_since = now_seconds - expires
        if expired_since > clock_skew:
            raise ExpiredRequestError(
                f"Request expired with skew {expired_since}s greater than allowed {clock_skew}s"
            )

    if date is not None:
        skew_ms = abs(now - parse_http_date(date)) * 1000
        if skew_ms > clock_skew * 1000:
            raise ExpiredRequestError(f"clock skew of {skew_ms / 1000}s was greater than {clock_skew}s")
