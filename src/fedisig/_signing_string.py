"""Canonical signing string construction shared by the parser and the signer."""

from __future__ import annotations

from collections.abc import Sequence

from fedisig._errors import InvalidHeaderError, MissingHeaderError, StrictParsingError
from fedisig._request import RequestView

REQUEST_LINE = "request-line"
REQUEST_TARGET = "(request-target)"
KEY_ID = "(keyid)"
ALGORITHM = "(algorithm)"
OPAQUE = "(opaque)"
CREATED = "(created)"
EXPIRES = "(expires)"


def build_signing_string(
    headers: Sequence[str],
    *,
    request: RequestView,
    key_id: str,
    algorithm: str,
    opaque: str | None = None,
    created: str | None = None,
    expires: str | None = None,
    strict: bool = False,
) -> str:
    """Build the newline-joined string that is signed or verified.

    ``headers`` must already be lower-cased; each entry yields one line, in order.
    Pseudo-headers are derived from the request and the signature parameters,
    anything else is looked up on the request.

    Raises ``StrictParsingError`` for ``request-line`` in strict mode,
    ``MissingHeaderError`` for absent headers or a missing opaque value,
    ``InvalidHeaderError`` for repeated headers, and ``ValueError`` when
    ``(created)`` or ``(expires)`` is requested without a value.
    """
    lines: list[str] = []
    for name in headers:
        if name == REQUEST_LINE:
            if strict:
                raise StrictParsingError("request-line is not a valid header with strict parsing enabled.")
            lines.append(f"{request.method} {request.target} HTTP/{request.http_version}")
        elif name == REQUEST_TARGET:
            lines.append(f"{REQUEST_TARGET}: {request.method.lower()} {request.target}")
        elif name == KEY_ID:
            lines.append(f"{KEY_ID}: {key_id}")
        elif name == ALGORITHM:
            lines.append(f"{ALGORITHM}: {algorithm}")
        elif name == OPAQUE:
            if opaque is None:
                raise MissingHeaderError("(opaque) was signed but no opaque parameter was given")
            lines.append(f"{OPAQUE}: {opaque}")
        elif name == CREATED:
            if not created:
                raise ValueError("(created) requested without a created value")
            lines.append(f"{CREATED}: {created}")
        elif name == EXPIRES:
            if not expires:
                raise ValueError("(expires) requested without an expires value")
            lines.append(f"{EXPIRES}: {expires}")
        else:
            values = request.header_values(name)
            if not values:
                raise MissingHeaderError(f"{name} was not in the request")
            if len(values) > 1:
                raise InvalidHeaderError(f"{name} appears more than once in the request")
            lines.append(f"{name}: {values[0]}")
    return "\n".join(lines)
