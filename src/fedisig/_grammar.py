"""Tokenizer for the ``key="value",key=123`` signature parameter list."""

from __future__ import annotations

import re
from dataclasses import dataclass

from fedisig._errors import InvalidHeaderError

AUTHORIZATION_SCHEME = "Signature"

_QUOTED_PARAM_RE = re.compile(r'([A-Za-z]+)="([^"]*)"')
_NUMERIC_PARAM_RE = re.compile(r"([A-Za-z]+)=([0-9]+)")
_SIGNED_NUMERIC_PARAM_RE = re.compile(r"([A-Za-z]+)=([+-]?[0-9]+)")


@dataclass(frozen=True)
class SignatureParameter:
    """One raw ``key=value`` entry, as written in the header."""

    key: str
    value: str


def parse_signature_header_value(value: str, *, allow_signed_numbers: bool = False) -> list[SignatureParameter]:
    """Parse the bare form used by the ``Signature`` header.

    The whole value must be consumed: parameters are separated by a single comma
    with no surrounding whitespace, and anything left over is an error.

    Raises ``InvalidHeaderError`` on malformed input.
    """
    numeric_re = _SIGNED_NUMERIC_PARAM_RE if allow_signed_numbers else _NUMERIC_PARAM_RE
    params: list[SignatureParameter] = []
    pos = 0
    while True:
        match = _QUOTED_PARAM_RE.match(value, pos) or numeric_re.match(value, pos)
        if match is None:
            raise InvalidHeaderError(f"Malformed signature parameter at offset {pos}")
        params.append(SignatureParameter(key=match.group(1), value=match.group(2)))
        pos = match.end()
        if pos == len(value):
            return params
        if value[pos] != ",":
            raise InvalidHeaderError(f"Unexpected {value[pos]!r} at offset {pos}, expected ','")
        pos += 1


def parse_authorization_header_value(value: str, *, allow_signed_numbers: bool = False) -> list[SignatureParameter]:
    """Parse the prefixed form used by ``Authorization: Signature ...``."""
    prefix = f"{AUTHORIZATION_SCHEME} "
    if not value.startswith(prefix):
        raise InvalidHeaderError(f"Authorization header must start with {prefix!r}")
    return parse_signature_header_value(value[len(prefix):], allow_signed_numbers=allow_signed_numbers)
