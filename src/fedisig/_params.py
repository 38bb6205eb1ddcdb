"""Validation and normalization of the parsed signature parameters."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from fedisig._algorithms import resolve_algorithm
from fedisig._errors import InvalidAlgorithmError, InvalidHeaderError, InvalidParamsError
from fedisig._grammar import SignatureParameter
from fedisig._request import RequestView
from fedisig._signing_string import CREATED, EXPIRES


class SpecVersion(str, Enum):
    """Parsing profile.

    ``legacy`` accepts ``request-line``, signed integers for ``created`` and
    ``expires``, and lets a repeated parameter override the earlier one.
    ``strict`` rejects all three.
    """

    LEGACY = "legacy"
    STRICT = "strict"


# lower-cased spelling -> canonical spelling
_KNOWN_PARAMS = {
    name.lower(): name for name in ("keyId", "algorithm", "signature", "headers", "created", "expires", "opaque")
}

_UNSIGNED_INT_RE = re.compile(r"[0-9]+")
_SIGNED_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class SignatureParams:
    """The validated parameter bag of a signature header."""

    key_id: str
    algorithm: str  # lower-cased token
    supplied_algorithm: str  # as written, for the (algorithm) pseudo-header
    signature: str  # base64 text, not decoded
    headers: tuple[str, ...]
    created: str | None = None
    expires: str | None = None
    opaque: str | None = None
    extensions: tuple[SignatureParameter, ...] = ()


def default_headers(request: RequestView) -> tuple[str, ...]:
    """Headers signed when the signature does not say: ``x-date`` if present, else ``date``."""
    return ("x-date",) if request.header_values("x-date") else ("date",)


def _collect(parameters: Sequence[SignatureParameter], spec_version: SpecVersion) -> dict[str, str]:
    collected: dict[str, str] = {}
    for param in parameters:
        name = _KNOWN_PARAMS.get(param.key.lower(), param.key)
        if name in collected and spec_version is SpecVersion.STRICT:
            raise InvalidHeaderError(f"{name} parameter is duplicated")
        collected[name] = param.value
    return collected


def _numeric(name: str, value: str | None, spec_version: SpecVersion) -> str | None:
    if value is None:
        return None
    pattern = _UNSIGNED_INT_RE if spec_version is SpecVersion.STRICT else _SIGNED_INT_RE
    if not pattern.fullmatch(value):
        raise InvalidParamsError(f"{name} must be an integer, got {value!r}")
    return value


def validate_params(
    parameters: Sequence[SignatureParameter],
    request: RequestView,
    *,
    spec_version: SpecVersion = SpecVersion.LEGACY,
    algorithms: Sequence[str] | None = None,
) -> SignatureParams:
    """Extract and check ``keyId``, ``algorithm``, ``signature`` and the optional parameters.

    Raises ``InvalidHeaderError`` for missing or empty required parameters and
    ``InvalidParamsError`` for semantic violations, including algorithms that
    are unsupported or outside the ``algorithms`` allow-list.
    """
    collected = _collect(parameters, spec_version)

    key_id = collected.pop("keyId", "")
    if not key_id:
        raise InvalidHeaderError("keyId was not specified")

    algorithm = collected.pop("algorithm", "")
    if not algorithm:
        raise InvalidHeaderError("algorithm was not specified")
    if algorithms is not None and algorithm.lower() not in {a.lower() for a in algorithms}:
        raise InvalidParamsError(f"{algorithm.lower()} is not a supported algorithm")
    try:
        resolve_algorithm(algorithm)
    except InvalidAlgorithmError as exc:
        raise InvalidParamsError(f"{algorithm} is not supported") from exc

    signature = collected.pop("signature", "")
    if not signature:
        raise InvalidHeaderError("signature was not specified")

    headers_value = collected.pop("headers", "")
    if headers_value:
        headers = tuple(h.lower() for h in headers_value.split(" "))
        if "" in headers:
            raise InvalidParamsError(f"headers parameter {headers_value!r} contains an empty header name")
    else:
        headers = default_headers(request)

    created = _numeric("created", collected.pop("created", None), spec_version)
    expires = _numeric("expires", collected.pop("expires", None), spec_version)
    if CREATED in headers and created is None:
        raise InvalidParamsError("(created) was signed but no created parameter was given")
    if EXPIRES in headers and expires is None:
        raise InvalidParamsError("(expires) was signed but no expires parameter was given")

    opaque = collected.pop("opaque", None)

    return SignatureParams(
        key_id=key_id,
        algorithm=algorithm.lower(),
        supplied_algorithm=algorithm,
        signature=signature,
        headers=headers,
        created=created,
        expires=expires,
        opaque=opaque,
        extensions=tuple(SignatureParameter(key=k, value=v) for k, v in collected.items()),
    )
