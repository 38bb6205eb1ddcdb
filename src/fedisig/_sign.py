"""Signing of outgoing requests."""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from email.utils import formatdate
from typing import Any

from fedisig._algorithms import KeyAlgorithm, resolve_algorithm
from fedisig._crypto import CryptoProvider, default_provider
from fedisig._errors import InvalidAlgorithmError, InvalidParamsError
from fedisig._grammar import AUTHORIZATION_SCHEME
from fedisig._params import default_headers
from fedisig._parse import AUTHORIZATION_HEADER, SIGNATURE_HEADER
from fedisig._request import MutableRequestView, header_text
from fedisig._signing_string import CREATED, build_signing_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignOptions:
    """What to sign and with which key.

    ``headers`` defaults to ``x-date`` or ``date``. ``algorithm`` defaults from
    the key type. ``created`` defaults to the signing time when ``(created)`` is
    signed. ``header_name`` selects the carrier: ``authorization`` emits the
    prefixed form, ``signature`` the bare one.
    """

    key_id: str
    key: Any
    headers: Sequence[str] | None = None
    algorithm: str | None = None
    opaque: str | None = None
    created: int | None = None
    expires: int | None = None
    header_name: str = AUTHORIZATION_HEADER
    strict: bool = False


def _default_algorithm(key_type: KeyAlgorithm | None) -> str:
    if key_type is None:
        raise InvalidParamsError("Cannot choose an algorithm for an unsupported key type")
    if key_type is KeyAlgorithm.ED25519:
        return "ed25519-sha512"
    return f"{key_type.value}-sha256"


def _quoted(name: str, value: str) -> str:
    if '"' in value:
        raise InvalidParamsError(f"{name} must not contain a double quote")
    return f'{name}="{value}"'


def format_signature_params(
    *,
    key_id: str,
    algorithm: str,
    headers: Sequence[str],
    signature: str,
    created: int | None = None,
    expires: int | None = None,
    opaque: str | None = None,
) -> str:
    """Serialize signature parameters in the ``key="value",key=123`` grammar."""
    parts = [_quoted("keyId", key_id), _quoted("algorithm", algorithm)]
    if created is not None:
        parts.append(f"created={header_text(created)}")
    if expires is not None:
        parts.append(f"expires={header_text(expires)}")
    if opaque is not None:
        parts.append(_quoted("opaque", opaque))
    parts.append(_quoted("headers", " ".join(headers)))
    parts.append(_quoted("signature", signature))
    return ",".join(parts)


class _PendingHeaders:
    """Read view of a request plus headers that will be written once signing succeeds."""

    def __init__(self, request: MutableRequestView, pending: dict[str, str]) -> None:
        self._request = request
        self._pending = pending

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def target(self) -> str:
        return self._request.target

    @property
    def http_version(self) -> str:
        return self._request.http_version

    def header_values(self, name: str) -> list[str]:
        if name.lower() in self._pending:
            return [self._pending[name.lower()]]
        return self._request.header_values(name)


def sign_request(
    request: MutableRequestView,
    options: SignOptions,
    *,
    provider: CryptoProvider | None = None,
    now: float | None = None,
) -> str:
    """Sign ``request`` and write the signature header into it.

    Returns the header value that was set.

    Raises ``InvalidParamsError`` when the algorithm is unsupported or does not
    match the key, and ``MissingHeaderError`` when a signed header is absent.
    The request is left untouched when signing fails.
    """
    provider = provider or default_provider
    now = time.time() if now is None else now

    key = provider.load_private_key(options.key)
    key_type = provider.key_type(key)

    headers = tuple(h.lower() for h in options.headers) if options.headers else default_headers(request)

    algorithm = options.algorithm or _default_algorithm(key_type)
    try:
        key_algorithm, hash_algorithm = resolve_algorithm(algorithm, key_type.value if key_type is not None else None)
    except InvalidAlgorithmError as exc:
        raise InvalidParamsError(f"{algorithm} is not supported") from exc
    if key_algorithm is not key_type:
        raise InvalidParamsError(f"{algorithm} cannot be used with a {getattr(key_type, 'value', 'unsupported')} key")

    pending: dict[str, str] = {}
    if "date" in headers and not request.header_values("date"):
        pending["date"] = formatdate(now, usegmt=True)

    created = options.created
    if created is None and CREATED in headers:
        created = int(now)
    expires = options.expires

    signing_string = build_signing_string(
        headers,
        request=_PendingHeaders(request, pending),
        key_id=options.key_id,
        algorithm=algorithm,
        opaque=options.opaque,
        created=header_text(created) if created is not None else None,
        expires=header_text(expires) if expires is not None else None,
        strict=options.strict,
    )
    signature = base64.b64encode(provider.sign(hash_algorithm, signing_string, key)).decode("ascii")

    params = format_signature_params(
        key_id=options.key_id,
        algorithm=algorithm,
        headers=headers,
        signature=signature,
        created=created,
        expires=expires,
        opaque=options.opaque,
    )
    value = params if options.header_name.lower() == SIGNATURE_HEADER else f"{AUTHORIZATION_SCHEME} {params}"
    if "date" in pending:
        request.set_header("Date", pending["date"])
    request.set_header(options.header_name, value)
    logger.debug("Signed %s %s as %s with %s", request.method, request.target, options.key_id, algorithm)
    return value
