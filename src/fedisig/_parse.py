"""Entry point for parsing and validating an inbound signed request."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from fedisig._errors import InvalidHeaderError, MissingHeaderError
from fedisig._grammar import AUTHORIZATION_SCHEME, parse_authorization_header_value, parse_signature_header_value
from fedisig._params import SignatureParams, SpecVersion, validate_params
from fedisig._request import RequestView
from fedisig._signing_string import build_signing_string
from fedisig._temporal import DEFAULT_CLOCK_SKEW, check_freshness

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "authorization"
SIGNATURE_HEADER = "signature"


@dataclass(frozen=True)
class ParseOptions:
    """Constraints applied by :func:`parse_request`.

    ``algorithms`` is an allow-list of tokens (``None`` allows every supported one),
    ``authorization_header_name`` overrides the carrier header, ``clock_skew`` is in
    seconds, ``required_headers`` must all appear in the signature's ``headers``,
    and ``strict`` forbids ``request-line`` (``None`` defers to ``spec_version``).
    """

    algorithms: Sequence[str] | None = None
    authorization_header_name: str | None = None
    clock_skew: float = DEFAULT_CLOCK_SKEW
    required_headers: Sequence[str] = ()
    strict: bool | None = None
    spec_version: SpecVersion = SpecVersion.LEGACY

    @property
    def strict_parsing(self) -> bool:
        if self.strict is not None:
            return self.strict
        return self.spec_version is SpecVersion.STRICT


@dataclass(frozen=True)
class ParsedSignature:
    """A parsed, validated signature, ready to be handed to :func:`verify_signature`."""

    algorithm: str  # upper-cased for display; params.algorithm is canonical
    key_id: str
    opaque: str | None
    signing_string: str
    params: SignatureParams
    scheme: str = AUTHORIZATION_SCHEME


def _carrier_header(request: RequestView, options: ParseOptions) -> tuple[str, str]:
    if options.authorization_header_name:
        name = options.authorization_header_name.lower()
        values = request.header_values(name)
    else:
        name = AUTHORIZATION_HEADER
        values = request.header_values(name)
        if not values:
            name = SIGNATURE_HEADER
            values = request.header_values(name)

    if not values:
        raise MissingHeaderError("no signature header present in the request")
    if len(values) > 1:
        raise InvalidHeaderError(f"{name} header appears more than once in the request")
    return name, values[0]


def parse_request(
    request: RequestView,
    options: ParseOptions | None = None,
    *,
    now: float | None = None,
) -> ParsedSignature:
    """Parse and validate the HTTP Signature carried by ``request``.

    The signature bytes are not checked here and the keyId is not resolved;
    pass the result and the sender's key to :func:`verify_signature`.

    Raises ``MissingHeaderError``, ``InvalidHeaderError``, ``InvalidParamsError``,
    ``StrictParsingError`` or ``ExpiredRequestError``.
    """
    options = options or ParseOptions()
    now = time.time() if now is None else now
    legacy = options.spec_version is SpecVersion.LEGACY

    header_name, header_value = _carrier_header(request, options)
    parse = parse_signature_header_value if header_name == SIGNATURE_HEADER else parse_authorization_header_value
    parameters = parse(header_value, allow_signed_numbers=legacy)

    params = validate_params(
        parameters,
        request,
        spec_version=options.spec_version,
        algorithms=options.algorithms,
    )

    for required in options.required_headers:
        if required.lower() not in params.headers:
            raise MissingHeaderError(f"{required} was not a signed header")

    signing_string = build_signing_string(
        params.headers,
        request=request,
        key_id=params.key_id,
        algorithm=params.supplied_algorithm,
        opaque=params.opaque,
        created=params.created,
        expires=params.expires,
        strict=options.strict_parsing,
    )

    check_freshness(
        created=int(params.created) if params.created is not None else None,
        expires=int(params.expires) if params.expires is not None else None,
        date=None,
        clock_skew=options.clock_skew,
        now=now,
    )
    # every Date and X-Date value is checked, signed or not
    for date in (*request.header_values("date"), *request.header_values("x-date")):
        check_freshness(created=None, expires=None, date=date, clock_skew=options.clock_skew, now=now)

    logger.debug("Parsed %s signature from %s over %s", params.algorithm, params.key_id, " ".join(params.headers))
    return ParsedSignature(
        algorithm=params.algorithm.upper(),
        key_id=params.key_id,
        opaque=params.opaque,
        signing_string=signing_string,
        params=params,
    )
