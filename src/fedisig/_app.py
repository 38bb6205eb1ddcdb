"""FastAPI inbox that accepts deliveries only after HTTP Signature verification."""

from __future__ import annotations

import base64
import dataclasses
import hashlib
import logging
import re

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from fedisig._errors import HttpSignatureError
from fedisig._key_resolver_factory import create_key_resolver
from fedisig._parse import ParsedSignature, parse_request
from fedisig._request import StarletteRequestView
from fedisig._settings import get_inbox_host, get_parse_options
from fedisig._verify import verify_signature

logger = logging.getLogger(__name__)

app = FastAPI()
key_resolver = create_key_resolver()

# Signed headers every delivery must cover
_INBOX_REQUIRED_HEADERS = ("host", "digest")

_DIGEST_RE = re.compile(r"^([a-zA-Z0-9-]+)=(.+)$")
_DIGEST_ALGORITHMS = {"SHA-256": hashlib.sha256}


def _problem_response(status: int, title: str, detail: str, pointer: str = "/signature") -> JSONResponse:
    """Return an ``application/problem+json`` error response."""
    return JSONResponse(
        status_code=status,
        content={
            "type": f"about:blank#{title.lower().replace(' ', '-')}",
            "title": title,
            "errors": [{"detail": detail, "pointer": pointer}],
        },
        media_type="application/problem+json",
    )


def _check_digest(header: str | None, body: bytes) -> bool:
    """Return True if a ``Digest: SHA-256=...`` header matches ``body``."""
    if header is None:
        return False
    match = _DIGEST_RE.match(header)
    if match is None:
        return False
    hash_factory = _DIGEST_ALGORITHMS.get(match.group(1).upper())
    if hash_factory is None:
        return False
    return base64.b64encode(hash_factory(body).digest()).decode("ascii") == match.group(2)


def _verify_request(request: Request) -> ParsedSignature | JSONResponse:
    """Parse and verify the HTTP Signature on a request.

    Returns the parsed signature on success, or an error JSONResponse on failure.
    """
    options = get_parse_options()
    options = dataclasses.replace(
        options, required_headers=tuple(dict.fromkeys((*options.required_headers, *_INBOX_REQUIRED_HEADERS)))
    )
    try:
        parsed = parse_request(StarletteRequestView(request), options)
    except HttpSignatureError as exc:
        logger.warning("Rejected signature: %s: %s", type(exc).__name__, exc)
        return _problem_response(401, "Unauthorized", str(exc))

    try:
        public_key = key_resolver.resolve(parsed.key_id)
    except ValueError as exc:
        logger.warning("Rejected signature: keyId %r: %s", parsed.key_id, exc)
        return _problem_response(401, "Unauthorized", str(exc), pointer="/signature/keyId")
    if public_key is None:
        logger.warning("Rejected signature: unknown keyId %r", parsed.key_id)
        return _problem_response(401, "Unauthorized", f"Unknown key {parsed.key_id!r}", pointer="/signature/keyId")

    if not verify_signature(parsed, public_key):
        logger.warning("Rejected signature: verification failed for %r", parsed.key_id)
        return _problem_response(401, "Unauthorized", "Signature verification failed")

    return parsed


@app.post("/inbox")
async def inbox(request: Request) -> Response:
    """Accept a signed delivery."""
    expected_host = get_inbox_host()
    if expected_host is not None and request.headers.get("host") != expected_host:
        return _problem_response(401, "Unauthorized", "Host does not match this inbox", pointer="/host")

    body = await request.body()
    if not body:
        return _problem_response(400, "Bad Request", "Body cannot be empty", pointer="/body")

    result = _verify_request(request)
    if isinstance(result, JSONResponse):
        return result

    if not _check_digest(request.headers.get("digest"), body):
        logger.warning("Rejected delivery from %r: digest mismatch", result.key_id)
        return _problem_response(401, "Unauthorized", "Digest does not match the body", pointer="/digest")

    logger.info("Accepted delivery signed by %r", result.key_id)
    return JSONResponse(status_code=202, content={"keyId": result.key_id, "algorithm": result.params.algorithm})
