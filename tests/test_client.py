"""Tests for signing outgoing httpx requests."""

from __future__ import annotations

import httpx

from fedisig._client import HttpSignatureAuth
from fedisig._parse import parse_request
from fedisig._request import HttpxRequestView
from fedisig._sign import SignOptions
from fedisig._verify import verify_signature

from .conftest import Ed25519TestSigner, sha256_digest

_BODY = b'{"type": "Create"}'
_SIGNED = ["(request-target)", "host", "date", "digest"]


def _inbox(signer: Ed25519TestSigner) -> httpx.MockTransport:
    public_key = signer.private_key.public_key()

    def handler(request: httpx.Request) -> httpx.Response:
        parsed = parse_request(HttpxRequestView(request))
        if not verify_signature(parsed, public_key):
            return httpx.Response(401)
        return httpx.Response(202, json={"signingString": parsed.signing_string})

    return httpx.MockTransport(handler)


class TestHttpSignatureAuth:
    def test_signs_request(self, signer: Ed25519TestSigner) -> None:
        auth = HttpSignatureAuth(
            SignOptions(key_id=signer.id, key=signer.private_key, headers=_SIGNED),
        )
        with httpx.Client(transport=_inbox(signer), auth=auth) as client:
            resp = client.post(
                "https://example.com/inbox?page=2", content=_BODY, headers={"Digest": sha256_digest(_BODY)}
            )
        assert resp.status_code == 202
        signing_string = resp.json()["signingString"]
        assert signing_string.startswith("(request-target): post /inbox?page=2\nhost: example.com\ndate: ")

    def test_signature_header(self, signer: Ed25519TestSigner) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        auth = HttpSignatureAuth(SignOptions(key_id=signer.id, key=signer.private_key, header_name="signature"))
        with httpx.Client(transport=httpx.MockTransport(handler), auth=auth) as client:
            client.get("https://example.com/outbox")
        assert "authorization" not in seen[0].headers
        assert seen[0].headers["signature"].startswith(f'keyId="{signer.id}",algorithm="ed25519-sha512"')
        assert "date" in seen[0].headers

    def test_request_line_uses_configured_version(self, signer: Ed25519TestSigner) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            parsed = parse_request(HttpxRequestView(request, http_version="2"))
            seen.append(parsed.signing_string)
            return httpx.Response(200 if verify_signature(parsed, signer.private_key.public_key()) else 401)

        auth = HttpSignatureAuth(
            SignOptions(key_id=signer.id, key=signer.private_key, headers=["request-line", "date"]), http_version="2"
        )
        with httpx.Client(transport=httpx.MockTransport(handler), auth=auth) as client:
            resp = client.get("https://example.com/outbox?page=1")
        assert resp.status_code == 200
        assert seen[0].startswith("GET /outbox?page=1 HTTP/2\ndate: ")

    def test_default_version(self) -> None:
        assert HttpxRequestView(httpx.Request("GET", "https://example.com/")).http_version == "1.1"
