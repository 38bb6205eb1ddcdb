"""``httpx`` integration for signing outgoing requests."""

from __future__ import annotations

from collections.abc import Generator

import httpx

from fedisig._crypto import CryptoProvider
from fedisig._request import HttpxRequestView
from fedisig._sign import SignOptions, sign_request


class HttpSignatureAuth(httpx.Auth):
    """Signs every request sent through an ``httpx`` client.

    Headers that are signed (``digest``, ``content-type``...) must already be
    set on the request.
    """

    def __init__(
        self, options: SignOptions, *, provider: CryptoProvider | None = None, http_version: str = "1.1"
    ) -> None:
        self._options = options
        self._provider = provider
        self._http_version = http_version

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        view = HttpxRequestView(request, http_version=self._http_version)
        sign_request(view, self._options, provider=self._provider)
        yield request
