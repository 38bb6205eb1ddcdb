"""Narrow request views so signing and verification work with any HTTP stack."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx
from starlette.requests import Request


def header_text(value: Any) -> str:
    """Return the literal wire text for a header value.

    Booleans become ``true``/``false`` and numbers their decimal form, so a
    value such as ``Content-Length: 17`` signs the same whether it was given as
    ``17`` or ``"17"``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


@runtime_checkable
class RequestView(Protocol):
    """What parsing needs from an HTTP request."""

    @property
    def method(self) -> str: ...
    @property
    def target(self) -> str: ...
    @property
    def http_version(self) -> str: ...
    def header_values(self, name: str) -> list[str]: ...


@runtime_checkable
class MutableRequestView(RequestView, Protocol):
    """A request view that signing can write headers into."""

    def set_header(self, name: str, value: Any) -> None: ...


@dataclass
class HttpRequest:
    """A plain request: method, target (path plus query), headers and protocol version.

    Headers may be given as a mapping or as ``(name, value)`` pairs; pairs allow
    repeated headers.
    """

    method: str
    target: str
    headers: Mapping[str, Any] | Iterable[tuple[str, Any]] = field(default_factory=list)
    http_version: str = "1.1"

    def __post_init__(self) -> None:
        items = self.headers.items() if isinstance(self.headers, Mapping) else self.headers
        self.headers = [(name, header_text(value)) for name, value in items]

    def header_values(self, name: str) -> list[str]:
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    def set_header(self, name: str, value: Any) -> None:
        wanted = name.lower()
        self.headers = [(key, v) for key, v in self.headers if key.lower() != wanted]
        self.headers.append((name, header_text(value)))


class StarletteRequestView:
    """Read-only view over an inbound Starlette/FastAPI request."""

    def __init__(self, request: Request) -> None:
        self._request = request

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def target(self) -> str:
        scope = self._request.scope
        raw_path = scope.get("raw_path")
        path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else self._request.url.path
        query = scope.get("query_string", b"")
        return f"{path}?{query.decode('latin-1')}" if query else path

    @property
    def http_version(self) -> str:
        return self._request.scope.get("http_version", "1.1")

    def header_values(self, name: str) -> list[str]:
        return self._request.headers.getlist(name)


class HttpxRequestView:
    """Mutable view over an outbound ``httpx.Request``.

    httpx negotiates the protocol only when the request is sent, after it has
    been signed, so ``request-line`` uses ``http_version`` as given here.
    """

    def __init__(self, request: httpx.Request, *, http_version: str = "1.1") -> None:
        self._request = request
        self._http_version = http_version

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def target(self) -> str:
        return self._request.url.raw_path.decode("ascii")

    @property
    def http_version(self) -> str:
        return self._http_version

    def header_values(self, name: str) -> list[str]:
        return self._request.headers.get_list(name)

    def set_header(self, name: str, value: Any) -> None:
        self._request.headers[name] = header_text(value)
