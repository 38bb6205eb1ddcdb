"""Error taxonomy for HTTP Signature parsing, signing and verification.

Every error derives from ``ValueError`` so HTTP handlers that already reject
``ValueError`` as a client error need no changes.
"""

from __future__ import annotations


class HttpSignatureError(ValueError):
    """Base class for all HTTP Signature errors."""


class MissingHeaderError(HttpSignatureError):
    """A signed header, or the carrier header itself, is absent from the request."""


class InvalidHeaderError(HttpSignatureError):
    """The carrier header is malformed or a required parameter is absent or empty."""


class InvalidParamsError(HttpSignatureError):
    """The parameters parsed but violate a semantic constraint."""


class InvalidAlgorithmError(HttpSignatureError):
    """Raised by the algorithm resolver for unknown or malformed algorithm tokens."""


class ExpiredRequestError(HttpSignatureError):
    """The signature's created/expires parameters or the Date header exceed the clock skew."""


class StrictParsingError(HttpSignatureError):
    """A legacy construct was used while strict parsing is enabled."""
