"""Resolution of a signature's keyId to a public key.

Fetching remote actor documents is left to the caller; the resolvers here only
cover keys that can be derived locally.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import base58
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from fedisig._crypto import default_provider

# Multicodec prefix for Ed25519 public keys (0xed 0x01)
_MULTICODEC_ED25519_PUB = b"\xed\x01"


def extract_public_key(did_key: str) -> Ed25519PublicKey:
    """Extract an Ed25519 public key from a ``did:key:z...`` identifier.

    Handles both ``did:key:z6Mk...`` and ``did:key:z6Mk...#z6Mk...`` formats.

    Raises ``ValueError`` if the DID is malformed or not an Ed25519 key.
    """
    did = did_key.split("#")[0]

    if not did.startswith("did:key:z"):
        raise ValueError(f"Expected did:key:z..., got {did_key!r}")

    # "z" is the multibase prefix for base58btc
    decoded = base58.b58decode(did[len("did:key:z"):])

    if not decoded.startswith(_MULTICODEC_ED25519_PUB):
        raise ValueError(f"Expected Ed25519 multicodec prefix (0xed01), got {decoded[:2].hex()}")

    pub_bytes = decoded[len(_MULTICODEC_ED25519_PUB):]
    if len(pub_bytes) != 32:
        raise ValueError(f"Expected 32-byte Ed25519 public key, got {len(pub_bytes)} bytes")

    return Ed25519PublicKey.from_public_bytes(pub_bytes)


def make_did_key(public_key: Ed25519PublicKey) -> str:
    """Return the ``did:key:z...#z...`` keyId for an Ed25519 public key."""
    fingerprint = f"z{base58.b58encode(_MULTICODEC_ED25519_PUB + public_key.public_bytes_raw()).decode()}"
    return f"did:key:{fingerprint}#{fingerprint}"


@runtime_checkable
class KeyResolver(Protocol):
    """Maps a keyId to a public key, or ``None`` if it is unknown."""

    def resolve(self, key_id: str) -> Any | None: ...


class DidKeyResolver:
    """Resolves ``did:key`` identifiers; any other keyId is unknown."""

    def resolve(self, key_id: str) -> Ed25519PublicKey | None:
        if not key_id.startswith("did:key:"):
            return None
        return extract_public_key(key_id)


class StaticKeyResolver:
    """Resolves keyIds from a fixed mapping of keyId to key (object or PEM text)."""

    def __init__(self, keys: Mapping[str, Any]) -> None:
        self._keys = {key_id: default_provider.load_public_key(key) for key_id, key in keys.items()}

    def resolve(self, key_id: str) -> Any | None:
        return self._keys.get(key_id)
