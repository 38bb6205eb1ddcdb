"""Signature verification against a public key or shared secret."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from fedisig._algorithms import KeyAlgorithm, resolve_algorithm
from fedisig._crypto import CryptoProvider, HmacKey, default_provider
from fedisig._parse import ParsedSignature

logger = logging.getLogger(__name__)


def _decode_signature(parsed: ParsedSignature) -> bytes | None:
    try:
        return base64.b64decode(parsed.params.signature, validate=True)
    except binascii.Error:
        logger.debug("Signature from %s is not valid base64", parsed.key_id)
        return None


def verify_signature(parsed: ParsedSignature, public_key: Any, *, provider: CryptoProvider | None = None) -> bool:
    """Verify ``parsed`` against ``public_key``.

    The algorithm is resolved again with the key's actual type, so ``hs2019``
    picks its hash here. A key whose type does not match the algorithm, an
    ``hmac-*`` algorithm, or a signature that does not check out all return
    ``False``; only an unrecognizable algorithm token raises
    ``InvalidAlgorithmError``.
    """
    provider = provider or default_provider
    key = provider.load_public_key(public_key)
    key_type = provider.key_type(key)

    key_algorithm, hash_algorithm = resolve_algorithm(
        parsed.params.algorithm, key_type.value if key_type is not None else None
    )
    if key_algorithm is KeyAlgorithm.HMAC or key_algorithm is not key_type:
        logger.debug("Algorithm %s does not match %s key for %s", parsed.params.algorithm, key_type, parsed.key_id)
        return False

    signature = _decode_signature(parsed)
    if signature is None:
        return False
    return provider.verify(hash_algorithm, parsed.signing_string, signature, key)


def verify_hmac(parsed: ParsedSignature, secret: bytes | str, *, provider: CryptoProvider | None = None) -> bool:
    """Verify an ``hmac-*`` signature with a shared secret."""
    provider = provider or default_provider
    key_algorithm, hash_algorithm = resolve_algorithm(parsed.params.algorithm)
    if key_algorithm is not KeyAlgorithm.HMAC:
        return False

    signature = _decode_signature(parsed)
    if signature is None:
        return False
    return provider.verify(hash_algorithm, parsed.signing_string, signature, HmacKey(secret))
