"""Signature algorithm tokens and their resolution to (key, hash) pairs."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from fedisig._errors import InvalidAlgorithmError


class KeyAlgorithm(str, Enum):
    """Key algorithms that can appear as the first segment of an algorithm token."""

    RSA = "rsa"
    DSA = "dsa"
    ECDSA = "ecdsa"
    ED25519 = "ed25519"
    HMAC = "hmac"
    HS2019 = "hs2019"  # placeholder until the key type is known


class HashAlgorithm(str, Enum):
    """Hash algorithms that can appear as the second segment of an algorithm token."""

    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"


PUBLIC_KEY_ALGORITHMS = frozenset(
    {KeyAlgorithm.RSA, KeyAlgorithm.DSA, KeyAlgorithm.ECDSA, KeyAlgorithm.ED25519}
)


class AlgorithmPair(NamedTuple):
    key_algorithm: KeyAlgorithm
    hash_algorithm: HashAlgorithm


def _key_algorithm(value: str) -> KeyAlgorithm | None:
    try:
        return KeyAlgorithm(value)
    except ValueError:
        return None


def _hash_algorithm(value: str) -> HashAlgorithm | None:
    try:
        return HashAlgorithm(value)
    except ValueError:
        return None


def resolve_algorithm(token: str, public_key_type: str | None = None) -> AlgorithmPair:
    """Resolve an algorithm token such as ``rsa-sha256`` into an :class:`AlgorithmPair`.

    ``hs2019`` defers the choice to the key: an Ed25519 key resolves to
    ``ed25519-sha512``, any other key type to ``{type}-sha256``, and without a
    key type the placeholder pair ``(hs2019, sha256)`` is returned.

    Raises :class:`InvalidAlgorithmError` for unknown or malformed tokens.
    """
    segments = token.lower().split("-")

    if segments[0] == KeyAlgorithm.HS2019.value:
        if public_key_type == KeyAlgorithm.ED25519.value:
            return resolve_algorithm("ed25519-sha512")
        if public_key_type is not None:
            return resolve_algorithm(f"{public_key_type}-sha256")
        return AlgorithmPair(KeyAlgorithm.HS2019, HashAlgorithm.SHA256)

    if len(segments) != 2:
        raise InvalidAlgorithmError(f"{segments[0].upper()} is not a valid algorithm")

    key_algorithm = _key_algorithm(segments[0])
    if key_algorithm is None or (
        key_algorithm is not KeyAlgorithm.HMAC and key_algorithm not in PUBLIC_KEY_ALGORITHMS
    ):
        raise InvalidAlgorithmError(f"{segments[0].upper()} type keys are not supported")

    hash_algorithm = _hash_algorithm(segments[1])
    if hash_algorithm is None:
        raise InvalidAlgorithmError(f"{segments[1].upper()} is not a supported hash algorithm")

    return AlgorithmPair(key_algorithm, hash_algorithm)
