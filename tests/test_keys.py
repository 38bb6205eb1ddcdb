"""Tests for keyId resolution."""

from __future__ import annotations

import base58
import pytest
from cryptography.hazmat.primitives import serialization

from fedisig._keys import DidKeyResolver, StaticKeyResolver, extract_public_key, make_did_key

from .conftest import RSA_PUBLIC_PEM, Ed25519TestSigner


def _raw(public_key: object) -> bytes:
    return public_key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)


class TestExtractPublicKey:
    def test_extract_from_did_key(self) -> None:
        signer = Ed25519TestSigner()
        controller = signer.id.split("#")[0]
        key = extract_public_key(controller)
        assert _raw(key) == _raw(signer.private_key.public_key())

    def test_extract_from_did_key_with_fragment(self) -> None:
        signer = Ed25519TestSigner()
        key = extract_public_key(signer.id)
        assert _raw(key) == _raw(signer.private_key.public_key())

    def test_invalid_prefix_raises(self) -> None:
        with pytest.raises(ValueError, match="Expected did:key:z"):
            extract_public_key("did:web:example.com")

    def test_invalid_multicodec_raises(self) -> None:
        fake = "did:key:z" + base58.b58encode(b"\x00\x00" + b"\x01" * 32).decode()
        with pytest.raises(ValueError, match="multicodec"):
            extract_public_key(fake)

    def test_wrong_length_raises(self) -> None:
        fake = "did:key:z" + base58.b58encode(b"\xed\x01" + b"\x01" * 16).decode()
        with pytest.raises(ValueError, match="32-byte"):
            extract_public_key(fake)


class TestMakeDidKey:
    def test_format(self) -> None:
        signer = Ed25519TestSigner()
        controller, fragment = signer.id.split("#")
        assert controller.startswith("did:key:z6Mk")
        assert controller == f"did:key:{fragment}"


class TestDidKeyResolver:
    def test_resolves_did_key(self, signer: Ed25519TestSigner) -> None:
        key = DidKeyResolver().resolve(signer.id)
        assert _raw(key) == _raw(signer.private_key.public_key())

    def test_other_key_id_unknown(self) -> None:
        assert DidKeyResolver().resolve("https://example.com/actor#main-key") is None


class TestStaticKeyResolver:
    def test_pem_and_objects(self, signer: Ed25519TestSigner) -> None:
        public_key = signer.private_key.public_key()
        resolver = StaticKeyResolver({"Test": RSA_PUBLIC_PEM, signer.id: public_key})
        assert resolver.resolve("Test").key_size == 1024
        assert resolver.resolve(signer.id) is public_key

    def test_unknown(self) -> None:
        assert StaticKeyResolver({}).resolve("Test") is None
