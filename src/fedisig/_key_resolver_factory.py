"""Factory for creating the configured key resolver."""

from __future__ import annotations

import json
from pathlib import Path

from fedisig._keys import DidKeyResolver, KeyResolver, StaticKeyResolver
from fedisig._settings import get_key_resolver_config, get_key_resolver_name


def create_key_resolver() -> KeyResolver:
    """Instantiate the key resolver selected by ``FEDISIG_KEY_RESOLVER``."""
    name = get_key_resolver_name()
    config = get_key_resolver_config()

    if name == "did-key":
        return DidKeyResolver()

    if name == "static":
        keys_file = config.get("file")
        if not keys_file:
            raise ValueError("FEDISIG_KEYS_FILE is required for the static key resolver")
        keys = json.loads(Path(keys_file).read_text(encoding="utf-8"))
        if not isinstance(keys, dict):
            raise ValueError("FEDISIG_KEYS_FILE must contain a JSON object of keyId to PEM")
        return StaticKeyResolver(keys)

    raise ValueError(f"Unknown key resolver: {name!r}")
