"""Environment-variable configuration for signature parsing and the inbox."""

from __future__ import annotations

import os

from fedisig._params import SpecVersion
from fedisig._parse import ParseOptions
from fedisig._temporal import DEFAULT_CLOCK_SKEW


def get_clock_skew() -> int:
    """Return the allowed clock skew in seconds (default: ``300``)."""
    value = os.environ.get("FEDISIG_CLOCK_SKEW", str(DEFAULT_CLOCK_SKEW))
    try:
        skew = int(value)
    except ValueError:
        raise ValueError(f"FEDISIG_CLOCK_SKEW must be an integer, got {value!r}")  # noqa: B904
    if skew < 0:
        raise ValueError(f"FEDISIG_CLOCK_SKEW must not be negative, got {skew}")
    return skew


def get_spec_version() -> SpecVersion:
    """Return the parsing profile (default: ``legacy``)."""
    value = os.environ.get("FEDISIG_SPEC_VERSION", SpecVersion.LEGACY.value).lower()
    try:
        return SpecVersion(value)
    except ValueError:
        raise ValueError(f"FEDISIG_SPEC_VERSION must be 'legacy' or 'strict', got {value!r}")  # noqa: B904


def get_algorithms() -> tuple[str, ...] | None:
    """Return the comma-separated algorithm allow-list, or ``None`` to allow all."""
    value = os.environ.get("FEDISIG_ALGORITHMS", "")
    algorithms = tuple(a.strip().lower() for a in value.split(",") if a.strip())
    return algorithms or None


def get_required_headers() -> tuple[str, ...]:
    """Return the space-separated headers every signature must cover."""
    return tuple(h.lower() for h in os.environ.get("FEDISIG_REQUIRED_HEADERS", "").split())


def get_authorization_header_name() -> str | None:
    return os.environ.get("FEDISIG_AUTHORIZATION_HEADER") or None


def get_inbox_host() -> str | None:
    """Return the ``Host`` the inbox accepts deliveries for, or ``None`` for any."""
    return os.environ.get("FEDISIG_INBOX_HOST") or None


def get_key_resolver_name() -> str:
    """Return the selected key resolver name (default: ``did-key``)."""
    return os.environ.get("FEDISIG_KEY_RESOLVER", "did-key").lower()


def get_key_resolver_config() -> dict[str, str]:
    """Collect all ``FEDISIG_KEYS_*`` env vars as resolver config."""
    prefix = "FEDISIG_KEYS_"
    return {key.removeprefix(prefix).lower(): value for key, value in os.environ.items() if key.startswith(prefix)}


def get_parse_options() -> ParseOptions:
    """Build :class:`ParseOptions` from the environment."""
    return ParseOptions(
        algorithms=get_algorithms(),
        authorization_header_name=get_authorization_header_name(),
        clock_skew=get_clock_skew(),
        required_headers=get_required_headers(),
        spec_version=get_spec_version(),
    )
