"""Environment-driven configuration.

Settings are read once at startup into an immutable :class:`Settings` object
and passed explicitly to the components that need them. Request handlers never
consult the environment. Missing required variables abort startup with a
:class:`~artto_handler.errors.ConfigurationError` listing every absent key.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv
from web3 import Web3

from .constants import (
    DEFAULT_BILLING_URL,
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_FUNDING_VALUE_ETH,
    DEFAULT_FUNDING_VALUE_WEI,
    DEFAULT_POOL_FEES_TIER,
    DEFAULT_RECEIPT_POLL_LATENCY,
)
from .errors import ConfigurationError

DEFAULT_ENV_FILES: Sequence[str] = (".env.local", ".env")

REQUIRED_KEYS: Sequence[str] = (
    "ALCHEMY_ID",
    "PRIVATE_KEY",
    "OPENSEA_API_KEY",
    "OPENROUTER_API_KEY",
    "ARTTO_WALLET_ADDRESS",
    "OPENSEA_ARTTO_SERVER_BEARER_TOKEN",
    "MARKETPLACE_FACTORY",
)


@dataclass(frozen=True)
class Settings:
    rpc_credential: str = field(repr=False)
    private_key: str = field(repr=False)
    marketplace_api_key: str = field(repr=False)
    billing_api_key: str = field(repr=False)
    wallet_address: str
    bearer_token: str = field(repr=False)
    marketplace_factory: str
    port: int = 3001
    billing_url: str = DEFAULT_BILLING_URL
    billing_timeout: float = 30.0
    funding_value_wei: int = DEFAULT_FUNDING_VALUE_WEI
    pool_fees_tier: int = DEFAULT_POOL_FEES_TIER
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    receipt_poll_latency: float = DEFAULT_RECEIPT_POLL_LATENCY
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_files: Sequence[str] = DEFAULT_ENV_FILES,
    ) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        When reading the real process environment, ``.env.local`` and ``.env``
        are loaded first without overriding variables that are already set.
        """
        if environ is None:
            for name in env_files:
                path = Path(name)
                if path.exists():
                    load_dotenv(path, override=False)
            environ = os.environ

        values = {key: (environ.get(key) or "").strip() for key in REQUIRED_KEYS}
        missing = [key for key, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing configuration for {', '.join(missing)}. "
                "Provide it via the environment or .env.local."
            )

        return cls(
            rpc_credential=values["ALCHEMY_ID"],
            private_key=values["PRIVATE_KEY"],
            marketplace_api_key=values["OPENSEA_API_KEY"],
            billing_api_key=values["OPENROUTER_API_KEY"],
            wallet_address=_normalize_address(values["ARTTO_WALLET_ADDRESS"], field="ARTTO_WALLET_ADDRESS"),
            bearer_token=values["OPENSEA_ARTTO_SERVER_BEARER_TOKEN"],
            marketplace_factory=values["MARKETPLACE_FACTORY"],
            port=_parse_int("PORT", environ.get("PORT"), 3001),
            billing_url=(environ.get("OPENROUTER_BASE_URL") or DEFAULT_BILLING_URL).rstrip("/"),
            billing_timeout=_parse_float("BILLING_TIMEOUT_SECONDS", environ.get("BILLING_TIMEOUT_SECONDS"), 30.0),
            funding_value_wei=_parse_ether(
                "FUNDING_VALUE_ETH", environ.get("FUNDING_VALUE_ETH") or DEFAULT_FUNDING_VALUE_ETH
            ),
            pool_fees_tier=_parse_int("POOL_FEES_TIER", environ.get("POOL_FEES_TIER"), DEFAULT_POOL_FEES_TIER),
            confirmation_timeout=_parse_float(
                "CONFIRMATION_TIMEOUT_SECONDS",
                environ.get("CONFIRMATION_TIMEOUT_SECONDS"),
                DEFAULT_CONFIRMATION_TIMEOUT,
            ),
            receipt_poll_latency=_parse_float(
                "RECEIPT_POLL_SECONDS", environ.get("RECEIPT_POLL_SECONDS"), DEFAULT_RECEIPT_POLL_LATENCY
            ),
            log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
        )


def _normalize_address(value: str, *, field: str) -> str:
    addr = value.strip()
    if not addr.lower().startswith("0x"):
        raise ConfigurationError(f"{field} must be a 0x-prefixed hexadecimal address.")
    if len(addr) != 42:
        raise ConfigurationError(f"{field} must be a 42-character 0x-prefixed Ethereum address.")
    try:
        return Web3.to_checksum_address(addr)
    except ValueError as err:
        raise ConfigurationError(f"{field} is not a valid address.") from err


def _parse_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value, 10)
    except ValueError as err:
        raise ConfigurationError(f"{name} must be an integer value.") from err


def _parse_float(name: str, value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError as err:
        raise ConfigurationError(f"{name} must be a number.") from err
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be positive.")
    return parsed


def _parse_ether(name: str, value: str) -> int:
    try:
        amount = Decimal(value.strip())
    except InvalidOperation as err:
        raise ConfigurationError(f"{name} must be a decimal amount of ether.") from err
    if not amount.is_finite():
        raise ConfigurationError(f"{name} must be a positive amount of ether.")
    try:
        wei = int(Web3.to_wei(amount, "ether"))
    except ValueError as err:
        raise ConfigurationError(f"{name} is out of range: {err}") from err
    if wei <= 0:
        raise ConfigurationError(f"{name} must be at least one wei.")
    return wei
