"""Estimate, price, sign, submit and confirm settlement transactions."""

from __future__ import annotations

import logging
import os
import ssl
from typing import Any, Dict, Optional

import certifi
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from .config import Settings
from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_RECEIPT_POLL_LATENCY,
    FUNDING_CHAIN,
    SETTLEMENT_ABI,
    resolve_chain,
)
from .errors import (
    ConfigurationError,
    ConfirmationTimeout,
    ExecutionError,
    FeeFetchError,
    GasEstimationError,
    SubmissionError,
    TransactionReverted,
)
from .models import TransactionCall, TransactionOutcome

logger = logging.getLogger(__name__)

FEE_FETCH_ATTEMPTS = 2


def _ssl_request_kwargs(request_kwargs: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    # aiohttp needs a CA bundle even when Python lacks system certs.
    request_kwargs = dict(request_kwargs or {})
    if "ssl" not in request_kwargs:
        cafile = os.getenv("SSL_CERT_FILE") or certifi.where()
        request_kwargs["ssl"] = ssl.create_default_context(cafile=cafile)
    return request_kwargs


def _to_hex(value: Any) -> str:
    if isinstance(value, str):
        return value
    return AsyncWeb3.to_hex(value)


class TransactionExecutor:
    """Sends :class:`TransactionCall` objects from one local signing key.

    The web3 client and account are shared by concurrent requests and never
    mutated. Nonces come from the node's pending count, so two overlapping
    submissions are ordered by the node, not by this class.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        *,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        poll_latency: float = DEFAULT_RECEIPT_POLL_LATENCY,
    ) -> None:
        self._w3 = w3
        self._account = account
        self._confirmation_timeout = confirmation_timeout
        self._poll_latency = poll_latency

    @classmethod
    def from_settings(cls, settings: Settings, chain: str = FUNDING_CHAIN) -> "TransactionExecutor":
        descriptor = resolve_chain(chain)
        try:
            account = Account.from_key(settings.private_key)
        except ValueError as exc:
            raise ConfigurationError("PRIVATE_KEY is not a valid private key.") from exc

        provider = AsyncWeb3.AsyncHTTPProvider(
            descriptor.rpc_url(settings.rpc_credential),
            request_kwargs=_ssl_request_kwargs(),
        )
        return cls(
            AsyncWeb3(provider),
            account,
            confirmation_timeout=settings.confirmation_timeout,
            poll_latency=settings.receipt_poll_latency,
        )

    @property
    def address(self) -> str:
        return self._account.address

    async def aclose(self) -> None:
        await self._w3.provider.disconnect()

    async def submit(self, call: TransactionCall) -> TransactionOutcome:
        contract = self._w3.eth.contract(address=call.contract_address, abi=SETTLEMENT_ABI)
        function = getattr(contract.functions, call.function_name)(*call.arguments)
        sender = self.address

        try:
            gas = await function.estimate_gas({"from": sender, "value": call.value_wei})
        except Exception as exc:
            raise GasEstimationError(f"Gas estimation failed: {exc}") from exc
        logger.debug("Estimated gas for %s: %s", call.function_name, gas)

        gas_price = await self._fetch_gas_price()

        try:
            nonce = await self._w3.eth.get_transaction_count(sender, "pending")
            tx = await function.build_transaction(
                {
                    "from": sender,
                    "value": call.value_wei,
                    "gas": gas,
                    "gasPrice": gas_price,
                    "nonce": nonce,
                }
            )
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            raise SubmissionError(f"Failed to send transaction: {exc}") from exc

        tx_hash_hex = _to_hex(tx_hash)
        logger.info("Transaction sent: %s (nonce %s, gas %s @ %s wei)", tx_hash_hex, nonce, gas, gas_price)

        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._confirmation_timeout,
                poll_latency=self._poll_latency,
            )
        except TimeExhausted as exc:
            raise ConfirmationTimeout(tx_hash_hex, self._confirmation_timeout) from exc
        except Exception as exc:
            raise ExecutionError(
                f"Lost track of transaction {tx_hash_hex} while awaiting confirmation: {exc}"
            ) from exc

        if receipt.get("status") == 0:
            raise TransactionReverted(tx_hash_hex)

        logger.info("Transaction %s confirmed in block %s", tx_hash_hex, receipt.get("blockNumber"))
        return TransactionOutcome(
            transaction_hash=tx_hash_hex,
            confirmed=True,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )

    async def _fetch_gas_price(self) -> int:
        last_error: Optional[Exception] = None
        for attempt in range(1, FEE_FETCH_ATTEMPTS + 1):
            try:
                return await self._w3.eth.gas_price
            except Exception as exc:
                last_error = exc
                logger.warning("Gas price fetch attempt %d failed: %s", attempt, exc)
        raise FeeFetchError(f"Failed to fetch gas price: {last_error}") from last_error
