"""Artto marketplace and OpenRouter funding handler."""

from __future__ import annotations

from .constants import (
    CHAINS,
    DEFAULT_RPC_URLS,
    SUPPORTED_CHAINS,
    WRAPPED_NATIVE_TOKENS,
    ChainDescriptor,
    UnsupportedChainError,
    resolve_chain,
)
from .errors import (
    AuthError,
    ConfigurationError,
    ConfirmationTimeout,
    ExecutionError,
    FeeFetchError,
    FundingError,
    GasEstimationError,
    InvalidIntent,
    NegotiationError,
    PipelineError,
    SubmissionError,
    TransactionReverted,
    TransportError,
    ValidationError,
)
from .models import FundingRequest, PaymentIntent, TransactionCall, TransactionOutcome

__all__ = [
    "CHAINS",
    "DEFAULT_RPC_URLS",
    "SUPPORTED_CHAINS",
    "WRAPPED_NATIVE_TOKENS",
    "ChainDescriptor",
    "UnsupportedChainError",
    "resolve_chain",
    "AuthError",
    "ConfigurationError",
    "ConfirmationTimeout",
    "ExecutionError",
    "FeeFetchError",
    "FundingError",
    "GasEstimationError",
    "InvalidIntent",
    "NegotiationError",
    "PipelineError",
    "SubmissionError",
    "TransactionReverted",
    "TransportError",
    "ValidationError",
    "FundingRequest",
    "PaymentIntent",
    "TransactionCall",
    "TransactionOutcome",
]
