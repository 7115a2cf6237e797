"""Error types raised by the funding pipeline and the HTTP layer."""

from __future__ import annotations

from typing import Optional


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or malformed."""


class AuthError(PermissionError):
    """Raised when a request does not carry the expected bearer credential."""


class ValidationError(ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class PipelineError(RuntimeError):
    """Base class for failures inside one stage of the funding pipeline."""

    stage = "pipeline"


class NegotiationError(PipelineError):
    stage = "negotiation"

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"Failed to create charge: {status_code} {reason}".rstrip())
        self.status_code = status_code
        self.reason = reason


class TransportError(PipelineError):
    """The billing service could not be reached (refused, timed out, TLS)."""

    stage = "negotiation"


class InvalidIntent(PipelineError):
    """The billing response did not describe a usable payment intent."""

    stage = "intent"


class ExecutionError(PipelineError):
    stage = "execution"


class GasEstimationError(ExecutionError):
    """The call would revert against current chain state; not retried."""

    stage = "gas_estimation"


class FeeFetchError(ExecutionError):
    stage = "fee_fetch"


class SubmissionError(ExecutionError):
    """The transaction was rejected before broadcast (nonce, balance, ...)."""

    stage = "submission"


class ConfirmationTimeout(ExecutionError):
    """The transaction was broadcast but no receipt arrived in time.

    It may still be mined later, so callers must not treat this as a failure
    to submit.
    """

    stage = "confirmation"

    def __init__(self, transaction_hash: str, timeout: float) -> None:
        super().__init__(
            f"Transaction {transaction_hash} was not confirmed within {timeout:g}s; "
            "it may still be included"
        )
        self.transaction_hash = transaction_hash
        self.timeout = timeout


class TransactionReverted(ExecutionError):
    stage = "confirmation"

    def __init__(self, transaction_hash: str) -> None:
        super().__init__(f"Transaction {transaction_hash} reverted on-chain")
        self.transaction_hash = transaction_hash


class FundingError(RuntimeError):
    """A funding request failed; wraps the originating stage error."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(str(cause) or cause.__class__.__name__)
        self.stage = stage
        self.cause = cause

    @property
    def transaction_hash(self) -> Optional[str]:
        return getattr(self.cause, "transaction_hash", None)
