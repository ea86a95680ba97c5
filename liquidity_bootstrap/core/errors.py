from __future__ import annotations

from typing import Any


class BootstrapError(Exception):
    """Root of every error raised by the liquidity bootstrap core."""


class ValidationError(BootstrapError, ValueError):
    """Raised while planning a run, before any transaction is submitted."""


class InvalidPriceError(ValidationError):
    pass


class DegeneratePairError(ValidationError):
    pass


class InsufficientInputError(ValidationError):
    pass


class InvalidAmountError(ValidationError):
    pass


class InvalidFeeTierError(ValidationError):
    pass


class TransactionError(BootstrapError):
    """A failure at a step that talks to the chain.

    Steps that already confirmed stay confirmed; nothing is rolled back.
    """

    def __init__(self, message: str, *, step: str | None = None):
        super().__init__(message)
        self.step = step


class SubmissionError(TransactionError):
    """The transaction never made it into the mempool (encode/estimate/sign/send)."""


class ConfirmationError(TransactionError):
    """The transaction was broadcast but reverted or was not included in time."""

    def __init__(
        self,
        txn_hash: str,
        receipt: dict[str, Any] | None = None,
        message: str | None = None,
        *,
        step: str | None = None,
    ):
        self.txn_hash = txn_hash
        self.receipt = receipt or {}
        super().__init__(message or f"Transaction not confirmed: {txn_hash}", step=step)
