"""
Error taxonomy shared by the ARK DEX adapter.

Every error carries a stable ``kind`` identifier, a human-readable message and
an optional wrapped ``cause``. Errors surfaced to the DEX host are
:class:`InvalidActionError` instances whose ``kind`` is one of the constants
below; :class:`TransportError` marks faults that callers may retry.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

MULTISIG_ACCOUNT_DID_NOT_EXIST = "MultisigAccountDidNotExistError"
ACCOUNT_DID_NOT_EXIST = "AccountDidNotExistError"
ACCOUNT_WAS_NOT_MULTISIG = "AccountWasNotMultisigError"
ACCOUNT_QUERY_ERROR = "AccountQueryError"
BLOCK_DID_NOT_EXIST = "BlockDidNotExistError"
TRANSACTION_BROADCAST_ERROR = "TransactionBroadcastError"


class AdapterError(RuntimeError):
    """Base class for every error raised by the adapter."""

    retryable = False

    def __init__(self, message: str, *, kind: Optional[str] = None, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind or type(self).__name__
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.kind,
            "type": type(self).__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause is not None else None,
        }


class AdapterConfigError(AdapterError):
    """Raised when the adapter configuration is missing or invalid."""


class TransportError(AdapterError):
    """Network failure, timeout or 5xx response. Safe to retry with backoff."""

    retryable = True


class SchemaError(AdapterError):
    """Raised when an API payload does not have the expected shape."""


class SignatureError(AdapterError):
    """Raised when signatures cannot be reconciled against the wallet members."""


class FetchCancelledError(AdapterError):
    """Raised when a paginated fetch is cancelled between two pages."""


class WalletNotFoundError(AdapterError):
    """The wallet address has no account on chain."""


class WalletNotMultisigError(AdapterError):
    """The account exists but carries no multisignature attribute."""


class InvalidActionError(AdapterError):
    """
    Error surfaced to the DEX host for a failed action.

    ``kind`` is the stable error name the host matches on, e.g.
    :data:`BLOCK_DID_NOT_EXIST`.
    """

    def __init__(self, kind: str, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message, kind=kind, cause=cause)

    @property
    def name(self) -> str:
        return self.kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"
