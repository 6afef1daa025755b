"""
Fault taxonomy for neoconduit.

Every fault raised by the RPC core, the script builder and the transaction
manager derives from ``NeoConduitError``.  Each class carries an ``exit_code``
so the CLI can map faults to process exit statuses.
"""

from __future__ import annotations

from typing import Any, Optional


class NeoConduitError(RuntimeError):
    exit_code: int = 1


# ============ RPC core ============


class TransportFault(NeoConduitError):
    """The exchange with the node failed: connection, status or malformed body."""

    exit_code = 10

    def __init__(self, message: str, *, status: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ProtocolFault(NeoConduitError):
    """The node answered with an explicit JSON-RPC error object."""

    exit_code = 11

    def __init__(
        self,
        code: int,
        message: str,
        data: Any = None,
        method: Optional[str] = None,
    ) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data
        self.method = method


class DecodeFault(NeoConduitError):
    """A well-formed response did not have the expected shape."""

    exit_code = 12

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


# ============ Script builder ============


class ScriptBuildFault(NeoConduitError):
    exit_code = 20


# ============ Transaction manager ============


class TransactionFault(NeoConduitError):
    exit_code = 30


class FeeEstimationFault(TransactionFault):
    exit_code = 31


class InsufficientFundsFault(TransactionFault):
    exit_code = 32

    def __init__(self, required: int, budget: int) -> None:
        super().__init__(f"Fees of {required} exceed the budget of {budget}")
        self.required = required
        self.budget = budget


class SignatureMismatchFault(TransactionFault):
    exit_code = 33

    def __init__(self, public_key: bytes, message: str = "Signature does not verify") -> None:
        super().__init__(f"{message} (public key {public_key.hex()})")
        self.public_key = public_key


class AlreadySignedFault(TransactionFault):
    exit_code = 34


class MissingSignaturesFault(TransactionFault):
    exit_code = 35

    def __init__(self, account: str, collected: int, required: int) -> None:
        super().__init__(
            f"Signer {account} has {collected} of {required} required signatures"
        )
        self.account = account
        self.collected = collected
        self.required = required


__all__ = [
    "NeoConduitError",
    "TransportFault",
    "ProtocolFault",
    "DecodeFault",
    "ScriptBuildFault",
    "TransactionFault",
    "FeeEstimationFault",
    "InsufficientFundsFault",
    "SignatureMismatchFault",
    "AlreadySignedFault",
    "MissingSignaturesFault",
]
