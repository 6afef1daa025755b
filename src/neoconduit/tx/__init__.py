"""
TX - transaction payloads, fee pricing, and witness assembly.
"""

from .manager import TransactionManager, TxState
from .multisig import is_threshold_met, order_signatures
from .payload import Signer, Transaction, TransactionAttribute, Witness, WitnessScope

__all__ = [
    "Signer",
    "Transaction",
    "TransactionAttribute",
    "TransactionManager",
    "TxState",
    "Witness",
    "WitnessScope",
    "is_threshold_met",
    "order_signatures",
]
