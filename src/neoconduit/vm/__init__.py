"""
VM - script construction for neoconduit.

Deterministic emission of invocation and deployment scripts, and the
verification scripts that back ordinary and multi-signature accounts.
"""

from .contract import (
    multisig_redeem_script,
    parse_multisig,
    script_hash,
    signature_redeem_script,
)
from .opcode import CallFlags, OpCode
from .params import ContractParameter, ContractParameterType
from .nef import make_nef
from .script import CONTRACT_MANAGEMENT, ScriptBuilder, build_deployment, build_invocation

__all__ = [
    "CONTRACT_MANAGEMENT",
    "CallFlags",
    "ContractParameter",
    "ContractParameterType",
    "OpCode",
    "ScriptBuilder",
    "build_deployment",
    "build_invocation",
    "make_nef",
    "multisig_redeem_script",
    "parse_multisig",
    "script_hash",
    "signature_redeem_script",
]
