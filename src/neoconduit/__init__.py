__all__ = [
    # RPC
    "RpcClient",
    "HttpTransport",
    "Transport",
    "run_sync",
    # Faults
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
    # Primitives
    "UInt160",
    "UInt256",
    "BigDecimal",
    "to_address",
    "to_script_hash",
    # Scripts
    "ScriptBuilder",
    "build_invocation",
    "build_deployment",
    # Keys
    "KeyPair",
    "KeyPairSigner",
    "SigningProvider",
    # Transactions
    "Signer",
    "Transaction",
    "TransactionManager",
    "WitnessScope",
    # Contracts
    "ContractClient",
    "ContractManifest",
    # Config
    "Settings",
]

from .config import Settings
from .contract import ContractClient
from .errors import (
    AlreadySignedFault,
    DecodeFault,
    FeeEstimationFault,
    InsufficientFundsFault,
    MissingSignaturesFault,
    NeoConduitError,
    ProtocolFault,
    ScriptBuildFault,
    SignatureMismatchFault,
    TransactionFault,
    TransportFault,
)
from .manifest.models import ContractManifest
from .primitives import BigDecimal, UInt160, UInt256, to_address, to_script_hash
from .rpc.client import RpcClient
from .rpc.sync import run_sync
from .rpc.transport import HttpTransport, Transport
from .sigil.keys import KeyPair
from .sigil.signer import KeyPairSigner, SigningProvider
from .tx.manager import TransactionManager
from .tx.payload import Signer, Transaction, WitnessScope
from .vm.script import ScriptBuilder, build_deployment, build_invocation
