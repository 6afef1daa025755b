"""
Transaction Manager - build, price, and sign one transaction.

Lifecycle:
    DRAFTING              register signers, then ``make_transaction``
    AWAITING_SIGNATURES   collect signatures (single-key or m-of-n)
    SIGNED                ``sign`` assembled the witnesses; nothing may change

Fees come from the node: the system fee is the gas a simulated run of the
script consumed, the network fee is the serialized size times the fee per
byte plus the cost of running every verification script.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Union

from ..config import DEFAULT_VALID_HORIZON
from ..errors import (
    AlreadySignedFault,
    FeeEstimationFault,
    InsufficientFundsFault,
    MissingSignaturesFault,
    SignatureMismatchFault,
    TransactionFault,
)
from ..primitives import UInt160, parse_account, to_address
from ..rpc.client import RpcClient
from ..rpc.sync import blocking
from ..sigil.keys import KeyPair, verify_signature
from ..sigil.signer import SigningProvider
from ..vm.contract import (
    multisig_contract_cost,
    multisig_redeem_script,
    script_hash,
    signature_contract_cost,
    signature_redeem_script,
)
from .multisig import invocation_script, is_threshold_met, order_signatures
from .payload import Signer, Transaction, TransactionAttribute, Witness, WitnessScope

log = logging.getLogger(__name__)

# Length of a single-signature verification script: PUSHDATA1 33 <key> SYSCALL <4>
_SIGNATURE_SCRIPT_SIZE = 40


class TxState(enum.Enum):
    DRAFTING = "drafting"
    AWAITING_SIGNATURES = "awaiting_signatures"
    SIGNED = "signed"


@dataclass
class _SignerContext:
    account: UInt160
    verification: bytes
    m: int
    public_keys: tuple[bytes, ...]
    signatures: dict[bytes, bytes] = field(default_factory=dict)

    @property
    def cost(self) -> int:
        if self.m == 1 and len(self.public_keys) == 1:
            return signature_contract_cost()
        return multisig_contract_cost(self.m, len(self.public_keys))

    def witness(self) -> Witness:
        if len(self.public_keys) == 1:
            sigs = [self.signatures[self.public_keys[0]]]
        else:
            sigs = order_signatures(self.m, self.public_keys, self.signatures)
        return Witness(invocation_script(sigs), self.verification)


def _single(public_key: bytes) -> _SignerContext:
    verification = signature_redeem_script(public_key)
    return _SignerContext(script_hash(verification), verification, 1, (public_key,))


def _multi(m: int, public_keys: Sequence[bytes]) -> _SignerContext:
    verification = multisig_redeem_script(m, public_keys)
    return _SignerContext(script_hash(verification), verification, m, tuple(public_keys))


class TransactionManager:
    """Builds one transaction for ``sender`` and collects its witnesses."""

    def __init__(
        self,
        client: RpcClient,
        sender: Union[UInt160, str],
        *,
        network: Optional[int] = None,
        valid_horizon: int = DEFAULT_VALID_HORIZON,
    ) -> None:
        self.client = client
        self.sender = parse_account(sender)
        self.network = network
        self.valid_horizon = valid_horizon
        self.state = TxState.DRAFTING
        self._tx: Optional[Transaction] = None
        self._contexts: dict[UInt160, _SignerContext] = {}
        self._pending: list[tuple[Union[KeyPair, SigningProvider], UInt160]] = []
        self._lock = threading.Lock()

    @property
    def blocking_timeout(self) -> Optional[float]:
        return self.client.blocking_timeout

    @property
    def transaction(self) -> Optional[Transaction]:
        return self._tx

    def _ensure_mutable(self) -> None:
        if self.state is TxState.SIGNED:
            raise AlreadySignedFault("Transaction is already signed")

    def _transition(self, state: TxState) -> None:
        log.info("Transaction %s -> %s", self.state.value, state.value)
        self.state = state

    # ============ Registration ============

    def _register(self, ctx: _SignerContext) -> _SignerContext:
        with self._lock:
            self._ensure_mutable()
            existing = self._contexts.get(ctx.account)
            if existing is not None:
                return existing
            if self._tx is not None and ctx.account not in {s.account for s in self._tx.signers}:
                raise TransactionFault(f"{to_address(ctx.account)} is not a signer of this transaction")
            self._contexts[ctx.account] = ctx
            return ctx

    def register_signature(self, public_key: bytes) -> UInt160:
        """Declare a single-key account so its verification cost is priced in."""
        return self._register(_single(public_key)).account

    def register_multi_sig(self, m: int, public_keys: Sequence[bytes]) -> UInt160:
        """Declare an m-of-n account so its verification cost is priced in."""
        return self._register(_multi(m, public_keys)).account

    # ============ Building ============

    def _estimate_size(self, tx: Transaction) -> int:
        witnesses = []
        for signer in tx.signers:
            ctx = self._contexts.get(signer.account)
            if ctx is None:
                witnesses.append(Witness(bytes(66), bytes(_SIGNATURE_SCRIPT_SIZE)))
            else:
                witnesses.append(Witness(bytes(66 * ctx.m), ctx.verification))
        return tx.with_witnesses(witnesses).size

    def _verification_cost(self, tx: Transaction) -> int:
        total = 0
        for signer in tx.signers:
            ctx = self._contexts.get(signer.account)
            total += signature_contract_cost() if ctx is None else ctx.cost
        return total

    async def make_transaction_async(
        self,
        script: bytes,
        signers: Optional[Sequence[Signer]] = None,
        attributes: Optional[Sequence[TransactionAttribute]] = None,
        *,
        budget: Optional[int] = None,
    ) -> Transaction:
        """Price ``script`` against the node and fix the unsigned transaction.

        Raises:
            FeeEstimationFault: the simulated run faulted.
            InsufficientFundsFault: system plus network fee exceed ``budget``.
        """
        if self.state is not TxState.DRAFTING:
            self._ensure_mutable()
            raise TransactionFault("Transaction has already been made")
        if not script:
            raise TransactionFault("Script must not be empty")

        signer_list = list(signers or ())
        own = next((s for s in signer_list if s.account == self.sender), None)
        if own is None:
            own = Signer(self.sender, WitnessScope.CALLED_BY_ENTRY)
        else:
            signer_list.remove(own)
        signer_list.insert(0, own)

        block_count = await self.client.get_block_count_async()
        if self.network is None:
            version = await self.client.get_version_async()
            if version.network is None:
                raise TransactionFault("Node did not report its network magic")
            self.network = version.network
        fee_per_byte = await self.client.get_fee_per_byte_async()
        exec_fee_factor = await self.client.get_exec_fee_factor_async()

        result = await self.client.invoke_script_async(script, *(s.account for s in signer_list))
        if not result.halted or result.exception:
            raise FeeEstimationFault(
                f"Simulation ended in {result.state}: {result.exception or 'no exception message'}"
            )

        try:
            tx = Transaction(
                script=bytes(script),
                signers=tuple(signer_list),
                attributes=tuple(attributes or ()),
                system_fee=result.gas_consumed,
                valid_until_block=block_count - 1 + self.valid_horizon,
            )
        except ValueError as exc:
            raise TransactionFault(str(exc)) from exc

        network_fee = (
            self._estimate_size(tx) * fee_per_byte
            + self._verification_cost(tx) * exec_fee_factor
        )
        tx = replace(tx, network_fee=network_fee)
        required = tx.system_fee + tx.network_fee
        if budget is not None and required > budget:
            raise InsufficientFundsFault(required, budget)

        log.debug(
            "Priced transaction: sysfee=%d netfee=%d valid_until=%d",
            tx.system_fee,
            tx.network_fee,
            tx.valid_until_block,
        )
        with self._lock:
            self._ensure_mutable()
            if self.state is not TxState.DRAFTING:
                raise TransactionFault("Transaction has already been made")
            self._tx = tx
            pending, self._pending = self._pending, []
            self._transition(TxState.AWAITING_SIGNATURES)

        for signer, account in pending:
            await self._sign_with(signer, account)
        return tx

    make_transaction = blocking(make_transaction_async)

    # ============ Signatures ============

    def _sign_data(self) -> bytes:
        if self._tx is None or self.network is None:
            raise TransactionFault("No transaction to sign yet; call make_transaction first")
        return self._tx.get_sign_data(self.network)

    def _record(self, account: UInt160, public_key: bytes, signature: bytes) -> None:
        with self._lock:
            self._ensure_mutable()
            if self._tx is None:
                raise TransactionFault("No transaction to sign yet; call make_transaction first")
            ctx = self._contexts.get(account)
            if ctx is None or public_key not in ctx.public_keys:
                raise TransactionFault(f"Key {public_key.hex()} does not belong to {to_address(account)}")
            if not verify_signature(self._sign_data(), signature, public_key):
                raise SignatureMismatchFault(public_key)
            ctx.signatures[public_key] = signature

    async def _sign_with(self, signer: Union[KeyPair, SigningProvider], account: UInt160) -> None:
        data = self._sign_data()
        if isinstance(signer, KeyPair):
            public_key = signer.public_key
            signature = signer.sign(data)
        else:
            public_key = signer.public_key(account)
            signature = await signer.sign(data, account)
        self._record(account, public_key, signature)

    async def _queue_or_sign(self, signer: Union[KeyPair, SigningProvider], account: UInt160) -> None:
        with self._lock:
            if self.state is TxState.DRAFTING:
                self._pending.append((signer, account))
                return
        await self._sign_with(signer, account)

    async def add_signature_async(
        self,
        key_or_provider: Union[KeyPair, SigningProvider],
        account: Optional[Union[UInt160, str]] = None,
    ) -> UInt160:
        """Sign as a single-key account.

        With a ``KeyPair`` the account is derived from the key.  A signing
        provider signs for ``account``, defaulting to the sender.  Before
        ``make_transaction`` the signer is only registered, and signs once
        the transaction exists.
        """
        if isinstance(key_or_provider, KeyPair):
            public_key = key_or_provider.public_key
        else:
            public_key = key_or_provider.public_key(parse_account(account or self.sender))
        ctx = self._register(_single(public_key))
        await self._queue_or_sign(key_or_provider, ctx.account)
        return ctx.account

    add_signature = blocking(add_signature_async)

    async def add_multi_sig_async(self, key: KeyPair, m: int, public_keys: Sequence[bytes]) -> UInt160:
        """Add ``key``'s signature for the m-of-n account over ``public_keys``."""
        ctx = self._register(_multi(m, public_keys))
        if key.public_key not in ctx.public_keys:
            raise TransactionFault(f"Key {key.public_key.hex()} is not one of the account keys")
        await self._queue_or_sign(key, ctx.account)
        return ctx.account

    add_multi_sig = blocking(add_multi_sig_async)

    def add_multi_sig_signature(
        self,
        public_key: bytes,
        signature: bytes,
        m: int,
        public_keys: Sequence[bytes],
    ) -> UInt160:
        """Add a signature produced elsewhere for the m-of-n account.

        Raises:
            SignatureMismatchFault: the signature does not verify against
                ``public_key`` and the sign data; it is not counted.
        """
        ctx = self._register(_multi(m, public_keys))
        self._record(ctx.account, public_key, signature)
        return ctx.account

    def signatures_collected(self, account: Union[UInt160, str]) -> int:
        ctx = self._contexts.get(parse_account(account))
        return 0 if ctx is None else len(ctx.signatures)

    def sign(self) -> Transaction:
        """Assemble the witnesses in signer order and freeze the transaction.

        Raises:
            MissingSignaturesFault: an account is below its threshold.
            AlreadySignedFault: called a second time.
        """
        with self._lock:
            self._ensure_mutable()
            if self._tx is None:
                raise TransactionFault("No transaction to sign yet; call make_transaction first")
            witnesses = []
            for signer in self._tx.signers:
                ctx = self._contexts.get(signer.account)
                if ctx is None:
                    raise MissingSignaturesFault(to_address(signer.account), 0, 1)
                if not is_threshold_met(ctx.m, ctx.signatures):
                    raise MissingSignaturesFault(to_address(signer.account), len(ctx.signatures), ctx.m)
                witnesses.append(ctx.witness())
            self._tx = self._tx.with_witnesses(witnesses)
            self._transition(TxState.SIGNED)
            log.info("Signed transaction %s", self._tx.hash)
            return self._tx


__all__ = ["TransactionManager", "TxState"]
