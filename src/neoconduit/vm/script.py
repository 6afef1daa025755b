"""
ScriptBuilder - deterministic NeoVM script emission.

``build_invocation`` and ``build_deployment`` are pure functions of their
inputs: the same arguments always produce byte-identical scripts.  Nonces and
other replay protection live on the transaction, not in the script.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

from ..errors import ScriptBuildFault
from ..manifest.models import ContractManifest
from ..primitives import UInt160, UInt256, parse_account
from .nef import is_nef, make_nef, verify_checksum
from .opcode import CallFlags, Interop, OpCode, interop_hash
from .params import ContractParameter, ContractParameterType

CONTRACT_MANAGEMENT = UInt160.from_string("0xfffdc93764dbaddd97c48f252a53ea4643faa3fd")

_INT_SIZES = (
    (1, OpCode.PUSHINT8),
    (2, OpCode.PUSHINT16),
    (4, OpCode.PUSHINT32),
    (8, OpCode.PUSHINT64),
    (16, OpCode.PUSHINT128),
    (32, OpCode.PUSHINT256),
)


def _signed_le(value: int) -> bytes:
    magnitude = value if value >= 0 else ~value
    length = (magnitude.bit_length() + 8) // 8
    return value.to_bytes(length, "little", signed=True)


class ScriptBuilder:
    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def to_bytes(self) -> bytes:
        return bytes(self._buf)

    def emit(self, opcode: int, operand: bytes = b"") -> "ScriptBuilder":
        self._buf.append(int(opcode))
        self._buf.extend(operand)
        return self

    def emit_int(self, value: int) -> "ScriptBuilder":
        if -1 <= value <= 16:
            return self.emit(OpCode.PUSH0 + value)
        raw = _signed_le(value)
        for size, opcode in _INT_SIZES:
            if len(raw) <= size:
                pad = b"\xff" if value < 0 else b"\x00"
                return self.emit(opcode, raw + pad * (size - len(raw)))
        raise ValueError(f"Integer {value} does not fit in 256 bits")

    def emit_data(self, data: bytes) -> "ScriptBuilder":
        size = len(data)
        if size < 0x100:
            self.emit(OpCode.PUSHDATA1, size.to_bytes(1, "little"))
        elif size < 0x10000:
            self.emit(OpCode.PUSHDATA2, size.to_bytes(2, "little"))
        else:
            self.emit(OpCode.PUSHDATA4, size.to_bytes(4, "little"))
        self._buf.extend(data)
        return self

    def emit_syscall(self, name: str) -> "ScriptBuilder":
        return self.emit(OpCode.SYSCALL, interop_hash(name))

    def emit_push(self, value: Any) -> "ScriptBuilder":
        """Push a Python value using the VM's stack item encoding."""
        if value is None:
            return self.emit(OpCode.PUSHNULL)
        if isinstance(value, bool):
            return self.emit(OpCode.PUSHT if value else OpCode.PUSHF)
        if isinstance(value, int):
            return self.emit_int(value)
        if isinstance(value, (bytes, bytearray)):
            return self.emit_data(bytes(value))
        if isinstance(value, str):
            return self.emit_data(value.encode("utf-8"))
        if isinstance(value, (UInt160, UInt256)):
            return self.emit_data(value.to_array())
        if isinstance(value, ContractParameter):
            return self._emit_parameter(value)
        if isinstance(value, Mapping):
            return self.emit_map(list(value.items()))
        if isinstance(value, Sequence):
            return self.emit_array(value)
        raise TypeError(f"Cannot push value of type {type(value).__name__}")

    def emit_array(self, values: Sequence[Any]) -> "ScriptBuilder":
        if not values:
            return self.emit(OpCode.NEWARRAY0)
        for item in reversed(values):
            self.emit_push(item)
        self.emit_int(len(values))
        return self.emit(OpCode.PACK)

    def emit_map(self, pairs: Sequence[tuple[Any, Any]]) -> "ScriptBuilder":
        if not pairs:
            return self.emit(OpCode.NEWMAP)
        for key, item in reversed(pairs):
            self.emit_push(item)
            self.emit_push(key)
        self.emit_int(len(pairs))
        return self.emit(OpCode.PACKMAP)

    def _emit_parameter(self, param: ContractParameter) -> "ScriptBuilder":
        t = param.type
        if param.value is None or t is ContractParameterType.Any:
            return self.emit(OpCode.PUSHNULL)
        if t is ContractParameterType.Array:
            return self.emit_array(list(param.value))
        if t is ContractParameterType.Map:
            return self.emit_map(list(param.value))
        if t is ContractParameterType.PublicKey and len(param.value) != 33:
            raise TypeError("PublicKey parameter must be a 33-byte compressed point")
        return self.emit_push(param.value)


def _resolve_target(target: Union[UInt160, str]) -> UInt160:
    try:
        return parse_account(target)
    except (ValueError, TypeError, AttributeError) as exc:
        raise ScriptBuildFault(f"Malformed target address {target!r}: {exc}") from exc


def build_invocation(
    target: Union[UInt160, str],
    operation: str,
    args: Sequence[Any] = (),
    flags: CallFlags = CallFlags.ALL,
) -> bytes:
    """Build a script that calls ``operation`` on the contract at ``target``.

    Arguments are pushed in reverse order and packed into one array, followed
    by the call flags, the operation name and the target hash.

    Raises:
        ScriptBuildFault: malformed target, empty operation, or an argument
            that has no stack item encoding.
    """
    script_hash = _resolve_target(target)
    if not operation:
        raise ScriptBuildFault("Operation name must not be empty")

    sb = ScriptBuilder()
    for index, arg in reversed(list(enumerate(args))):
        try:
            sb.emit_push(arg)
        except (TypeError, ValueError) as exc:
            raise ScriptBuildFault(f"Argument {index}: {exc}") from exc
    if args:
        sb.emit_int(len(args))
        sb.emit(OpCode.PACK)
    else:
        sb.emit(OpCode.NEWARRAY0)
    sb.emit_int(int(flags))
    sb.emit_push(operation)
    sb.emit_push(script_hash)
    sb.emit_syscall(Interop.CONTRACT_CALL)
    return sb.to_bytes()


def build_deployment(
    program: bytes,
    manifest: Union[ContractManifest, Mapping[str, Any], str],
) -> bytes:
    """Build a script that calls ``ContractManagement.deploy(nef, manifest)``.

    ``program`` is either a complete NEF file or a raw script, which is then
    wrapped in a NEF with no method tokens.  The manifest is pushed in its
    RFC 8785 canonical form so the script does not depend on key order or
    whitespace in the caller's JSON.
    """
    if not program:
        raise ScriptBuildFault("Program bytes must not be empty")
    if isinstance(manifest, ContractManifest):
        manifest_bytes = manifest.to_canonical_bytes()
    else:
        try:
            manifest_bytes = ContractManifest.from_json(manifest).to_canonical_bytes()
        except ValueError as exc:
            raise ScriptBuildFault(f"Invalid manifest: {exc}") from exc

    if is_nef(program):
        if not verify_checksum(program):
            raise ScriptBuildFault("NEF checksum does not match its contents")
        nef = bytes(program)
    else:
        nef = make_nef(program)
    return build_invocation(CONTRACT_MANAGEMENT, "deploy", [nef, manifest_bytes])


__all__ = ["CONTRACT_MANAGEMENT", "ScriptBuilder", "build_invocation", "build_deployment"]
