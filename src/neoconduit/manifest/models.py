from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import rfc8785

from .schemas import SchemaRegistry, SchemaValidationError


@dataclass(frozen=True)
class ContractParameterDefinition:
    name: str
    type: str

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type}


@dataclass(frozen=True)
class ContractMethodDescriptor:
    name: str
    parameters: tuple[ContractParameterDefinition, ...] = ()
    return_type: str = "Void"
    offset: int = 0
    safe: bool = False

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [p.to_json() for p in self.parameters],
            "returntype": self.return_type,
            "offset": self.offset,
            "safe": self.safe,
        }


@dataclass(frozen=True)
class ContractEventDescriptor:
    name: str
    parameters: tuple[ContractParameterDefinition, ...] = ()

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "parameters": [p.to_json() for p in self.parameters]}


@dataclass(frozen=True)
class ContractPermission:
    contract: str = "*"
    methods: Union[str, tuple[str, ...]] = "*"

    def to_json(self) -> dict[str, Any]:
        methods = self.methods if self.methods == "*" else list(self.methods)
        return {"contract": self.contract, "methods": methods}


def _params(raw: list[dict[str, Any]]) -> tuple[ContractParameterDefinition, ...]:
    return tuple(ContractParameterDefinition(p["name"], p["type"]) for p in raw)


@dataclass(frozen=True)
class ContractManifest:
    """Metadata describing a deployed program's ABI and permissions."""

    name: str
    methods: tuple[ContractMethodDescriptor, ...] = ()
    events: tuple[ContractEventDescriptor, ...] = ()
    permissions: tuple[ContractPermission, ...] = (ContractPermission(),)
    groups: tuple[dict[str, str], ...] = ()
    features: Mapping[str, Any] = field(default_factory=dict)
    supported_standards: tuple[str, ...] = ()
    trusts: Union[str, tuple[str, ...]] = ()
    extra: Optional[Any] = None

    @classmethod
    def from_json(
        cls,
        payload: Union[Mapping[str, Any], str, bytes],
        registry: Optional[SchemaRegistry] = None,
    ) -> "ContractManifest":
        if isinstance(payload, (str, bytes)):
            payload = json.loads(payload)
        if not isinstance(payload, Mapping):
            raise SchemaValidationError("Manifest must be a JSON object.")
        registry = registry or SchemaRegistry.default()
        registry.validate(dict(payload))

        abi = payload["abi"]
        trusts = payload.get("trusts", [])
        return cls(
            name=payload["name"],
            methods=tuple(
                ContractMethodDescriptor(
                    name=m["name"],
                    parameters=_params(m["parameters"]),
                    return_type=m["returntype"],
                    offset=m.get("offset", 0),
                    safe=m.get("safe", False),
                )
                for m in abi["methods"]
            ),
            events=tuple(
                ContractEventDescriptor(e["name"], _params(e["parameters"]))
                for e in abi["events"]
            ),
            permissions=tuple(
                ContractPermission(
                    p["contract"],
                    p["methods"] if p["methods"] == "*" else tuple(p["methods"]),
                )
                for p in payload["permissions"]
            ),
            groups=tuple(dict(g) for g in payload.get("groups", [])),
            features=dict(payload.get("features", {})),
            supported_standards=tuple(payload.get("supportedstandards", [])),
            trusts=trusts if trusts == "*" else tuple(trusts),
            extra=payload.get("extra"),
        )

    @classmethod
    def from_path(cls, path: Path, registry: Optional[SchemaRegistry] = None) -> "ContractManifest":
        with path.open("r", encoding="utf-8") as f:
            return cls.from_json(json.load(f), registry=registry)

    def method(self, name: str) -> Optional[ContractMethodDescriptor]:
        return next((m for m in self.methods if m.name == name), None)

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "groups": [dict(g) for g in self.groups],
            "features": dict(self.features),
            "supportedstandards": list(self.supported_standards),
            "abi": {
                "methods": [m.to_json() for m in self.methods],
                "events": [e.to_json() for e in self.events],
            },
            "permissions": [p.to_json() for p in self.permissions],
            "trusts": self.trusts if self.trusts == "*" else list(self.trusts),
            "extra": self.extra,
        }

    def to_canonical_bytes(self) -> bytes:
        """RFC 8785 canonical JSON, the exact bytes embedded in deployment scripts."""
        return rfc8785.dumps(self.to_json())


__all__ = [
    "ContractEventDescriptor",
    "ContractManifest",
    "ContractMethodDescriptor",
    "ContractParameterDefinition",
    "ContractPermission",
]
