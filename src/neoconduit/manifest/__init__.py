"""
Manifest - contract manifest model, schema validation and canonical encoding.
"""

from .models import (
    ContractEventDescriptor,
    ContractManifest,
    ContractMethodDescriptor,
    ContractParameterDefinition,
    ContractPermission,
)
from .schemas import SchemaRegistry, SchemaValidationError

__all__ = [
    "ContractEventDescriptor",
    "ContractManifest",
    "ContractMethodDescriptor",
    "ContractParameterDefinition",
    "ContractPermission",
    "SchemaRegistry",
    "SchemaValidationError",
]
