"""
Manifest schema validation.

The JSON schema ships inside the package under ``schemas/v1``.
"""

from __future__ import annotations

import json
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import FormatChecker

MANIFEST_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "v1" / "contract.manifest.schema.json"


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message if not errors else f"{message} {'; '.join(errors)}")
        self.errors = errors or []


class SchemaRegistry:
    """Validates manifests against one schema file, loaded once."""

    def __init__(self, schema_path: Path = MANIFEST_SCHEMA_PATH) -> None:
        self.schema_path = schema_path

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return _default_registry()

    @cached_property
    def validator(self) -> jsonschema.Validator:
        with self.schema_path.open("r", encoding="utf-8") as f:
            schema = json.load(f)
        validator_cls = jsonschema.validators.validator_for(schema)
        validator_cls.check_schema(schema)
        return validator_cls(schema, format_checker=FormatChecker())

    def validate(self, instance: Any) -> None:
        errors = sorted(self.validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
        if errors:
            raise SchemaValidationError(
                f"Manifest does not match {self.schema_path.name}.",
                errors=[_format_error(err) for err in errors],
            )


def _format_error(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(part) for part in error.path) or "<root>"
    return f"{location}: {error.message}"


@lru_cache(maxsize=1)
def _default_registry() -> SchemaRegistry:
    return SchemaRegistry()


__all__ = ["MANIFEST_SCHEMA_PATH", "SchemaRegistry", "SchemaValidationError"]
