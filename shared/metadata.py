"""
Extension metadata loading and validation.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


class MetadataValidationError(ValueError):
    """Raised when a metadata file is missing required data or is malformed."""


@dataclass(frozen=True)
class MetadataConstraints:
    """Schema constraints as simple dataclass constants."""

    max_name_length: int = 80
    max_description_length: int = 400
    default_settings_schema: str = "org.gnome.pomodoro.preferences"


_UUID_PATTERN = re.compile(r"^[A-Za-z0-9._-]+@[A-Za-z0-9._-]+$")
_VERSION_PATTERN = re.compile(r"^\d+(\.\d+)*$")


@dataclass(frozen=True)
class ExtensionMetadata:
    uuid: str
    name: str
    version: str
    settings_schema: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ExtensionMetadata":
        normalized = validate_metadata(raw)
        return cls(
            uuid=normalized["uuid"],
            name=normalized["name"],
            version=normalized["version"],
            settings_schema=normalized["settings-schema"],
            description=normalized["description"],
        )


def load_metadata(path: Path) -> ExtensionMetadata:
    """
    Load a metadata JSON file and validate it against the expected schema.
    """
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise MetadataValidationError(f"Metadata file not found: {path}") from exc
    except OSError as exc:
        raise MetadataValidationError(f"Unable to read metadata: {path}") from exc

    try:
        raw_metadata = json.loads(contents)
    except json.JSONDecodeError as exc:
        raise MetadataValidationError(f"Metadata is not valid JSON: {exc}") from exc

    if not isinstance(raw_metadata, dict):
        raise MetadataValidationError("Metadata root must be a JSON object.")

    return ExtensionMetadata.from_dict(raw_metadata)


def validate_metadata(raw_metadata: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a normalized metadata dictionary with defaults applied.
    """
    constraints = MetadataConstraints()

    uuid = _require_string(raw_metadata.get("uuid"), field="uuid", required=True)
    if not _UUID_PATTERN.match(uuid):
        raise MetadataValidationError("uuid must look like 'name@domain'.")

    name = _require_string(
        raw_metadata.get("name"),
        field="name",
        max_length=constraints.max_name_length,
        required=True,
    )

    version_raw = raw_metadata.get("version")
    if isinstance(version_raw, int) and not isinstance(version_raw, bool):
        version_raw = str(version_raw)
    version = _require_string(version_raw, field="version", required=True)
    if not _VERSION_PATTERN.match(version):
        raise MetadataValidationError("version must be dot separated numbers.")

    schema = raw_metadata.get("settings-schema")
    if schema is None or (isinstance(schema, str) and schema.strip() == ""):
        schema = constraints.default_settings_schema
    else:
        schema = _require_string(schema, field="settings-schema", required=False)

    description = _require_string(
        raw_metadata.get("description"),
        field="description",
        max_length=constraints.max_description_length,
        required=False,
    )

    return {
        "uuid": uuid,
        "name": name,
        "version": version,
        "settings-schema": schema,
        "description": description or None,
    }


def _require_string(
    value: Any,
    *,
    field: str,
    max_length: Optional[int] = None,
    required: bool,
) -> str:
    if value is None:
        if required:
            raise MetadataValidationError(f"{field} is required.")
        return ""
    if not isinstance(value, str):
        raise MetadataValidationError(f"{field} must be a string.")
    cleaned = value.strip()
    if required and not cleaned:
        raise MetadataValidationError(f"{field} must not be empty.")
    if max_length is not None and len(cleaned) > max_length:
        raise MetadataValidationError(f"{field} must be at most {max_length} characters.")
    return cleaned
