from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ImportConfig, OutputConfig, SubmissionConfig
from ..models.tax_fields import TaxField
from ..services.header_matching import SUGGESTION_THRESHOLD

"""Config loader for the HS code importer.

Responsibilities:
- Load YAML config (default config/import.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults (first sheet, suggestion threshold 2, 30s timeout)
- Resolve header_overrides keys to TaxField members
- Apply environment overrides for the submission endpoint
"""

DEFAULT_CONFIG_PATH = Path("config/import.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

ENV_API_URL = "HSCODE_API_URL"
ENV_API_TOKEN = "HSCODE_API_TOKEN"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data violates the schema (missing keys, wrong types,
            unknown properties).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _parse_overrides(raw: Mapping[str, str] | None) -> dict[TaxField, str]:
    overrides: dict[TaxField, str] = {}
    for name, header in (raw or {}).items():
        try:
            overrides[TaxField.parse(name)] = header
        except ValueError as e:
            raise ConfigError(f"header_overrides: {e}") from e
    return overrides


def _build_submission(raw: Mapping[str, Any] | None, env: Mapping[str, str]) -> SubmissionConfig:
    raw = raw or {}
    headers = dict(raw.get("headers") or {})
    token = env.get(ENV_API_TOKEN)
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return SubmissionConfig(
        url=env.get(ENV_API_URL) or raw.get("url"),
        timeout=float(raw.get("timeout", 30.0)),
        batch_size=raw.get("batch_size"),
        headers=headers,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH, env: Mapping[str, str] | None = None) -> ImportConfig:
    """Load and validate the import configuration.

    Args:
        path: YAML config file
        env: Environment used for overrides (defaults to os.environ)

    Raises:
        ConfigError: Missing file, invalid YAML, schema violation or an
            unknown field name in header_overrides
    """
    if env is None:
        env = os.environ
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    out_raw = data.get("output") or {}
    return ImportConfig(
        source_file=data["source_file"],
        sheet=data.get("sheet"),
        suggestion_threshold=data.get("suggestion_threshold", SUGGESTION_THRESHOLD),
        keep_na_strings=data.get("keep_na_strings"),
        header_overrides=_parse_overrides(data.get("header_overrides")),
        output=OutputConfig(xlsx=out_raw.get("xlsx"), json=out_raw.get("json")),
        submission=_build_submission(data.get("submission"), env),
    )
