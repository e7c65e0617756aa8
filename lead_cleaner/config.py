"""Configuration helpers for filter and export profiles."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .models import DEFAULT_PLACEHOLDER_NAME, EXPORT_FORMATS, DateRange, ExportSettings, FilterOptions
from .pipeline.chunks import DEFAULT_CHUNK_SIZE
from .pipeline.dates import parse_date_bound

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

_FILTER_FLAGS = ("remove_duplicates", "format_numbers", "remove_invalid", "remove_empty")
_FILTER_KEYS = set(_FILTER_FLAGS) | {"date_range", "regex_filter"}
_EXPORT_KEYS = {"format", "sms_text", "include_names", "placeholder_name", "encoding"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def _section(config: Mapping[str, Any], name: str, known: set) -> Mapping[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    for key in section:
        if key not in known:
            LOGGER.debug("Ignoring unknown %s option %s", name, key)
    return section


def _flag(section: Mapping[str, Any], name: str, key: str) -> bool:
    value = section.get(key, False)
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{name}.{key}' must be true or false, got {value!r}")
    return value


def filter_options_from_config(config: Mapping[str, Any]) -> FilterOptions:
    """Build :class:`FilterOptions` from the ``filters`` section."""

    section = _section(config, "filters", _FILTER_KEYS)
    flags = {flag: _flag(section, "filters", flag) for flag in _FILTER_FLAGS}

    range_cfg = section.get("date_range") or {}
    if not isinstance(range_cfg, Mapping):
        raise ConfigurationError("'filters.date_range' must be a mapping with 'start' and/or 'end'")
    date_range = DateRange(
        start=parse_date_bound(range_cfg.get("start")),
        end=parse_date_bound(range_cfg.get("end"), end=True),
    )

    regex_filter = section.get("regex_filter") or ""
    return FilterOptions(date_range=date_range, regex_filter=str(regex_filter), **flags)


def export_settings_from_config(config: Mapping[str, Any]) -> ExportSettings:
    """Build :class:`ExportSettings` from the ``export`` section."""

    section = _section(config, "export", _EXPORT_KEYS)
    export_format = str(section.get("format", "omnichat")).lower()
    if export_format not in EXPORT_FORMATS:
        raise ConfigurationError(f"Unsupported export format '{export_format}'. Choose one of {list(EXPORT_FORMATS)}")

    return ExportSettings(
        format=export_format,
        sms_text=str(section.get("sms_text") or ""),
        include_names=_flag(section, "export", "include_names"),
        placeholder_name=str(section.get("placeholder_name") or DEFAULT_PLACEHOLDER_NAME),
        encoding=str(section.get("encoding") or "utf-8"),
    )


def chunk_size_from_config(config: Mapping[str, Any]) -> int:
    section = _section(config, "pipeline", {"chunk_size"})
    try:
        chunk_size = int(section.get("chunk_size", DEFAULT_CHUNK_SIZE))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("'pipeline.chunk_size' must be an integer") from exc
    if chunk_size <= 0:
        raise ConfigurationError("'pipeline.chunk_size' must be positive")
    return chunk_size


__all__ = [
    "ConfigurationError",
    "load_configuration",
    "filter_options_from_config",
    "export_settings_from_config",
    "chunk_size_from_config",
]
