"""
Config Loader — Build HandlerOptions from defaults, env vars, and YAML.

Layers, lowest priority first:
1. Built-in defaults (500x500, quality 90, jpeg)
2. Environment variables (FILE_HANDLER_*)
3. A YAML options file
4. Explicit overrides (e.g. CLI flags); None values are ignored

## Usage

    from file_handler.config.loader import load_options

    options = load_options({"format": "webp"}, config_path=Path("options.yaml"))

## Environment Variables

- FILE_HANDLER_MAX_WIDTH
- FILE_HANDLER_MAX_HEIGHT
- FILE_HANDLER_QUALITY
- FILE_HANDLER_FORMAT
- FILE_HANDLER_SKIP_IMAGE_OPTIMIZATION
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import AliasChoices
from pydantic import ValidationError as PydanticValidationError

from ..models.options import HandlerOptions
from ..validation import ConfigurationError

logger = logging.getLogger(__name__)

ENV_VARS = {
    "max_width": "FILE_HANDLER_MAX_WIDTH",
    "max_height": "FILE_HANDLER_MAX_HEIGHT",
    "quality": "FILE_HANDLER_QUALITY",
    "format": "FILE_HANDLER_FORMAT",
    "skip_image_optimization": "FILE_HANDLER_SKIP_IMAGE_OPTIMIZATION",
}

OptionsLike = Union[HandlerOptions, Mapping[str, Any], None]


def _alias_map() -> Dict[str, str]:
    """Map every accepted spelling to its field name."""
    aliases: Dict[str, str] = {}
    for name, info in HandlerOptions.model_fields.items():
        aliases[name] = name
        if isinstance(info.validation_alias, AliasChoices):
            for choice in info.validation_alias.choices:
                if isinstance(choice, str):
                    aliases[choice] = name
    return aliases


def canonical_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Rewrite alias keys (maxWidth, targetFormat, ...) to field names.

    Keys that are not options are dropped, as are None values.
    """
    aliases = _alias_map()
    result: Dict[str, Any] = {}
    for key, value in data.items():
        name = aliases.get(key)
        if name is None or value is None:
            continue
        result[name] = value
    return result


def build_options(*layers: OptionsLike) -> HandlerOptions:
    """
    Merge option layers left to right and validate the result.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer is None:
            continue
        if isinstance(layer, HandlerOptions):
            merged.update(layer.model_dump())
        else:
            merged.update(canonical_keys(layer))

    try:
        return HandlerOptions.model_validate(merged)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigurationError(f"Invalid handler options: {'; '.join(errors)}") from e


def options_from_env(env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect FILE_HANDLER_* variables that are set and non-empty."""
    source = os.environ if env is None else env
    values: Dict[str, Any] = {}
    for name, var in ENV_VARS.items():
        raw = source.get(var)
        if raw is not None and raw.strip():
            values[name] = raw.strip()
    return values


def options_from_file(path: Path) -> Dict[str, Any]:
    """
    Read an options mapping from a YAML file.

    Raises:
        ConfigurationError: If the file is missing or not a YAML mapping.
    """
    if not path.exists():
        raise ConfigurationError(f"Options file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in options file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file must contain a mapping: {path}")

    logger.debug(f"Loaded options from {path}: {sorted(data)}")
    return data


def load_options(
    overrides: OptionsLike = None,
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> HandlerOptions:
    """
    Load options from environment, an optional YAML file, and overrides.

    Returns:
        Validated, frozen HandlerOptions.
    """
    env_layer = options_from_env(env)
    file_layer = options_from_file(config_path) if config_path else None

    options = build_options(env_layer, file_layer, overrides)
    logger.debug(
        f"Options: {options.max_width}x{options.max_height} "
        f"q={options.quality} format={options.format.value} "
        f"skip={options.skip_image_optimization}"
    )
    return options
