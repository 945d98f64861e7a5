"""
Compiler settings loaded from YAML.

The packaged ``config/compiler.yaml`` supplies the defaults; callers may point
at their own file or build ``CompilerSettings`` directly.
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import FormulaConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "compiler.yaml"


class CompilerSettings(BaseModel):
    """Settings shared by the parser, the tree codec and the engine."""

    known_references: List[str] = Field(default_factory=list)
    equality_symbol: Literal["=", "=="] = "="
    max_nesting_depth: int = Field(default=64, ge=1)

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "known_references": ["A1", "B1", "[15401]", "STRUC_HRS"],
                    "equality_symbol": "=",
                    "max_nesting_depth": 64,
                }
            ]
        },
    )


def _read_yaml(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise FormulaConfigError(f"Expected a mapping in {path}, got {type(config).__name__}")
    return config


def load_settings(path: Optional[Union[str, Path]] = None) -> CompilerSettings:
    """Load compiler settings.

    Args:
        path: YAML file to read. When omitted the packaged defaults are used.

    Returns:
        CompilerSettings: Validated settings.

    Raises:
        FormulaConfigError: If an explicitly given file is missing or invalid.
    """
    if path is not None:
        config_path = Path(path)
        try:
            settings = CompilerSettings(**_read_yaml(config_path))
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise FormulaConfigError(
                f"Failed to load settings from {config_path}: {e}"
            ) from e
        logger.info(f"Loaded compiler settings from {config_path}")
        return settings

    try:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.error(f"Settings file not found: {DEFAULT_CONFIG_PATH}")
            return CompilerSettings()

        settings = CompilerSettings(**_read_yaml(DEFAULT_CONFIG_PATH))
        logger.debug(f"Loaded default compiler settings from {DEFAULT_CONFIG_PATH}")
        return settings

    except (OSError, yaml.YAMLError, ValidationError, FormulaConfigError) as e:
        logger.error(f"Failed to load default settings, using built-in values: {e}")
        return CompilerSettings()


__all__ = ["CompilerSettings", "DEFAULT_CONFIG_PATH", "load_settings"]
