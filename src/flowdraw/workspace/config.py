# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Render configuration: an immutable settings object loaded from YAML.

The configuration is built once at startup and passed explicitly into every
pipeline invocation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".flowdraw.yaml"


class RenderConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


class RenderConfig(BaseModel):
    """Theme, security, font, timing, layout and AI settings.

    Keys use kebab case in YAML (``security-level: strict``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    theme: Literal["light", "dark"] = "light"
    security_level: Literal["strict", "loose"] = Field(alias="security-level", default="strict")
    font_family: str = Field(alias="font-family", default="Inter, sans-serif")
    font_size: float = Field(alias="font-size", default=14.0, gt=0)
    debounce_ms: int = Field(alias="debounce-ms", default=300, ge=0)

    node_width: float = Field(alias="node-width", default=120.0, gt=0)
    node_height: float = Field(alias="node-height", default=48.0, gt=0)
    node_gap: float = Field(alias="node-gap", default=40.0, ge=0)
    rank_gap: float = Field(alias="rank-gap", default=60.0, ge=0)
    padding: float = Field(default=24.0, ge=0)
    label_padding: float = Field(alias="label-padding", default=14.0, ge=0)

    ai_model: str = Field(alias="ai-model", default="gemini-3-flash-preview")
    ai_temperature: float = Field(alias="ai-temperature", default=0.2, ge=0, le=2)

    @property
    def char_width(self) -> float:
        """Approximate advance width of one label character."""
        return self.font_size * 0.6


DEFAULT_CONFIG = RenderConfig()


def load_render_config(path: Path) -> RenderConfig:
    """Load and validate a render configuration file.

    An empty file yields the defaults.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A frozen RenderConfig instance.

    Raises:
        RenderConfigError: If the file cannot be read, is not valid YAML, or
            does not conform to the schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise RenderConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise RenderConfigError(f"Cannot read config file: {exc}") from exc

    return _parse_render_config(text, source_label=str(path))


# ################
# Implementation
# ################


def _parse_render_config(text: str, source_label: str = "<string>") -> RenderConfig:
    """Parse configuration YAML text into a RenderConfig.

    Raises:
        RenderConfigError: If the YAML is invalid or violates the schema.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RenderConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RenderConfigError(f"{source_label}: configuration must be a YAML mapping")

    try:
        return RenderConfig.model_validate(data)
    except ValidationError as exc:
        raise RenderConfigError(f"Invalid configuration in {source_label}: {exc}") from exc
