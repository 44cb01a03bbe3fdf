# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the render configuration module."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from flowdraw.workspace import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG,
    RenderConfig,
    RenderConfigError,
    load_render_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a render config file and return its path."""
    config_file = tmp_path / CONFIG_FILE_NAME
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_defaults() -> None:
    """The default configuration matches the documented values."""
    assert DEFAULT_CONFIG.theme == "light"
    assert DEFAULT_CONFIG.security_level == "strict"
    assert DEFAULT_CONFIG.debounce_ms == 300
    assert DEFAULT_CONFIG.ai_model == "gemini-3-flash-preview"
    assert DEFAULT_CONFIG.ai_temperature == 0.2


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    """An empty file is a valid configuration with every default."""
    assert load_render_config(_write_config(tmp_path, "")) == DEFAULT_CONFIG


def test_kebab_case_keys(tmp_path: Path) -> None:
    """YAML keys use kebab case and map onto the snake-case fields."""
    content = """\
theme: dark
security-level: loose
font-family: monospace
font-size: 12
debounce-ms: 150
node-width: 100
rank-gap: 80
label-padding: 6
ai-model: other-model
ai-temperature: 0.7
"""
    config = load_render_config(_write_config(tmp_path, content))

    assert config.theme == "dark"
    assert config.security_level == "loose"
    assert config.font_family == "monospace"
    assert config.font_size == 12
    assert config.debounce_ms == 150
    assert config.node_width == 100
    assert config.rank_gap == 80
    assert config.label_padding == 6
    assert config.ai_model == "other-model"
    assert config.ai_temperature == 0.7
    assert config.node_height == DEFAULT_CONFIG.node_height


def test_populate_by_field_name() -> None:
    """Configurations can also be built in code with field names."""
    config = RenderConfig(debounce_ms=0, font_size=10)
    assert config.debounce_ms == 0
    assert config.char_width == pytest.approx(6.0)


def test_config_is_frozen() -> None:
    """A configuration cannot be changed after construction."""
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.theme = "dark"  # type: ignore[misc]


# ###############
# Error Cases
# ###############


def test_missing_file(tmp_path: Path) -> None:
    """A missing file raises RenderConfigError."""
    with pytest.raises(RenderConfigError, match="not found"):
        load_render_config(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    """Malformed YAML raises RenderConfigError."""
    with pytest.raises(RenderConfigError, match="Invalid YAML"):
        load_render_config(_write_config(tmp_path, "theme: [unclosed\n"))


def test_non_mapping(tmp_path: Path) -> None:
    """A top-level list is rejected."""
    with pytest.raises(RenderConfigError, match="must be a YAML mapping"):
        load_render_config(_write_config(tmp_path, "- dark\n"))


def test_unknown_key(tmp_path: Path) -> None:
    """Unknown keys are rejected."""
    with pytest.raises(RenderConfigError, match="Invalid configuration"):
        load_render_config(_write_config(tmp_path, "colour: red\n"))


@pytest.mark.parametrize(
    "content",
    [
        "theme: neon\n",
        "security-level: off\n",
        "font-size: 0\n",
        "debounce-ms: -1\n",
        "ai-temperature: 3\n",
    ],
)
def test_out_of_range_values(tmp_path: Path, content: str) -> None:
    """Values outside their allowed range are rejected."""
    with pytest.raises(RenderConfigError):
        load_render_config(_write_config(tmp_path, content))


def test_error_chains_cause(tmp_path: Path) -> None:
    """Schema errors keep the pydantic error as their cause."""
    with pytest.raises(RenderConfigError) as exc_info:
        load_render_config(_write_config(tmp_path, "theme: neon\n"))
    assert isinstance(exc_info.value.__cause__, ValidationError)
