# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""AI-assisted repair suggestions for diagram text that failed to render.

The service only receives the broken text and the error message. Its answer
is a suggestion: it is returned together with a diff and never written back
to the source by this module.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from google import genai
from google.genai import types

from flowdraw.compiler.errors import DiagramError
from flowdraw.repair.diff import DiffLine, diff_suggestion

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

SYSTEM_PROMPT = """You are an expert in flowchart diagram syntax. Your task is to fix the provided syntax error.
Follow these rules:
1. Fix only the syntax errors.
2. Maintain the original logic of the diagram.
3. Return ONLY the raw diagram code.
4. Do NOT include markdown code blocks.
5. Do NOT include any explanations or conversational text."""


class RepairError(Exception):
    """Raised when a repair suggestion cannot be obtained."""


class RepairService(Protocol):
    """Anything that turns (broken text, error message) into replacement text."""

    def suggest_fix(self, broken_text: str, error_message: str) -> str: ...


@dataclass(frozen=True)
class RepairSuggestion:
    """A proposed replacement awaiting explicit acceptance.

    Attributes:
        original: The text that failed to render.
        suggestion: The proposed replacement text.
        diff: Line-level comparison of the two.
    """

    original: str
    suggestion: str
    diff: list[DiffLine]

    @property
    def changed(self) -> bool:
        return self.original != self.suggestion


def build_repair_prompt(broken_text: str, error_message: str) -> str:
    """Return the user prompt sent to the language model."""
    return (
        "Broken diagram code:\n"
        f"{broken_text}\n"
        "\n"
        "Error message:\n"
        f"{error_message}\n"
        "\n"
        "Please fix the syntax error. Return ONLY the raw code.\n"
    )


def clean_suggestion(text: str) -> str:
    """Strip Markdown code fences the model may add despite instructions."""
    return _FENCE.sub("", text).strip()


class GeminiRepairService:
    """Repair service backed by a Google Gemini model.

    Args:
        api_key: Google API key.
        model: Model id.
        temperature: Sampling temperature.

    Raises:
        ValueError: If api_key is empty.
    """

    def __init__(self, api_key: str, model: str = "gemini-3-flash-preview", temperature: float = 0.2) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._temperature = temperature

    def suggest_fix(self, broken_text: str, error_message: str) -> str:
        """Ask the model for a corrected version of *broken_text*.

        Raises:
            RepairError: If the API call fails or returns no text.
        """
        logger.debug("Requesting repair from %s", self._model)
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=build_repair_prompt(broken_text, error_message),
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    temperature=self._temperature,
                ),
            )
        except Exception as exc:  # SDK and transport failures alike
            logger.error("Repair request failed: %s", exc)
            raise RepairError(f"Failed to fix code with AI: {exc}") from exc

        text = clean_suggestion(response.text or "")
        if not text:
            raise RepairError("AI returned an empty response.")
        return text


def request_repair(source: str, error: DiagramError, service: RepairService) -> RepairSuggestion:
    """Obtain a repair suggestion for *source* that failed with *error*.

    Raises:
        RepairError: If the service fails.
    """
    suggestion = service.suggest_fix(source, error.describe())
    return RepairSuggestion(original=source, suggestion=suggestion, diff=diff_suggestion(source, suggestion))


# ################
# Implementation
# ################

_FENCE = re.compile(r"```[A-Za-z]*")
