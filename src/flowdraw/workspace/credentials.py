# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Client-side storage of the AI repair service API key."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CREDENTIAL_KEY = "flowdraw_api_key"
CREDENTIALS_FILE_NAME = "credentials.yaml"


class CredentialError(Exception):
    """Raised when the credentials file cannot be read, written, or is invalid."""


class Credentials(BaseModel):
    """Contents of the credentials file: a single optional API key."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    api_key: str | None = Field(alias=CREDENTIAL_KEY, default=None)


def default_credentials_path() -> Path:
    """Return the per-user credentials path (``$XDG_CONFIG_HOME/flowdraw/credentials.yaml``)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "flowdraw" / CREDENTIALS_FILE_NAME


class CredentialStore:
    """Reads and writes the API key stored under :data:`CREDENTIAL_KEY`.

    Args:
        path: Location of the credentials file; defaults to
            :func:`default_credentials_path`.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_credentials_path()

    def load(self) -> str | None:
        """Return the stored API key, or None when absent.

        Raises:
            CredentialError: If the file exists but cannot be read or parsed.
        """
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CredentialError(f"Cannot read credentials file '{self.path}': {exc}") from exc

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise CredentialError(f"Invalid YAML in credentials file '{self.path}': {exc}") from exc

        if data is None:
            data = {}
        try:
            return Credentials.model_validate(data).api_key or None
        except ValidationError as exc:
            raise CredentialError(f"Invalid credentials file '{self.path}': {exc}") from exc

    def save(self, api_key: str) -> None:
        """Store *api_key*, replacing any previous key.

        The file is created with owner-only permissions.

        Raises:
            CredentialError: If the key is blank or the file cannot be written.
        """
        api_key = api_key.strip()
        if not api_key:
            raise CredentialError("API key must not be empty")
        data = Credentials(api_key=api_key).model_dump(by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(data, default_flow_style=False), encoding="utf-8")
            self.path.chmod(0o600)
        except OSError as exc:
            raise CredentialError(f"Cannot write credentials file '{self.path}': {exc}") from exc

    def clear(self) -> None:
        """Remove the stored key. Missing files are ignored."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise CredentialError(f"Cannot remove credentials file '{self.path}': {exc}") from exc
