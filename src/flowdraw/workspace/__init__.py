# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Render configuration and client-side credentials for Flowdraw."""

from flowdraw.workspace.config import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG,
    RenderConfig,
    RenderConfigError,
    load_render_config,
)
from flowdraw.workspace.credentials import (
    CREDENTIAL_KEY,
    CredentialError,
    Credentials,
    CredentialStore,
    default_credentials_path,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "CREDENTIAL_KEY",
    "CredentialError",
    "CredentialStore",
    "Credentials",
    "DEFAULT_CONFIG",
    "RenderConfig",
    "RenderConfigError",
    "default_credentials_path",
    "load_render_config",
]
