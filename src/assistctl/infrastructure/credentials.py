"""Stored API credential — a small JSON file in the user config directory.

The file lives at ``click.get_app_dir("assistctl")/credentials.json``
unless ``ASSISTCTL_CREDENTIALS`` points elsewhere. It is written with
owner-only permissions; the key is never logged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from pydantic import BaseModel, ValidationError

APP_NAME = "assistctl"
CREDENTIALS_ENV_VAR = "ASSISTCTL_CREDENTIALS"
CREDENTIALS_FILENAME = "credentials.json"

logger = logging.getLogger(__name__)


class StoredCredentials(BaseModel):
    model_config = {"frozen": True}

    api_key: str


def default_credentials_path() -> Path:
    env_path = os.environ.get(CREDENTIALS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path(click.get_app_dir(APP_NAME)) / CREDENTIALS_FILENAME


class CredentialStore:
    """Load, save, and clear the stored API key."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_credentials_path()

    def load(self) -> str | None:
        """Return the stored key, or None if absent or unreadable."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("Cannot read credentials file %s", self.path, exc_info=True)
            return None
        try:
            return StoredCredentials.model_validate_json(raw).api_key or None
        except ValidationError:
            logger.warning("Ignoring malformed credentials file %s", self.path)
            return None

    def save(self, api_key: str) -> Path:
        """Persist *api_key* (owner read/write only) and return the file path."""
        if not api_key.strip():
            raise ValueError("API key must not be empty")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = StoredCredentials(api_key=api_key.strip()).model_dump_json()
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        return self.path

    def clear(self) -> bool:
        """Remove the stored key; return whether one existed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True


def mask_key(api_key: str) -> str:
    """Render a key for display: prefix and last four characters only."""
    if len(api_key) <= 8:
        return "*" * len(api_key)
    return f"{api_key[:3]}...{api_key[-4:]}"
