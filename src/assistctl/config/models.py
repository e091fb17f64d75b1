"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, assistctl.toml only contains overrides.
A fresh setup needs nothing at all once an API key is stored.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://api.openai.com/v1/"
DEFAULT_BETA = "assistants=v2"
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

BackoffPolicy = Literal["fixed", "linear", "exponential"]


class ApiConfig(BaseModel):
    """[api] section.

    Also the explicit configuration handed to the transport: the
    credential is captured here once and never read from globals.
    """

    model_config = {"frozen": True}

    base_url: str = DEFAULT_BASE_URL
    key: str = Field(default="", repr=False)
    beta: str = DEFAULT_BETA
    timeout: float = Field(default=60.0, gt=0)


class UploadConfig(BaseModel):
    """[upload] section."""

    model_config = {"frozen": True}

    max_file_size: int = Field(default=MAX_UPLOAD_BYTES, gt=0)
    max_concurrency: int = Field(default=4, ge=1)
    max_retries: int = Field(default=2, ge=0)
    retry_delay: float = Field(default=2.0, ge=0)
    backoff: BackoffPolicy = "fixed"
    purpose: str = "assistants"


class RunsConfig(BaseModel):
    """[runs] section."""

    model_config = {"frozen": True}

    poll_interval: float = Field(default=2.0, gt=0)
    poll_timeout: float = Field(default=300.0, gt=0)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
