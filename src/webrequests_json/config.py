"""Configuration loading utilities for the webrequests-json CLI."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse

import yaml
from pydantic import BaseModel, Field, field_validator

from .errors import DEFAULT_PREVIEW_LENGTH
from .http import JSON_CONTENT_TYPE
from .serialization import JsonSettings


class ClientConfig(BaseModel):
    base_url: Optional[str] = Field(
        default=None,
        description="Base URL that relative request paths are resolved against",
    )
    timeout_s: float = Field(30.0, gt=0, description="Request timeout in seconds")
    accept: str = Field(JSON_CONTENT_TYPE, description="Accept header sent with requests")
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        if not stripped:
            return None
        parsed = urlparse(stripped)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("client.base_url must be an absolute http(s) URL")
        return stripped


class DecodeConfig(BaseModel):
    preview_length: int = Field(
        DEFAULT_PREVIEW_LENGTH,
        gt=0,
        description="Maximum characters of body preview attached to errors",
    )
    strict: Optional[bool] = Field(
        default=None,
        description="Force strict (true) or lax (false) binding; unset defers to the target type",
    )
    indent: Optional[int] = Field(default=2, ge=0, description="Indent for printed JSON")


class WebRequestsJsonConfig(BaseModel):
    client: ClientConfig = Field(default_factory=ClientConfig)
    decode: DecodeConfig = Field(default_factory=DecodeConfig)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "WebRequestsJsonConfig":
        return cls.model_validate(raw)

    @classmethod
    def from_yaml(cls, path: Path) -> "WebRequestsJsonConfig":
        data = yaml.safe_load(path.read_text()) or {}
        return cls.from_dict(data)

    def json_settings(self) -> JsonSettings:
        return JsonSettings(strict=self.decode.strict)

    def resolve_url(self, target: str) -> str:
        """Return ``target`` unchanged if absolute, otherwise join it to the base URL."""
        if urlparse(target).scheme:
            return target
        if not self.client.base_url:
            raise ValueError(f"Relative URL '{target}' requires client.base_url to be configured")
        return urljoin(self.client.base_url.rstrip("/") + "/", target.lstrip("/"))


def load_config(path: str | Path) -> WebRequestsJsonConfig:
    """Load a WebRequestsJsonConfig from a YAML file."""
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    return WebRequestsJsonConfig.from_yaml(config_path)
