"""Configuration management for visionsnap.

Loads settings from a YAML configuration file with environment variable
overrides for sensitive values (API keys). Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings

from visionsnap.domain.models import Facing

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/visionsnap.yaml")

DEFAULT_PROMPT = (
    "Describe what you see in this image. If it contains text or a question, "
    "read it out and answer it. Be concise and do not use markdown formatting."
)


class CaptureConfig(BaseModel):
    user_device_index: int = Field(default=0, description="OpenCV device index of the front camera")
    environment_device_index: int = Field(default=1, description="OpenCV device index of the back camera")
    default_facing: Facing = Field(default=Facing.ENVIRONMENT)
    resolution_width: int | None = Field(default=4096)
    resolution_height: int | None = Field(default=3072)
    max_dimension: int = Field(default=1920, gt=0)
    jpeg_quality: float = Field(default=0.85, gt=0.0, le=1.0)


class MLLMConfig(BaseModel):
    provider: Literal["anthropic", "openai"] = Field(default="anthropic")
    model: str = Field(default="claude-sonnet-4-20250514")
    base_url: str | None = Field(default=None)
    max_tokens: int = Field(default=1024, gt=0)
    default_prompt: str = Field(default=DEFAULT_PROMPT)


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)


class ClientConfig(BaseModel):
    server_url: str = Field(default="http://localhost:8000")
    timeout: float = Field(default=60.0, gt=0)
    prompt: str | None = Field(default="What do you see in this image? Be concise and helpful.")
    error_display_seconds: float = Field(default=4.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for visionsnap.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "VISIONSNAP_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # API Keys
    anthropic_api_key: SecretStr = Field(default=SecretStr(""))
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    openrouter_api_key: SecretStr = Field(default=SecretStr(""))

    # Configuration sections
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    mllm: MLLMConfig = Field(default_factory=MLLMConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def upstream_api_key(self) -> str:
        """The credential for the configured upstream provider, or ''."""
        if self.mllm.provider == "anthropic":
            return self.anthropic_api_key.get_secret_value()
        return (
            self.openrouter_api_key.get_secret_value()
            or self.openai_api_key.get_secret_value()
        )

    def upstream_base_url(self) -> str | None:
        if self.mllm.base_url:
            return self.mllm.base_url
        if self.mllm.provider == "openai" and self.openrouter_api_key.get_secret_value():
            return "https://openrouter.ai/api/v1"
        return None


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    # Load .env file manually for non-prefixed vars
    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    for env_name, field in (
        ("ANTHROPIC_API_KEY", "anthropic_api_key"),
        ("OPENAI_API_KEY", "openai_api_key"),
        ("OPENROUTER_API_KEY", "openrouter_api_key"),
    ):
        value = os.environ.get(env_name, "")
        if value:
            yaml_data[field] = value

    or_base_url = os.environ.get("OPENROUTER_BASE_URL", "")
    vision_model = os.environ.get("VISION_MODEL", "")

    if "mllm" not in yaml_data:
        yaml_data["mllm"] = {}

    if or_base_url and not yaml_data["mllm"].get("base_url"):
        yaml_data["mllm"]["base_url"] = or_base_url

    if vision_model and not yaml_data["mllm"].get("model"):
        yaml_data["mllm"]["model"] = vision_model
