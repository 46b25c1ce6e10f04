"""Loading and first-run generation of the user configuration file."""

import os
import tomllib
from pathlib import Path

import typer
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cargo_check_i18n.core.template import DEFAULT_REQUEST_BODY_TEMPLATE, DEFAULT_RESPONSE_PATH
from cargo_check_i18n.errors import ConfigError

APP_NAME = "cargo-check-i18n"
CONFIG_ENV_VAR = "CARGO_CHECK_I18N_CONFIG"
API_KEY_ENV_VAR = "CARGO_CHECK_I18N_API_KEY"

DEFAULT_PROMPT = (
    "As a plain text translator, translate the following Rust compiler message into {language}. "
    "Keep code identifiers unchanged and reply with the translation only:\n{text}"
)

EXAMPLE_CONFIG = f'''version = "1.0"
language = "zh-CN"
api_url = "https://api.openai.com/v1/chat/completions"
api_key = ""
model = "gpt-4o-mini"
temperature = 0.2
rate_limit = 8
timeout = 30.0
response_path = "{DEFAULT_RESPONSE_PATH}"
request_body_template = \'\'\'{DEFAULT_REQUEST_BODY_TEMPLATE}\'\'\'
'''


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    language: str = "zh-CN"
    api_url: str = "https://api.openai.com/v1/chat/completions"
    api_key: str = ""
    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    rate_limit: int = Field(default=8, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    request_body_template: str = DEFAULT_REQUEST_BODY_TEMPLATE
    response_path: str = DEFAULT_RESPONSE_PATH
    prompt: str = DEFAULT_PROMPT
    cache_enabled: bool = True
    cache_path: Path | None = None

    @field_validator("language", "api_url", "model", "response_path", "request_body_template")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


def get_config_path(override: Path | None = None) -> Path:
    if override is not None:
        return override
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path(typer.get_app_dir(APP_NAME)) / "config.toml"


def write_example_config(path: Path, force: bool = False) -> bool:
    """Write the example configuration to *path*. Returns False if it already exists."""
    if path.exists() and not force:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    return True


def load_settings(path: Path, require_api_key: bool = True) -> Settings:
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if not raw.get("api_key"):
        env_key = os.getenv(API_KEY_ENV_VAR)
        if env_key:
            raw["api_key"] = env_key

    try:
        settings = Settings.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
        raise ConfigError(f"Invalid configuration in {path}: {problems}") from exc

    if require_api_key and not settings.api_key:
        raise ConfigError(f"Please provide the api_key in {path} (or set {API_KEY_ENV_VAR}).")
    return settings
