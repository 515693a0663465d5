"""Application configuration via environment variables."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

# Base directory (root of project)
BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_API_URL = (
    "https://router.huggingface.co/hf-inference/models/"
    "stabilityai/stable-diffusion-xl-base-1.0"
)


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at startup and passed down explicitly."""

    gemini_api_key: str = ""
    huggingface_token: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    image_api_url: str = DEFAULT_IMAGE_API_URL
    text_timeout: float = 60.0
    image_timeout: float = 60.0
    image_batch_timeout: float = 90.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        # .env in the backend dir, real environment wins
        load_dotenv(env_file or BASE_DIR / ".env")

        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
            huggingface_token=os.getenv("HUGGINGFACE_TOKEN", "").strip(),
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            image_api_url=os.getenv("IMAGE_API_URL", DEFAULT_IMAGE_API_URL),
            text_timeout=_float_env("TEXT_TIMEOUT_SECONDS", 60.0),
            image_timeout=_float_env("IMAGE_TIMEOUT_SECONDS", 60.0),
            image_batch_timeout=_float_env("IMAGE_BATCH_TIMEOUT_SECONDS", 90.0),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            host=os.getenv("HOST", "0.0.0.0"),
            port=_int_env("PORT", 5000),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def huggingface_configured(self) -> bool:
        return bool(self.huggingface_token)

    def missing_secrets(self) -> List[str]:
        """Names of the required secrets that are not set."""
        missing = []
        if not self.gemini_configured:
            missing.append("GEMINI_API_KEY")
        if not self.huggingface_configured:
            missing.append("HUGGINGFACE_TOKEN")
        return missing

    def require_secrets(self) -> None:
        missing = self.missing_secrets()
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
