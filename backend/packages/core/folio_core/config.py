"""
Translation configuration.

This module provides configuration settings for translation providers
and the translation pipeline loaded from environment variables.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env file in project root
_env_file = Path(__file__).parent.parent.parent.parent.parent / ".env"

_DEFAULT_BUNDLE_DIR = Path(__file__).parent / "messages"


class TranslationConfig(BaseSettings):
    """
    Translation configuration from environment variables.

    All settings are prefixed with TRANSLATION_ in environment.
    Instances are built once at process start and passed to the engine
    and pipeline explicitly.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRANSLATION_",
        env_file=str(_env_file) if _env_file.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider order; providers without credentials are skipped
    provider_order: str = "deepl,google,openai,mtran,google_free"

    # DeepL
    deepl_api_key: str = ""
    deepl_pro: bool = False

    # Google Cloud Translation (v2 REST API)
    google_api_key: str = ""

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # MTranServer (self-hosted)
    mtran_base_url: str = ""
    mtran_api_key: str = ""

    # Key-less Google web translator, opt-in only
    google_free_enabled: bool = False

    # Timeouts and batch limits
    provider_timeout_seconds: float = Field(default=15.0, gt=0)
    job_timeout_seconds: float = Field(default=120.0, gt=0)
    batch_size: int = Field(default=50, ge=1, le=500)
    max_attempts: int = Field(default=3, ge=1)
    stale_job_seconds: int = Field(default=900, ge=60)

    # Compiled message bundles (one <locale>.json per locale)
    bundle_dir: Path = _DEFAULT_BUNDLE_DIR

    @property
    def provider_names(self) -> list[str]:
        """Configured provider order as a list of names."""
        return [name.strip() for name in self.provider_order.split(",") if name.strip()]
