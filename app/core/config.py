"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Firebase credentials and the project id are validated
at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except the Firebase project,
    which is resolved from FIREBASE_PROJECT_ID or from the service account
    JSON (see validate_firebase).
    """

    # App
    app_name: str = "lyra"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:9002"

    # Firebase / Firestore: use key (env) or path (file). The project id is
    # taken from the service account JSON when not set explicitly.
    firebase_project_id: str = ""
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    firestore_timeout_seconds: float = 30.0
    # Poll interval for live query/document channels (REST has no push).
    firestore_listen_interval_seconds: float = 2.0

    # Inference providers
    google_ai_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    deepseek_api_key: SecretStr | None = None
    default_ai_model: str = "openai:gpt-5-mini"
    inference_timeout_seconds: float = 60.0

    # Rate limits (slowapi syntax)
    inference_rate_limit: str = "30/minute"

    # Developer diagnostics: permission errors kept for the debug overlay
    permission_error_history: int = 50

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_firebase(self) -> "Settings":
        """Validate Firebase and inference settings.

        - Key and path are mutually exclusive.
        - Listen interval must be positive (zero would spin the event loop).
        - default_ai_model must look like "<provider>:<model>".
        """
        has_key = (
            self.firebase_service_account_key
            and self.firebase_service_account_key.get_secret_value()
        )
        if has_key and self.firebase_service_account_path:
            raise ValueError(
                "Set only one of FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
            )
        if self.firestore_listen_interval_seconds <= 0:
            raise ValueError(
                "FIRESTORE_LISTEN_INTERVAL_SECONDS must be greater than 0, "
                f"got: {self.firestore_listen_interval_seconds!r}"
            )
        if ":" not in self.default_ai_model:
            raise ValueError(
                "DEFAULT_AI_MODEL must be '<provider>:<model>', "
                f"got: {self.default_ai_model!r}"
            )
        return self

    def provider_api_key(self, provider: str) -> str | None:
        """Return the API key configured for an inference provider, if any."""
        secret = {
            "google": self.google_ai_api_key,
            "openai": self.openai_api_key,
            "deepseek": self.deepseek_api_key,
        }.get(provider)
        if secret is None:
            return None
        return secret.get_secret_value() or None


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
