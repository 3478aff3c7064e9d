# telelead_intake/core/config.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from telelead_intake.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    # Server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=10000, validation_alias="PORT")
    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")
    max_body_bytes: int = Field(default=1048576, validation_alias="MAX_BODY_BYTES")  # 1MB
    trust_proxy_headers: bool = Field(default=False, validation_alias="TRUST_PROXY_HEADERS")
    static_dir: Optional[str] = Field(default=None, validation_alias="STATIC_DIR")

    # TeleLead upstream
    telelead_key: str = Field(validation_alias="TELELEAD_KEY")
    telelead_uid: str = Field(validation_alias="TELELEAD_UID")
    telelead_url: str = Field(
        default="https://api.teleleads.com/lead_post",
        validation_alias="TELELEAD_URL",
    )
    telelead_timeout_seconds: float = Field(default=20.0, validation_alias="TELELEAD_TIMEOUT_SECONDS")
    echo_sent_data: bool = Field(default=True, validation_alias="ECHO_SENT_DATA")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    # CORS
    allowed_origins: str = Field(default="", validation_alias="ALLOWED_ORIGINS")

    # Monitoring
    sentry_dsn: Optional[str] = Field(default=None, validation_alias="SENTRY_DSN")

    @field_validator("environment")
    def validate_environment(cls, v):
        valid_envs = ["development", "testing", "staging", "production"]
        if v not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v):
        valid_formats = ["json", "console"]
        if v not in valid_formats:
            raise ValueError(f"log_format must be one of {valid_formats}")
        return v

    @field_validator("telelead_key", "telelead_uid")
    def validate_credential(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("telelead_timeout_seconds")
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("telelead_timeout_seconds must be positive")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def origins(self) -> List[str]:
        """Parsed CORS allow-list; an empty setting allows every origin."""
        origins = [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        if not origins or origins == ["*"]:
            return ["*"]
        return origins


_CREDENTIAL_ENV = {
    "telelead_key": "TELELEAD_KEY",
    "telelead_uid": "TELELEAD_UID",
}


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, failing loudly on bad credentials."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        bad = []
        for error in e.errors():
            loc = error.get("loc") or ("",)
            name = str(loc[0])
            bad.append(_CREDENTIAL_ENV.get(name, name.upper()))
        missing = [name for name in _CREDENTIAL_ENV.values() if name in bad]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing,
            ) from e
        raise ConfigurationError(f"Invalid configuration: {', '.join(bad)}") from e

