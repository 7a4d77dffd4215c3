"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from control_panel.domain.severity import DEFAULT_CRITICAL_FIELD_IDS


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for the status core and its HTTP surface.

    Environment variable names map directly to field names in uppercase.
    Example: `backend_base_url` reads from `BACKEND_BASE_URL`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        backend_base_url: Base URL of the telemetry backend RPC endpoint.
        backend_request_timeout_seconds: Transport timeout for one backend HTTP request.
        backend_event_reconnect_seconds: Delay before reopening a dropped event stream.
        docker_poll_interval_seconds: Delay between Docker status poll ticks.
        docker_rpc_timeout_seconds: Upper bound for one reconciler backend call.
        critical_fields: Comma-separated critical field identifiers.
        log_level: Root logging level name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="127.0.0.1")
    application_port: int = Field(default=8765, ge=1, le=65535)
    backend_base_url: str = Field(default="http://127.0.0.1:1420", min_length=1)
    backend_request_timeout_seconds: float = Field(default=10.0, gt=0)
    backend_event_reconnect_seconds: float = Field(default=1.0, ge=0)
    docker_poll_interval_seconds: float = Field(default=5.0, gt=0)
    docker_rpc_timeout_seconds: float = Field(default=4.0, gt=0)
    critical_fields: str = Field(default=",".join(DEFAULT_CRITICAL_FIELD_IDS))
    log_level: str = Field(default="INFO")

    @field_validator("backend_base_url")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("docker_rpc_timeout_seconds")
    @classmethod
    def _validate_timeout_below_interval(cls, value: float, info: ValidationInfo) -> float:
        poll_interval_seconds = float(info.data.get("docker_poll_interval_seconds", 5.0))
        if value >= poll_interval_seconds:
            raise ValueError("docker_rpc_timeout_seconds must be less than docker_poll_interval_seconds")
        return value

    @field_validator("critical_fields")
    @classmethod
    def _validate_critical_fields(cls, value: str) -> str:
        identifiers = [identifier.strip() for identifier in value.split(",") if identifier.strip()]
        return ",".join(identifiers)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("log_level must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG")
        return normalized_value

    def config_critical_field_ids(self) -> tuple[str, ...]:
        """Return configured critical field identifiers in declaration order."""

        return tuple(identifier for identifier in self.critical_fields.split(",") if identifier)


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
