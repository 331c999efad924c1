import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

DEFAULT_MAX_RESPONSE_BYTES = 50 * 1024 * 1024  # XMLTV guides can be large


class ProviderSettings(BaseSettings):
    """Provider connection settings loaded from environment variables.

    Validates configuration at construction to catch misconfiguration early.
    """

    server: str = ""
    port: int = 80
    username: str = ""
    password: str = ""
    timeout_seconds: int = 30  # 0 disables the timeout
    enable_user_agent_spoofing: bool = False
    custom_user_agent: str = ""
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    stream_format: str = "ts"
    strict_json_keys: bool = True
    apply_xmltv_offsets: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="XTREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("server", mode="before")
    @classmethod
    def normalize_server(cls, value):
        """Trim whitespace and trailing slashes."""
        if value is None:
            return ""
        return str(value).strip().rstrip("/")

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        """Port 0 means no explicit port is appended to the base URL."""
        if value < 0 or value > 65535:
            raise ValueError("port must be between 0 and 65535")
        return value

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value < 0:
            raise ValueError("timeout_seconds must be >= 0")
        return value

    @field_validator("max_response_bytes")
    @classmethod
    def validate_max_response_bytes(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_response_bytes must be > 0")
        return value

    @field_validator("stream_format")
    @classmethod
    def validate_stream_format(cls, value: str) -> str:
        """Validate live stream container format."""
        normalized = value.strip().lower()
        allowed = {"ts", "hls"}
        if normalized not in allowed:
            raise ValueError(f"stream_format must be one of {sorted(allowed)}")
        return normalized

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @model_validator(mode="after")
    def validate_provider_configuration(self):
        """Warn about settings that make every fetch fail."""
        if not self.server:
            logger.warning("No provider server configured - fetches will fail")
        if self.enable_user_agent_spoofing and not self.custom_user_agent.strip():
            logger.debug("User agent spoofing enabled without custom agent, default will be used")
        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Server: %s", self.server or "<not set>")
        logger.info("  Port: %s", self.port or "<none>")
        logger.info("  Username: %s", "***" if self.username else "<not set>")
        logger.info("  Timeout: %s", f"{self.timeout_seconds}s" if self.timeout_seconds else "disabled")
        logger.info("  User Agent Spoofing: %s", self.enable_user_agent_spoofing)
        logger.info("  Max Response Size: %.1f MB", self.max_response_bytes / 1024 / 1024)
        logger.info("  Stream Format: %s", self.stream_format)
        logger.info("  Strict JSON Keys: %s", self.strict_json_keys)
        logger.info("  Apply XMLTV Offsets: %s", self.apply_xmltv_offsets)


settings = ProviderSettings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
