from pathlib import Path
import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Grabber settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    database_path: str = "./data/epggrab.db"
    find_grabbers_command: str = "/usr/bin/tv_find_grabbers"
    socket_dir: str = "./data/epggrab"
    grab_timeout_sec: int = 0  # 0 disables the grabber timeout
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="EPGGRAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Validate database path is accessible."""
        path = Path(value)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return value
        except (OSError, PermissionError) as exc:
            raise ValueError(f"Cannot access database path '{value}': {exc}") from exc

    @field_validator("find_grabbers_command", "socket_dir")
    @classmethod
    def validate_not_blank(cls, value: str, info) -> str:
        """Reject empty paths."""
        if not value.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return value.strip()

    @field_validator("grab_timeout_sec")
    @classmethod
    def validate_grab_timeout(cls, value: int) -> int:
        """Validate grabber timeout (seconds)."""
        if value < 0:
            raise ValueError("grab_timeout_sec must be >= 0")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @property
    def socket_path(self) -> str:
        """Socket the external xmltv module receives documents on."""
        return str(Path(self.socket_dir) / "xmltv.sock")

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Database: %s", self.database_path)
        logger.info("  Grabber Discovery: %s", self.find_grabbers_command)
        logger.info("  Socket Directory: %s", self.socket_dir)
        logger.info(
            "  Grab Timeout: %s",
            f"{self.grab_timeout_sec}s" if self.grab_timeout_sec else "disabled",
        )


settings = CustomSettings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
