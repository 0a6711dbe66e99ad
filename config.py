import os
import logging
from typing import Dict

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from utils.errors import ConfigError

logger = logging.getLogger("ghost_mailer")

# field name -> environment variable
REQUIRED_ENV = {
    "ghost_base_url": "GHOST_URL",
    "ghost_admin_key_id": "GHOST_ADMIN_ID",
    "ghost_admin_hex_secret": "GHOST_ADMIN_SECRET",
    "webhook_shared_secret": "WEBHOOK_SECRET",
    "email_api_key": "RESEND_API_KEY",
    "from_address": "FROM_EMAIL",
}


def parse_log_level(name: str) -> str:
    """Upper-cased level name, or ConfigError if logging does not know it."""
    level = name.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {name!r}")
    return level


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    ghost_base_url: str
    ghost_admin_key_id: str
    ghost_admin_hex_secret: str
    webhook_shared_secret: str
    email_api_key: str
    from_address: str
    port: int = 3000
    log_level: str = "INFO"
    dry_run: bool = False

    @field_validator("ghost_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        return parse_log_level(value)

    @classmethod
    def from_env(cls, env: Dict[str, str] = None) -> "AppConfig":
        """
        Builds the config from environment variables (after loading .env).
        Raises ConfigError naming every required variable that is missing.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        missing = [var for var in REQUIRED_ENV.values() if not env.get(var)]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        values = {field: env[var] for field, var in REQUIRED_ENV.items()}

        port = env.get("PORT", "3000")
        try:
            values["port"] = int(port)
        except ValueError:
            raise ConfigError(f"PORT must be a valid number, got {port!r}")

        values["log_level"] = parse_log_level(env.get("LOG_LEVEL", "INFO"))
        values["dry_run"] = env.get("DRY_RUN", "false").strip().lower() in ("1", "true", "yes")
        return cls(**values)
