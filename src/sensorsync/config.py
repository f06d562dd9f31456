"""Runtime configuration loaded from environment variables.

Values come from the process environment, optionally seeded from a local
.env file via python-dotenv.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .common.exceptions import ConfigurationError

load_dotenv()

DEFAULT_PORT = 8080
DEFAULT_MQTT_HOST = "test.mosquitto.org"
DEFAULT_MQTT_PORT = 1883


@dataclass
class SensorSyncConfig:
    """Configuration for the SensorSync backend."""

    # Persistence
    database_url: Optional[str] = None

    # HTTP
    port: int = DEFAULT_PORT
    backend_url: Optional[str] = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Notification channel
    mqtt_host: str = DEFAULT_MQTT_HOST
    mqtt_port: int = DEFAULT_MQTT_PORT
    mqtt_client_id: str = ""
    mqtt_publish_timeout: float = 5.0

    # Credentials
    bcrypt_rounds: int = 10

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "SensorSyncConfig":
        """Build a config from the current environment."""
        port = int(os.getenv("PORT", str(DEFAULT_PORT)))
        cors = os.getenv("CORS_ORIGINS", "*")

        return cls(
            database_url=os.getenv("DATABASE_URL") or os.getenv("DB_CONNECTION_URL"),
            port=port,
            backend_url=os.getenv("BACKEND_URL") or f"http://localhost:{port}",
            cors_origins=[o.strip() for o in cors.split(",") if o.strip()],
            mqtt_host=os.getenv("MQTT_HOST", DEFAULT_MQTT_HOST),
            mqtt_port=int(os.getenv("MQTT_PORT", str(DEFAULT_MQTT_PORT))),
            mqtt_client_id=os.getenv("MQTT_CLIENT_ID", ""),
            mqtt_publish_timeout=float(os.getenv("MQTT_PUBLISH_TIMEOUT", "5.0")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def require_database_url(self) -> str:
        """Return the database URL or fail with a ConfigurationError."""
        if not self.database_url:
            raise ConfigurationError(
                "Database connection string is not configured",
                missing_keys=["DATABASE_URL"],
            )
        return self.database_url
