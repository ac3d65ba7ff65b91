# admin_panel/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
import logging
from pathlib import Path

logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s SETTINGS.PY - [%(levelname)s] - %(message)s'
    )

# settings.py lives at <project>/admin_panel/settings.py
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.info(f"SETTINGS.PY: .env file found at: {DOTENV_PATH}")
else:
    logger.debug(
        f"SETTINGS.PY: .env file not found at: {DOTENV_PATH}. "
        "Relying on OS env vars or defaults."
    )


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = "Admin Panel"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug_mode: bool = False
    log_level: str = "INFO"

    # Redis backs the session store. When disabled (or unreachable at startup)
    # the session layer runs degraded and every lookup is a miss.
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    session_ttl_seconds: int = Field(default=7 * 24 * 3600, gt=0)
    session_key_prefix: str = "auth:token:"

    sqlite_db_path: str = "./admin_panel_data.sqlite3"

    login_shared_secret: Optional[str] = Field(
        default=None,
        description="Password accepted by POST /auth/login. Login is disabled when unset."
    )

    # Outbound HTTP client pool settings, applied per service name
    http_client_default_timeout: float = 30.0
    http_client_max_connections: int = 100
    http_client_max_keepalive_connections: int = 20
    http_client_keepalive_expiry: float = 5.0
    http_client_retry_delay: float = 1.0

    example_api_base_url: str = "https://jsonplaceholder.typicode.com"
    example_api_timeout: float = 10.0
    example_api_retries: int = 2

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding='utf-8'
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level.upper()


settings = Settings()

logger.info(
    f"SETTINGS.PY: environment='{settings.environment}', debug_mode={settings.debug_mode}, "
    f"redis_enabled={settings.redis_enabled}, redis_host='{settings.redis_host}'"
)
logger.info(
    f"SETTINGS.PY: login_shared_secret: "
    f"{'********' if settings.login_shared_secret else 'None'}"
)
