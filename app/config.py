import logging
from dataclasses import dataclass
from typing import Any, ClassVar, FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./tvcatalog.db"

    # Database pool (applies to client/server DBs like Postgres; SQLite uses NullPool)
    DB_POOL_PRE_PING: bool = True
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800

    # JWT
    # NOTE: This default is intentionally insecure and must never be used outside dev/test.
    DEFAULT_JWT_SECRET: ClassVar[str] = "dev-secret-change-me-please-32chars!!"
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_TOKEN_LIFETIME_SECONDS: int = 3600

    # Application
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Environment. Suggested values: dev|test|staging|prod.
    ENV: str = "dev"

    # Public address used when building absolute hypermedia links.
    # BASE_URL wins when set; otherwise http://HOST:PORT is used.
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    BASE_URL: str = ""

    # Paging
    PAGE_LIMIT_DEFAULT: int = 10

    # Image host (cloudinary://<api_key>:<api_secret>@<cloud_name>)
    CLOUDINARY_URL: str = ""
    CLOUDINARY_FOLDER: str = "tvcatalog"
    CLOUDINARY_TIMEOUT_SECONDS: float = 30.0

    # Observability
    METRICS_ENABLED: bool = True

    # Seed admin, used by scripts/init_db.py
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@example.org"
    ADMIN_PASSWORD: str = "1234567890"

    # --- Guardrails ---
    _SAFE_ENVS: ClassVar[FrozenSet[str]] = frozenset({"dev", "development", "test", "testing"})
    _UNSAFE_PLACEHOLDERS: ClassVar[FrozenSet[str]] = frozenset(
        {
            "change-me-in-production",
            "change-me",
            "changeme",
            "",
        }
    )

    def model_post_init(self, __context: Any) -> None:
        self._guardrail_default_secrets()

    def _guardrail_default_secrets(self) -> None:
        env = (self.ENV or "").strip().lower()
        if env in self._SAFE_ENVS:
            return

        jwt_secret = (self.JWT_SECRET or "").strip()
        lowered = jwt_secret.lower()
        if (
            jwt_secret == self.DEFAULT_JWT_SECRET
            or lowered in self._UNSAFE_PLACEHOLDERS
            or "change-me" in lowered
        ):
            raise RuntimeError(
                "Refusing to start with an insecure default/placeholder JWT_SECRET outside dev/test. "
                f"Got ENV={self.ENV!r}. "
                "Set a secure value via the JWT_SECRET environment variable, "
                "or run with ENV=dev/test."
            )


settings = Settings()


@dataclass(frozen=True)
class LinkConfig:
    """Where the service is reachable from the outside, for absolute links."""

    host: str = "127.0.0.1"
    port: int = 3000
    base_url: str = ""

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "LinkConfig":
        s = s or settings
        return cls(host=s.HOST, port=s.PORT, base_url=s.BASE_URL)
