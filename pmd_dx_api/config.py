import os
from dataclasses import dataclass

from pmd_dx_api.errors import ConfigError


def _require(key: str) -> str:
    value = os.getenv(key)
    if value is None:
        raise ConfigError(key)
    return value


@dataclass(frozen=True)
class Settings:
    db_user: str
    db_password: str
    db_url: str
    db_name: str
    redis_url: str
    redis_password: str
    port: int = 3000
    log_path: str = "logs"

    @property
    def database_dsn(self) -> str:
        return f"postgres://{self.db_user}:{self.db_password}@{self.db_url}/{self.db_name}"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment. Raises ConfigError on a missing variable."""
        return cls(
            db_user=_require("DB_USER"),
            db_password=_require("DB_PASSWORD"),
            db_url=_require("DB_URL"),
            db_name=_require("DB_NAME"),
            redis_url=_require("REDIS_URL"),
            redis_password=_require("REDIS_PASSWORD"),
            port=int(os.getenv("PORT", "3000")),
            log_path=os.getenv("LOG_PATH", "logs"),
        )
