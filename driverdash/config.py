# driverdash/config.py
from pydantic_settings import BaseSettings
from pydantic import computed_field


class Settings(BaseSettings):
    # Local SQLite file unless a full MySQL connection is configured
    database_url: str = "sqlite:///./data/driver.db"

    mysql_user: str | None = None
    mysql_password: str | None = None
    mysql_host: str | None = None
    mysql_db: str | None = None

    secret_key: str | None = None

    bcrypt_rounds: int = 12
    token_algorithm: str = "HS256"
    token_expire_minutes: int = 60 * 24 * 30

    default_rate_per_km: float = 0.12
    default_language: str = "en"
    history_limit: int = 90  # rows per list on the dashboard
    max_history_limit: int = 200

    log_level: str = "INFO"

    @computed_field
    @property
    def sqlalchemy_url(self) -> str:
        if self.mysql_user and self.mysql_host and self.mysql_db:
            # Use mysqlclient (MySQLdb) driver
            return (
                f"mysql+mysqldb://{self.mysql_user}:{self.mysql_password or ''}"
                f"@{self.mysql_host}/{self.mysql_db}?charset=utf8mb4"
            )
        return self.database_url

    @property
    def token_secret(self) -> str:
        """Signing secret for bearer tokens; SECRET_KEY, else a dev default."""
        return self.secret_key or "dev-secret-change-me"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
