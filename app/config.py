from pydantic_settings import BaseSettings
from typing import Optional
from urllib.parse import quote_plus

class Settings(BaseSettings):
    postgres_user: str = "bookstore"
    postgres_password: str = "bookstore"
    postgres_db: str = "bookstore"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full URL wins over the postgres_* parts (sqlite for local runs and tests)
    sqlalchemy_database_url: Optional[str] = None

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    env: str = "local"
    log_level: str = "INFO"

    return_window_days: int = 30
    recommendation_limit: int = 10

    @property
    def database_url(self):
        if self.sqlalchemy_database_url:
            return self.sqlalchemy_database_url

        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
