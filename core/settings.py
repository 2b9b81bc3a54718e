from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_NAME: str = "layout_builder"
    DATABASE_USER: str = "layout_builder"
    DATABASE_PASSWORD: str = ""
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432

    # Full SQLAlchemy URL, takes precedence over the DATABASE_* parts (sqlite in tests)
    SQLALCHEMY_DATABASE_URI: str | None = None

    @property
    def DATABASE_URL(self) -> str:
        if self.SQLALCHEMY_DATABASE_URI:
            return self.SQLALCHEMY_DATABASE_URI
        return (
            f"postgresql+psycopg2://{self.DATABASE_USER}:"
            f"{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:"
            f"{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    # View mode whose display gates override editing
    LAYOUT_BUILDER_DEFAULT_VIEW_MODE: str = "full"

    DEBUG: bool = False

    # Sentry error tracking
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8"
    }


settings = Settings()
