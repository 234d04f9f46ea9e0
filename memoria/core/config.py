from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_ENV: str = "development"

    # One SQLite file per store. A template without "{store}" (e.g. "sqlite://")
    # gives every store its own private in-memory database.
    DATA_DIR: str = "./data"
    DATABASE_URL_TEMPLATE: str = "sqlite:///{data_dir}/{store}.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    # Comma-separated allowed origins, or "*" to allow all.
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def database_url(self, store: str) -> str:
        return self.DATABASE_URL_TEMPLATE.format(data_dir=self.DATA_DIR, store=store)


settings = Settings()
