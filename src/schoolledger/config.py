# src/schoolledger/config.py

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Central application settings (Pydantic v2).

    Only the program entry point (container/app factory) reads these; core
    services receive plain values through their constructors.
    """

    # ------------------------------------------------------------------------------------
    # App / API
    # ------------------------------------------------------------------------------------
    PROJECT_NAME: str = Field(default="schoolledger", alias="APP_NAME")
    ENVIRONMENT: str = Field(default="dev", alias="ENV")  # dev|staging|prod
    API_PREFIX: str = Field(default="/api")
    PROJECT_VERSION: str = Field(default="1.0.0")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="")  # json|console; empty = derive from ENV

    # ------------------------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------------------------
    STORE_BACKEND: str = Field(default="memory")  # memory|sql
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./schoolledger.db",
        description="Async SQLAlchemy URL",
    )
    DATABASE_ECHO: bool = Field(default=False)

    # ------------------------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------------------------
    CACHE_DEFAULT_TTL_SECONDS: float = Field(default=300.0)
    CACHE_CLEANUP_INTERVAL_SECONDS: float = Field(default=600.0)

    # ------------------------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------------------------
    INCLUDE_INACTIVE_STUDENTS: bool = Field(default=False)

    # ------------------------------------------------------------------------------------
    # Helper properties
    # ------------------------------------------------------------------------------------
    @property
    def is_dev(self) -> bool:
        return self.ENVIRONMENT.lower() in {"dev", "development", "local"}

    @property
    def is_prod(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @property
    def uses_sql_store(self) -> bool:
        return self.STORE_BACKEND.lower() == "sql"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "populate_by_name": True,   # enable aliases
        "extra": "ignore",          # don't crash on unrelated env keys
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
