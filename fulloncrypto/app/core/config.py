from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "FullOnCrypto API Server"
    database_url: str = "sqlite:///fulloncrypto.db"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = ["*"]
    # Create the engine and tables during startup; a failure aborts the process.
    eager_connect: bool = True
    # Recover the signer of wallet login/registration messages with eth-account.
    verify_wallet_signatures: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FULLONCRYPTO_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
