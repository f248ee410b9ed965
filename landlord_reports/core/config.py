from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    DATABASE_URL: str
    ENV: str = "dev"
    LOG_LEVEL: str = "info"

    # JWT issued by the landlord portal (HS256 shared secret)
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # Optional external identity provider; when set, tokens are verified against its JWKS
    JWT_JWKS_URL: Optional[str] = None

    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
