from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "FinanceTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_TRANSACTIONS_TABLE: str = Field(
        default="finance-tracker-transactions",
        validation_alias="DYNAMO_TABLE_TRANSACTIONS",
    )
    DYNAMO_ENDPOINT_URL: Optional[str] = Field(default=None)  # e.g. DynamoDB Local

    # JWT verification (tokens are issued by the identity service)
    JWT_SECRET_KEY: str = Field(
        default="9c1f0b6f4e2a4d8c8e3b7a5d2f1e0c9b8a7d6e5f4c3b2a1908f7e6d5c4b3a291",
        validation_alias="JWT_SECRET",
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    RECENT_TRANSACTIONS_DEFAULT: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",
    )


settings = Settings()
