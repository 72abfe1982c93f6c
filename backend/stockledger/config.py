from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "StockLedger"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # Database
    DATABASE_URL: str = "sqlite:///./stockledger.db"
    AUTO_CREATE_TABLES: bool = True
    READINESS_CHECK_DATABASE: bool = True

    # HTTP
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"
    ENABLE_REQUEST_ID: bool = True
    ENABLE_REQUEST_LOGGING: bool = True
    ENABLE_SECURITY_HEADERS: bool = True
    STRICT_TRANSPORT_SECURITY_SECONDS: int = 31536000
    DEFAULT_PAGE_SIZE: int = 20

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Ledger behaviour
    # "warn" records a stock-out past available stock, "reject" refuses it.
    STOCK_OUT_INSUFFICIENT_POLICY: str = "warn"
    CONFLICT_HTTP_STATUS: int = 400
    EXPOSE_ERROR_DETAILS: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @property
    def reject_insufficient_stock(self) -> bool:
        return self.STOCK_OUT_INSUFFICIENT_POLICY.lower() == "reject"

    @model_validator(mode="after")
    def validate_policies(self):
        if self.STOCK_OUT_INSUFFICIENT_POLICY.lower() not in {"warn", "reject"}:
            raise ValueError("STOCK_OUT_INSUFFICIENT_POLICY must be 'warn' or 'reject'.")
        if self.CONFLICT_HTTP_STATUS not in {400, 409}:
            raise ValueError("CONFLICT_HTTP_STATUS must be 400 or 409.")

        if self.is_production:
            problems = []
            if self.DATABASE_URL.lower().startswith("sqlite"):
                problems.append("SQLite is not allowed in production")
            if self.AUTO_CREATE_TABLES:
                problems.append("AUTO_CREATE_TABLES must be false; run Alembic migrations instead")
            if self.EXPOSE_ERROR_DETAILS:
                problems.append("EXPOSE_ERROR_DETAILS must be false")
            if problems:
                raise ValueError("; ".join(problems))
        return self


settings = Settings()
