from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Terminal-local storage for the draft slot
    DATABASE_URL: str = "sqlite:///./pos_terminal.db"

    # REST backend (catalog, customers, transactions)
    BACKEND_API_URL: str = "http://localhost:3001/api"
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    # Shared with the backend that issues access tokens
    JWT_SECRET: str = "dev-insecure-key-change-in-production"

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Roles allowed to operate the checkout
    POS_ROLES: list[str] = ["OWNER", "ADMIN", "MANAGER", "CASHIER"]

    DRAFT_KEY: str = "posDraft"
    CURRENCY_SYMBOL: str = "₹"


settings = Settings()
