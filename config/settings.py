from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Remote ledger API
    API_BASE_URL: str = "https://your-api-base-url.com"
    API_TIMEOUT_SECONDS: float = 15.0

    # Local durable cache (session identity + last-known user)
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_CACHE_KEY: str = "ledger:session:current"

    # Lists
    LIST_PAGE_SIZE: int = 10

    # Payment gateway
    GATEWAY_KEY_ID: str = ""
    GATEWAY_CURRENCY: str = "INR"
    GATEWAY_SURCHARGE_BPS: int = 200  # 2% added to the amount sent to the gateway only
    MERCHANT_NAME: str = "MyKuttam"

    # App
    APP_NAME: str = "Donation Ledger"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"


settings = Settings()
