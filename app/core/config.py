from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    DATA_DIR: str = "./data"

    PRICING_DEBOUNCE_MS: int = 500
    BOOKINGS_PAGE_SIZE: int = 10
    # cancelled / no_show bookings may be reopened as pending
    ALLOW_REOPEN_TERMINAL: bool = False

    BUSINESS_NAME: str = "Your Business"
    BUSINESS_TIMEZONE: str = "Asia/Bangkok"


settings = Settings()
