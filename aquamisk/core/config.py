from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    DATABASE_URL: str = "sqlite:///./aquamisk.db"
    DATABASE_ECHO: bool = False

    # Stock below this level raises a (non-fatal) alert
    CRITICAL_STOCK_THRESHOLD: int = 5
    # Default cut-off for the low stock report
    LOW_STOCK_THRESHOLD: int = 10

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    ERROR_REPORT_DIR: str = "tmp/error_reports"

settings = Settings()
