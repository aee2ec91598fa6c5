from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "CraftOps"
    DATABASE_URL: str = "sqlite+pysqlite:///./craftops.db"
    LOG_LEVEL: str = "INFO"
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 5.0
    METRICS_ENABLED: bool = True
    DEFAULT_MATERIAL_UNIT: str = "pcs"
    TRANSFER_STRICT_TRANSITIONS: bool = True
    CREDIT_NOTE_PREFIX: str = "VCN"
    FINANCIAL_YEAR_START_MONTH: int = 4


settings = Settings()
