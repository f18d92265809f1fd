from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PORT: int = 3002
    DB_PATH: str = "/data/resumind.db"
    STORAGE_DIR: str = "/data/uploads"
    LOG_LEVEL: str = "info"

    AI_FEEDBACK_URL: str = "http://localhost:8080/v1/feedback"
    AI_REQUEST_TIMEOUT: float = 120.0
    ANALYSIS_TIMEOUT_MS: int = 30000
    PDF_RENDER_SCALE: float = 4.0


settings = Settings()
