from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal

class Settings(BaseSettings):
    DB_URL: str = "sqlite:///./data/handoffs.db"
    DATA_DIR: str = "./data"
    SIGNOFF_MODE: Literal["log", "denormalized"] = "log"
    LOG_LEVEL: str = "INFO"
    cors_allow_origins: List[str] = ["*"]
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

settings = Settings()
