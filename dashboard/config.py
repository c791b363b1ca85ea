from pydantic_settings import BaseSettings
from typing import Optional
from dotenv import load_dotenv
load_dotenv()


class DashboardConfig(BaseSettings):
    PROXY_BASE_URL: str = "http://localhost:5000"
    PROXY_TIMEOUT: float = 90.0
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    APP_ID: str = "default-app-id"
    HISTORY_TABLE: str = "analysis_history"
    INITIAL_REFRESH_TOKEN: Optional[str] = None
    HISTORY_REFRESH_SECONDS: int = 15
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env.local"
        env_file_encoding = "utf-8"
        extra = "ignore"


config = DashboardConfig()
