from typing import List, Optional
import logging

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv('.env.local', override=True)
load_dotenv()

logger = logging.getLogger(__name__)


#=========================
#CONFIG
#=========================
class ProxySettings(BaseSettings):
    NEWS_API_KEY: Optional[str] = None
    NEWS_API_URL: str = "https://newsapi.org/v2"
    ALPHA_VANTAGE_API_KEY: Optional[str] = None
    ALPHA_VANTAGE_URL: str = "https://www.alphavantage.co/query"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_API_VERSION: str = "v1beta"
    GEMINI_MODEL: str = "gemini-2.5-flash"
    ALLOWED_ORIGINS: str = (
        "https://autonomous-ai-knowledge-worker.netlify.app,"
        "http://localhost:3000,http://localhost:8501"
    )
    REQUIRE_HTTPS: bool = False
    HOST: str = "127.0.0.1"
    PORT: int = 5000
    UPSTREAM_TIMEOUT: float = 60.0
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env.local"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def gemini_api_url(self) -> str:
        return (
            f"https://generativelanguage.googleapis.com/{self.GEMINI_API_VERSION}/models/"
            f"{self.GEMINI_MODEL}:generateContent"
        )


settings = ProxySettings()

for _name in ("NEWS_API_KEY", "ALPHA_VANTAGE_API_KEY", "GEMINI_API_KEY"):
    if not getattr(settings, _name):
        logger.warning(f"{_name} not set - the matching endpoint will be unavailable")
