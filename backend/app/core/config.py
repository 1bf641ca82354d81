import os
from typing import List

from pydantic_settings import BaseSettings


DEFAULT_PLATFORMS = [
    "Netflix",
    "Amazon Prime Video",
    "Disney+ Hotstar",
    "Hulu",
    "Apple TV+",
    "SonyLIV",
    "Zee5",
]


class Settings(BaseSettings):
    app_title: str = os.getenv("OTT_APP_TITLE", "OTT Release Radar API")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Generation provider: gemini | ollama | openai_compatible
    ott_llm_provider: str = os.getenv("OTT_LLM_PROVIDER", "gemini")
    ott_llm_model: str = os.getenv("OTT_LLM_MODEL", "gemini-2.5-flash")
    ott_llm_api_base: str = os.getenv("OTT_LLM_API_BASE", "https://generativelanguage.googleapis.com")
    # Name of the env var holding the key, not the key itself
    ott_llm_api_key_env: str = os.getenv("OTT_LLM_API_KEY_ENV", "GEMINI_API_KEY")
    ott_llm_timeout_seconds: float = float(os.getenv("OTT_LLM_TIMEOUT_SECONDS", "60"))
    ott_llm_temperature: float = float(os.getenv("OTT_LLM_TEMPERATURE", "0.7"))

    # Release cache: memory | redis
    ott_cache_backend: str = os.getenv("OTT_CACHE_BACKEND", "memory")
    ott_cache_ttl_seconds: int = int(os.getenv("OTT_CACHE_TTL_SECONDS", "300"))  # 5 min
    ott_cache_max_entries: int = int(os.getenv("OTT_CACHE_MAX_ENTRIES", "64"))

    # Empty means the server's local time
    ott_timezone: str = os.getenv("OTT_TIMEZONE", "")
    ott_default_limit: int = int(os.getenv("OTT_DEFAULT_LIMIT", "20"))
    ott_platforms: List[str] = DEFAULT_PLATFORMS


settings = Settings()
