from pydantic_settings import BaseSettings
from typing import List, Optional

# Ordered by reliability and availability
FREE_MODELS = [
    # Qwen
    "qwen/qwen3-235b-a22b:free",
    "qwen/qwen3-14b:free",
    "qwen/qwen3-coder:free",
    "qwen/qwen-2-7b-instruct:free",
    # DeepSeek
    "deepseek/deepseek-r1-0528-qwen3-8b:free",
    "deepseek/deepseek-r1-0528:free",
    "deepseek/deepseek-r1-distill-llama-70b:free",
    "deepseek/deepseek-r1:free",
    "deepseek/deepseek-chat-v3.1:free",
    "deepseek/deepseek-chat-v3-0324:free",
    # Google
    "google/gemini-flash-1.5-8b:free",
    "google/gemma-3-27b-it:free",
    "google/gemma-3n-e4b-it:free",
    # Other providers
    "meta-llama/llama-3.2-3b-instruct:free",
    "microsoft/phi-3-mini-128k-instruct:free",
    "z-ai/glm-4.5-air:free",
    "minimax/minimax-m2:free",
]


class Settings(BaseSettings):
    # API Configuration
    api_title: str = "Content AI Assistant"
    api_version: str = "1.0.0"
    debug: bool = False

    # Gateway Configuration
    openrouter_api_key: Optional[str] = None
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    app_url: str = "http://localhost:3000"  # sent as HTTP-Referer
    models: List[str] = FREE_MODELS

    # Fallback
    rate_limit_backoff_seconds: float = 2.0

    # Monitoring
    enable_metrics: bool = True
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
