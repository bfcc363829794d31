"""Configuration and environment variables"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Gemini (image descriptions)
    gemini_api_key: Optional[str] = None
    gemini_vlm_model: str = "gemini-2.5-flash-lite"

    # Question-answering providers
    groq_api_key: Optional[str] = None
    groq_model: str = "llama-3.3-70b-versatile"
    perplexity_api_key: Optional[str] = None
    perplexity_model: str = "sonar-pro"
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    llm_timeout: float = 60.0
    llm_max_tokens: int = 2048

    # Upload handling
    max_file_size: int = 50000000  # 50MB

    # Image page handling
    render_scale: float = 2.0
    max_concurrent_image_calls: int = 3
    image_description_timeout: float = 60.0
    detect_image_types: bool = True

    # Chunking / retrieval
    chunk_target_size: int = 800
    chunk_max_size: int = 1200
    embedding_dimension: int = 128
    top_k_results: int = 5

    # Storage
    storage_backend: str = "memory"  # "memory" or "mongodb"
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "intelliread"

    # CORS Settings
    cors_origins: list = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
