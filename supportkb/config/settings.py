"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from two sources (in priority order):
#
#   1. **Environment variables** - e.g. OPENAI_API_KEY=sk-abc123
#   2. **.env file** - key=value lines in the project root .env file
#
# Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``.  Defaults
# apply when neither source defines a value.
#
# Credentials default to "" (not configured).  The app still starts; the
# collaborator that needs a missing credential raises ConfigurationError
# the first time it is used.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """supportKB application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Embeddings ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, Azure proxy, ...)
    openai_embedding_model: str = ""  # Empty = text-embedding-3-small

    # === Vector store ===
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "support_knowledge_base"

    # === Web page fetching ===
    # When set, pages are fetched as GET {scrape_proxy_url}?url=<target>.
    scrape_proxy_url: str = ""
    scrape_timeout: float = 15.0

    # === Ingestion ===
    chunk_size: int = 500
    chunk_overlap: int = 50
    max_upload_bytes: int = 10 * 1024 * 1024
    ingest_max_concurrency: int = 8

    # === Listing / search ===
    list_page_size: int = 100
    search_top_k: int = 20
    search_min_score: float = 0.7

    # === Ratings ===
    feedback_db_path: str = "data/feedback.db"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
