import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    max_document_chars: int = 50000
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"
    rate_limit: str = "30/minute"

    # Segmentation / extraction thresholds
    header_max_length: int = 50
    skill_item_min_length: int = 2
    skill_item_max_length: int = 30

    # Preservation verification (fuzzy window match)
    fuzzy_window_size: int = 50
    fuzzy_window_step: int = 25
    fuzzy_match_ratio: float = 0.7

    # Feedback / versioning store
    feedback_store_backend: str = "memory"  # "memory" | "sqlite"
    feedback_db_path: str = "data/feedback.db"
    store_max_retries: int = 5

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
