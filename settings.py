import os
from typing import Optional

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime configuration, read from the environment"""
    api_key: str = ""
    user: str = ""
    cache_dir: Optional[str] = "cache"  # None keeps responses in memory only
    timeout: float = 10.0
    enrichment_concurrency: int = 4
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_key=os.getenv("LASTFM_API_KEY", ""),
            user=os.getenv("LASTFM_USER", ""),
            cache_dir=os.getenv("LASTFM_CACHE_DIR", "cache") or None,
            timeout=float(os.getenv("LASTFM_TIMEOUT", "10")),
            enrichment_concurrency=int(os.getenv("LASTFM_ENRICHMENT_CONCURRENCY", "4")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
