import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlencode

from pydantic import ValidationError

from models import CacheEntry


logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "profile_charts_lastfm_"
CACHE_TTL_SECONDS = 60 * 60


def cache_key(params: Mapping[str, Any]) -> str:
    """Derive a stable cache key from request parameters.

    Empty values are dropped and the rest sorted by name, so requests that
    differ only in ordering or blank parameters share a key.
    """
    filtered = sorted(
        (str(name), str(value))
        for name, value in params.items()
        if value is not None and value != ""
    )
    digest = hashlib.md5(urlencode(filtered).encode("utf-8")).hexdigest()
    return CACHE_KEY_PREFIX + digest


class ResponseCache:
    """Time-boxed cache for upstream responses, in memory with optional disk copy"""

    def __init__(
        self,
        cache_dir: Optional[str] = "cache",
        clock: Callable[[], float] = time.time,
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else None
        if self.cache_dir is not None:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.clock = clock

        # In-memory cache
        self._entries: Dict[str, CacheEntry] = {}

    def _entry_file(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def _load_entry(self, key: str) -> Optional[CacheEntry]:
        """Load an entry from disk, treating unreadable files as a miss"""
        if self.cache_dir is None:
            return None

        entry_file = self._entry_file(key)
        if not entry_file.exists():
            return None

        try:
            with open(entry_file, "r") as f:
                return CacheEntry(**json.load(f))
        except (OSError, json.JSONDecodeError, TypeError, ValidationError):
            logger.debug("Ignoring unreadable cache file %s", entry_file)
            return None

    def get(self, key: str) -> Optional[Any]:
        """Get a cached payload, or None on miss or expiry"""
        entry = self._entries.get(key)
        if entry is None:
            entry = self._load_entry(key)
            if entry is not None:
                self._entries[key] = entry

        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            logger.debug("Cache entry expired", extra={"cache_key": key})
            return None
        return entry.payload

    def put(self, key: str, payload: Any, ttl: int = CACHE_TTL_SECONDS):
        """Store a payload for ``ttl`` seconds, replacing any previous entry"""
        entry = CacheEntry(key=key, payload=payload, expires_at=self.clock() + ttl)
        self._entries[key] = entry

        if self.cache_dir is None:
            return
        try:
            with open(self._entry_file(key), "w") as f:
                json.dump(entry.model_dump(), f)
        except OSError:
            # Memory copy still serves this process
            logger.warning("Failed to write cache file for %s", key)
