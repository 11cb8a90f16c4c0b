import json
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from cache import CACHE_TTL_SECONDS, ResponseCache, cache_key
from models import NormalizedItem
from normalizer import normalize_item


logger = logging.getLogger(__name__)

API_ENDPOINT = "https://ws.audioscrobbler.com/2.0/"

ALLOWED_METHODS = frozenset({
    "artist.getinfo",
    "album.getinfo",
    "track.getinfo",
    "user.gettopalbums",
    "user.gettopartists",
    "user.gettoptracks",
})


class LastFMError(Exception):
    """Base error for a failed Last.fm request"""

    code = "lastfm_error"
    status = 502

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        data = {"error": self.code, "message": self.message}
        if self.detail:
            data["detail"] = self.detail
        return data


class InvalidMethodError(LastFMError):
    code = "invalid_method"
    status = 400


class TransportError(LastFMError):
    code = "transport_error"
    status = 502


class DecodeError(LastFMError):
    code = "json_decode_error"
    status = 500


class LastFMClient:
    """Client for the Last.fm web service, with one-hour response caching"""

    def __init__(
        self,
        api_key: str,
        user: str,
        cache: ResponseCache,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.base_url = API_ENDPOINT
        self.api_key = api_key
        self.user = user
        self.cache = cache
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

        if not api_key:
            logger.warning("LASTFM_API_KEY is not configured; upstream requests will be rejected")

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()

    def build_params(self, method: Optional[str], params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge caller params, minus blank ones, over the request defaults"""
        merged: Dict[str, Any] = {
            "api_key": self.api_key,
            "user": self.user,
            "format": "json",
        }
        if method:
            merged["method"] = method
        merged.update({name: value for name, value in (params or {}).items() if value})
        return merged

    async def request(self, method: Optional[str], params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a cached GET against the API and return the decoded JSON payload.

        Raises InvalidMethodError for methods outside ALLOWED_METHODS,
        TransportError when the request cannot be completed and DecodeError
        when the body is not JSON. Failures are never cached.
        """
        merged = self.build_params(method, params)
        key = cache_key(merged)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit", extra={"method": merged.get("method"), "cache_key": key})
            return cached

        method = merged.get("method")
        if not method or method not in ALLOWED_METHODS:
            raise InvalidMethodError(
                "Invalid or missing method parameter for Last.fm API request.",
                detail=str(method) if method else None,
            )

        logger.info("Fetching from Last.fm API", extra={"method": method})
        query = {name: value for name, value in merged.items() if value is not None}
        try:
            response = await self.client.get(self.base_url, params=query)
        except httpx.HTTPError as e:
            raise TransportError(f"Last.fm request failed: {method}", detail=str(e)) from e

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise DecodeError("Failed to decode Last.fm API response.", detail=e.msg) from e

        if isinstance(data, dict) and "error" in data:
            logger.warning(
                "Last.fm returned an error payload",
                extra={"method": method, "error": data.get("error"), "detail": data.get("message")},
            )

        self.cache.put(key, data, CACHE_TTL_SECONDS)
        return data

    async def _get_info(self, kind: str, params: Dict[str, Any]) -> Optional[NormalizedItem]:
        try:
            data = await self.request(f"{kind}.getinfo", params)
        except LastFMError as e:
            logger.warning(
                "Info lookup failed",
                extra={"kind": kind, "error": e.code, "detail": e.detail},
            )
            return None

        try:
            return normalize_item(kind, data)
        except ValidationError as e:
            logger.warning(
                "Info payload could not be normalized",
                extra={"kind": kind, "error": "validation_error", "detail": str(e)},
            )
            return None

    async def get_artist_info(self, artist: str, user: Optional[str] = None) -> Optional[NormalizedItem]:
        """Get an artist's details, or None when unavailable"""
        return await self._get_info("artist", {"artist": artist, "user": user})

    async def get_album_info(
        self, album: str, artist: str, user: Optional[str] = None
    ) -> Optional[NormalizedItem]:
        """Get an album's details, or None when unavailable"""
        return await self._get_info("album", {"album": album, "artist": artist, "user": user})

    async def get_track_info(
        self, track: str, album: str, artist: str, user: Optional[str] = None
    ) -> Optional[NormalizedItem]:
        """Get a track's details, or None when unavailable"""
        return await self._get_info(
            "track", {"track": track, "album": album, "artist": artist, "user": user}
        )
