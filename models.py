from pydantic import BaseModel, field_validator
from typing import Any, Dict, List, Union


IMAGE_SIZES = ("small", "medium", "large", "extralarge")


class PartialItem(BaseModel):
    """Name and link of a non-leaf item in a chart entry"""
    name: str = ""
    url: str = ""

    @field_validator("name", "url", mode="before")
    @classmethod
    def _blank_if_missing(cls, value: Any) -> str:
        return "" if value is None else str(value)


class NormalizedItem(PartialItem):
    """Model for an artist, album or track as displayed"""
    images: Dict[str, str] = {}  # Maps size tag to image URL
    playcount: int = 0

    @field_validator("playcount", mode="before")
    @classmethod
    def _coerce_playcount(cls, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0


class ArtistEntry(BaseModel):
    artist: NormalizedItem


class AlbumEntry(BaseModel):
    artist: PartialItem
    album: NormalizedItem


class TrackEntry(BaseModel):
    artist: PartialItem
    album: PartialItem
    track: NormalizedItem


CollectionEntry = Union[ArtistEntry, AlbumEntry, TrackEntry]


class CacheEntry(BaseModel):
    """Model for a cached upstream response"""
    key: str
    payload: Any
    expires_at: float  # Unix timestamp

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ChartResponse(BaseModel):
    """Response model for a top chart"""
    collection: str
    period: str
    items: List[Dict[str, Any]]
