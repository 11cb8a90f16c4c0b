from typing import Any, Awaitable, Callable, Dict, List, Optional
import asyncio
import logging

from models import AlbumEntry, ArtistEntry, CollectionEntry, NormalizedItem, PartialItem, TrackEntry
from lastfm_client import LastFMClient
from normalizer import normalize_list_entry, partial_item


logger = logging.getLogger(__name__)

COLLECTIONS = ("albums", "artists", "tracks")
PERIODS = ("overall", "7day", "1month", "3month", "6month", "12month")
DEFAULT_PERIOD = "overall"
DEFAULT_LIMIT = 8
MAX_LIMIT = 50
ENRICHMENT_CONCURRENCY = 4


def validate_period(period: Optional[str]) -> str:
    """Validate and normalize the chart period parameter"""
    if period and period.lower() in PERIODS:
        return period.lower()
    return DEFAULT_PERIOD


def validate_limit(limit: Optional[int]) -> int:
    if not limit:
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, int(limit)))


def merge_enrichment(
    listed: NormalizedItem, enriched: Optional[NormalizedItem]
) -> NormalizedItem:
    """Combine a top-list record with its info lookup.

    The list playcount always wins, since it honours the requested period
    while the info call reports the all-time count.
    """
    if enriched is None:
        return listed
    return enriched.model_copy(update={"playcount": listed.playcount})


def _list_records(data: Any, container: str, field: str) -> List[Dict[str, Any]]:
    if not isinstance(data, dict):
        return []
    wrapper = data.get(container)
    if not isinstance(wrapper, dict):
        return []
    records = wrapper.get(field)
    # Single results come back as a bare object
    if isinstance(records, dict):
        records = [records]
    if not isinstance(records, list):
        return []
    return [record for record in records if isinstance(record, dict)]


class ChartsBuilder:
    """Builds a user's top albums, artists and tracks from Last.fm"""

    def __init__(self, lastfm_client: LastFMClient, concurrency: int = ENRICHMENT_CONCURRENCY):
        self.lastfm_client = lastfm_client
        self.concurrency = max(1, concurrency)

    async def _fetch_list(
        self, method: str, params: Optional[Dict[str, Any]], container: str, field: str
    ) -> List[Dict[str, Any]]:
        data = await self.lastfm_client.request(method, dict(params or {}))
        return _list_records(data, container, field)

    async def _enrich_all(
        self,
        records: List[Dict[str, Any]],
        lookup: Callable[[Dict[str, Any]], Awaitable[Optional[NormalizedItem]]],
    ) -> List[Optional[NormalizedItem]]:
        """Run per-record info lookups with bounded concurrency, keeping list order"""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def enrich(record: Dict[str, Any]) -> Optional[NormalizedItem]:
            async with semaphore:
                enriched = await lookup(record)
            if enriched is None:
                logger.warning(
                    "No info available, using list entry",
                    extra={"item": record.get("name")},
                )
            return enriched

        return await asyncio.gather(*(enrich(record) for record in records))

    async def get_top_albums(self, params: Optional[Dict[str, Any]] = None) -> List[AlbumEntry]:
        """Get the user's top albums; list records already carry images and playcount"""
        records = await self._fetch_list("user.gettopalbums", params, "topalbums", "album")
        return [
            AlbumEntry(
                artist=partial_item(record.get("artist")),
                album=normalize_list_entry(record),
            )
            for record in records
        ]

    async def get_top_artists(self, params: Optional[Dict[str, Any]] = None) -> List[ArtistEntry]:
        """Get the user's top artists, enriched with artist.getinfo"""
        records = await self._fetch_list("user.gettopartists", params, "topartists", "artist")

        async def lookup(record: Dict[str, Any]) -> Optional[NormalizedItem]:
            return await self.lastfm_client.get_artist_info(record.get("name", ""))

        enriched = await self._enrich_all(records, lookup)
        return [
            ArtistEntry(artist=merge_enrichment(normalize_list_entry(record), info))
            for record, info in zip(records, enriched)
        ]

    async def get_top_tracks(self, params: Optional[Dict[str, Any]] = None) -> List[TrackEntry]:
        """Get the user's top tracks, enriched with track.getinfo"""
        records = await self._fetch_list("user.gettoptracks", params, "toptracks", "track")

        async def lookup(record: Dict[str, Any]) -> Optional[NormalizedItem]:
            artist = partial_item(record.get("artist"))
            return await self.lastfm_client.get_track_info(record.get("name", ""), "", artist.name)

        enriched = await self._enrich_all(records, lookup)
        return [
            TrackEntry(
                artist=partial_item(record.get("artist")),
                album=PartialItem(),
                track=merge_enrichment(normalize_list_entry(record), info),
            )
            for record, info in zip(records, enriched)
        ]

    async def get_collection(
        self, collection: str, params: Optional[Dict[str, Any]] = None
    ) -> List[CollectionEntry]:
        """Dispatch to the top-chart getter for "albums", "artists" or "tracks" """
        getters = {
            "albums": self.get_top_albums,
            "artists": self.get_top_artists,
            "tracks": self.get_top_tracks,
        }
        if collection not in getters:
            raise ValueError(f"Unknown collection: {collection}")
        return await getters[collection](params)
