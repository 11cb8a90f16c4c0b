from typing import Any, Dict, Iterable, Optional

from models import IMAGE_SIZES, NormalizedItem, PartialItem


ITEM_KINDS = ("artist", "album", "track")


def map_image_sizes(images: Optional[Iterable[Any]]) -> Dict[str, str]:
    """Fold Last.fm's [{size, #text}] image list into a size -> URL mapping"""
    mapped: Dict[str, str] = {}
    if not isinstance(images, list):
        return mapped

    for image in images:
        if not isinstance(image, dict):
            continue
        size = image.get("size")
        url = image.get("#text")
        if size not in IMAGE_SIZES or not (url is None or isinstance(url, str)):
            continue
        mapped[size] = url or ""
    return mapped


def _userplaycount(kind: str, record: Dict[str, Any]) -> Any:
    # artist.getinfo nests the user's count under stats, album/track do not
    if kind == "artist":
        stats = record.get("stats")
        return stats.get("userplaycount") if isinstance(stats, dict) else None
    return record.get("userplaycount")


def _image_list(kind: str, record: Dict[str, Any]) -> Any:
    # track.getinfo carries artwork on the album sub-object only
    if kind == "track":
        album = record.get("album")
        return album.get("image") if isinstance(album, dict) else None
    return record.get("image")


def normalize_item(kind: str, raw: Optional[Dict[str, Any]]) -> Optional[NormalizedItem]:
    """Normalize an artist/album/track.getinfo payload.

    Returns None when the payload holds no record for ``kind``, which callers
    treat as "no enrichment available".
    """
    if kind not in ITEM_KINDS:
        raise ValueError(f"Unknown item kind: {kind}")
    if not isinstance(raw, dict):
        return None

    record = raw.get(kind)
    if not record or not isinstance(record, dict):
        return None

    return NormalizedItem(
        name=record.get("name"),
        url=record.get("url"),
        images=map_image_sizes(_image_list(kind, record)),
        playcount=_userplaycount(kind, record),
    )


def normalize_list_entry(raw: Dict[str, Any]) -> NormalizedItem:
    """Normalize one record of a user.gettop* list"""
    return NormalizedItem(
        name=raw.get("name"),
        url=raw.get("url"),
        images=map_image_sizes(raw.get("image")),
        playcount=raw.get("playcount"),
    )


def partial_item(raw: Any) -> PartialItem:
    if not isinstance(raw, dict):
        return PartialItem()
    return PartialItem(name=raw.get("name"), url=raw.get("url"))
