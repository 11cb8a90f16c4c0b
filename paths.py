from collections.abc import Mapping, Sequence
from typing import Any, Optional


# Last.fm's grey star placeholder, used when an item has no image at the requested size
FALLBACK_IMAGE = "https://lastfm.freetls.fastly.net/i/u/174s/2a96cbd8b46e442fc41c2b86b821562f.png"

_MISSING = object()


def _step(value: Any, segment: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(segment, _MISSING)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if not (segment.isascii() and segment.isdigit()):
            return _MISSING
        index = int(segment)
        return value[index] if index < len(value) else _MISSING
    return _MISSING


def resolve(root: Any, path: Optional[str], default: Any = None) -> Any:
    """Resolve a dot-separated path like "album.images.large" against nested data.

    Segments index mappings by key and sequences by non-negative position.
    Anything that cannot be followed yields ``default`` instead of raising.
    """
    if not path:
        return default

    value = root
    for segment in path.split("."):
        value = _step(value, segment)
        if value is _MISSING:
            return default
    return value


def resolve_text(item: Any, path: Optional[str]) -> str:
    """Resolve a path to a display string, blank when not found"""
    value = resolve(item, path)
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value)


def resolve_image_url(item: Any, path: Optional[str], size: str = "large") -> str:
    """Pick the image URL for a size from the resolved image mapping, with fallback"""
    images = resolve(item, path)
    if isinstance(images, Mapping) and images.get(size):
        return images[size]
    return FALLBACK_IMAGE


def css_class_for(path: Optional[str]) -> str:
    """Class name for a rendered field, e.g. "album.images" -> "album-images" """
    return (path or "").replace(".", "-")
