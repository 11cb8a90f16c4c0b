from fastapi import FastAPI, Query, Request, status
from fastapi.responses import JSONResponse
import logging
from typing import List, Optional

from cache import ResponseCache
from charts import COLLECTIONS, ChartsBuilder, validate_limit, validate_period
from lastfm_client import LastFMClient, LastFMError
from models import ChartResponse
from paths import css_class_for, resolve_image_url, resolve_text
from settings import Settings


settings = Settings.from_env()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title="Last.fm Profile Charts")

# Initialize components
response_cache = ResponseCache(settings.cache_dir)
lastfm_client = LastFMClient(
    settings.api_key, settings.user, response_cache, timeout=settings.timeout
)
charts_builder = ChartsBuilder(lastfm_client, settings.enrichment_concurrency)


def no_store(response: JSONResponse) -> JSONResponse:
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(LastFMError)
async def lastfm_error_handler(request: Request, exc: LastFMError):
    logger.error("Last.fm request failed", extra={"path": request.url.path, "error": exc.code})
    return no_store(JSONResponse(exc.to_dict(), status_code=exc.status))


@app.on_event("shutdown")
async def shutdown_event():
    """Release the HTTP client on shutdown"""
    await lastfm_client.close()


@app.get("/api/healthz")
async def health_check():
    """Simple health check endpoint"""
    return {"status": "ok"}


async def load_chart(collection: str, period: Optional[str], limit: Optional[int]):
    if collection not in COLLECTIONS:
        return None, None
    selected_period = validate_period(period)
    entries = await charts_builder.get_collection(
        collection, {"period": selected_period, "limit": validate_limit(limit)}
    )
    return selected_period, [entry.model_dump() for entry in entries]


@app.get("/api/charts/{collection}")
async def api_chart(collection: str, period: Optional[str] = None, limit: Optional[int] = None):
    """Return the user's top albums, artists or tracks"""
    selected_period, items = await load_chart(collection, period, limit)
    if items is None:
        return no_store(
            JSONResponse({"error": "unknown_collection"}, status_code=status.HTTP_404_NOT_FOUND)
        )

    chart = ChartResponse(collection=collection, period=selected_period, items=items)
    return no_store(JSONResponse(chart.model_dump()))


@app.get("/api/charts/{collection}/display")
async def api_chart_display(
    collection: str,
    period: Optional[str] = None,
    limit: Optional[int] = None,
    prop: List[str] = Query(default=[]),
    image_prop: Optional[str] = None,
    image_size: str = "large",
    link_prop: Optional[str] = None,
):
    """Return per-item display values resolved from attribute paths such as "album.name" """
    selected_period, items = await load_chart(collection, period, limit)
    if items is None:
        return no_store(
            JSONResponse({"error": "unknown_collection"}, status_code=status.HTTP_404_NOT_FOUND)
        )

    rows = []
    for item in items:
        link = resolve_text(item, link_prop)
        row = {
            "fields": [
                {
                    "prop": path,
                    "class": css_class_for(path),
                    "text": resolve_text(item, path),
                    "link": link,
                }
                for path in prop
            ]
        }
        if image_prop:
            row["image"] = {
                "class": css_class_for(image_prop),
                "url": resolve_image_url(item, image_prop, image_size),
                "link": link,
            }
        rows.append(row)

    return no_store(
        JSONResponse({"collection": collection, "period": selected_period, "items": rows})
    )
