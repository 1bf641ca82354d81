from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.utils import logger as _app_logger  # noqa: F401  configures the "app" logger
from app.api.releases import router as releases_router


app = FastAPI(title=settings.app_title, version="1.0.0")

# Add GZip compression middleware for better transfer performance
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(releases_router, prefix="/api/ott", tags=["OTT Releases"])


@app.get("/")
def root():
    return {"status": "OTT Release Radar API Running"}


@app.get("/health")
async def health_check():
    """Simple health check endpoint for load balancers/monitoring"""
    from app.services.release_query import get_release_service
    from app.utils.timezone import format_iso_utc, utc_now

    return {
        "status": "healthy",
        "timestamp": format_iso_utc(utc_now()),
        "cache": get_release_service().cache.stats(),
    }
