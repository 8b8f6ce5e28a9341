"""
main.py — FastAPI application entry point for the SPC Outlook Lookup.

Exposes:
    GET /                      — health check (root)
    GET /health                — detailed health info
    GET /api/v1/outlook        — hazard report for a lat/lng
    GET /api/v1/categories     — category descriptions and loaded groups

Run with:
    uvicorn spc_outlook.main:app --reload
or the `spc-outlook-api` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from spc_outlook.config import Settings, load_settings
from spc_outlook.loader import CatalogLoadError, LoadResult, load_catalog
from spc_outlook.models import Category, Point
from spc_outlook.services import (
    IntervalLine,
    MatchLine,
    ReportLine,
    format_line,
    format_timestamp,
    has_threat,
    report,
)

# ── Logging ──────────────────────────────────────────────────────────────────
settings: Settings = load_settings()
logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

# ── Application-level outlook (loaded once at startup) ───────────────────────
outlook: LoadResult | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the configured outlook KML before accepting requests."""
    global outlook
    try:
        outlook = load_catalog(settings.kml_path, settings.tzinfo())
    except CatalogLoadError as exc:
        logger.error("Outlook not loaded: %s", exc)
        outlook = None
    else:
        logger.info("Loaded %d outlook regions", outlook.catalog.region_count)
        for error in outlook.errors:
            logger.warning("Placemark %r in %r: %s", error.label, error.group, error.reason)
    yield
    logger.info("Shutting down — releasing outlook.")


# ── FastAPI app ──────────────────────────────────────────────────────────────
app = FastAPI(
    title="SPC Outlook Lookup API",
    description=(
        "Report which Storm Prediction Center convective outlook areas "
        "cover a coordinate, with their validity windows."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _isoformat(moment):
    return moment.isoformat() if moment is not None else None


def _line_payload(line: ReportLine) -> dict:
    text = format_line(line, settings.time_format)
    if isinstance(line, IntervalLine):
        return {
            "kind": "interval",
            "text": text,
            "valid_from": line.window.begin.isoformat(),
            "valid_until": line.window.end.isoformat(),
        }
    if isinstance(line, MatchLine):
        return {
            "kind": "match",
            "text": text,
            "category": line.category.name.lower(),
            "description": line.description,
            "label": line.label,
            "valid_from": _isoformat(line.window.begin if line.window else None),
            "valid_until": _isoformat(line.window.end if line.window else None),
        }
    return {"kind": "none", "text": text}


# ── Routes ───────────────────────────────────────────────────────────────────

@app.get("/", tags=["health"])
def root():
    """Root health-check endpoint."""
    return {"status": "ok", "message": "SPC Outlook Lookup API is running."}


@app.get("/health", tags=["health"])
def health():
    """Detailed health check: returns loaded outlook counts."""
    if outlook is None:
        raise HTTPException(status_code=503, detail="Outlook not yet loaded.")
    catalog = outlook.catalog
    return {
        "status": "ok",
        "groups_loaded": len(catalog.groups),
        "regions_loaded": catalog.region_count,
        "placemark_errors": len(outlook.errors),
        "issued": _isoformat(catalog.issued),
    }


@app.get("/api/v1/outlook", tags=["outlook"])
def lookup(
    lat: float = Query(..., ge=-90.0, le=90.0, description="Latitude (-90 – 90)"),
    lng: float = Query(..., ge=-180.0, le=180.0, description="Longitude (-180 – 180)"),
):
    """
    Return the outlook report for the supplied geographic coordinate.

    Every outlook region is tested with the winding-number point-in-polygon
    test; validity windows are announced whenever they change between
    consecutive regions.

    Raises:
        HTTPException 503: If the outlook has not been loaded.
    """
    if outlook is None:
        raise HTTPException(status_code=503, detail="Outlook not loaded.")

    catalog = outlook.catalog
    lines = report(Point(lat=lat, lng=lng), catalog)
    threat = has_threat(lines)

    logger.info("Outlook (%.4f, %.4f) → threat: %s", lat, lng, threat)
    return {
        "latitude": lat,
        "longitude": lng,
        "issued": _isoformat(catalog.issued),
        "issued_text": (
            format_timestamp(catalog.issued, settings.time_format)
            if catalog.issued is not None else None
        ),
        "threat": threat,
        "lines": [_line_payload(line) for line in lines],
    }


@app.get("/api/v1/categories", tags=["metadata"])
def list_categories():
    """
    Return every hazard category with its description, and the outlook
    groups currently loaded (in document order).
    """
    if outlook is None:
        raise HTTPException(status_code=503, detail="Outlook not loaded.")

    return {
        "categories": {member.name.lower(): member.description for member in Category},
        "groups": [
            {"name": group.name, "category": group.category.name.lower(),
             "regions": len(group.regions)}
            for group in outlook.catalog.groups
        ],
    }


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the API with uvicorn (entry point of `spc-outlook-api`)."""
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
