"""
conftest.py — Shared pytest fixtures for the SPC Outlook Lookup test suite.

Provides:
    - Rings, hazard regions and a catalog built in memory so unit tests
      never touch the filesystem.
    - A small outlook KML document matching the SPC folder/placemark layout,
      as text and as a file under tmp_path.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from spc_outlook.models import (
    Category,
    HazardCatalog,
    HazardGroup,
    HazardRegion,
    Point,
    ValidityWindow,
)


def ring(*pairs) -> tuple[Point, ...]:
    """Build a Ring from (lat, lng) pairs."""
    return tuple(Point(lat=lat, lng=lng) for lat, lng in pairs)


def window(begin_hour: int, end_hour: int) -> ValidityWindow:
    return ValidityWindow(
        begin=datetime(2025, 4, 1, begin_hour, tzinfo=timezone.utc),
        end=datetime(2025, 4, 2, end_hour, tzinfo=timezone.utc),
    )


# ── Geometry fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def square_ring():
    """4×4 square with a corner at the origin (lat, lng pairs)."""
    return ring((0, 0), (0, 4), (4, 4), (4, 0), (0, 0))


@pytest.fixture
def hole_ring():
    """2×2 square centred inside square_ring."""
    return ring((1, 1), (1, 3), (3, 3), (3, 1), (1, 1))


@pytest.fixture
def chicago():
    return ZoneInfo("America/Chicago")


# ── Catalog fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def window_a():
    return window(13, 12)


@pytest.fixture
def window_b():
    return window(20, 12)


@pytest.fixture
def sample_catalog(square_ring, hole_ring, window_a, window_b) -> HazardCatalog:
    """
    Three groups:
        cat:  square with a hole                 (window A)
        torn: the same square, no hole           (window A)
        hail: a square far away from the origin  (window B)
    """
    far_square = ring((40, -100), (40, -90), (45, -90), (45, -100), (40, -100))
    return HazardCatalog(
        name="Test outlook",
        groups=(
            HazardGroup("SPC_day1otlk_cat", Category.CATEGORICAL, (
                HazardRegion(square_ring, (hole_ring,), window_a, "SLGT", Category.CATEGORICAL),
            )),
            HazardGroup("SPC_day1otlk_torn", Category.TORNADO, (
                HazardRegion(square_ring, (), window_a, "5 %", Category.TORNADO),
            )),
            HazardGroup("SPC_day1otlk_hail", Category.HAIL, (
                HazardRegion(far_square, (), window_b, "15 %", Category.HAIL),
            )),
        ),
    )


# ── KML fixtures ──────────────────────────────────────────────────────────────

SAMPLE_KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
<Document>
  <name>SPC Day 1 Convective Outlook</name>
  <description><![CDATA[SPC Day 1 Convective Outlook
Valid 1300Z - 1200Z
Issue Time 1259 PM CDT Tue Apr 01 2025<br />
]]></description>
  <Folder>
    <name>SPC_day1otlk_cat</name>
    <Placemark>
      <name>SLGT</name>
      <TimeSpan><begin>2025-04-01T13:00:00Z</begin><end>2025-04-02T12:00:00Z</end></TimeSpan>
      <Polygon>
        <outerBoundaryIs><LinearRing><coordinates>0,0 4,0 4,4 0,4 0,0</coordinates></LinearRing></outerBoundaryIs>
        <innerBoundaryIs><LinearRing><coordinates>1,1 3,1 3,3 1,3 1,1</coordinates></LinearRing></innerBoundaryIs>
      </Polygon>
    </Placemark>
  </Folder>
  <Folder>
    <name>SPC_day1otlk_sigtorn</name>
    <Placemark>
      <name>SIGN</name>
      <TimeSpan><begin>2025-04-01T13:00:00Z</begin><end>2025-04-02T12:00:00Z</end></TimeSpan>
      <Polygon>
        <outerBoundaryIs><LinearRing><coordinates>0,0 4,0 4,4 0,4 0,0</coordinates></LinearRing></outerBoundaryIs>
      </Polygon>
    </Placemark>
    <Placemark>
      <name>BROKEN</name>
      <TimeSpan><begin>2025-04-01T13:00:00Z</begin><end>2025-04-02T12:00:00Z</end></TimeSpan>
      <Polygon>
        <outerBoundaryIs><LinearRing><coordinates>0,0 4,x 4,4 0,0</coordinates></LinearRing></outerBoundaryIs>
      </Polygon>
    </Placemark>
  </Folder>
  <Folder>
    <name>SPC_day1otlk_hail</name>
    <Placemark>
      <name>15 %</name>
      <TimeSpan><begin>not a time</begin><end>2025-04-02T12:00:00Z</end></TimeSpan>
      <Polygon>
        <outerBoundaryIs><LinearRing><coordinates>0,0 4,0 4,4 0,4 0,0</coordinates></LinearRing></outerBoundaryIs>
      </Polygon>
    </Placemark>
  </Folder>
</Document>
</kml>
"""


@pytest.fixture
def sample_kml() -> str:
    """Outlook with a holed polygon, one malformed ring and one bad timestamp."""
    return SAMPLE_KML


@pytest.fixture
def sample_kml_path(tmp_path, sample_kml):
    path = tmp_path / "day1otlk.kml"
    path.write_text(sample_kml, encoding="utf-8")
    return path
