"""
loader.py — Outlook KML ingestion for the SPC Outlook Lookup.

Responsible for:
    - Reading an outlook KML document from disk or from a string.
    - Parsing coordinate strings into closed Rings and RFC 3339 timestamps
      into aware datetimes in the configured zone.
    - Mapping each folder to its hazard Category.
    - Collecting per-placemark failures on a LoadResult instead of aborting.

Nothing downstream of this module re-parses raw strings.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Optional, Union

from spc_outlook.models import (
    Category,
    HazardCatalog,
    HazardGroup,
    HazardRegion,
    Point,
    Ring,
    ValidityWindow,
)

logger = logging.getLogger(__name__)


# ── Errors ───────────────────────────────────────────────────────────────────

class CatalogLoadError(Exception):
    """The outlook document could not be read or is not valid XML."""


class CoordinateParseError(ValueError):
    """A coordinate tuple in a LinearRing is malformed."""


class TimestampParseError(ValueError):
    """A TimeSpan begin/end value is not an RFC 3339 timestamp."""


@dataclass(frozen=True)
class PlacemarkError:
    """One placemark that failed to parse, and why."""
    group:  str
    label:  str
    reason: str


@dataclass(frozen=True)
class LoadResult:
    """
    Outcome of ingesting one outlook document.

    Attributes:
        catalog: Every region that could be built. Placemarks with bad
                 coordinates are absent; placemarks with bad timestamps are
                 present with window=None.
        errors:  Per-placemark failures, in document order.
    """
    catalog: HazardCatalog
    errors:  tuple[PlacemarkError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


# ── Field parsers ────────────────────────────────────────────────────────────

def parse_coordinates(text: Optional[str]) -> Ring:
    """
    Parse a KML <coordinates> body into a Ring.

    KML lists whitespace-separated "lng,lat[,alt]" tuples. The ring is
    returned exactly as written; closing it is the document's job.

    Raises:
        CoordinateParseError: On an empty body or any malformed tuple.
    """
    tokens = (text or "").split()
    if not tokens:
        raise CoordinateParseError("Empty coordinate list")

    points = []
    for token in tokens:
        parts = token.split(",")
        if len(parts) < 2:
            raise CoordinateParseError(f"Malformed coordinate {token!r}")
        try:
            points.append(Point(lat=float(parts[1]), lng=float(parts[0])))
        except ValueError as exc:
            raise CoordinateParseError(f"Malformed coordinate {token!r}") from exc
    return tuple(points)


_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(raw: Optional[str], tz: tzinfo) -> datetime:
    """
    Parse an RFC 3339 timestamp and convert it into the zone ``tz``.

    Raises:
        TimestampParseError: If the value is missing, malformed or has no
                             UTC offset.
    """
    value = (raw or "").strip()
    if value[-1:] in ("Z", "z"):
        value = value[:-1] + "+00:00"
    # datetime carries microseconds; finer fractions are truncated.
    value = _FRACTION_RE.sub(r"\1", value)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise TimestampParseError(f"Invalid timestamp {raw!r}") from exc
    if parsed.tzinfo is None:
        raise TimestampParseError(f"Timestamp {raw!r} has no UTC offset")
    return parsed.astimezone(tz)


def parse_window(begin: Optional[str], end: Optional[str], tz: tzinfo) -> ValidityWindow:
    return ValidityWindow(begin=parse_timestamp(begin, tz), end=parse_timestamp(end, tz))


# US zone abbreviations used on outlook issue-time lines.
_ZONE_OFFSETS: dict[str, int] = {
    "UTC": 0, "GMT": 0,
    "EST": -5, "EDT": -4,
    "CST": -6, "CDT": -5,
    "MST": -7, "MDT": -6,
    "PST": -8, "PDT": -7,
}

# "Issue Time 1259 PM CDT Tue Apr 01 2025"
_ISSUE_LOCAL_RE = re.compile(
    r"Issue Time (\d{3,4}) (AM|PM) ([A-Z]{3}) \w{3} (\w{3} \d{1,2} \d{4})"
)
# "Issue Time 20250401 202504011759Z"
_ISSUE_UTC_RE = re.compile(r"Issue Time \d{8} (\d{12})Z")


def parse_issue_time(description: Optional[str], tz: tzinfo) -> Optional[datetime]:
    """
    Extract the issue time from a document <description>.

    Both the local-time form and the compact UTC form are understood.

    Returns:
        The issue time in zone ``tz``, or None if no line could be read.
    """
    text = description or ""

    match = _ISSUE_LOCAL_RE.search(text)
    if match and match.group(3) in _ZONE_OFFSETS:
        hhmm, meridiem, zone, date = match.groups()
        try:
            naive = datetime.strptime(f"{date} {hhmm.zfill(4)} {meridiem}", "%b %d %Y %I%M %p")
        except ValueError:
            naive = None
        if naive is not None:
            offset = timezone(timedelta(hours=_ZONE_OFFSETS[zone]))
            return naive.replace(tzinfo=offset).astimezone(tz)

    match = _ISSUE_UTC_RE.search(text)
    if match:
        try:
            naive = datetime.strptime(match.group(1), "%Y%m%d%H%M")
        except ValueError:
            naive = None
        if naive is not None:
            return naive.replace(tzinfo=timezone.utc).astimezone(tz)

    logger.warning("Could not read issue time from document description.")
    return None


# ── Document parsing ─────────────────────────────────────────────────────────

def _strip_namespaces(root: ET.Element) -> None:
    """Drop "{namespace}" prefixes so KML 2.2 and bare documents read alike."""
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.rsplit("}", 1)[1]


def _text(element: Optional[ET.Element], path: str) -> Optional[str]:
    if element is None:
        return None
    found = element.find(path)
    return found.text if found is not None else None


def _parse_polygon(polygon: ET.Element) -> tuple[Ring, tuple[Ring, ...]]:
    outer_text = _text(polygon, "outerBoundaryIs/LinearRing/coordinates")
    if outer_text is None:
        raise CoordinateParseError("Polygon has no outer boundary")
    outer = parse_coordinates(outer_text)
    holes = tuple(
        parse_coordinates(ring.text)
        for ring in polygon.findall("innerBoundaryIs/LinearRing/coordinates")
    )
    return outer, holes


def _parse_folder(
    folder: ET.Element,
    tz: tzinfo,
    errors: list[PlacemarkError],
) -> HazardGroup:
    name = (_text(folder, "name") or "").strip()
    category = Category.from_group_name(name)
    regions: list[HazardRegion] = []

    for placemark in folder.findall("Placemark"):
        label = (_text(placemark, "name") or "").strip()

        try:
            polygons = [_parse_polygon(p) for p in placemark.iter("Polygon")]
            if not polygons:
                raise CoordinateParseError("Placemark has no Polygon")
        except CoordinateParseError as exc:
            logger.warning("Skipping placemark %r in %r: %s", label, name, exc)
            errors.append(PlacemarkError(group=name, label=label, reason=str(exc)))
            continue

        window: Optional[ValidityWindow]
        try:
            window = parse_window(
                _text(placemark, "TimeSpan/begin"),
                _text(placemark, "TimeSpan/end"),
                tz,
            )
        except TimestampParseError as exc:
            logger.warning("No validity window for %r in %r: %s", label, name, exc)
            errors.append(PlacemarkError(group=name, label=label, reason=str(exc)))
            window = None

        for outer, holes in polygons:
            regions.append(HazardRegion(
                outer=outer,
                holes=holes,
                window=window,
                label=label,
                category=category,
            ))

    return HazardGroup(name=name, category=category, regions=tuple(regions))


def parse_catalog(document: Union[str, bytes], tz: tzinfo) -> LoadResult:
    """
    Parse an outlook KML document into a HazardCatalog.

    Args:
        document: KML text.
        tz:       Zone every validity and issue time is converted into.

    Returns:
        LoadResult holding the catalog and any per-placemark failures.

    Raises:
        CatalogLoadError: If the text is not well-formed XML or has no
                          <Document> element.
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise CatalogLoadError(f"Invalid KML: {exc}") from exc

    _strip_namespaces(root)
    doc = root if root.tag == "Document" else root.find("Document")
    if doc is None:
        raise CatalogLoadError("KML has no <Document> element")

    errors: list[PlacemarkError] = []
    groups = tuple(_parse_folder(folder, tz, errors) for folder in doc.findall("Folder"))

    catalog = HazardCatalog(
        groups=groups,
        name=(_text(doc, "name") or "").strip(),
        issued=parse_issue_time(_text(doc, "description"), tz),
    )
    logger.info(
        "Parsed %d regions in %d groups (%d placemark errors)",
        catalog.region_count, len(groups), len(errors),
    )
    return LoadResult(catalog=catalog, errors=tuple(errors))


def load_catalog(path: Union[str, Path], tz: tzinfo) -> LoadResult:
    """
    Read and parse an outlook KML file from disk.

    Raises:
        CatalogLoadError: If the file is missing, unreadable or not KML.
    """
    path = Path(path)
    try:
        document = path.read_bytes()
    except OSError as exc:
        logger.error("Outlook file not readable: %s (%s)", path, exc)
        raise CatalogLoadError(f"Cannot read {path}: {exc}") from exc

    logger.info("Loading outlook from %s", path.name)
    return parse_catalog(document, tz)
