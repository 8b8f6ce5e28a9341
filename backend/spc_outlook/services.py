"""
services.py — Business logic for the SPC Outlook Lookup.

Responsibilities:
    - Testing a point against each hazard region (delegated to winding.py).
    - Walking the catalog in document order and announcing each validity
      window when it changes from the previous region's window.
    - Rendering report lines as text for the CLI and the API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from spc_outlook.models import Category, HazardCatalog, HazardRegion, Point, ValidityWindow
from spc_outlook.winding import point_in_polygon

logger = logging.getLogger(__name__)

NO_THREAT_TEXT = "No significant threat"

# Placeholder shown on a match whose region had no readable validity window.
UNKNOWN_WINDOW_TEXT = "validity unknown"


# ── Report lines ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class IntervalLine:
    """Start of a new validity window."""
    window: ValidityWindow


@dataclass(frozen=True)
class MatchLine:
    """The query point lies in a region of this category."""
    category:    Category
    description: str
    label:       str
    window:      Optional[ValidityWindow] = None


@dataclass(frozen=True)
class NoThreatLine:
    """No region matched the query point."""


ReportLine = Union[IntervalLine, MatchLine, NoThreatLine]

# Never equal to a ValidityWindow.
_NO_WINDOW = object()


# ── Public API ───────────────────────────────────────────────────────────────

def describe(category: Category) -> str:
    """Fixed description sentence for a hazard category."""
    return category.description


def matches(point: Point, region: HazardRegion) -> bool:
    """True if the point is inside the region's outer ring and none of its holes."""
    return point_in_polygon(point, region.outer, region.holes)


def report(point: Point, catalog: HazardCatalog) -> list[ReportLine]:
    """
    Build the ordered report for one query point.

    Steps:
        1. Visit groups, then regions, in catalog order.
        2. Emit an IntervalLine whenever a region's window differs from the
           last announced one. Only consecutive repeats are folded, so a
           window interrupted by another is announced again.
        3. Emit a MatchLine for every region containing the point.
        4. If nothing matched, finish with a single NoThreatLine.

    Regions whose window failed to parse neither announce nor reset the
    current window; their matches carry window=None.

    Args:
        point:   Query point.
        catalog: Parsed outlook.

    Returns:
        Report lines in output order.
    """
    lines: list[ReportLine] = []
    last_window: object = _NO_WINDOW
    matched = False

    for group in catalog.groups:
        for region in group.regions:
            if region.window is not None and region.window != last_window:
                lines.append(IntervalLine(window=region.window))
                last_window = region.window

            if matches(point, region):
                logger.debug("Matched %s region %r", region.category.name, region.label)
                lines.append(MatchLine(
                    category=region.category,
                    description=describe(region.category),
                    label=region.label,
                    window=region.window,
                ))
                matched = True

    if not matched:
        lines.append(NoThreatLine())

    return lines


def has_threat(lines: list[ReportLine]) -> bool:
    return any(isinstance(line, MatchLine) for line in lines)


# ── Text rendering ───────────────────────────────────────────────────────────

def format_timestamp(moment: datetime, fmt: str = "short") -> str:
    """
    Render a timestamp for display.

    "short" gives the compact "3:04pm 1/2" form (no zero padding, lowercase
    meridiem); any other value is used as a strftime pattern.
    """
    if fmt != "short":
        return moment.strftime(fmt)
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return f"{hour}:{moment.minute:02d}{meridiem} {moment.month}/{moment.day}"


def format_line(line: ReportLine, fmt: str = "short") -> str:
    if isinstance(line, IntervalLine):
        return (
            f"Valid {format_timestamp(line.window.begin, fmt)} — "
            f"{format_timestamp(line.window.end, fmt)}"
        )
    if isinstance(line, MatchLine):
        text = f"{line.description}: {line.label}"
        if line.window is None:
            text += f" ({UNKNOWN_WINDOW_TEXT})"
        return text
    return NO_THREAT_TEXT


def format_report(lines: list[ReportLine], fmt: str = "short") -> list[str]:
    """Render report lines as text, one string per line."""
    return [format_line(line, fmt) for line in lines]
