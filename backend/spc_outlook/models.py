"""
models.py — Immutable domain types for the outlook lookup.

Everything here is built once by the loader and never mutated afterwards:
    - Point / Ring:        coordinates of the hazard boundaries.
    - ValidityWindow:      the time span a hazard region is valid for.
    - Category:            closed set of outlook hazard kinds.
    - HazardRegion:        polygon-with-holes tagged with window, label, category.
    - HazardGroup:         one outlook folder (all regions of one category).
    - HazardCatalog:       the whole outlook document, groups in document order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Point:
    """A (latitude, longitude) pair. Values are not range-checked."""
    lat: float
    lng: float


# A closed ring: first and last point are expected to coincide.
Ring = tuple[Point, ...]


@dataclass(frozen=True)
class ValidityWindow:
    """Inclusive [begin, end] validity span of a hazard region."""
    begin: datetime
    end:   datetime


class Category(Enum):
    """Outlook hazard kinds, each carrying its fixed description."""

    CATEGORICAL         = "cat"
    WIND                = "wind"
    HAIL                = "hail"
    TORNADO             = "torn"
    SIGNIFICANT_WIND    = "sigwind"
    SIGNIFICANT_HAIL    = "sighail"
    SIGNIFICANT_TORNADO = "sigtorn"
    CONVECTIVE          = "tstm"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_group_name(cls, name: str) -> "Category":
        """
        Map an outlook folder identifier (e.g. "SPC_day1otlk_sigtorn") to
        its category.

        The trailing "_"-separated token selects the category; identifiers
        with an unknown token resolve to CONVECTIVE.
        """
        token = name.strip().rsplit("_", 1)[-1].lower()
        return _GROUP_TOKENS.get(token, cls.CONVECTIVE)


_DESCRIPTIONS: dict[Category, str] = {
    Category.CATEGORICAL:         "Categorical Risk for severe weather",
    Category.WIND:                "Risk of >57 mph gusts within 25 miles",
    Category.HAIL:                'Risk of 1" hail within 25 miles',
    Category.TORNADO:             "Risk of tornado within 25 miles",
    Category.SIGNIFICANT_WIND:    "Significant wind (>75 mph gusts) within 25 miles",
    Category.SIGNIFICANT_HAIL:    'Significant hail (>2") within 25 miles',
    Category.SIGNIFICANT_TORNADO: "Significant tornado (EF2 or greater) within 25 miles",
    Category.CONVECTIVE:          "Risk of T'Strm within 12 miles",
}

_GROUP_TOKENS: dict[str, Category] = {member.value: member for member in Category}


@dataclass(frozen=True)
class HazardRegion:
    """
    One outlook polygon.

    Attributes:
        outer:    Exterior boundary ring.
        holes:    Interior rings excluded from the hazard area.
        window:   Validity span, or None when the source timestamps could
                  not be parsed.
        label:    Name of the outlook area (e.g. "SLGT", "5 %").
        category: Hazard kind of the folder the region came from.
    """
    outer:    Ring
    holes:    tuple[Ring, ...] = ()
    window:   Optional[ValidityWindow] = None
    label:    str = ""
    category: Category = Category.CONVECTIVE


@dataclass(frozen=True)
class HazardGroup:
    """All regions of one outlook folder, in document order."""
    name:     str
    category: Category
    regions:  tuple[HazardRegion, ...] = ()


@dataclass(frozen=True)
class HazardCatalog:
    """
    A parsed outlook document.

    Attributes:
        groups: Hazard groups in document order (this is the report order).
        name:   Document name, if present.
        issued: Issue time converted to the configured zone, if readable.
    """
    groups: tuple[HazardGroup, ...] = field(default_factory=tuple)
    name:   str = ""
    issued: Optional[datetime] = None

    @property
    def region_count(self) -> int:
        return sum(len(group.regions) for group in self.groups)
