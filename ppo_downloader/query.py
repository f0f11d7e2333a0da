"""
Query construction for the PPO data portal download endpoint.

Filters are held in a FilterSet, expanded into an ordered list of
QueryClause objects and encoded once into the portal's search syntax:

    %2Bgenus:Quercus+AND+%2Byear:>=1979+AND+source:USA-NPN,NEON

``%2B`` is the encoded ``+`` that marks a clause as required, and the
literal ``+`` in ``+AND+`` is an encoded space.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, fields
from typing import Any

from ppo_downloader.errors import ValidationError
from ppo_downloader.utils import (
    format_number,
    validate_day,
    validate_positive_int,
    validate_year,
)

PPO_DOWNLOAD_URL = "http://api.plantphenology.org/v1/download/"

REQUIRED_MARKER = "%2B"
AND_SEPARATOR = "+AND+"

# Only USA-NPN and NEON records are requested
SOURCE_RESTRICTION = "source:USA-NPN,NEON"

# Fields returned by the portal
OUTPUT_FIELDS = (
    "latitude",
    "longitude",
    "year",
    "dayOfYear",
    "plantStructurePresenceTypes",
)

# Order in which filters become clauses
CLAUSE_ORDER = (
    "genus",
    "specific_epithet",
    "term_id",
    "bbox",
    "from_year",
    "to_year",
    "from_day",
    "to_day",
)

# filter name -> (portal field, operator, quoted)
CLAUSE_FIELDS = {
    "genus": ("genus", "", False),
    "specific_epithet": ("specificEpithet", "", False),
    "term_id": ("plantStructurePresenceTypes", "", True),
    "from_year": ("year", ">=", False),
    "to_year": ("year", "<=", False),
    "from_day": ("dayOfYear", ">=", False),
    "to_day": ("dayOfYear", "<=", False),
}


@dataclass(frozen=True)
class QueryClause:
    """
    A single condition in the portal's search syntax.

    Attributes:
        field: Portal field name (e.g. "year")
        operator: "", ">=" or "<="
        value: Value as it should appear in the query
        required: Prefix the clause with the required-term marker
        quoted: Wrap the value in double quotes
    """

    field: str
    operator: str
    value: str
    required: bool = True
    quoted: bool = False

    def encode(self) -> str:
        """Render the clause, e.g. ``%2Byear:>=1979``."""
        marker = REQUIRED_MARKER if self.required else ""
        value = f'"{self.value}"' if self.quoted else self.value
        return f"{marker}{self.field}:{self.operator}{value}"


@dataclass(frozen=True)
class BoundingBox:
    """
    A latitude/longitude rectangle normalized so that min <= max.

    Attributes:
        min_lat: Southern edge in decimal degrees
        max_lat: Northern edge in decimal degrees
        min_lng: Western edge in decimal degrees
        max_lng: Eastern edge in decimal degrees
    """

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @classmethod
    def from_corners(
        cls, lat1: float, lng1: float, lat2: float, lng2: float
    ) -> BoundingBox:
        """Create a box from two opposite corners given in any order."""
        return cls(
            min_lat=min(lat1, lat2),
            max_lat=max(lat1, lat2),
            min_lng=min(lng1, lng2),
            max_lng=max(lng1, lng2),
        )

    @classmethod
    def parse(cls, value: str | Sequence[float] | BoundingBox) -> BoundingBox:
        """
        Parse a bounding box.

        Accepts ``"lat1,long1,lat2,long2"`` or a sequence of four numbers.

        Raises:
            ValidationError: If the box is malformed or out of range
        """
        if isinstance(value, BoundingBox):
            return value

        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",")]
        else:
            parts = list(value)

        if len(parts) != 4:
            raise ValidationError(
                f"bbox must have 4 values (lat,long,lat,long), got {len(parts)}"
            )

        try:
            lat1, lng1, lat2, lng2 = (float(part) for part in parts)
        except (TypeError, ValueError):
            raise ValidationError(f"bbox values must be numeric, got {value!r}")

        for lat in (lat1, lat2):
            if not -90 <= lat <= 90:
                raise ValidationError(f"bbox latitude out of range: {lat}")
        for lng in (lng1, lng2):
            if not -180 <= lng <= 180:
                raise ValidationError(f"bbox longitude out of range: {lng}")

        return cls.from_corners(lat1, lng1, lat2, lng2)

    def clauses(self) -> list[QueryClause]:
        """Expand into the four required latitude/longitude clauses."""
        return [
            QueryClause("latitude", ">=", format_number(self.min_lat)),
            QueryClause("latitude", "<=", format_number(self.max_lat)),
            QueryClause("longitude", ">=", format_number(self.min_lng)),
            QueryClause("longitude", "<=", format_number(self.max_lng)),
        ]

    def to_string(self) -> str:
        """Format as ``"minLat,minLng,maxLat,maxLng"``."""
        return ",".join(
            format_number(v)
            for v in (self.min_lat, self.min_lng, self.max_lat, self.max_lng)
        )


@dataclass
class FilterSet:
    """
    Filters for a PPO data portal download.

    All fields are optional, but at least one filter other than ``limit``
    must be set before a query can be built.

    Attributes:
        genus: Plant genus name (e.g. "Quercus")
        specific_epithet: Plant specific epithet
        term_id: Plant stage from the Plant Phenology Ontology,
            e.g. "obo:PPO_0002324"
        from_year: First year to include
        to_year: Last year to include
        from_day: First day of year to include (1-366)
        to_day: Last day of year to include (1-366)
        bbox: Bounding box as "lat,long,lat,long" or a 4-item sequence
        limit: Maximum number of rows to return
    """

    genus: str | None = None
    specific_epithet: str | None = None
    term_id: str | None = None
    from_year: int | None = None
    to_year: int | None = None
    from_day: int | None = None
    to_day: int | None = None
    bbox: BoundingBox | str | Sequence[float] | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        """Normalize and validate filter values."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str):
                value = value.strip() or None
                setattr(self, f.name, value)

        try:
            if self.from_year is not None:
                self.from_year = validate_year(self.from_year, "from_year")
            if self.to_year is not None:
                self.to_year = validate_year(self.to_year, "to_year")
            if self.from_day is not None:
                self.from_day = validate_day(self.from_day, "from_day")
            if self.to_day is not None:
                self.to_day = validate_day(self.to_day, "to_day")
            if self.limit is not None:
                self.limit = validate_positive_int(self.limit, "limit")
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if (
            self.from_year is not None
            and self.to_year is not None
            and self.from_year > self.to_year
        ):
            raise ValidationError(
                f"from_year ({self.from_year}) cannot be after "
                f"to_year ({self.to_year})"
            )

        if (
            self.from_day is not None
            and self.to_day is not None
            and self.from_day > self.to_day
        ):
            raise ValidationError(
                f"from_day ({self.from_day}) cannot be after to_day ({self.to_day})"
            )

        if self.bbox is not None:
            self.bbox = BoundingBox.parse(self.bbox)

    @property
    def is_empty(self) -> bool:
        """True if no filter other than ``limit`` is set."""
        return all(getattr(self, name) is None for name in CLAUSE_ORDER)

    def validate(self) -> None:
        """
        Check that the filters can produce a query.

        Raises:
            ValidationError: If no filter other than ``limit`` is set
        """
        if self.is_empty:
            raise ValidationError("Please specify at least 1 query argument")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilterSet:
        """
        Create a FilterSet from a dictionary (e.g., from YAML config).

        Supports the nested ``taxonomy``/``filters`` layout as well as flat keys.
        """
        taxonomy = data.get("taxonomy") or {}
        filters = data.get("filters") or data

        return cls(
            genus=taxonomy.get("genus") or data.get("genus"),
            specific_epithet=(
                taxonomy.get("specific_epithet") or data.get("specific_epithet")
            ),
            term_id=filters.get("term_id"),
            from_year=filters.get("from_year"),
            to_year=filters.get("to_year"),
            from_day=filters.get("from_day"),
            to_day=filters.get("to_day"),
            bbox=filters.get("bbox"),
            limit=filters.get("limit"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "taxonomy": {
                "genus": self.genus,
                "specific_epithet": self.specific_epithet,
            },
            "filters": {
                "term_id": self.term_id,
                "from_year": self.from_year,
                "to_year": self.to_year,
                "from_day": self.from_day,
                "to_day": self.to_day,
                "bbox": self.bbox.to_string() if self.bbox else None,
                "limit": self.limit,
            },
        }


class QueryBuilder:
    """
    Build download URLs for the PPO data portal.

    Example:
        builder = QueryBuilder()
        url = builder.build(FilterSet(genus="Quercus", from_year=1979))
    """

    def __init__(self, base_url: str = PPO_DOWNLOAD_URL):
        """
        Initialize the builder.

        Args:
            base_url: Download endpoint the query is appended to
        """
        self.base_url = base_url

    def build_clauses(self, filters: FilterSet) -> list[QueryClause]:
        """
        Expand filters into clauses in CLAUSE_ORDER.

        The source restriction is not included.

        Raises:
            ValidationError: If no filter other than ``limit`` is set
        """
        filters.validate()

        clauses = []
        for name in CLAUSE_ORDER:
            value = getattr(filters, name)
            if value is None:
                continue

            if name == "bbox":
                clauses.extend(value.clauses())
                continue

            field, operator, quoted = CLAUSE_FIELDS[name]
            if not isinstance(value, str):
                value = format_number(value)
            clauses.append(QueryClause(field, operator, value, quoted=quoted))

        return clauses

    def build_query(self, filters: FilterSet) -> str:
        """Build the query string (everything after ``?``)."""
        encoded = [clause.encode() for clause in self.build_clauses(filters)]
        encoded.append(SOURCE_RESTRICTION)

        query = f"q={AND_SEPARATOR.join(encoded)}&source={','.join(OUTPUT_FIELDS)}"

        if filters.limit is not None:
            query += f"&limit={filters.limit}"

        return query

    def build(self, filters: FilterSet) -> str:
        """
        Build the complete download URL.

        Args:
            filters: FilterSet with at least one non-limit filter

        Returns:
            Query URL string

        Raises:
            ValidationError: If no filter other than ``limit`` is set
        """
        return f"{self.base_url}?{self.build_query(filters)}"


def build_query_url(filters: FilterSet, base_url: str = PPO_DOWNLOAD_URL) -> str:
    """Build the download URL for a FilterSet."""
    return QueryBuilder(base_url).build(filters)
