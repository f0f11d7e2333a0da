"""Tests for the query module."""

import pytest
from ppo_downloader.errors import ValidationError
from ppo_downloader.query import (
    BoundingBox,
    FilterSet,
    QueryBuilder,
    QueryClause,
    build_query_url,
)

BASE = "http://api.plantphenology.org/v1/download/"
SUFFIX = (
    "+AND+source:USA-NPN,NEON"
    "&source=latitude,longitude,year,dayOfYear,plantStructurePresenceTypes"
)


class TestQueryClause:
    """Tests for QueryClause."""

    def test_required_clause(self):
        """Test required clauses carry the %2B marker."""
        clause = QueryClause("year", ">=", "1979")
        assert clause.encode() == "%2Byear:>=1979"

    def test_optional_clause(self):
        """Test clauses without the required marker."""
        clause = QueryClause("source", "", "USA-NPN,NEON", required=False)
        assert clause.encode() == "source:USA-NPN,NEON"

    def test_quoted_clause(self):
        """Test quoted values."""
        clause = QueryClause(
            "plantStructurePresenceTypes", "", "obo:PPO_0002324", quoted=True
        )
        assert clause.encode() == '%2BplantStructurePresenceTypes:"obo:PPO_0002324"'


class TestBoundingBox:
    """Tests for BoundingBox."""

    def test_parse_string(self):
        """Test parsing a lat,long,lat,long string."""
        box = BoundingBox.parse("44,-124,46,-122")
        assert box.min_lat == 44
        assert box.max_lat == 46
        assert box.min_lng == -124
        assert box.max_lng == -122

    def test_corner_order_normalized(self):
        """Test that swapped corners give the same box."""
        assert BoundingBox.parse("44,-124,46,-122") == BoundingBox.parse(
            "46,-122,44,-124"
        )

    def test_mixed_corner_order_normalized(self):
        """Test the other diagonal normalizes to the same box."""
        assert BoundingBox.parse("44,-122,46,-124") == BoundingBox.parse(
            "46,-124,44,-122"
        )

    def test_parse_sequence(self):
        """Test parsing a sequence of numbers."""
        box = BoundingBox.parse([46.5, -122.25, 44, -124])
        assert box == BoundingBox(44, 46.5, -124, -122.25)

    def test_parse_strips_whitespace(self):
        """Test that whitespace around values is ignored."""
        box = BoundingBox.parse(" 44 , -124, 46 ,-122 ")
        assert box == BoundingBox(44, 46, -124, -122)

    def test_wrong_number_of_values(self):
        """Test that a box needs four values."""
        with pytest.raises(ValidationError, match="4 values"):
            BoundingBox.parse("44,-124,46")

    def test_non_numeric_values(self):
        """Test that non-numeric values are rejected."""
        with pytest.raises(ValidationError, match="numeric"):
            BoundingBox.parse("44,west,46,-122")

    def test_latitude_out_of_range(self):
        """Test that latitudes beyond 90 are rejected."""
        with pytest.raises(ValidationError, match="latitude"):
            BoundingBox.parse("95,-124,46,-122")

    def test_longitude_out_of_range(self):
        """Test that longitudes beyond 180 are rejected."""
        with pytest.raises(ValidationError, match="longitude"):
            BoundingBox.parse("44,-190,46,-122")

    def test_clauses(self):
        """Test expansion into four required clauses."""
        box = BoundingBox.parse("46,-122,44,-124")
        encoded = [clause.encode() for clause in box.clauses()]
        assert encoded == [
            "%2Blatitude:>=44",
            "%2Blatitude:<=46",
            "%2Blongitude:>=-124",
            "%2Blongitude:<=-122",
        ]

    def test_clauses_keep_decimals(self):
        """Test fractional degrees are written without exponent."""
        box = BoundingBox.parse("44.125,-124.5,46,-122")
        encoded = [clause.encode() for clause in box.clauses()]
        assert encoded[0] == "%2Blatitude:>=44.125"
        assert encoded[2] == "%2Blongitude:>=-124.5"

    def test_to_string(self):
        """Test formatting back to a string."""
        assert BoundingBox.parse("46,-122,44,-124").to_string() == "44,-124,46,-122"


class TestFilterSet:
    """Tests for FilterSet."""

    def test_empty_filter_set(self):
        """Test an empty filter set reports itself empty."""
        assert FilterSet().is_empty is True

    def test_limit_alone_is_empty(self):
        """Test that limit does not count as a query filter."""
        filters = FilterSet(limit=10)
        assert filters.is_empty is True
        with pytest.raises(ValidationError, match="at least 1 query argument"):
            filters.validate()

    def test_empty_strings_are_absent(self):
        """Test that blank strings are treated as unset."""
        filters = FilterSet(genus="  ", term_id="")
        assert filters.genus is None
        assert filters.term_id is None
        assert filters.is_empty is True

    def test_bbox_parsed(self):
        """Test that bbox strings become BoundingBox objects."""
        filters = FilterSet(bbox="46,-122,44,-124")
        assert filters.bbox == BoundingBox(44, 46, -124, -122)

    def test_year_strings_converted(self):
        """Test that numeric strings are accepted for years."""
        filters = FilterSet(from_year="1979")
        assert filters.from_year == 1979

    def test_invalid_year_raises_error(self):
        """Test that an implausible year is rejected."""
        with pytest.raises(ValidationError, match="must be >= 1700"):
            FilterSet(from_year=1500)

    def test_future_year_raises_error(self):
        """Test that a future year is rejected."""
        with pytest.raises(ValidationError, match="cannot be in the future"):
            FilterSet(to_year=3000)

    def test_year_range_reversed(self):
        """Test that from_year after to_year is rejected."""
        with pytest.raises(ValidationError, match="cannot be after"):
            FilterSet(from_year=2004, to_year=1979)

    def test_day_out_of_range(self):
        """Test that days must fall within 1-366."""
        with pytest.raises(ValidationError, match="between 1 and 366"):
            FilterSet(from_day=0)
        with pytest.raises(ValidationError, match="between 1 and 366"):
            FilterSet(to_day=367)

    def test_day_range_reversed(self):
        """Test that from_day after to_day is rejected."""
        with pytest.raises(ValidationError, match="cannot be after"):
            FilterSet(from_day=200, to_day=100)

    def test_limit_must_be_positive(self):
        """Test that limit must be a positive integer."""
        with pytest.raises(ValidationError, match="limit must be >= 1"):
            FilterSet(genus="Quercus", limit=0)

    def test_validation_error_is_value_error(self):
        """Test ValidationError can be caught as ValueError."""
        with pytest.raises(ValueError):
            FilterSet(from_year="nineteen")

    def test_from_dict_nested(self):
        """Test creating a filter set from a nested dictionary."""
        data = {
            "taxonomy": {"genus": "Quercus", "specific_epithet": "alba"},
            "filters": {
                "from_year": 1979,
                "to_year": 2004,
                "bbox": "44,-124,46,-122",
                "limit": 100,
            },
        }
        filters = FilterSet.from_dict(data)
        assert filters.genus == "Quercus"
        assert filters.specific_epithet == "alba"
        assert filters.from_year == 1979
        assert filters.to_year == 2004
        assert filters.bbox == BoundingBox(44, 46, -124, -122)
        assert filters.limit == 100

    def test_from_dict_flat(self):
        """Test creating a filter set from flat keys."""
        filters = FilterSet.from_dict({"genus": "Acer", "from_day": 150})
        assert filters.genus == "Acer"
        assert filters.from_day == 150

    def test_to_dict(self):
        """Test converting a filter set to a dictionary."""
        filters = FilterSet(genus="Quercus", bbox="46,-122,44,-124", limit=5)
        data = filters.to_dict()
        assert data["taxonomy"]["genus"] == "Quercus"
        assert data["filters"]["bbox"] == "44,-124,46,-122"
        assert data["filters"]["limit"] == 5
        assert data["filters"]["from_year"] is None


class TestQueryBuilder:
    """Tests for QueryBuilder."""

    @pytest.fixture
    def builder(self):
        """Create a QueryBuilder instance."""
        return QueryBuilder()

    def test_no_filters_raises_error(self, builder):
        """Test that an empty filter set cannot be built."""
        with pytest.raises(ValidationError):
            builder.build(FilterSet())

    def test_limit_only_raises_error(self, builder):
        """Test that limit alone is not enough."""
        with pytest.raises(ValidationError):
            builder.build(FilterSet(limit=10))

    def test_genus_and_years(self, builder):
        """Test the documented genus/year query."""
        url = builder.build(FilterSet(genus="Quercus", from_year=1979, to_year=2004))
        assert url == (
            BASE
            + "?q=%2Bgenus:Quercus+AND+%2Byear:>=1979+AND+%2Byear:<=2004"
            + SUFFIX
        )

    def test_bbox_corner_order_independent(self, builder):
        """Test that bbox corner order does not change the query."""
        url1 = builder.build(FilterSet(bbox="44,-124,46,-122"))
        url2 = builder.build(FilterSet(bbox="46,-122,44,-124"))
        assert url1 == url2
        assert url1 == (
            BASE
            + "?q=%2Blatitude:>=44+AND+%2Blatitude:<=46"
            + "+AND+%2Blongitude:>=-124+AND+%2Blongitude:<=-122"
            + SUFFIX
        )

    def test_clause_order_is_fixed(self, builder):
        """Test clauses follow the fixed order regardless of argument order."""
        filters = FilterSet(
            to_day=60,
            from_day=1,
            to_year=2004,
            from_year=1979,
            bbox="44,-124,46,-122",
            term_id="obo:PPO_0002324",
            specific_epithet="alba",
            genus="Quercus",
        )
        fields = [clause.field for clause in builder.build_clauses(filters)]
        assert fields == [
            "genus",
            "specificEpithet",
            "plantStructurePresenceTypes",
            "latitude",
            "latitude",
            "longitude",
            "longitude",
            "year",
            "year",
            "dayOfYear",
            "dayOfYear",
        ]

    def test_term_id_quoted(self, builder):
        """Test that term IDs are quoted verbatim."""
        url = builder.build(FilterSet(term_id="obo:PPO_0002324"))
        assert '?q=%2BplantStructurePresenceTypes:"obo:PPO_0002324"+AND+' in url

    def test_specific_epithet_field_name(self, builder):
        """Test that specific epithets use the portal's field name."""
        url = builder.build(FilterSet(specific_epithet="alba"))
        assert "?q=%2BspecificEpithet:alba+AND+source:USA-NPN,NEON" in url

    def test_day_clauses(self, builder):
        """Test day-of-year clauses."""
        url = builder.build(FilterSet(from_day=1, to_day=60))
        assert "?q=%2BdayOfYear:>=1+AND+%2BdayOfYear:<=60+AND+" in url

    def test_source_restriction_appended(self, builder):
        """Test the source restriction follows the filter clauses."""
        query = builder.build_query(FilterSet(genus="Quercus"))
        assert query.startswith("q=%2Bgenus:Quercus+AND+source:USA-NPN,NEON&")

    def test_limit_appended(self, builder):
        """Test that limit is the final argument."""
        url = builder.build(FilterSet(from_day=150, limit=10))
        assert url.endswith(SUFFIX + "&limit=10")

    def test_no_limit_suffix(self, builder):
        """Test that no limit argument is added without a limit."""
        url = builder.build(FilterSet(from_day=150))
        assert "&limit=" not in url
        assert url.endswith(SUFFIX)

    def test_custom_base_url(self):
        """Test building against another endpoint."""
        builder = QueryBuilder(base_url="http://localhost:8080/v1/download/")
        url = builder.build(FilterSet(genus="Quercus"))
        assert url.startswith("http://localhost:8080/v1/download/?q=")

    def test_build_query_url_shortcut(self):
        """Test the module-level shortcut matches the builder."""
        filters = FilterSet(genus="Quercus", limit=3)
        assert build_query_url(filters) == QueryBuilder().build(filters)
