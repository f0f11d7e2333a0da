"""
PPO data portal client.

Sends a single download request built from a FilterSet and turns the
portal's gzip-compressed CSV response into a pandas DataFrame:

- 200: gzip CSV whose first line echoes the query, second line is the header
- 204: no matching records
- anything else: an error
"""

from __future__ import annotations

import gzip
import io
import zlib

import pandas as pd
import requests

from ppo_downloader.errors import DecodeError, TransportError
from ppo_downloader.query import PPO_DOWNLOAD_URL, FilterSet, QueryBuilder
from ppo_downloader.utils import get_logger

# Request configuration
DEFAULT_TIMEOUT = (10, 120)  # (connect, read) in seconds

GZIP_MAGIC = b"\x1f\x8b"


def decode_response(response: requests.Response) -> pd.DataFrame | None:
    """
    Interpret a download response.

    Args:
        response: Response from the download endpoint

    Returns:
        DataFrame of results, or None if the portal found no records

    Raises:
        TransportError: For any status other than 200 or 204
        DecodeError: If a 200 body cannot be decompressed or parsed
    """
    logger = get_logger()

    if response.status_code == 204:
        logger.info("No results found")
        return None

    if response.status_code != 200:
        detail = response.text or None
        raise TransportError(
            f"Unexpected status code {response.status_code}"
            + (f": {detail}" if detail else ""),
            status_code=response.status_code,
            detail=detail,
        )

    logger.info("Unzipping response and processing data")
    return read_payload(response.content)


def read_payload(content: bytes) -> pd.DataFrame:
    """
    Parse a download payload into a DataFrame.

    The payload is gunzipped unless the transport has already decoded it.
    The first line (a description of the query) is skipped and the second
    line is used as the header.

    Raises:
        DecodeError: If the payload is not valid gzip or CSV
    """
    compression = "gzip" if content[:2] == GZIP_MAGIC else None

    with io.BytesIO(content) as buffer:
        try:
            df = pd.read_csv(buffer, compression=compression, skiprows=1, header=0)
        except pd.errors.EmptyDataError as e:
            raise DecodeError(f"Response contained no header row: {e}") from e
        except pd.errors.ParserError as e:
            raise DecodeError(f"Could not parse response as CSV: {e}") from e
        except (gzip.BadGzipFile, zlib.error, EOFError) as e:
            raise DecodeError(f"Could not decompress response: {e}") from e
        except UnicodeDecodeError as e:
            raise DecodeError(f"Response is not valid text: {e}") from e

    return df


class PPOClient:
    """
    Client for the PPO data portal download API.

    Example:
        with PPOClient() as client:
            df = client.download(FilterSet(genus="Quercus", from_year=1979))
    """

    def __init__(
        self,
        base_url: str = PPO_DOWNLOAD_URL,
        timeout: tuple[int, int] | float | None = DEFAULT_TIMEOUT,
    ):
        """
        Initialize PPO client.

        Args:
            base_url: Download endpoint
            timeout: Request timeout as (connect, read) seconds, or None
        """
        self.base_url = base_url
        self.timeout = timeout
        self.builder = QueryBuilder(base_url)
        self.logger = get_logger()
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with default headers."""
        session = requests.Session()
        session.headers.update(
            {
                "Accept": "application/x-gzip, text/csv",
                "User-Agent": "ppo-downloader/1.0 (Python)",
            }
        )
        return session

    def build_url(self, filters: FilterSet) -> str:
        """Build the download URL for the given filters."""
        return self.builder.build(filters)

    def fetch(self, filters: FilterSet) -> requests.Response:
        """
        Send the download request.

        Args:
            filters: FilterSet to query

        Returns:
            Raw response

        Raises:
            ValidationError: If the filters are empty
            TransportError: If the request cannot be completed
        """
        url = self.build_url(filters)
        self.logger.info(f"Sending request to {url}")

        try:
            return self.session.get(url, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection error: {e}") from e
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timeout: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

    def download(self, filters: FilterSet) -> pd.DataFrame | None:
        """
        Download records matching the filters.

        Returns:
            DataFrame of results, or None if nothing matched

        Raises:
            ValidationError: If the filters are empty
            TransportError: On connection failure or unexpected status
            DecodeError: If the payload is malformed
        """
        response = self.fetch(filters)
        df = decode_response(response)

        if df is not None:
            self.logger.info(f"Retrieved {len(df):,} records")

        return df

    def close(self) -> None:
        """Close the session and release resources."""
        self.session.close()

    def __enter__(self) -> PPOClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit."""
        self.close()


def ppo_data(
    genus: str | None = None,
    specific_epithet: str | None = None,
    term_id: str | None = None,
    from_year: int | None = None,
    to_year: int | None = None,
    from_day: int | None = None,
    to_day: int | None = None,
    bbox: str | None = None,
    limit: int | None = None,
    client: PPOClient | None = None,
) -> pd.DataFrame | None:
    """
    Retrieve data from the PPO data portal.

    The portal aggregates plant phenology observations from USA-NPN, NEON
    and PEP725; results are limited to the USA-NPN and NEON sources.

    Args:
        genus: A plant genus name
        specific_epithet: A plant specific epithet
        term_id: A plant stage from the Plant Phenology Ontology,
            e.g. "obo:PPO_0002324"
        from_year: Query for years starting from this year
        to_year: Query for years ending at this year
        from_day: Query for days starting from this day
        to_day: Query for days ending at this day
        bbox: A lat/long bounding box as "lat,long,lat,long"
        limit: Limit the result set to this many rows
        client: Client to use (a temporary one is created if omitted)

    Returns:
        DataFrame with source, latitude, longitude, year, dayOfYear and
        plantStructurePresenceTypes columns, or None if nothing matched

    Example:
        df = ppo_data(genus="Quercus", from_year=1979, to_year=2004)
        df = ppo_data(bbox="44,-124,46,-122", from_day=1, to_day=60)
        df = ppo_data(from_day=150, limit=10)
    """
    filters = FilterSet(
        genus=genus,
        specific_epithet=specific_epithet,
        term_id=term_id,
        from_year=from_year,
        to_year=to_year,
        from_day=from_day,
        to_day=to_day,
        bbox=bbox,
        limit=limit,
    )
    filters.validate()

    if client is not None:
        return client.download(filters)

    with PPOClient() as temp_client:
        return temp_client.download(filters)
