"""Remote catalog client for PokéAPI."""

import logging
from typing import Any, List, Optional

import requests

from constants import API_POKEMON_URL, API_TYPE_URL, REQUEST_TIMEOUT, USER_AGENT
from errors import DecodeError, NetworkError
from models import CollectionSummary, DetailRecord

logger = logging.getLogger(__name__)


class CatalogClient:
    """
    Issues list, detail and category requests against PokéAPI.
    Holds no catalog state; every call is one round trip, no caching or retries.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        pokemon_url: str = API_POKEMON_URL,
        type_url: str = API_TYPE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self._session = session
        self.pokemon_url = pokemon_url
        self.type_url = type_url
        self.timeout = timeout

    def get_session(self) -> requests.Session:
        """Get or create the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": USER_AGENT})
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        try:
            resp = self.get_session().get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"GET {url} failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(f"GET {url} returned invalid JSON: {e}") from e

    @staticmethod
    def _results(data: Any, url: str) -> list:
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise DecodeError(f"GET {url}: response has no 'results' list")
        return results

    def list_page(self, page_size: int, offset: int) -> List[CollectionSummary]:
        """Fetch one page of collection summaries."""
        data = self._get_json(self.pokemon_url, params={"limit": page_size, "offset": offset})
        summaries = [CollectionSummary.from_api(entry) for entry in self._results(data, self.pokemon_url)]
        logger.debug("Listed %d summaries at offset %d", len(summaries), offset)
        return summaries

    def fetch_detail(self, url: str) -> DetailRecord:
        """Resolve a summary's detail URL to a full record."""
        return DetailRecord.from_api(self._get_json(url))

    def list_categories(self) -> List[str]:
        """Fetch every known type name."""
        data = self._get_json(self.type_url)
        names = []
        for entry in self._results(data, self.type_url):
            name = entry.get("name") if isinstance(entry, dict) else None
            if not isinstance(name, str):
                raise DecodeError(f"GET {self.type_url}: type entry without a name")
            names.append(name)
        return names
