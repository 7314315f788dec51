"""Shared fixtures: PokéAPI-shaped payloads and a scriptable catalog client."""

import asyncio
import threading
from typing import Dict, Iterable, List, Optional, Set

import pytest

from errors import NetworkError
from favorites import FavoritesStore
from models import CollectionSummary, DetailRecord

DETAIL_URL = "https://pokeapi.co/api/v2/pokemon/{}/"


def make_payload(pokemon_id: int, name: Optional[str] = None, types: Iterable[str] = ("normal",)) -> dict:
    """Build a trimmed /pokemon/{id} response."""
    return {
        "id": pokemon_id,
        "name": name or f"pokemon-{pokemon_id}",
        "sprites": {"front_default": f"https://sprites.example/{pokemon_id}.png"},
        "types": [{"slot": i + 1, "type": {"name": t, "url": "x"}} for i, t in enumerate(types)],
        "stats": [
            {"base_stat": 35, "effort": 0, "stat": {"name": "hp"}},
            {"base_stat": 55, "effort": 2, "stat": {"name": "attack"}},
        ],
        "abilities": [{"ability": {"name": "static"}, "is_hidden": False, "slot": 1}],
        "height": 4,
    }


def make_record(pokemon_id: int, name: Optional[str] = None, types: Iterable[str] = ("normal",)) -> DetailRecord:
    return DetailRecord.from_api(make_payload(pokemon_id, name, types))


class FakeCatalogClient:
    """
    Stands in for CatalogClient. Pages hold consecutive ids starting at
    ``id_base + offset + 1``. The next request for a page can be held back with
    ``hold(offset)`` until ``release(offset)`` so tests control completion order.
    """

    def __init__(
        self,
        names: Optional[Dict[int, str]] = None,
        types: Optional[Dict[int, List[str]]] = None,
        id_base: int = 0,
    ):
        self.id_base = id_base
        self.names = names or {}
        self.types = types or {}
        self.categories: List[str] = ["normal", "fire", "water", "electric"]
        self.fail_categories = False
        self.fail_list = False
        self.failing_ids: Set[int] = set()
        self.list_calls: List[tuple] = []
        self.detail_calls: List[str] = []
        self._gates: Dict[int, threading.Event] = {}
        self._events: Dict[int, threading.Event] = {}
        self._lock = threading.Lock()

    def hold(self, offset: int) -> None:
        self._gates[offset] = self._events[offset] = threading.Event()

    def release(self, offset: int) -> None:
        self._events[offset].set()

    def list_page(self, page_size: int, offset: int) -> List[CollectionSummary]:
        with self._lock:
            self.list_calls.append((page_size, offset))
            gate = self._gates.pop(offset, None)
        if gate is not None and not gate.wait(timeout=5):
            raise NetworkError("gate never released")
        if self.fail_list:
            raise NetworkError("list failed")
        return [
            CollectionSummary(name=f"pokemon-{i}", detail_url=DETAIL_URL.format(i))
            for i in range(self.id_base + offset + 1, self.id_base + offset + page_size + 1)
        ]

    def fetch_detail(self, url: str) -> DetailRecord:
        with self._lock:
            self.detail_calls.append(url)
        pokemon_id = int(url.rstrip("/").rsplit("/", 1)[1])
        if pokemon_id in self.failing_ids:
            raise NetworkError(f"detail {pokemon_id} failed")
        return make_record(pokemon_id, self.names.get(pokemon_id), self.types.get(pokemon_id, ["normal"]))

    def list_categories(self) -> List[str]:
        if self.fail_categories:
            raise NetworkError("types unavailable")
        return list(self.categories)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_client():
    return FakeCatalogClient()


@pytest.fixture
def favorites_path(tmp_path):
    return str(tmp_path / "favorites.json")


@pytest.fixture
def favorites_store(favorites_path):
    return FavoritesStore(favorites_path)


async def wait_for_list_calls(client: FakeCatalogClient, count: int, timeout: float = 2.0) -> None:
    """Yield to the loop until the client has seen ``count`` list requests."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while len(client.list_calls) < count:
        if loop.time() > deadline:
            raise AssertionError(f"expected {count} list calls, saw {client.list_calls}")
        await asyncio.sleep(0.01)
