"""
Shared pytest fixtures for the Pokédex tests.

Provides:
  - JSON-shaped Pokémon records built like PokeAPI returns them
  - A fake PokeAPI client (no network) with per-name failures and delays
  - FastAPI TestClient wired to an app built around the fake client
"""

import sys
import threading
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest

# ---------------------------------------------------------------------------
# Ensure the project root is on sys.path so we can import the package
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pokedex.catalog.pokeapi_service import FetchError  # noqa: E402
from pokedex.catalog.schemas import (  # noqa: E402
    Pokemon,
    PokemonListResponse,
    PokemonTypeDetail,
    TypeListResponse,
)

TEST_BASE = "https://pokeapi.test/api/v2"


def make_pokemon(pid: int, name: str, types: Iterable[str] = ("normal",)) -> Dict[str, Any]:
    """Return a Pokémon record shaped like ``GET /pokemon/{name}``."""
    return {
        "id": pid,
        "name": name,
        "sprites": {
            "front_default": f"https://img.test/{pid}.png",
            "front_shiny": None,
            "back_default": None,
            "other": {"official-artwork": {"front_default": f"https://art.test/{pid}.png"}},
        },
        "types": [
            {"slot": i + 1, "type": {"name": t, "url": f"{TEST_BASE}/type/{t}/"}}
            for i, t in enumerate(types)
        ],
        "abilities": [
            {"ability": {"name": "overgrow", "url": ""}, "is_hidden": False, "slot": 1},
            {"ability": {"name": "solar-power", "url": ""}, "is_hidden": True, "slot": 3},
        ],
        "height": 7,
        "weight": 69,
        "stats": [
            {"base_stat": 45, "effort": 0, "stat": {"name": "hp", "url": ""}},
            {"base_stat": 255, "effort": 1, "stat": {"name": "special-attack", "url": ""}},
        ],
    }


# Five records in list-page (id) order.
SAMPLE = [
    make_pokemon(1, "bulbasaur", ["grass", "poison"]),
    make_pokemon(4, "charmander", ["fire"]),
    make_pokemon(6, "charizard", ["fire", "flying"]),
    make_pokemon(7, "squirtle", ["water"]),
    make_pokemon(63, "abra", ["psychic"]),
]


class FakePokeAPI:
    """Drop-in stand-in for ``PokeAPIClient`` that never touches the network."""

    def __init__(
        self,
        records: Optional[List[Dict[str, Any]]] = None,
        fail: Iterable[str] = (),
        delays: Optional[Dict[str, float]] = None,
        fail_list: bool = False,
    ):
        self.base_url = TEST_BASE
        self.records = list(SAMPLE if records is None else records)
        self.fail = set(fail)
        self.delays = dict(delays or {})
        self.fail_list = fail_list
        self.calls: List[str] = []
        self.list_calls = 0
        self._lock = threading.Lock()

    def fetch_pokemon_list(self, limit: int = 151, offset: int = 0) -> PokemonListResponse:
        self.list_calls += 1
        if self.fail_list:
            raise FetchError("list page failed", url=f"{TEST_BASE}/pokemon", status=500)
        page = self.records[offset:offset + limit]
        return PokemonListResponse(
            count=len(self.records),
            results=[{"name": r["name"], "url": f"{TEST_BASE}/pokemon/{r['id']}/"} for r in page],
        )

    def fetch_pokemon_by_name(self, name_or_id) -> Pokemon:
        key = str(name_or_id)
        with self._lock:
            self.calls.append(key)
        if key in self.delays:
            time.sleep(self.delays[key])
        if key in self.fail:
            raise FetchError(f"{key} failed", url=f"{TEST_BASE}/pokemon/{key}", status=500)
        for record in self.records:
            if record["name"] == key or str(record["id"]) == key:
                return Pokemon.model_validate(record)
        raise FetchError(f"{key} not found", url=f"{TEST_BASE}/pokemon/{key}", status=404)

    def fetch_all_types(self) -> TypeListResponse:
        names = sorted({t["type"]["name"] for r in self.records for t in r["types"]})
        return TypeListResponse(
            count=len(names),
            results=[{"name": n, "url": f"{TEST_BASE}/type/{n}/"} for n in names],
        )

    def fetch_type_details(self, name_or_id) -> PokemonTypeDetail:
        key = str(name_or_id)
        members = [
            {"pokemon": {"name": r["name"], "url": ""}, "slot": t["slot"]}
            for r in self.records
            for t in r["types"]
            if t["type"]["name"] == key
        ]
        if not members:
            raise FetchError(f"type {key} not found", status=404)
        return PokemonTypeDetail(id=1, name=key, pokemon=members)


@pytest.fixture()
def fake_api() -> FakePokeAPI:
    return FakePokeAPI()


@pytest.fixture()
def make_api():
    """Factory for fake clients with custom records, failures or delays."""
    return FakePokeAPI


@pytest.fixture()
def pokemon_factory():
    return make_pokemon


# ---------------------------------------------------------------------------
# FastAPI TestClient
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(fake_api):
    """Return a Starlette TestClient wired to an app around ``fake_api``."""
    from fastapi.testclient import TestClient
    from pokedex.main import create_app

    with TestClient(create_app(client=fake_api)) as c:
        yield c
