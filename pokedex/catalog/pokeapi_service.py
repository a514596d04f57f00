"""
PokeAPI integration for the catalogue.  This module talks to the public,
read-only PokeAPI over HTTP and maps its JSON into the models defined in
``schemas``.  It exposes:

* ``PokeAPIClient`` — a thin wrapper around a ``requests.Session`` with
  one method per endpoint the viewer consumes (list page, single
  Pokémon, type list, type detail).

* ``fetch_multiple_pokemon_details()`` — the batch loader.  Given the
  ``results`` of a list page it fetches every referenced Pokémon at the
  same time and returns them in the order they were requested.  If any
  single request fails the whole batch fails.

* ``load_batch_partial()`` — the same fan-out, but it keeps whatever
  loaded and reports the failures instead of raising.  Screens only use
  it when explicitly configured to.

Every failure (connection error, timeout, non-2xx status, malformed
body) surfaces as a single ``FetchError``; callers do not distinguish
"not found" from "server error" from "unreachable".
"""

from __future__ import annotations

import logging
import urllib.parse
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar, Union

import requests
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter

from .schemas import (
    NamedResource,
    Pokemon,
    PokemonListResponse,
    PokemonTypeDetail,
    TypeListResponse,
)


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

BASE_URL = "https://pokeapi.co/api/v2"
# Seconds, applied to every single request.
REQUEST_TIMEOUT = 10
# Size of the one and only list page the screens load.
BATCH_LIMIT = 151

ModelT = TypeVar("ModelT", bound=BaseModel)


class FetchError(Exception):
    """Raised for any failed PokeAPI request.

    ``url`` is the address that failed and ``status`` the HTTP status
    code when a response was received at all.
    """

    def __init__(self, message: str, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class PokeAPIClient:
    """Read-only client for the handful of PokeAPI endpoints we use."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
        pool_size: int = BATCH_LIMIT,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            # The batch loader opens one connection per Pokémon; size the
            # pool so none of them are thrown away mid-burst.
            adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.headers.update({"Accept": "application/json"})
        self.session = session

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET and return the decoded JSON body.

        Raises ``FetchError`` for transport errors, timeouts, non-2xx
        responses and bodies that are not JSON.
        """
        url = self._url(path)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Error fetching %s: %s", url, exc)
            raise FetchError(f"Request to {url} failed: {exc}", url=url) from exc
        if not 200 <= response.status_code < 300:
            logger.warning("PokeAPI request to %s returned status %s", url, response.status_code)
            raise FetchError(
                f"Request to {url} returned status {response.status_code}",
                url=url,
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Invalid JSON from %s: %s", url, exc)
            raise FetchError(f"Invalid JSON from {url}", url=url, status=response.status_code) from exc

    def _get_model(self, model: Type[ModelT], path: str, params: Optional[Dict[str, Any]] = None) -> ModelT:
        data = self._get_json(path, params=params)
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Unexpected %s payload from %s: %s", model.__name__, path, exc)
            raise FetchError(f"Unexpected payload from {self._url(path)}", url=self._url(path)) from exc

    def fetch_pokemon_list(self, limit: int = BATCH_LIMIT, offset: int = 0) -> PokemonListResponse:
        """Fetch one list page of Pokémon references."""
        return self._get_model(
            PokemonListResponse, "/pokemon", params={"limit": limit, "offset": offset}
        )

    def fetch_pokemon_by_name(self, name_or_id: Union[str, int]) -> Pokemon:
        """Fetch the full record of a single Pokémon by name or id."""
        key = urllib.parse.quote(str(name_or_id).strip().lower())
        return self._get_model(Pokemon, f"/pokemon/{key}")

    def fetch_all_types(self) -> TypeListResponse:
        return self._get_model(TypeListResponse, "/type")

    def fetch_type_details(self, name_or_id: Union[str, int]) -> PokemonTypeDetail:
        """Fetch a type and every Pokémon that has it."""
        key = urllib.parse.quote(str(name_or_id).strip().lower())
        return self._get_model(PokemonTypeDetail, f"/type/{key}")

    def close(self) -> None:
        self.session.close()


def _submit_all(
    executor: ThreadPoolExecutor, refs: Sequence[NamedResource], client: PokeAPIClient
) -> List[Future]:
    return [executor.submit(client.fetch_pokemon_by_name, ref.name) for ref in refs]


def fetch_multiple_pokemon_details(
    refs: Sequence[NamedResource], client: PokeAPIClient
) -> List[Pokemon]:
    """Fetch the full record of every reference concurrently.

    One request per reference, all issued at once; duplicates are
    fetched twice.  The returned list lines up index for index with
    ``refs`` whatever order the responses arrive in.  The first failure
    aborts the batch: requests that have not started are cancelled and
    the ``FetchError`` is raised, so no partial result ever escapes.
    """
    if not refs:
        return []
    executor = ThreadPoolExecutor(max_workers=len(refs), thread_name_prefix="pokeapi")
    try:
        futures = _submit_all(executor, refs, client)
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [f for f in done if f.exception() is not None]
        if failed:
            # ``done`` is a set; report the lowest-index failure so the
            # error is deterministic when several finished together.
            exc = min(failed, key=futures.index).exception()
            logger.error("Batch of %d aborted: %s", len(refs), exc)
            raise exc
        return [f.result() for f in futures]
    finally:
        # In-flight requests are left to finish on their own.
        executor.shutdown(wait=False, cancel_futures=True)


@dataclass
class BatchResult:
    """Outcome of a partial batch: what loaded, and why the rest did not."""

    pokemon: List[Pokemon] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failures


def load_batch_partial(refs: Sequence[NamedResource], client: PokeAPIClient) -> BatchResult:
    """Like ``fetch_multiple_pokemon_details`` but never aborts.

    Loaded records keep the order of ``refs``; each failed reference is
    reported by name with its error message.
    """
    result = BatchResult()
    if not refs:
        return result
    with ThreadPoolExecutor(max_workers=len(refs), thread_name_prefix="pokeapi") as executor:
        futures = _submit_all(executor, refs, client)
        for ref, future in zip(refs, futures):
            try:
                result.pokemon.append(future.result())
            except FetchError as exc:
                result.failures[ref.name] = str(exc)
    if result.failures:
        logger.warning(
            "Batch loaded %d of %d Pokémon; failed: %s",
            len(result.pokemon),
            len(refs),
            ", ".join(result.failures),
        )
    return result
