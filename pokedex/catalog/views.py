"""
Screen state for the gallery, list and detail pages.

Each screen owns its own state exclusively and moves through
``idle -> loading -> ready | error``.  The gallery and list screens keep
a *base* collection (set once per successful load) and a *filtered*
collection that is recomputed from scratch, as a pure function of the
base and the current settings, every time a setting changes.

Clicking an entry on the gallery or list produces a
``NavigationContext`` snapshot of the names currently visible; the
detail screen steps through that snapshot without ever checking it
against the origin screen again.

FastAPI runs sync endpoints on a thread pool, so every screen guards
its state with a lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from . import display
from .pokeapi_service import (
    BATCH_LIMIT,
    FetchError,
    PokeAPIClient,
    fetch_multiple_pokemon_details,
    load_batch_partial,
)
from .schemas import (
    DetailNavigation,
    DetailScreen,
    GalleryScreen,
    ListScreen,
    NavigationContext,
    Pokemon,
    PokemonWithDetails,
    SortOrder,
    SortProperty,
    TypeBasic,
    ViewStatus,
)
from .store import build_index, filter_by_types, names_of, search_by_name, sort_pokemon


logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load Pokemon data. Please try again later."
DETAIL_ERROR = "Failed to load Pokemon details. Please try again later."
SORT_PROPERTIES = ("name", "id")


class _BatchScreen:
    """Shared load lifecycle for the screens built on the 151-Pokémon batch."""

    def __init__(
        self,
        client: PokeAPIClient,
        limit: int = BATCH_LIMIT,
        allow_partial: bool = False,
    ):
        self.client = client
        self.limit = limit
        self.allow_partial = allow_partial
        self._lock = threading.RLock()
        self.status: ViewStatus = "idle"
        self.error: Optional[str] = None
        self.base: List[PokemonWithDetails] = []
        self.types: List[TypeBasic] = []
        self.filtered: List[PokemonWithDetails] = []
        self.failed: Dict[str, str] = {}

    def _fetch_batch(self) -> List[Pokemon]:
        page = self.client.fetch_pokemon_list(self.limit, 0)
        if not self.allow_partial:
            self.failed = {}
            return fetch_multiple_pokemon_details(page.results, self.client)
        result = load_batch_partial(page.results, self.client)
        self.failed = result.failures
        return result.pokemon

    def load(self) -> None:
        """Fetch the list page and every Pokémon on it, then index them.

        Any ``FetchError`` leaves the screen in the terminal ``error``
        state with an empty collection; nothing is retried.
        """
        with self._lock:
            self.status = "loading"
            self.error = None
            try:
                pokemon = self._fetch_batch()
            except FetchError as exc:
                logger.error("Error fetching Pokemon data: %s", exc)
                self.status = "error"
                self.error = LOAD_ERROR
                self.base, self.types, self.filtered = [], [], []
                return
            index = build_index(pokemon, self.client.base_url)
            self.base = index.pokemon
            self.types = index.types
            self.status = "ready"
            self._recompute()
            logger.info("%s ready with %d Pokémon", type(self).__name__, len(self.base))

    def mount(self) -> None:
        """Load on first use, and again whenever the last load failed."""
        with self._lock:
            if self.status in ("idle", "error"):
                self.load()

    def _recompute(self) -> None:
        raise NotImplementedError

    def select(self, name: str) -> NavigationContext:
        """Build the navigation payload for a click on ``name``.

        The position is looked up in the *current* filtered collection.
        Raises ``KeyError`` when ``name`` is not visible.
        """
        with self._lock:
            names = names_of(self.filtered)
            try:
                index = names.index(name)
            except ValueError:
                raise KeyError(name) from None
            return NavigationContext(pokemon_list=names, current_index=index)


class GalleryView(_BatchScreen):
    """Gallery screen: type filter (AND) plus name search."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.selected_types: FrozenSet[str] = frozenset()
        self.search_query = ""

    def _recompute(self) -> None:
        result = filter_by_types(self.base, self.selected_types)
        self.filtered = search_by_name(result, self.search_query)

    def toggle_type(self, type_name: str) -> None:
        with self._lock:
            if type_name in self.selected_types:
                self.selected_types = self.selected_types - {type_name}
            else:
                self.selected_types = self.selected_types | {type_name}
            self._recompute()

    def set_search(self, query: str) -> None:
        with self._lock:
            self.search_query = query
            self._recompute()

    def clear_filters(self) -> None:
        """Reset the type selection and the search text in one change."""
        with self._lock:
            self.selected_types = frozenset()
            self.search_query = ""
            self._recompute()

    def snapshot(self) -> GalleryScreen:
        with self._lock:
            return GalleryScreen(
                status=self.status,
                error=self.error,
                types=list(self.types),
                selected_types=sorted(self.selected_types),
                search_query=self.search_query,
                show_clear_filters=bool(self.selected_types or self.search_query),
                items=[display.to_card(p) for p in self.filtered],
                showing=len(self.filtered),
                total=len(self.base),
                no_results=self.status == "ready" and not self.filtered,
                failed=dict(self.failed),
            )


class ListView(_BatchScreen):
    """List screen: name search plus a two-key, two-direction sort."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.search_query = ""
        self.sort_property: SortProperty = "id"
        self.sort_order: SortOrder = "asc"

    def _recompute(self) -> None:
        result = search_by_name(self.base, self.search_query)
        self.filtered = sort_pokemon(result, self.sort_property, self.sort_order)

    def set_search(self, query: str) -> None:
        with self._lock:
            self.search_query = query
            self._recompute()

    def change_sort(self, prop: SortProperty) -> None:
        """Same key flips the direction; the other key switches to it ascending."""
        if prop not in SORT_PROPERTIES:
            raise ValueError(f"Unknown sort property: {prop!r}")
        with self._lock:
            if self.sort_property == prop:
                self.sort_order = "desc" if self.sort_order == "asc" else "asc"
            else:
                self.sort_property = prop
                self.sort_order = "asc"
            self._recompute()

    def snapshot(self) -> ListScreen:
        with self._lock:
            return ListScreen(
                status=self.status,
                error=self.error,
                search_query=self.search_query,
                sort_property=self.sort_property,
                sort_order=self.sort_order,
                items=[display.to_card(p) for p in self.filtered],
                showing=len(self.filtered),
                total=len(self.base),
                failed=dict(self.failed),
            )


class DetailView:
    """Detail screen for one Pokémon, with optional previous/next stepping.

    Every load takes a new request token.  The fetch itself runs outside
    the lock, and its result is only committed if no newer load has been
    started meanwhile, so rapid stepping always settles on the last
    requested name.
    """

    def __init__(self, client: PokeAPIClient):
        self.client = client
        self._lock = threading.Lock()
        self._token = 0
        self.status: ViewStatus = "idle"
        self.name: Optional[str] = None
        self.context: Optional[NavigationContext] = None
        self.pokemon: Optional[Pokemon] = None
        self.error: Optional[str] = None

    def open(self, name: str, context: Optional[NavigationContext] = None) -> DetailScreen:
        with self._lock:
            self._token += 1
            token = self._token
            self.name = name
            self.context = context
            self.pokemon = None
            self.error = None
            self.status = "loading"
        if not name.strip():
            self._commit(token, None, "No Pokemon name provided.")
            return self.snapshot()
        try:
            pokemon = self.client.fetch_pokemon_by_name(name)
        except FetchError as exc:
            logger.error("Error fetching Pokemon details for %s: %s", name, exc)
            self._commit(token, None, DETAIL_ERROR)
        else:
            self._commit(token, pokemon, None)
        return self.snapshot()

    def _commit(self, token: int, pokemon: Optional[Pokemon], error: Optional[str]) -> bool:
        with self._lock:
            if token != self._token:
                logger.debug("Discarding stale response for request %d (latest %d)", token, self._token)
                return False
            self.pokemon = pokemon
            self.error = error
            self.status = "error" if error else "ready"
            return True

    def previous(self) -> DetailScreen:
        return self._step(-1)

    def next(self) -> DetailScreen:
        return self._step(1)

    def _step(self, offset: int) -> DetailScreen:
        with self._lock:
            context = self.context
            allowed = context is not None and (
                context.has_previous if offset < 0 else context.has_next
            )
        if not allowed:
            return self.snapshot()
        moved = context.step(offset)
        return self.open(moved.current_name, moved)

    def snapshot(self) -> DetailScreen:
        with self._lock:
            navigation = None
            if self.context is not None:
                ctx = self.context
                navigation = DetailNavigation(
                    has_previous=ctx.has_previous,
                    has_next=ctx.has_next,
                    position=f"{ctx.current_index + 1} of {len(ctx.pokemon_list)}",
                    previous=ctx.pokemon_list[ctx.current_index - 1] if ctx.has_previous else None,
                    next=ctx.pokemon_list[ctx.current_index + 1] if ctx.has_next else None,
                )
            return DetailScreen(
                status=self.status,
                name=self.name,
                error=self.error,
                pokemon=display.to_detail(self.pokemon) if self.pokemon else None,
                navigation=navigation,
            )


@dataclass
class Screens:
    """One instance of each screen, as held by the running application."""

    gallery: GalleryView
    list_view: ListView
    detail: DetailView

    @classmethod
    def create(cls, client: PokeAPIClient, allow_partial: bool = False) -> "Screens":
        return cls(
            gallery=GalleryView(client, allow_partial=allow_partial),
            list_view=ListView(client, allow_partial=allow_partial),
            detail=DetailView(client),
        )
