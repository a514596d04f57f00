"""
Index building and the pure filter/search/sort helpers for the catalogue.

``build_index()`` turns a freshly loaded batch of Pokémon into the two
structures the screens work from: the alphabetically sorted list of
every type present in the batch (the filter menu) and one
``PokemonWithDetails`` per Pokémon carrying its flattened type names.

The helpers below never mutate their input; each returns a new list so
the screens can recompute their derived collection from scratch on
every settings change.
"""

from __future__ import annotations

import locale
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .pokeapi_service import BASE_URL
from .schemas import Pokemon, PokemonWithDetails, SortOrder, SortProperty, TypeBasic


@dataclass
class CatalogIndex:
    types: List[TypeBasic] = field(default_factory=list)
    pokemon: List[PokemonWithDetails] = field(default_factory=list)


def _norm(s: Optional[str]) -> str:
    """Normalize a string for case-insensitive comparison.

    Parameters
    ----------
    s : Optional[str]
        The string to normalize.

    Returns
    -------
    str
        The normalized string (lowercased and stripped). An empty string is
        returned when the input is ``None`` or empty.
    """
    return (s or "").strip().lower()


def with_type_names(pokemon: Pokemon) -> PokemonWithDetails:
    """Attach the slot-ordered type names to a Pokémon record."""
    return PokemonWithDetails(
        **pokemon.model_dump(),
        type_names=[t.type.name for t in pokemon.types],
    )


def build_index(pokemon: Sequence[Pokemon], base_url: str = BASE_URL) -> CatalogIndex:
    """Derive the type menu and per-Pokémon type names from a batch.

    The type menu is the set of distinct type names across the whole
    batch in ascending alphabetical order (not first-seen order), so it
    renders identically on every load.  Each entry gets a synthesized
    ``{base_url}/type/{name}`` locator.
    """
    detailed = [with_type_names(p) for p in pokemon]
    names = {name for p in detailed for name in p.type_names}
    base = base_url.rstrip("/")
    types = [TypeBasic(name=name, url=f"{base}/type/{name}") for name in sorted(names)]
    return CatalogIndex(types=types, pokemon=detailed)


def filter_by_types(
    pokemon: Iterable[PokemonWithDetails], selected: Iterable[str]
) -> List[PokemonWithDetails]:
    """Keep Pokémon that have *every* selected type (AND semantics)."""
    wanted = set(selected)
    if not wanted:
        return list(pokemon)
    return [p for p in pokemon if wanted.issubset(p.type_names)]


def search_by_name(pokemon: Iterable[PokemonWithDetails], query: Optional[str]) -> List[PokemonWithDetails]:
    """Case-insensitive substring match on the name; blank keeps everything."""
    nq = _norm(query)
    if not nq:
        return list(pokemon)
    return [p for p in pokemon if nq in p.name.lower()]


def sort_pokemon(
    pokemon: Iterable[PokemonWithDetails],
    prop: SortProperty = "id",
    order: SortOrder = "asc",
) -> List[PokemonWithDetails]:
    """Sort by name (locale collation) or id (numeric).

    Python's sort is stable in both directions, so ties keep the order
    they came in with.
    """
    if prop == "name":
        key = lambda p: locale.strxfrm(p.name)  # noqa: E731
    elif prop == "id":
        key = lambda p: p.id  # noqa: E731
    else:
        raise ValueError(f"Unknown sort property: {prop!r}")
    return sorted(pokemon, key=key, reverse=(order == "desc"))


def names_of(pokemon: Iterable[Pokemon]) -> List[str]:
    return [p.name for p in pokemon]
