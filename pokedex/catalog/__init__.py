"""
Catalog package for the Pokédex viewer.

This package loads the first 151 Pokémon from PokeAPI, indexes them by
type, and exposes three screens (gallery, list and detail) as JSON
routes that a front-end can render. The gallery filters by type and
name, the list searches and sorts, and the detail screen can step
through whatever sequence the user clicked from.
"""

from .router import router as catalog_router  # noqa: F401
