"""
Route definitions for the Pokédex catalogue.

Endpoints under /api/catalog:
- GET  /gallery                 : gallery screen (loads on first use)
- POST /gallery/types/{type}    : toggle a type filter
- POST /gallery/search          : set the gallery search text
- POST /gallery/clear           : clear every gallery filter
- GET  /gallery/select/{name}   : navigation payload for a gallery click
- GET  /list                    : list screen (loads on first use)
- POST /list/search             : set the list search text
- POST /list/sort/{property}    : sort-key toggle (name | id)
- GET  /list/select/{name}      : navigation payload for a list click
- GET  /pokemon/{name}          : open the detail screen
- POST /pokemon/previous        : step the detail screen back
- POST /pokemon/next            : step the detail screen forward
- GET  /types                   : PokeAPI type list passthrough
- GET  /types/{name}            : PokeAPI type detail passthrough
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from .pokeapi_service import FetchError, PokeAPIClient
from .schemas import (
    DetailScreen,
    GalleryScreen,
    ListScreen,
    Navigation,
    NavigationContext,
    PokemonTypeDetail,
    SearchRequest,
    TypeListResponse,
)
from .views import DetailView, GalleryView, ListView, Screens

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def get_screens(request: Request) -> Screens:
    return request.app.state.screens


def get_client(request: Request) -> PokeAPIClient:
    return request.app.state.client


def _gallery(screens: Screens = Depends(get_screens)) -> GalleryView:
    return screens.gallery


def _list_view(screens: Screens = Depends(get_screens)) -> ListView:
    return screens.list_view


def _detail(screens: Screens = Depends(get_screens)) -> DetailView:
    return screens.detail


def _raise_on_error(screen):
    if screen.status == "error":
        raise HTTPException(status_code=502, detail=screen.error)
    return screen


def _select(view, name: str) -> Navigation:
    view.mount()
    _raise_on_error(view)
    try:
        context = view.select(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"{name} is not in the current view")
    return Navigation(name=name, state=context)


# ---------------------------------------------------------------------------
# Gallery


@router.get("/gallery", response_model=GalleryScreen)
def gallery_screen(view: GalleryView = Depends(_gallery)) -> GalleryScreen:
    view.mount()
    return _raise_on_error(view.snapshot())


@router.post("/gallery/types/{type_name}", response_model=GalleryScreen)
def toggle_gallery_type(type_name: str, view: GalleryView = Depends(_gallery)) -> GalleryScreen:
    """Check the type if it is unchecked, uncheck it otherwise."""
    known = {t.name for t in view.types}
    if type_name not in known and type_name not in view.selected_types:
        raise HTTPException(status_code=404, detail=f"Unknown type: {type_name}")
    view.toggle_type(type_name)
    return view.snapshot()


@router.post("/gallery/search", response_model=GalleryScreen)
def search_gallery(req: SearchRequest, view: GalleryView = Depends(_gallery)) -> GalleryScreen:
    view.set_search(req.query)
    return view.snapshot()


@router.post("/gallery/clear", response_model=GalleryScreen)
def clear_gallery_filters(view: GalleryView = Depends(_gallery)) -> GalleryScreen:
    view.clear_filters()
    return view.snapshot()


@router.get("/gallery/select/{name}", response_model=Navigation)
def select_from_gallery(name: str, view: GalleryView = Depends(_gallery)) -> Navigation:
    return _select(view, name)


# ---------------------------------------------------------------------------
# List


@router.get("/list", response_model=ListScreen)
def list_screen(view: ListView = Depends(_list_view)) -> ListScreen:
    view.mount()
    return _raise_on_error(view.snapshot())


@router.post("/list/search", response_model=ListScreen)
def search_list(req: SearchRequest, view: ListView = Depends(_list_view)) -> ListScreen:
    view.set_search(req.query)
    return view.snapshot()


@router.post("/list/sort/{prop}", response_model=ListScreen)
def change_list_sort(prop: str, view: ListView = Depends(_list_view)) -> ListScreen:
    """Same key flips the direction; the other key switches to it ascending."""
    try:
        view.change_sort(prop)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return view.snapshot()


@router.get("/list/select/{name}", response_model=Navigation)
def select_from_list(name: str, view: ListView = Depends(_list_view)) -> Navigation:
    return _select(view, name)


# ---------------------------------------------------------------------------
# Detail


@router.post("/pokemon/previous", response_model=DetailScreen)
def previous_pokemon(view: DetailView = Depends(_detail)) -> DetailScreen:
    return _raise_on_error(view.previous())


@router.post("/pokemon/next", response_model=DetailScreen)
def next_pokemon(view: DetailView = Depends(_detail)) -> DetailScreen:
    return _raise_on_error(view.next())


@router.get("/pokemon/{name}", response_model=DetailScreen)
def pokemon_detail(
    name: str,
    pokemon_list: Optional[List[str]] = Query(default=None, alias="pokemonList"),
    current_index: Optional[int] = Query(default=None, alias="currentIndex"),
    view: DetailView = Depends(_detail),
) -> DetailScreen:
    """
    Open the detail screen for ``name``.

    ``pokemonList`` and ``currentIndex`` carry the navigation payload
    returned by a ``/select`` endpoint.  Both are optional; without them
    the screen still works but has no previous/next controls.
    """
    context: Optional[NavigationContext] = None
    if pokemon_list is not None or current_index is not None:
        if pokemon_list is None or current_index is None:
            raise HTTPException(
                status_code=422,
                detail="pokemonList and currentIndex must be given together",
            )
        try:
            context = NavigationContext(pokemon_list=pokemon_list, current_index=current_index)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
    return _raise_on_error(view.open(name, context))


# ---------------------------------------------------------------------------
# Type passthroughs


@router.get("/types", response_model=TypeListResponse)
def list_types(client: PokeAPIClient = Depends(get_client)) -> TypeListResponse:
    try:
        return client.fetch_all_types()
    except FetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@router.get("/types/{name}", response_model=PokemonTypeDetail)
def type_detail(name: str, client: PokeAPIClient = Depends(get_client)) -> PokemonTypeDetail:
    try:
        return client.fetch_type_details(name)
    except FetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
