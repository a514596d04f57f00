"""
Pydantic schema definitions for the catalog module.

The first group of models mirrors the JSON records returned by PokeAPI
(``/pokemon``, ``/pokemon/{name}``, ``/type`` and ``/type/{name}``).
Only the fields the viewer needs are declared; anything else in the
payload is ignored. Slot ordering of ``types`` and ``abilities`` is
kept exactly as received.

The second group describes what the screens hand back to the
front-end: the navigation payload passed from a list screen to the
detail screen, and one snapshot model per screen.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NamedResource(BaseModel):
    """A ``{name, url}`` reference as PokeAPI returns them everywhere."""

    name: str
    url: str = ""


# PokeAPI calls these "basic" references in list pages.
PokemonBasic = NamedResource
TypeBasic = NamedResource


class PokemonSprites(BaseModel):
    front_default: Optional[str] = None
    front_shiny: Optional[str] = None
    back_default: Optional[str] = None
    # Keyed by artwork family, e.g. "official-artwork" -> {"front_default": ...}
    other: Optional[Dict[str, Dict[str, Any]]] = None

    def official_artwork(self) -> Optional[str]:
        artwork = (self.other or {}).get("official-artwork") or {}
        return artwork.get("front_default")


class PokemonType(BaseModel):
    slot: int
    type: NamedResource


class PokemonAbility(BaseModel):
    ability: NamedResource
    is_hidden: bool = False
    slot: int


class PokemonStat(BaseModel):
    base_stat: int = Field(ge=0, le=255)
    effort: int = 0
    stat: NamedResource


class Pokemon(BaseModel):
    """A single Pokémon record as served by ``/pokemon/{name}``.

    ``height`` and ``weight`` are integers in decimetres and hectograms;
    divide by 10 for metres and kilograms.
    """

    id: int
    name: str
    sprites: PokemonSprites = Field(default_factory=PokemonSprites)
    types: List[PokemonType] = Field(default_factory=list)
    abilities: List[PokemonAbility] = Field(default_factory=list)
    height: int = 0
    weight: int = 0
    stats: List[PokemonStat] = Field(default_factory=list)


class PokemonWithDetails(Pokemon):
    """A Pokémon plus the flattened list of its type names.

    ``type_names`` is computed once by ``store.build_index`` and is only
    ever rebuilt from scratch, never patched.
    """

    type_names: List[str] = Field(default_factory=list)


class PokemonListResponse(BaseModel):
    """A list page from ``/pokemon?limit=&offset=``."""

    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[PokemonBasic] = Field(default_factory=list)


class TypeListResponse(BaseModel):
    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[TypeBasic] = Field(default_factory=list)


class TypePokemonEntry(BaseModel):
    pokemon: PokemonBasic
    slot: int


class PokemonTypeDetail(BaseModel):
    """Detail of a single type, including every Pokémon that has it."""

    id: int
    name: str
    pokemon: List[TypePokemonEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Navigation hand-off and screen payloads


class NavigationContext(BaseModel):
    """Ordered names visible on the origin screen and the clicked position.

    Serialised with the camelCase keys the front-end router expects
    (``pokemonList`` / ``currentIndex``); snake_case is accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True)

    pokemon_list: List[str] = Field(alias="pokemonList")
    current_index: int = Field(alias="currentIndex")

    @model_validator(mode="after")
    def _index_in_range(self) -> "NavigationContext":
        if not 0 <= self.current_index < len(self.pokemon_list):
            raise ValueError(
                f"currentIndex {self.current_index} is outside a list of "
                f"{len(self.pokemon_list)} names"
            )
        return self

    @property
    def current_name(self) -> str:
        return self.pokemon_list[self.current_index]

    @property
    def has_previous(self) -> bool:
        return self.current_index > 0

    @property
    def has_next(self) -> bool:
        return self.current_index < len(self.pokemon_list) - 1

    def step(self, offset: int) -> "NavigationContext":
        """Return a new context moved by ``offset`` over the same list."""
        return NavigationContext(
            pokemon_list=self.pokemon_list,
            current_index=self.current_index + offset,
        )


class Navigation(BaseModel):
    """What a click on a list entry produces: a route plus its state."""

    name: str
    state: NavigationContext


ViewStatus = Literal["idle", "loading", "ready", "error"]
SortProperty = Literal["name", "id"]
SortOrder = Literal["asc", "desc"]


class PokemonCard(BaseModel):
    """Summary row used by both the gallery grid and the list."""

    id: int
    name: str
    display_name: str
    display_id: str
    sprite_url: Optional[str] = None
    types: List[str] = Field(default_factory=list)


class GalleryScreen(BaseModel):
    status: ViewStatus
    error: Optional[str] = None
    types: List[TypeBasic] = Field(default_factory=list)
    selected_types: List[str] = Field(default_factory=list)
    search_query: str = ""
    show_clear_filters: bool = False
    items: List[PokemonCard] = Field(default_factory=list)
    showing: int = 0
    total: int = 0
    no_results: bool = False
    failed: Dict[str, str] = Field(default_factory=dict)


class ListScreen(BaseModel):
    status: ViewStatus
    error: Optional[str] = None
    search_query: str = ""
    sort_property: SortProperty = "id"
    sort_order: SortOrder = "asc"
    items: List[PokemonCard] = Field(default_factory=list)
    showing: int = 0
    total: int = 0
    failed: Dict[str, str] = Field(default_factory=dict)


class AbilityView(BaseModel):
    name: str
    is_hidden: bool = False


class StatView(BaseModel):
    name: str
    value: int
    percent: float


class PokemonDetail(BaseModel):
    id: int
    name: str
    display_name: str
    display_id: str
    artwork_url: Optional[str] = None
    types: List[str] = Field(default_factory=list)
    abilities: List[AbilityView] = Field(default_factory=list)
    height: str
    weight: str
    stats: List[StatView] = Field(default_factory=list)


class DetailNavigation(BaseModel):
    has_previous: bool
    has_next: bool
    position: str
    previous: Optional[str] = None
    next: Optional[str] = None


class DetailScreen(BaseModel):
    status: ViewStatus
    name: Optional[str] = None
    error: Optional[str] = None
    pokemon: Optional[PokemonDetail] = None
    # None when the screen was opened without a navigation context.
    navigation: Optional[DetailNavigation] = None


class SearchRequest(BaseModel):
    query: str = ""
