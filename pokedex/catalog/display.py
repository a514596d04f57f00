"""Formatting helpers that turn Pokémon records into screen payloads."""

from __future__ import annotations

from .schemas import (
    AbilityView,
    Pokemon,
    PokemonCard,
    PokemonDetail,
    PokemonWithDetails,
    StatView,
)

MAX_BASE_STAT = 255


def capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def display_id(pokemon_id: int) -> str:
    """``7`` -> ``#007``."""
    return f"#{pokemon_id:03d}"


def ability_label(name: str) -> str:
    return capitalize(name).replace("-", " ")


def stat_label(name: str) -> str:
    """``special-attack`` -> ``Special Attack``."""
    return " ".join(capitalize(word) for word in name.replace("-", " ", 1).split(" "))


def tenths(value: int, unit: str) -> str:
    """Render a PokeAPI decimetre/hectogram integer, e.g. ``69 -> "6.9 kg"``."""
    return f"{value / 10:.1f} {unit}"


def stat_percent(base_stat: int) -> float:
    return base_stat / MAX_BASE_STAT * 100


def to_card(pokemon: PokemonWithDetails) -> PokemonCard:
    return PokemonCard(
        id=pokemon.id,
        name=pokemon.name,
        display_name=capitalize(pokemon.name),
        display_id=display_id(pokemon.id),
        sprite_url=pokemon.sprites.front_default,
        types=[capitalize(t) for t in pokemon.type_names],
    )


def to_detail(pokemon: Pokemon) -> PokemonDetail:
    # Official artwork first, then the plain front sprite.
    artwork = pokemon.sprites.official_artwork() or pokemon.sprites.front_default
    return PokemonDetail(
        id=pokemon.id,
        name=pokemon.name,
        display_name=capitalize(pokemon.name),
        display_id=display_id(pokemon.id),
        artwork_url=artwork,
        types=[capitalize(t.type.name) for t in pokemon.types],
        abilities=[
            AbilityView(name=ability_label(a.ability.name), is_hidden=a.is_hidden)
            for a in pokemon.abilities
        ],
        height=tenths(pokemon.height, "m"),
        weight=tenths(pokemon.weight, "kg"),
        stats=[
            StatView(
                name=stat_label(s.stat.name),
                value=s.base_stat,
                percent=stat_percent(s.base_stat),
            )
            for s in pokemon.stats
        ],
    )
