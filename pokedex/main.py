# pokedex/main.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .catalog import catalog_router
from .catalog.pokeapi_service import PokeAPIClient
from .catalog.views import Screens


def create_app(client: Optional[PokeAPIClient] = None, allow_partial: bool = False) -> FastAPI:
    """Build the application around ``client`` (a real PokeAPI client by default)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        api = client or PokeAPIClient()
        app.state.client = api
        app.state.screens = Screens.create(api, allow_partial=allow_partial)
        yield
        if client is None:
            api.close()

    app = FastAPI(
        title="Pokédex",
        description=(
            "Catalogue des 151 premiers Pokémon à partir de PokeAPI : "
            "galerie filtrable par type, liste triable et fiche détaillée "
            "avec navigation précédent/suivant."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # 🔹 Route de base pour tester rapidement
    @app.get("/")
    def health_check():
        return {"status": "ok", "message": "Pokédex API live 🚀"}

    app.include_router(catalog_router)
    return app


app = create_app()
