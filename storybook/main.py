# storybook/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import get_settings
from .exceptions import MissingProduct, MissingSchema, PersonalizationError
from .personalization.router import router as books_router


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Storybook personalization",
        description=(
            "Configuration des livres personnalisés : choix des personnages, "
            "validation, clés de combinaison et pages prêtes à afficher."
        ),
        version="1.0.0",
    )

    @app.exception_handler(PersonalizationError)
    async def personalization_error_handler(request: Request, exc: PersonalizationError):
        if isinstance(exc, (MissingProduct, MissingSchema)):
            return JSONResponse(status_code=404, content={"detail": "Item not found"})
        logger.warning("Personalization error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": str(exc), "type": exc.error_type})

    # 🔹 Route de base pour tester rapidement
    @app.get("/")
    def health_check():
        return {"status": "ok", "message": "Storybook personalization live 🚀"}

    app.include_router(books_router)
    return app


app = create_app()
