"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l’instance FastAPI (app).

Configure :

le logging (niveau LOG_LEVEL)

CORS (autorisations de qui peut appeler ces API)

titre, version, tags

schéma OpenAPI personnalisé

Inclut les routers (ex : /api/v1/videos).

Initialise la base au démarrage, attend les générations en cours à l'arrêt.

Point unique d’exécution : uvicorn content_factory.main:app --reload.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_factory.core.config import settings
from content_factory.core.openapi import custom_openapi
from content_factory.db.session import init_db
from content_factory.api.v1.dependencies import dispatcher

from content_factory.api.v1.routers import videos, avatars, preferences, scripts
from content_factory.api.v1.routers import settings as settings_router

import uvicorn

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    openapi_tags=[
        {"name": "videos", "description": "Demandes de génération vidéo et suivi de statut"},
        {"name": "avatars", "description": "Avatars HeyGen de l'utilisateur"},
        {"name": "preferences", "description": "Préférences de template HeyGen"},
        {"name": "settings", "description": "Réglages globaux (fournisseur text-to-video)"},
        {"name": "scripts", "description": "Budgets de script et prompt voix-off"},
    ],
)

# CORS (ajustez selon vos besoins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

# Routers
app.include_router(videos.router, prefix="/api/v1")
app.include_router(avatars.router, prefix="/api/v1")
app.include_router(preferences.router, prefix="/api/v1")
app.include_router(settings_router.router, prefix="/api/v1")
app.include_router(scripts.router, prefix="/api/v1")

# Génération du schéma OpenAPI custom
app.openapi = lambda: custom_openapi(app)


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


# Démarrage / arrêt
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)


@app.on_event("shutdown")
async def on_shutdown():
    if dispatcher.pending_tasks:
        logger.info("Waiting for %d video generation task(s)", dispatcher.pending_tasks)
    await dispatcher.drain()


if __name__ == "__main__":
    uvicorn.run("content_factory.main:app", host="127.0.0.1", port=8080, reload=(settings.ENV == "dev"))  # http://localhost:8080
