"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) complète le schéma généré par FastAPI avec les conventions de l'API
(authentification, cycle de vie d'une vidéo, pagination).
"""

from fastapi.openapi.utils import get_openapi

def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API Content Factory : génération de vidéos avatar via HeyGen.\n\n"
            "### Conventions\n"
            "- Authentification : `Authorization: Bearer <access token>` (claim `sub` = user id).\n"
            "- Toutes les heures sont en UTC.\n"
            "- Pagination: query params `page` & `size`.\n"
            "- `POST /videos/generate` renvoie la vidéo `pending` immédiatement ; "
            "suivre l'avancement via `GET /videos/{id}/status`.\n"
        ),
        routes=app.routes,
        tags=app.openapi_tags,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
