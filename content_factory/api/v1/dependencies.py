"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_current_user_id() : user id (claim `sub`) du bearer token.

get_video_service() : VideoService câblé sur la session DB de la requête.

pagination() : paramètres communs page et size.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à remplacer dans les tests (app.dependency_overrides).
"""

from fastapi import Depends, HTTPException, Query, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from content_factory.core.config import generation_settings, jwt_settings, settings
from content_factory.db.session import get_session, session_factory

from content_factory.db.repositories.avatars import AvatarRepository
from content_factory.db.repositories.videos import VideoRepository
from content_factory.db.repositories.video_plan_items import VideoPlanItemRepository
from content_factory.db.repositories.app_settings import AppSettingRepository
from content_factory.db.repositories.user_preferences import UserPreferencesRepository

from content_factory.features.avatars.services import AvatarResolver, AvatarService
from content_factory.features.videos.dispatcher import GenerationDispatcher
from content_factory.features.videos.services import VideoService
from content_factory.features.settings.services import AppSettingsService
from content_factory.features.preferences.services import PreferencesService

from content_factory.providers.heygen import HeyGenClient
from content_factory.security.tokens import InvalidTokenError, user_id_from_token


def pagination(
    page: int = Query(1, ge=1, description="Numéro de page", examples=[1]),
    size: int = Query(20, ge=1, le=100, description="Taille de page", examples=[20]),
):
    offset = (page - 1) * size
    return {"offset": offset, "limit": size}


# -----------------------------
# Singletons (un par process)
# -----------------------------
heygen_client = HeyGenClient(
    api_key=settings.HEYGEN_KEY,
    base_url=settings.HEYGEN_API_URL,
    timeout=settings.HEYGEN_REQUEST_TIMEOUT,
)

dispatcher = GenerationDispatcher(
    client=heygen_client,
    session_factory=session_factory,
    config=generation_settings,
)


def get_heygen_client() -> HeyGenClient:
    return heygen_client


def get_dispatcher() -> GenerationDispatcher:
    return dispatcher


# -----------------------------
# Repositories
# -----------------------------
def get_avatar_repository(session: Session = Depends(get_session)) -> AvatarRepository:
    return AvatarRepository(session)

def get_video_repository(session: Session = Depends(get_session)) -> VideoRepository:
    return VideoRepository(session)

def get_video_plan_item_repository(session: Session = Depends(get_session)) -> VideoPlanItemRepository:
    return VideoPlanItemRepository(session)

def get_app_setting_repository(session: Session = Depends(get_session)) -> AppSettingRepository:
    return AppSettingRepository(session)

def get_user_preferences_repository(session: Session = Depends(get_session)) -> UserPreferencesRepository:
    return UserPreferencesRepository(session)


# -----------------------------
# Services
# -----------------------------
def get_avatar_service(
    avatar_repo: AvatarRepository = Depends(get_avatar_repository),
) -> AvatarService:
    return AvatarService(avatar_repo)


def get_avatar_resolver(
    avatar_repo: AvatarRepository = Depends(get_avatar_repository),
) -> AvatarResolver:
    return AvatarResolver(avatar_repo, storage_url_marker=generation_settings.storage_url_marker)


def get_video_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    plan_item_repo: VideoPlanItemRepository = Depends(get_video_plan_item_repository),
    resolver: AvatarResolver = Depends(get_avatar_resolver),
    dispatcher: GenerationDispatcher = Depends(get_dispatcher),
    client: HeyGenClient = Depends(get_heygen_client),
) -> VideoService:
    """
    VideoService avec tous ses collaborateurs injectés :
    - repositories sur la session de la requête
    - dispatcher et client HeyGen partagés (tâches de fond hors requête)
    """
    return VideoService(
        videos=video_repo,
        plan_items=plan_item_repo,
        resolver=resolver,
        dispatcher=dispatcher,
        client=client,
        config=generation_settings,
    )


def get_app_settings_service(
    repo: AppSettingRepository = Depends(get_app_setting_repository),
) -> AppSettingsService:
    return AppSettingsService(repo)


def get_preferences_service(
    repo: UserPreferencesRepository = Depends(get_user_preferences_repository),
) -> PreferencesService:
    return PreferencesService(repo)


# -----------------------------
# Authentication data
# -----------------------------
bearer_scheme = HTTPBearer(auto_error=True)

def get_access_token_from_bearer(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return credentials.credentials


def get_current_user_id(access_token: str = Depends(get_access_token_from_bearer)) -> str:
    try:
        return user_id_from_token(access_token, jwt_settings)
    except InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
