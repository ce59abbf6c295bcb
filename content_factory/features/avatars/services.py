"""
➡️ But : Résoudre l'avatar à utiliser pour un rendu, et gérer les avatars d'un utilisateur.

AvatarResolver.resolve_avatar_context() : avatar demandé (id interne puis id HeyGen),
sinon avatar par défaut, sinon premier avatar actif → AvatarContext.

AvatarService : CRUD scopé à l'utilisateur (un seul avatar par défaut).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from content_factory.core.errors import ConfigurationError, NotFoundError
from content_factory.db.models.base import utcnow
from content_factory.db.models.avatars import Avatar, AvatarKind, AvatarSource
from content_factory.db.repositories.avatars import AvatarRepository
from content_factory.features.avatars.schemas import AvatarCreateIn

logger = logging.getLogger(__name__)

PHOTO_SOURCES = {AvatarSource.USER_PHOTO.value, AvatarSource.AI_GENERATED.value}


@dataclass(frozen=True)
class AvatarContext:
    avatar_id: str                      # identifiant HeyGen
    avatar_record_id: Optional[str]     # ligne avatars.id
    is_photo_avatar: bool


def kind_for_source(source: str) -> AvatarKind:
    return AvatarKind.PHOTO if source in PHOTO_SOURCES else AvatarKind.STANDARD


def infer_legacy_kind(avatar: Avatar, storage_url_marker: str) -> AvatarKind:
    """Heuristique de back-fill pour les lignes sans `kind` : source, puis URL du stockage applicatif."""
    if avatar.source in PHOTO_SOURCES:
        return AvatarKind.PHOTO
    urls = (avatar.avatar_url, avatar.preview_url, avatar.thumbnail_url)
    if storage_url_marker and any(url and storage_url_marker in url for url in urls):
        return AvatarKind.PHOTO
    return AvatarKind.STANDARD


class AvatarResolver:
    def __init__(self, repo: AvatarRepository, *, storage_url_marker: str):
        self.repo = repo
        self.storage_url_marker = storage_url_marker

    def resolve_avatar_context(self, user_id: str, requested_avatar_id: Optional[str] = None) -> AvatarContext:
        if requested_avatar_id:
            avatar = self.repo.get_for_user(requested_avatar_id, user_id) or self.repo.get_by_heygen_id(
                requested_avatar_id, user_id
            )
            if not avatar:
                raise NotFoundError(f"Avatar {requested_avatar_id} not found")
        else:
            avatar = self.repo.get_default(user_id) or self.repo.get_first_active(user_id)
            if not avatar:
                raise ConfigurationError(
                    "No avatar configured. Please create an avatar or set a default avatar first."
                )

        return AvatarContext(
            avatar_id=avatar.heygen_avatar_id,
            avatar_record_id=avatar.id,
            is_photo_avatar=self._kind(avatar) == AvatarKind.PHOTO,
        )

    def resolve_default_context(self, user_id: str) -> AvatarContext:
        return self.resolve_avatar_context(user_id, None)

    def _kind(self, avatar: Avatar) -> AvatarKind:
        if avatar.kind:
            return AvatarKind(avatar.kind)
        kind = infer_legacy_kind(avatar, self.storage_url_marker)
        logger.info("Back-filling avatar %s kind=%s", avatar.id, kind.value)
        self.repo.update(avatar, kind=kind.value)
        return kind


class AvatarService:
    """CRUD avatars, toujours scopé au propriétaire."""

    def __init__(self, repo: AvatarRepository):
        self.repo = repo

    def list(self, user_id: str, offset: int = 0, limit: int = 100) -> Sequence[Avatar]:
        return self.repo.list_by_user(user_id, offset=offset, limit=limit)

    def get(self, avatar_id: str, user_id: str) -> Avatar:
        avatar = self.repo.get_for_user(avatar_id, user_id)
        if not avatar:
            raise NotFoundError("Avatar not found")
        return avatar

    def create(self, user_id: str, payload: AvatarCreateIn) -> Avatar:
        if payload.is_default:
            self._clear_defaults(user_id)
        return self.repo.create(
            user_id=user_id,
            heygen_avatar_id=payload.heygen_avatar_id,
            avatar_name=payload.avatar_name,
            avatar_url=payload.avatar_url,
            preview_url=payload.preview_url,
            thumbnail_url=payload.thumbnail_url,
            source=payload.source.value,
            kind=kind_for_source(payload.source.value).value,
            status=payload.status.value,
            is_default=payload.is_default,
        )

    def set_default(self, avatar_id: str, user_id: str) -> Avatar:
        avatar = self.get(avatar_id, user_id)
        self._clear_defaults(user_id, keep_id=avatar.id)
        return self.repo.update(avatar, is_default=True, updated_at=utcnow())

    def delete(self, avatar_id: str, user_id: str) -> None:
        self.repo.delete(self.get(avatar_id, user_id))

    def _clear_defaults(self, user_id: str, keep_id: Optional[str] = None) -> None:
        for other in self.repo.list_defaults(user_id):
            if other.id != keep_id:
                self.repo.update(other, commit=False, is_default=False)
        self.repo.session.commit()
