from typing import Optional, Sequence

from sqlmodel import select

from content_factory.db.repositories.base import BaseRepository
from content_factory.db.models.avatars import Avatar, AvatarStatus


class AvatarRepository(BaseRepository[Avatar]):
    model = Avatar

    def get_for_user(self, avatar_id: str, user_id: str) -> Optional[Avatar]:
        return self.first(Avatar.id == avatar_id, Avatar.user_id == user_id)

    def get_by_heygen_id(self, heygen_avatar_id: str, user_id: str) -> Optional[Avatar]:
        return self.first(Avatar.heygen_avatar_id == heygen_avatar_id, Avatar.user_id == user_id)

    def get_default(self, user_id: str) -> Optional[Avatar]:
        return self.first(Avatar.user_id == user_id, Avatar.is_default == True)  # noqa: E712

    def get_first_active(self, user_id: str) -> Optional[Avatar]:
        """Plus ancien avatar prêt à l'emploi."""
        return self.first(
            Avatar.user_id == user_id,
            Avatar.status == AvatarStatus.ACTIVE.value,
            order_by=Avatar.created_at.asc(),
        )

    def list_by_user(self, user_id: str, offset: int = 0, limit: int = 100) -> Sequence[Avatar]:
        stmt = (
            select(Avatar)
            .where(Avatar.user_id == user_id)
            .order_by(Avatar.is_default.desc(), Avatar.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def list_defaults(self, user_id: str) -> Sequence[Avatar]:
        return self.all(Avatar.user_id == user_id, Avatar.is_default == True)  # noqa: E712
