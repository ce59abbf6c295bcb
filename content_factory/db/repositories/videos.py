from datetime import datetime
from typing import Iterable, Optional, Sequence

from sqlmodel import func, select

from content_factory.db.repositories.base import BaseRepository
from content_factory.db.models.videos import Video


class VideoRepository(BaseRepository[Video]):
    """CRUD Vidéos + requêtes spécifiques (toujours scopées par user)."""
    model = Video

    def get_for_user(self, video_id: str, user_id: str) -> Optional[Video]:
        return self.session.exec(
            select(Video)
            .where(Video.id == video_id, Video.user_id == user_id)
            # relire la ligne : la génération en arrière-plan écrit via une autre session
            .execution_options(populate_existing=True)
        ).first()

    @staticmethod
    def _filtered(stmt, user_id: str, status: Optional[str], search: Optional[str]):
        stmt = stmt.where(Video.user_id == user_id)
        if status:
            stmt = stmt.where(Video.status == status)
        if search:
            stmt = stmt.where(Video.topic.ilike(f"%{search}%"))
        return stmt

    def list_by_user(
        self,
        user_id: str,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 100,
    ) -> Sequence[Video]:
        stmt = self._filtered(select(Video), user_id, status, search)
        stmt = (
            stmt.order_by(Video.created_at.desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return self.session.exec(stmt).all()

    def count_by_user(self, user_id: str, *, status: Optional[str] = None, search: Optional[str] = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(Video), user_id, status, search)
        return self.session.exec(stmt).one()

    def find_recent_duplicates(
        self,
        *,
        user_id: str,
        topic: str,
        style: str,
        duration: int,
        since: datetime,
        statuses: Iterable[str],
    ) -> Sequence[Video]:
        """Vidéos identiques (topic/style/durée) créées depuis `since`, plus récentes d'abord."""
        stmt = (
            select(Video)
            .where(
                Video.user_id == user_id,
                Video.topic == topic,
                Video.style == style,
                Video.duration == duration,
                Video.created_at >= since,
                Video.status.in_(list(statuses)),
            )
            .order_by(Video.created_at.desc())
        )
        return self.session.exec(stmt).all()
