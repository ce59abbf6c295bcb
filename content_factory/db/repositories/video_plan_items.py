from typing import Optional, Sequence

from content_factory.db.repositories.base import BaseRepository
from content_factory.db.models.video_plan_items import VideoPlanItem


class VideoPlanItemRepository(BaseRepository[VideoPlanItem]):
    model = VideoPlanItem

    def get_for_user(self, item_id: str, user_id: str) -> Optional[VideoPlanItem]:
        return self.first(VideoPlanItem.id == item_id, VideoPlanItem.user_id == user_id)

    def list_by_video(self, video_id: str) -> Sequence[VideoPlanItem]:
        """Plan items qui pointent vers la vidéo (reçoivent son statut)."""
        return self.all(VideoPlanItem.video_id == video_id)
