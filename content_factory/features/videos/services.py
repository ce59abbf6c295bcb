"""
➡️ But : Orchestration des demandes de vidéo (création, retry, statut, suppression).

Machine à états :
    pending -> generating -> completed | failed
    failed  -> pending (retry explicite uniquement)

request_manual_video() :
1. script tronqué au budget de mots de la durée
2. résolution de l'avatar (erreurs de config / not found levées tout de suite)
3. idempotence 1 : plan item déjà lié à une vidéo -> on la renvoie
4. idempotence 2 : même demande dans la fenêtre (6 h), même script et même avatar -> on la renvoie
5. création de la ligne `pending` (+ plan item -> generating)
6. génération lancée en tâche de fond, jamais attendue ici

Un plan item qui tombe sur un doublon (étape 4) est rattaché à la vidéo existante
et reprend son statut.

Les accès DB (Session synchrone) passent par le threadpool ; seuls HeyGen et
le lancement des tâches restent sur la boucle.

La détection de doublons est best-effort : pas de verrou entre le check et l'insert.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Tuple

from starlette.concurrency import run_in_threadpool

from content_factory.core.config import GenerationSettings
from content_factory.core.errors import NotFoundError, ValidationError
from content_factory.db.models.base import utcnow
from content_factory.db.models.video_plan_items import VideoPlanItem
from content_factory.db.models.videos import Video, VideoStatus
from content_factory.db.repositories.video_plan_items import VideoPlanItemRepository
from content_factory.db.repositories.videos import VideoRepository
from content_factory.features.avatars.services import AvatarResolver
from content_factory.features.videos.dispatcher import DispatchJob, GenerationDispatcher, mirror_plan_items
from content_factory.features.videos.errors import map_provider_status
from content_factory.features.videos.schemas import VideoCreateIn
from content_factory.providers.heygen import HeyGenClient, ProviderVideoStatus
from content_factory.utils.script_limits import enforce_word_limit

logger = logging.getLogger(__name__)

DUPLICATE_STATUSES = (
    VideoStatus.PENDING.value,
    VideoStatus.GENERATING.value,
    VideoStatus.COMPLETED.value,
)
REFRESHABLE_STATUSES = (VideoStatus.PENDING.value, VideoStatus.GENERATING.value)


class VideoService:
    def __init__(
        self,
        *,
        videos: VideoRepository,
        plan_items: VideoPlanItemRepository,
        resolver: AvatarResolver,
        dispatcher: GenerationDispatcher,
        client: HeyGenClient,
        config: GenerationSettings,
        now_fn: Callable[[], datetime] = utcnow,
    ):
        self.videos = videos
        self.plan_items = plan_items
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.client = client
        self.config = config
        self.now_fn = now_fn

    # ---------- Création ----------

    async def request_manual_video(self, user_id: str, payload: VideoCreateIn) -> Video:
        video, job = await run_in_threadpool(self._create_manual_video, user_id, payload)
        if job is not None:
            self.dispatcher.spawn(job)
        return video

    def _create_manual_video(self, user_id: str, payload: VideoCreateIn) -> Tuple[Video, Optional[DispatchJob]]:
        """Renvoie (vidéo, job) ; job = None quand une vidéo existante est réutilisée."""
        script = payload.script
        if script:
            limited = enforce_word_limit(script, payload.duration)
            if limited.was_trimmed:
                logger.info(
                    "Script trimmed from %d to %d words for a %ds video",
                    limited.word_count,
                    limited.max_words,
                    payload.duration,
                )
            script = limited.text

        avatar = self.resolver.resolve_avatar_context(user_id, payload.avatar_id)

        plan_item = None
        if payload.plan_item_id:
            plan_item = self.plan_items.get_for_user(payload.plan_item_id, user_id)
            if not plan_item:
                raise NotFoundError("Plan item not found")
            if plan_item.video_id:
                existing = self.videos.get_for_user(plan_item.video_id, user_id)
                if existing:
                    logger.info("Plan item %s already has video %s", plan_item.id, existing.id)
                    return existing, None

        duplicate = self._find_duplicate(
            user_id=user_id,
            payload=payload,
            script=script,
            avatar_record_id=avatar.avatar_record_id,
        )
        if duplicate:
            logger.info("Returning recent duplicate video %s for user %s", duplicate.id, user_id)
            if plan_item:
                self._link_plan_item(plan_item, duplicate)
                self.videos.session.commit()
            return duplicate, None

        video = self.videos.create(
            commit=False,
            user_id=user_id,
            topic=payload.topic,
            script=script,
            style=payload.style.value,
            duration=payload.duration,
            aspect_ratio=payload.aspect_ratio,
            output_resolution=payload.output_resolution,
            status=VideoStatus.PENDING.value,
            avatar_id=avatar.avatar_record_id,
        )
        if plan_item:
            self.plan_items.update(
                plan_item,
                commit=False,
                video_id=video.id,
                status=VideoStatus.GENERATING.value,
                error_message=None,
                updated_at=self.now_fn(),
            )
        self.videos.session.commit()
        self.videos.session.refresh(video)

        job = DispatchJob(
            video_id=video.id,
            user_id=user_id,
            avatar=avatar,
            dimension=payload.dimension.model_dump() if payload.dimension else None,
        )
        return video, job

    def _link_plan_item(self, plan_item: VideoPlanItem, video: Video) -> None:
        self.plan_items.update(
            plan_item,
            commit=False,
            video_id=video.id,
            status=video.status,
            error_message=video.error_message,
            updated_at=self.now_fn(),
        )

    def _find_duplicate(
        self,
        *,
        user_id: str,
        payload: VideoCreateIn,
        script: Optional[str],
        avatar_record_id: Optional[str],
    ) -> Optional[Video]:
        candidates = self.videos.find_recent_duplicates(
            user_id=user_id,
            topic=payload.topic,
            style=payload.style.value,
            duration=payload.duration,
            since=self.now_fn() - self.config.duplicate_window,
            statuses=DUPLICATE_STATUSES,
        )
        for candidate in candidates:
            if (candidate.script or None) == (script or None) and candidate.avatar_id == avatar_record_id:
                return candidate
        return None

    # ---------- Retry ----------

    async def retry_video(self, video_id: str, user_id: str) -> Video:
        video, job = await run_in_threadpool(self._reset_for_retry, video_id, user_id)
        logger.info("Retrying video %s", video.id)
        self.dispatcher.spawn(job)
        return video

    def _reset_for_retry(self, video_id: str, user_id: str) -> Tuple[Video, DispatchJob]:
        video = self.get_video(video_id, user_id)
        if video.status != VideoStatus.FAILED.value:
            raise ValidationError(f"Only failed videos can be retried (current status: {video.status})")

        # avatar d'origine ; supprimé entre-temps (avatar_id NULL) -> avatar par défaut
        avatar = self.resolver.resolve_avatar_context(user_id, video.avatar_id)

        video = self.videos.update(
            video,
            commit=False,
            status=VideoStatus.PENDING.value,
            heygen_video_id=None,
            video_url=None,
            error_message=None,
            updated_at=self.now_fn(),
        )
        mirror_plan_items(self.plan_items, video.id, status=VideoStatus.PENDING.value, error_message=None)
        self.videos.session.commit()
        self.videos.session.refresh(video)
        return video, DispatchJob(video_id=video.id, user_id=user_id, avatar=avatar)

    # ---------- Statut ----------

    async def refresh_video_status(self, video_id: str, user_id: str) -> Tuple[Video, Optional[float]]:
        """Interroge HeyGen seulement si la vidéo est en cours et a déjà un id fournisseur."""
        video = await run_in_threadpool(self.get_video, video_id, user_id)
        if video.status not in REFRESHABLE_STATUSES or not video.heygen_video_id:
            return video, None

        remote = await self.client.get_video_status(video.heygen_video_id)
        video = await run_in_threadpool(self._apply_remote_status, video, remote)
        return video, remote.progress

    def _apply_remote_status(self, video: Video, remote: ProviderVideoStatus) -> Video:
        status = map_provider_status(remote.status)
        error_message = None
        if status == VideoStatus.FAILED.value:
            error_message = remote.error or "Video generation failed"

        changes = {"status": status, "updated_at": self.now_fn()}
        if remote.video_url:
            changes["video_url"] = remote.video_url
        if error_message:
            changes["error_message"] = error_message

        video = self.videos.update(video, commit=False, **changes)
        mirror_plan_items(self.plan_items, video.id, status=status, error_message=error_message)
        self.videos.session.commit()
        self.videos.session.refresh(video)
        return video

    # ---------- Lecture ----------

    def list_videos(
        self,
        user_id: str,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 100,
    ) -> Tuple[Sequence[Video], int]:
        items = self.videos.list_by_user(user_id, status=status, search=search, offset=offset, limit=limit)
        total = self.videos.count_by_user(user_id, status=status, search=search)
        return items, total

    def get_video(self, video_id: str, user_id: str) -> Video:
        video = self.videos.get_for_user(video_id, user_id)
        if not video:
            raise NotFoundError("Video not found")
        return video

    async def get_share_url(self, video_id: str, user_id: str) -> str:
        video = await run_in_threadpool(self.get_video, video_id, user_id)
        if not video.heygen_video_id:
            raise ValidationError("Video has not been submitted to HeyGen yet")
        return await self.client.get_share_url(video.heygen_video_id)

    # ---------- Suppression ----------

    def delete_video(self, video_id: str, user_id: str) -> None:
        self.videos.delete(self.get_video(video_id, user_id))

