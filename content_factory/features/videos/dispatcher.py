"""
➡️ But : Lancer la génération HeyGen en arrière-plan et écrire le résultat sur la vidéo.

La route qui crée la vidéo n'attend pas cette tâche : elle renvoie la ligne `pending`
immédiatement, le client observe la suite via l'endpoint de statut.

Chaque tâche :
- ouvre ses propres sessions DB (la session de la requête est fermée entre-temps),
  toujours dans le threadpool : seuls les appels HeyGen tournent sur la boucle,
- est bornée par asyncio.wait_for(dispatch_timeout),
- ne relance jamais d'exception : succès ou échec sont écrits sur la vidéo (+ plan items).

La garde "heygen_video_id déjà posé" est best-effort : pas de verrou.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Set

from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from content_factory.core.config import GenerationSettings
from content_factory.core.errors import ConfigurationError, ErrorKind, ProviderError
from content_factory.db.models.base import utcnow
from content_factory.db.models.videos import VideoStatus
from content_factory.db.repositories.avatars import AvatarRepository
from content_factory.db.repositories.user_preferences import UserPreferencesRepository
from content_factory.db.repositories.video_plan_items import VideoPlanItemRepository
from content_factory.db.repositories.videos import VideoRepository
from content_factory.features.avatars.services import AvatarContext, AvatarResolver
from content_factory.features.videos.errors import (
    classify_provider_error,
    describe_provider_error,
    map_provider_status,
)
from content_factory.features.videos.payloads import (
    OutputFormat,
    build_avatar_payload,
    build_template_payload,
    resolve_output_format,
)
from content_factory.providers.heygen import HeyGenClient, ProviderVideo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchJob:
    video_id: str
    user_id: str
    avatar: AvatarContext
    dimension: Optional[Dict[str, int]] = None


@dataclass(frozen=True)
class _VideoSnapshot:
    topic: str
    script: Optional[str]
    aspect_ratio: Optional[str]
    output_resolution: Optional[str]


@dataclass(frozen=True)
class _TemplateConfig:
    template_id: str
    script_key: str
    variables: Dict[str, Any]
    overrides: Dict[str, Any]


class GenerationDispatcher:
    """Une instance par process ; garde une référence sur les tâches en cours."""

    def __init__(
        self,
        *,
        client: HeyGenClient,
        session_factory: Callable[[], Session],
        config: GenerationSettings,
    ):
        self.client = client
        self.session_factory = session_factory
        self.config = config
        self._tasks: Set[asyncio.Task] = set()

    # ---------- Tâches ----------

    def spawn(self, job: DispatchJob) -> asyncio.Task:
        """Fire-and-forget : la tâche tourne sur la boucle courante, l'appelant ne l'attend pas."""
        task = asyncio.get_running_loop().create_task(self.run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Attend toutes les tâches en cours (arrêt du serveur, tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run(self, job: DispatchJob) -> None:
        timeout = self.config.dispatch_timeout
        try:
            await asyncio.wait_for(self.dispatch(job), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Video %s generation timed out after %.0fs", job.video_id, timeout)
            message = f"Video generation timed out after {timeout:.0f} seconds"
            await run_in_threadpool(self._record_failure, job.video_id, message)
        except Exception as e:
            logger.exception("Video %s generation failed unexpectedly", job.video_id)
            await run_in_threadpool(self._record_failure, job.video_id, describe_provider_error(e))

    # ---------- Génération ----------

    async def dispatch(self, job: DispatchJob, *, allow_avatar_fallback: bool = True) -> None:
        snapshot = await run_in_threadpool(self._load_snapshot, job.video_id)
        if snapshot is None:
            return

        template = await run_in_threadpool(self._template_config, job.user_id)
        output = resolve_output_format(
            aspect_ratio=snapshot.aspect_ratio,
            output_resolution=snapshot.output_resolution,
            dimension=job.dimension,
            default_resolution=self.config.default_resolution,
        )
        character_id = job.avatar.avatar_id
        if job.avatar.is_photo_avatar:
            character_id = await self._photo_member_id(character_id)

        logger.info(
            "Dispatching video %s (avatar=%s photo=%s template=%s)",
            job.video_id,
            character_id,
            job.avatar.is_photo_avatar,
            template.template_id if template else None,
        )

        result: Optional[ProviderVideo] = None
        if template:
            if await run_in_threadpool(self._already_dispatched, job.video_id):
                return
            try:
                result = await self._generate_from_template(template, snapshot, job.avatar, character_id, output)
            except ProviderError as e:
                logger.warning(
                    "Template generation failed for video %s, falling back to avatar generation: %s",
                    job.video_id,
                    e,
                )

        if result is None:
            if await run_in_threadpool(self._already_dispatched, job.video_id):
                return
            payload = build_avatar_payload(
                topic=snapshot.topic,
                script=snapshot.script,
                avatar_id=character_id,
                is_photo_avatar=job.avatar.is_photo_avatar,
                output=output,
                voice_id=self.config.voice_id,
            )
            logger.debug("HeyGen avatar payload for video %s: %s", job.video_id, payload)
            try:
                result = await self.client.generate_video(payload)
            except ProviderError as e:
                if allow_avatar_fallback and classify_provider_error(e) is ErrorKind.AVATAR_NOT_FOUND:
                    fallback = await run_in_threadpool(self._default_avatar, job.user_id)
                    if fallback is not None:
                        logger.warning(
                            "Avatar %s not found for video %s, retrying once with default avatar %s",
                            job.avatar.avatar_id,
                            job.video_id,
                            fallback.avatar_id,
                        )
                        await self.dispatch(replace(job, avatar=fallback), allow_avatar_fallback=False)
                        return
                logger.error("HeyGen generation failed for video %s: %s", job.video_id, e)
                await run_in_threadpool(self._record_failure, job.video_id, describe_provider_error(e))
                return

        await run_in_threadpool(self._record_success, job.video_id, result)

    async def _generate_from_template(
        self,
        template: _TemplateConfig,
        snapshot: _VideoSnapshot,
        avatar: AvatarContext,
        character_id: str,
        output: OutputFormat,
    ) -> ProviderVideo:
        try:
            schema: Optional[Dict[str, Any]] = await self.client.get_template(template.template_id)
        except ProviderError as e:
            logger.info("Template %s schema unavailable (%s), using node overrides", template.template_id, e)
            schema = None

        payload = build_template_payload(
            topic=snapshot.topic,
            script=snapshot.script,
            avatar_id=character_id,
            is_photo_avatar=avatar.is_photo_avatar,
            output=output,
            script_key=template.script_key,
            template=schema,
            avatar_key=self.config.avatar_key,
            base_variables=template.variables,
            node_ids=self.config.avatar_node_ids,
            node_overrides=template.overrides,
        )
        logger.debug("HeyGen template payload (%s): %s", template.template_id, payload)
        return await self.client.generate_video_from_template(template.template_id, payload)

    async def _photo_member_id(self, group_id: str) -> str:
        """Les photo avatars sont des groupes : HeyGen attend l'id d'un membre."""
        try:
            member_id = await self.client.get_avatar_group_member(group_id)
        except ProviderError as e:
            logger.info("Assuming %s is an individual photo avatar id (group lookup failed: %s)", group_id, e)
            return group_id
        if member_id:
            logger.info("Using photo avatar %s from group %s", member_id, group_id)
            return member_id
        return group_id

    # ---------- Lecture ----------

    def _load_snapshot(self, video_id: str) -> Optional[_VideoSnapshot]:
        with self.session_factory() as session:
            video = VideoRepository(session).get(video_id)
            if not video:
                logger.warning("Video %s disappeared before dispatch", video_id)
                return None
            return _VideoSnapshot(
                topic=video.topic,
                script=video.script,
                aspect_ratio=video.aspect_ratio,
                output_resolution=video.output_resolution,
            )

    def _already_dispatched(self, video_id: str) -> bool:
        with self.session_factory() as session:
            video = VideoRepository(session).get(video_id)
            if video is None:
                return True
            if video.heygen_video_id:
                logger.info("Video %s already has provider id %s, skipping dispatch", video_id, video.heygen_video_id)
                return True
            return False

    def _template_config(self, user_id: str) -> Optional[_TemplateConfig]:
        with self.session_factory() as session:
            prefs = UserPreferencesRepository(session).get(user_id)
        if prefs and prefs.heygen_vertical_template_id:
            return _TemplateConfig(
                template_id=prefs.heygen_vertical_template_id,
                script_key=prefs.heygen_vertical_template_script_key or self.config.script_key,
                variables=dict(prefs.heygen_vertical_template_variables or {}),
                overrides=dict(prefs.heygen_vertical_template_overrides or {}),
            )
        if self.config.template_id:
            return _TemplateConfig(
                template_id=self.config.template_id,
                script_key=self.config.script_key,
                variables={},
                overrides=dict(prefs.heygen_vertical_template_overrides or {}) if prefs else {},
            )
        return None

    def _default_avatar(self, user_id: str) -> Optional[AvatarContext]:
        with self.session_factory() as session:
            resolver = AvatarResolver(AvatarRepository(session), storage_url_marker=self.config.storage_url_marker)
            try:
                return resolver.resolve_default_context(user_id)
            except ConfigurationError as e:
                logger.warning("No default avatar to fall back to for user %s: %s", user_id, e)
                return None

    # ---------- Écriture ----------

    def _record_success(self, video_id: str, result: ProviderVideo) -> None:
        """avatar_id n'est pas touché : il reste l'avatar demandé, même après un fallback."""
        status = map_provider_status(result.status)
        with self.session_factory() as session:
            videos = VideoRepository(session)
            video = videos.get(video_id)
            if not video:
                logger.warning("Video %s deleted while generating (provider id %s)", video_id, result.video_id)
                return
            changes: Dict[str, Any] = {
                "heygen_video_id": result.video_id,
                "status": status,
                "video_url": result.video_url,
                "error_message": None,
                "updated_at": utcnow(),
            }
            videos.update(video, commit=False, **changes)
            mirror_plan_items(VideoPlanItemRepository(session), video_id, status=status, error_message=None)
            session.commit()
        logger.info("Video %s dispatched: provider id %s, status %s", video_id, result.video_id, status)

    def _record_failure(self, video_id: str, message: str) -> None:
        with self.session_factory() as session:
            videos = VideoRepository(session)
            video = videos.get(video_id)
            if not video:
                return
            videos.update(
                video,
                commit=False,
                status=VideoStatus.FAILED.value,
                error_message=message,
                updated_at=utcnow(),
            )
            mirror_plan_items(
                VideoPlanItemRepository(session), video_id, status=VideoStatus.FAILED.value, error_message=message
            )
            session.commit()
        logger.error("Video %s marked as failed: %s", video_id, message)


def mirror_plan_items(
    items: VideoPlanItemRepository, video_id: str, *, status: str, error_message: Optional[str]
) -> None:
    """Recopie statut et erreur de la vidéo sur les plan items qui la référencent."""
    for item in items.list_by_video(video_id):
        items.update(
            item,
            commit=False,
            status=status,
            error_message=error_message,
            updated_at=utcnow(),
        )
