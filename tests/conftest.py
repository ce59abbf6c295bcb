import asyncio
import os

# avant tout import de content_factory : pas de fichier DB ni de clé réelle en test
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("HEYGEN_KEY", "test-key")

from datetime import timedelta
from typing import Any, Dict, List, Optional

import pytest
from sqlmodel import Session, create_engine

from content_factory.core.config import GenerationSettings
from content_factory.core.errors import ProviderError
from content_factory.db.models.avatars import Avatar, AvatarKind
from content_factory.db.repositories.avatars import AvatarRepository
from content_factory.db.repositories.video_plan_items import VideoPlanItemRepository
from content_factory.db.repositories.videos import VideoRepository
from content_factory.db.session import init_db
from content_factory.features.avatars.services import AvatarResolver
from content_factory.features.videos.dispatcher import GenerationDispatcher
from content_factory.features.videos.services import VideoService
from content_factory.providers.heygen import ProviderVideo, ProviderVideoStatus

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


class FakeHeyGenClient:
    """
    Remplace HeyGenClient : chaque file contient des résultats (ou exceptions) consommés dans l'ordre.
    Le dernier élément est réutilisé quand la file est épuisée.
    """

    def __init__(self):
        self.generate_results: List[Any] = [ProviderVideo(video_id="hg-1", status="processing")]
        self.template_results: List[Any] = [ProviderVideo(video_id="hg-tpl-1", status="processing")]
        self.template_schema: Any = None
        self.group_members: Dict[str, Any] = {}
        self.status_result: Any = ProviderVideoStatus(status="processing")
        self.share_url = "https://app.heygen.com/share/abc"
        self.generate_delay = 0.0

        self.generate_calls: List[Dict[str, Any]] = []
        self.template_calls: List[Any] = []
        self.status_calls: List[str] = []

    @staticmethod
    def _next(results: List[Any]) -> Any:
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def generate_video(self, payload):
        self.generate_calls.append(payload)
        if self.generate_delay:
            await asyncio.sleep(self.generate_delay)
        return self._next(self.generate_results)

    async def generate_video_from_template(self, template_id, payload):
        self.template_calls.append((template_id, payload))
        return self._next(self.template_results)

    async def get_template(self, template_id):
        if isinstance(self.template_schema, Exception):
            raise self.template_schema
        if self.template_schema is None:
            raise ProviderError("Template not found", status_code=404)
        return self.template_schema

    async def get_avatar_group_member(self, group_id):
        member = self.group_members.get(group_id)
        if isinstance(member, Exception):
            raise member
        return member

    async def get_video_status(self, video_id):
        self.status_calls.append(video_id)
        if isinstance(self.status_result, Exception):
            raise self.status_result
        return self.status_result

    async def get_share_url(self, video_id):
        return self.share_url


class RecordingDispatcher:
    """Dispatcher qui n'exécute rien : garde les jobs lancés."""

    def __init__(self):
        self.jobs = []

    def spawn(self, job):
        self.jobs.append(job)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def make_session(engine):
    def _factory() -> Session:
        return Session(engine, expire_on_commit=False)
    return _factory


@pytest.fixture
def session(make_session):
    with make_session() as s:
        yield s


@pytest.fixture
def config():
    return GenerationSettings(
        default_resolution="720p",
        voice_id="voice-1",
        duplicate_window=timedelta(hours=6),
        dispatch_timeout=5.0,
    )


@pytest.fixture
def client():
    return FakeHeyGenClient()


@pytest.fixture
def dispatcher(client, make_session, config):
    return GenerationDispatcher(client=client, session_factory=make_session, config=config)


def build_service(session, *, client, dispatcher, config, now_fn=None) -> VideoService:
    kwargs = {}
    if now_fn is not None:
        kwargs["now_fn"] = now_fn
    return VideoService(
        videos=VideoRepository(session),
        plan_items=VideoPlanItemRepository(session),
        resolver=AvatarResolver(AvatarRepository(session), storage_url_marker=config.storage_url_marker),
        dispatcher=dispatcher,
        client=client,
        config=config,
        **kwargs,
    )


def add_avatar(
    session,
    *,
    user_id: str = USER_ID,
    heygen_avatar_id: str = "hg-avatar-1",
    kind: Optional[str] = AvatarKind.STANDARD.value,
    **fields,
) -> Avatar:
    fields.setdefault("avatar_name", heygen_avatar_id)
    return AvatarRepository(session).create(
        user_id=user_id,
        heygen_avatar_id=heygen_avatar_id,
        kind=kind,
        **fields,
    )
