"""
Orchestration des vidéos : idempotence, dispatch en tâche de fond, fallback avatar, retry, statut.

Chaque test pilote le code async avec asyncio.run() et relit la base avec une session neuve
(le dispatcher écrit via ses propres sessions).
"""

import asyncio
from dataclasses import replace
import threading
from datetime import timedelta

import pytest

from content_factory.core.errors import ConfigurationError, NotFoundError, ProviderError, ValidationError
from content_factory.db.models.avatars import AvatarKind
from content_factory.db.models.base import utcnow
from content_factory.db.models.videos import VideoStatus, VideoStyle
from content_factory.db.repositories.user_preferences import UserPreferencesRepository
from content_factory.db.repositories.video_plan_items import VideoPlanItemRepository
from content_factory.db.repositories.videos import VideoRepository
from content_factory.features.avatars.services import AvatarContext
from content_factory.features.videos.dispatcher import DispatchJob, GenerationDispatcher
from content_factory.features.videos.schemas import VideoCreateIn
from content_factory.providers.heygen import ProviderVideo, ProviderVideoStatus

from conftest import OTHER_USER_ID, USER_ID, RecordingDispatcher, add_avatar, build_service


def _request(**overrides) -> VideoCreateIn:
    fields = {
        "topic": "3 erreurs de débutant en bourse",
        "script": "Première erreur : investir sans plan.",
        "style": VideoStyle.PROFESSIONAL,
        "duration": 30,
    }
    fields.update(overrides)
    return VideoCreateIn(**fields)


def _reload(make_session, video_id):
    with make_session() as s:
        return VideoRepository(s).get(video_id)


async def _create_and_wait(svc, dispatcher, payload, user_id=USER_ID):
    video = await svc.request_manual_video(user_id, payload)
    await dispatcher.drain()
    return video


def _avatar_ids_sent(client):
    return [call["video_inputs"][0]["character"].get("avatar_id") for call in client.generate_calls]


# ---------- Création ----------

def test_request_returns_pending_record_and_dispatches_in_background(session, make_session, client, dispatcher, config):
    avatar = add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    async def scenario():
        video = await svc.request_manual_video(USER_ID, _request())
        assert video.status == VideoStatus.PENDING.value
        assert video.heygen_video_id is None
        assert dispatcher.pending_tasks == 1
        await dispatcher.drain()
        return video

    video = asyncio.run(scenario())
    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.GENERATING.value
    assert stored.heygen_video_id == "hg-1"
    assert stored.avatar_id == avatar.id
    assert stored.error_message is None
    assert _avatar_ids_sent(client) == [avatar.heygen_avatar_id]


def test_script_is_trimmed_to_duration_budget(session, client, config):
    add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)
    script = " ".join(f"mot{i}" for i in range(100))

    video = asyncio.run(svc.request_manual_video(USER_ID, _request(script=script, duration=15)))
    assert video.script.split(" ") == [f"mot{i}" for i in range(45)]


def test_request_without_avatar_is_a_configuration_error(session, client, config):
    dispatcher = RecordingDispatcher()
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    with pytest.raises(ConfigurationError):
        asyncio.run(svc.request_manual_video(USER_ID, _request()))
    assert dispatcher.jobs == []
    assert VideoRepository(session).count() == 0


def test_unknown_requested_avatar_is_not_found(session, client, config):
    add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    with pytest.raises(NotFoundError):
        asyncio.run(svc.request_manual_video(USER_ID, _request(avatar_id="missing")))


# ---------- Idempotence ----------

def test_identical_requests_within_window_return_the_same_video(session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    first = asyncio.run(_create_and_wait(svc, dispatcher, _request()))
    second = asyncio.run(_create_and_wait(svc, dispatcher, _request()))
    third = asyncio.run(_create_and_wait(svc, dispatcher, _request(script="Un tout autre script.")))

    assert second.id == first.id
    assert third.id != first.id
    assert len(client.generate_calls) == 2


def test_duplicate_requires_same_avatar(session, client, config):
    add_avatar(session, heygen_avatar_id="hg-a", is_default=True)
    other = add_avatar(session, heygen_avatar_id="hg-b")
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    first = asyncio.run(svc.request_manual_video(USER_ID, _request()))
    second = asyncio.run(svc.request_manual_video(USER_ID, _request(avatar_id=other.id)))
    assert second.id != first.id


def test_duplicate_window_and_failed_videos_are_ignored(session, client, config):
    add_avatar(session, is_default=True)
    dispatcher = RecordingDispatcher()
    now = [utcnow()]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config, now_fn=lambda: now[0])

    first = asyncio.run(svc.request_manual_video(USER_ID, _request()))
    VideoRepository(session).update(first, status=VideoStatus.FAILED.value)
    second = asyncio.run(svc.request_manual_video(USER_ID, _request()))
    assert second.id != first.id

    now[0] = now[0] + config.duplicate_window + timedelta(minutes=1)
    third = asyncio.run(svc.request_manual_video(USER_ID, _request()))
    assert third.id != second.id
    assert len(dispatcher.jobs) == 3


def test_plan_item_with_video_returns_it_without_dispatch(session, client, config):
    add_avatar(session, is_default=True)
    dispatcher = RecordingDispatcher()
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)
    item = VideoPlanItemRepository(session).create(user_id=USER_ID, topic="Plan")

    first = asyncio.run(svc.request_manual_video(USER_ID, _request(plan_item_id=item.id)))
    session.refresh(item)
    assert item.video_id == first.id
    assert item.status == VideoStatus.GENERATING.value

    again = asyncio.run(svc.request_manual_video(USER_ID, _request(plan_item_id=item.id, script="autre")))
    assert again.id == first.id
    assert len(dispatcher.jobs) == 1


def test_plan_item_of_another_user_is_not_found(session, client, config):
    add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)
    item = VideoPlanItemRepository(session).create(user_id=OTHER_USER_ID, topic="Plan")

    with pytest.raises(NotFoundError):
        asyncio.run(svc.request_manual_video(USER_ID, _request(plan_item_id=item.id)))


def test_plan_item_is_linked_to_recent_duplicate(session, make_session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)
    first = asyncio.run(_create_and_wait(svc, dispatcher, _request()))
    item = VideoPlanItemRepository(session).create(user_id=USER_ID, topic="Plan")

    again = asyncio.run(_create_and_wait(svc, dispatcher, _request(plan_item_id=item.id)))

    assert again.id == first.id
    assert len(client.generate_calls) == 1
    with make_session() as s:
        linked = VideoPlanItemRepository(s).get(item.id)
    assert linked.video_id == first.id
    assert linked.status == VideoStatus.GENERATING.value


def test_status_refresh_reaches_plan_item_linked_to_duplicate(session, make_session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)
    first = asyncio.run(_create_and_wait(svc, dispatcher, _request()))
    item = VideoPlanItemRepository(session).create(user_id=USER_ID, topic="Plan")
    asyncio.run(svc.request_manual_video(USER_ID, _request(plan_item_id=item.id)))
    client.status_result = ProviderVideoStatus(status="failed", error="Rendering error")

    asyncio.run(svc.refresh_video_status(first.id, USER_ID))

    with make_session() as s:
        mirrored = VideoPlanItemRepository(s).get(item.id)
    assert mirrored.status == VideoStatus.FAILED.value
    assert mirrored.error_message == "Rendering error"


# ---------- Dispatch ----------

def test_provider_failure_is_recorded_and_mirrored_on_plan_item(session, make_session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    client.generate_results = [ProviderError("x", status_code=429, payload={})]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)
    item = VideoPlanItemRepository(session).create(user_id=USER_ID, topic="Plan")

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request(plan_item_id=item.id)))

    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.FAILED.value
    assert "rate limit" in stored.error_message
    with make_session() as s:
        mirrored = VideoPlanItemRepository(s).get(item.id)
    assert mirrored.status == VideoStatus.FAILED.value
    assert mirrored.error_message == stored.error_message


def test_completed_provider_response_is_stored(session, make_session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    client.generate_results = [ProviderVideo(video_id="hg-9", status="completed", video_url="https://cdn/v.mp4")]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.COMPLETED.value
    assert stored.video_url == "https://cdn/v.mp4"


def test_avatar_not_found_retries_once_with_default_avatar(session, make_session, client, dispatcher, config):
    add_avatar(session, heygen_avatar_id="hg-default", is_default=True)
    stale = add_avatar(session, heygen_avatar_id="hg-stale")
    client.generate_results = [
        ProviderError("Avatar not found", status_code=404),
        ProviderVideo(video_id="hg-ok", status="processing"),
    ]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request(avatar_id=stale.id)))

    assert _avatar_ids_sent(client) == ["hg-stale", "hg-default"]
    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.GENERATING.value
    assert stored.heygen_video_id == "hg-ok"
    assert stored.avatar_id == stale.id


def test_second_avatar_not_found_does_not_retry_again(session, make_session, client, dispatcher, config):
    add_avatar(session, heygen_avatar_id="hg-default", is_default=True)
    stale = add_avatar(session, heygen_avatar_id="hg-stale")
    client.generate_results = [ProviderError("Avatar not found", status_code=404)]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request(avatar_id=stale.id)))

    assert len(client.generate_calls) == 2
    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.FAILED.value
    assert stored.error_message == "Avatar not found"


def test_repeat_request_after_avatar_fallback_returns_same_video(session, client, dispatcher, config):
    add_avatar(session, heygen_avatar_id="hg-default", is_default=True)
    stale = add_avatar(session, heygen_avatar_id="hg-stale")
    client.generate_results = [
        ProviderError("Avatar not found", status_code=404),
        ProviderVideo(video_id="hg-ok", status="processing"),
    ]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    first = asyncio.run(_create_and_wait(svc, dispatcher, _request(avatar_id=stale.id)))
    again = asyncio.run(_create_and_wait(svc, dispatcher, _request(avatar_id=stale.id)))

    assert again.id == first.id
    assert len(client.generate_calls) == 2


def test_voice_not_found_404_does_not_trigger_avatar_fallback(session, make_session, client, dispatcher, config):
    add_avatar(session, heygen_avatar_id="hg-default", is_default=True)
    other = add_avatar(session, heygen_avatar_id="hg-other")
    client.generate_results = [
        ProviderError("x", status_code=404, payload={"error": {"code": 400116, "message": "voice missing"}})
    ]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request(avatar_id=other.id)))

    assert _avatar_ids_sent(client) == ["hg-other"]
    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.FAILED.value
    assert stored.error_message.startswith("Voice not found")


def test_photo_avatar_uses_group_member_id(session, client, dispatcher, config):
    add_avatar(session, heygen_avatar_id="group-1", kind=AvatarKind.PHOTO.value, is_default=True)
    client.group_members = {"group-1": "member-1"}
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    character = client.generate_calls[0]["video_inputs"][0]["character"]
    assert character == {"type": "talking_photo", "talking_photo_id": "member-1"}


def test_photo_avatar_keeps_id_when_group_lookup_fails(session, client, dispatcher, config):
    add_avatar(session, heygen_avatar_id="tp-1", kind=AvatarKind.PHOTO.value, is_default=True)
    client.group_members = {"tp-1": ProviderError("not a group", status_code=404)}
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    assert client.generate_calls[0]["video_inputs"][0]["character"]["talking_photo_id"] == "tp-1"


def test_template_from_preferences_is_tried_first(session, make_session, client, dispatcher, config):
    add_avatar(session, heygen_avatar_id="hg-a", is_default=True)
    UserPreferencesRepository(session).upsert(
        USER_ID,
        heygen_vertical_template_id="tpl-1",
        heygen_vertical_template_script_key="body",
    )
    client.template_schema = {"variables": {"host": {"type": "character"}}}
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request(aspect_ratio="9:16")))

    assert client.generate_calls == []
    template_id, payload = client.template_calls[0]
    assert template_id == "tpl-1"
    assert payload["variables"]["body"]["properties"]["content"] == _request().script
    assert payload["variables"]["host"]["properties"]["character_id"] == "hg-a"
    assert payload["force_vertical"] is True
    assert _reload(make_session, video.id).heygen_video_id == "hg-tpl-1"


def test_template_failure_falls_back_to_avatar_generation(session, make_session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    client.template_results = [ProviderError("Template rendering failed", status_code=400)]
    dispatcher = GenerationDispatcher(
        client=client,
        session_factory=make_session,
        config=replace(config, template_id="tpl-env", avatar_node_ids=("node-1",)),
    )
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    template_id, payload = client.template_calls[0]
    assert template_id == "tpl-env"
    assert payload["nodes_override"][0]["id"] == "node-1"
    assert len(client.generate_calls) == 1
    assert _reload(make_session, video.id).heygen_video_id == "hg-1"


def test_dispatch_is_skipped_when_provider_id_already_set(session, client, dispatcher, config):
    avatar = add_avatar(session, is_default=True)
    video = VideoRepository(session).create(
        user_id=USER_ID, topic="t", duration=30, heygen_video_id="hg-existing", avatar_id=avatar.id
    )
    job = DispatchJob(
        video_id=video.id,
        user_id=USER_ID,
        avatar=AvatarContext(avatar_id=avatar.heygen_avatar_id, avatar_record_id=avatar.id, is_photo_avatar=False),
    )

    asyncio.run(dispatcher.dispatch(job))

    assert client.generate_calls == []


def test_dispatch_timeout_is_recorded_as_failure(session, make_session, client, config):
    add_avatar(session, is_default=True)
    client.generate_delay = 1.0
    dispatcher = GenerationDispatcher(
        client=client, session_factory=make_session, config=replace(config, dispatch_timeout=0.05)
    )
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.FAILED.value
    assert "timed out" in stored.error_message


def test_unexpected_error_is_recorded_not_raised(session, make_session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    client.generate_results = [RuntimeError("kaboom")]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    stored = _reload(make_session, video.id)
    assert stored.status == VideoStatus.FAILED.value
    assert stored.error_message == "kaboom"


def test_dispatch_database_work_runs_off_the_event_loop_thread(session, make_session, client, config):
    add_avatar(session, is_default=True)
    session_threads = []

    def tracking_factory():
        session_threads.append(threading.get_ident())
        return make_session()

    dispatcher = GenerationDispatcher(client=client, session_factory=tracking_factory, config=config)
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    assert len(client.generate_calls) == 1
    assert session_threads
    assert threading.get_ident() not in session_threads


def test_timestamps_are_timezone_aware(session, make_session, client, dispatcher, config):
    add_avatar(session, is_default=True)
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    video = asyncio.run(_create_and_wait(svc, dispatcher, _request()))

    stored = _reload(make_session, video.id)
    assert stored.created_at.tzinfo is not None
    assert stored.updated_at.utcoffset() == timedelta(0)
    assert stored.updated_at >= stored.created_at


# ---------- Retry ----------

def _failed_video(session, avatar):
    return VideoRepository(session).create(
        user_id=USER_ID,
        topic="t",
        duration=30,
        status=VideoStatus.FAILED.value,
        heygen_video_id="hg-old",
        video_url="https://cdn/old.mp4",
        error_message="boom",
        avatar_id=avatar.id,
    )


def test_retry_resets_fields_and_dispatches_once(session, client, config):
    add_avatar(session, heygen_avatar_id="hg-default", is_default=True)
    previous = add_avatar(session, heygen_avatar_id="hg-previous")
    video = _failed_video(session, previous)
    dispatcher = RecordingDispatcher()
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    retried = asyncio.run(svc.retry_video(video.id, USER_ID))

    assert retried.status == VideoStatus.PENDING.value
    assert retried.heygen_video_id is None
    assert retried.video_url is None
    assert retried.error_message is None
    assert len(dispatcher.jobs) == 1
    assert dispatcher.jobs[0].avatar.avatar_id == "hg-previous"


def test_retry_of_completed_video_is_rejected_without_mutation(session, client, config):
    avatar = add_avatar(session, is_default=True)
    video = VideoRepository(session).create(
        user_id=USER_ID,
        topic="t",
        duration=30,
        status=VideoStatus.COMPLETED.value,
        heygen_video_id="hg-done",
        video_url="https://cdn/done.mp4",
        avatar_id=avatar.id,
    )
    dispatcher = RecordingDispatcher()
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    with pytest.raises(ValidationError):
        asyncio.run(svc.retry_video(video.id, USER_ID))

    session.refresh(video)
    assert video.status == VideoStatus.COMPLETED.value
    assert video.heygen_video_id == "hg-done"
    assert dispatcher.jobs == []


def test_retry_runs_the_generation_again(session, make_session, client, dispatcher, config):
    avatar = add_avatar(session, is_default=True)
    video = _failed_video(session, avatar)
    client.generate_results = [ProviderVideo(video_id="hg-new", status="processing")]
    svc = build_service(session, client=client, dispatcher=dispatcher, config=config)

    async def scenario():
        await svc.retry_video(video.id, USER_ID)
        await dispatcher.drain()

    asyncio.run(scenario())

    assert len(client.generate_calls) == 1
    assert _reload(make_session, video.id).heygen_video_id == "hg-new"


def test_retry_of_another_users_video_is_not_found(session, client, config):
    avatar = add_avatar(session, is_default=True)
    video = _failed_video(session, avatar)
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    with pytest.raises(NotFoundError):
        asyncio.run(svc.retry_video(video.id, OTHER_USER_ID))


# ---------- Statut ----------

def test_refresh_updates_record_and_plan_items(session, client, config):
    video = VideoRepository(session).create(
        user_id=USER_ID, topic="t", duration=30, status=VideoStatus.GENERATING.value, heygen_video_id="hg-1"
    )
    item = VideoPlanItemRepository(session).create(user_id=USER_ID, video_id=video.id, status="generating")
    client.status_result = ProviderVideoStatus(status="completed", video_url="https://cdn/v.mp4", progress=100)
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    refreshed, progress = asyncio.run(svc.refresh_video_status(video.id, USER_ID))

    assert refreshed.status == VideoStatus.COMPLETED.value
    assert refreshed.video_url == "https://cdn/v.mp4"
    assert progress == 100
    session.refresh(item)
    assert item.status == VideoStatus.COMPLETED.value


def test_refresh_records_provider_failure(session, client, config):
    video = VideoRepository(session).create(
        user_id=USER_ID, topic="t", duration=30, status=VideoStatus.GENERATING.value, heygen_video_id="hg-1"
    )
    client.status_result = ProviderVideoStatus(status="failed", error="Avatar render failed")
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    refreshed, _ = asyncio.run(svc.refresh_video_status(video.id, USER_ID))

    assert refreshed.status == VideoStatus.FAILED.value
    assert refreshed.error_message == "Avatar render failed"


@pytest.mark.parametrize(
    "status, provider_id",
    [
        (VideoStatus.PENDING.value, None),
        (VideoStatus.COMPLETED.value, "hg-1"),
        (VideoStatus.FAILED.value, "hg-1"),
    ],
)
def test_refresh_is_a_no_op_otherwise(session, client, config, status, provider_id):
    video = VideoRepository(session).create(
        user_id=USER_ID, topic="t", duration=30, status=status, heygen_video_id=provider_id
    )
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    refreshed, progress = asyncio.run(svc.refresh_video_status(video.id, USER_ID))

    assert client.status_calls == []
    assert refreshed.status == status
    assert progress is None


# ---------- Lecture / suppression ----------

def test_list_videos_filters_by_status_and_topic(session, client, config):
    repo = VideoRepository(session)
    repo.create(user_id=USER_ID, topic="Bourse pour débutants", duration=30, status="completed")
    repo.create(user_id=USER_ID, topic="Immobilier locatif", duration=30, status="failed")
    repo.create(user_id=OTHER_USER_ID, topic="Bourse avancée", duration=30, status="completed")
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    items, total = svc.list_videos(USER_ID)
    assert total == 2

    items, total = svc.list_videos(USER_ID, search="bourse")
    assert [v.topic for v in items] == ["Bourse pour débutants"]
    assert total == 1

    items, total = svc.list_videos(USER_ID, status="failed")
    assert [v.topic for v in items] == ["Immobilier locatif"]


def test_share_url_requires_provider_id(session, client, config):
    video = VideoRepository(session).create(user_id=USER_ID, topic="t", duration=30)
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    with pytest.raises(ValidationError):
        asyncio.run(svc.get_share_url(video.id, USER_ID))

    VideoRepository(session).update(video, heygen_video_id="hg-1")
    assert asyncio.run(svc.get_share_url(video.id, USER_ID)) == client.share_url


def test_delete_is_scoped_to_owner(session, client, config):
    video = VideoRepository(session).create(user_id=USER_ID, topic="t", duration=30)
    svc = build_service(session, client=client, dispatcher=RecordingDispatcher(), config=config)

    with pytest.raises(NotFoundError):
        svc.delete_video(video.id, OTHER_USER_ID)

    svc.delete_video(video.id, USER_ID)
    assert VideoRepository(session).get(video.id) is None

    with pytest.raises(NotFoundError):
        svc.delete_video(video.id, USER_ID)
