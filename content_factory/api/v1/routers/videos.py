from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from content_factory.api.v1.dependencies import get_current_user_id, get_video_service, pagination
from content_factory.core.errors import ConfigurationError, NotFoundError, ProviderError, ValidationError
from content_factory.db.models.videos import VideoStatus
from content_factory.features.videos.errors import describe_provider_error
from content_factory.features.videos.schemas import (
    MessageOut,
    ShareUrlOut,
    VideoCreateIn,
    VideoListOut,
    VideoOut,
    VideoStatusOut,
)
from content_factory.features.videos.services import VideoService


router = APIRouter(
    prefix="/videos",
    tags=["videos"],
    responses={404: {"description": "Not Found"}},
)


# -------- Helpers --------

def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ConfigurationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=describe_provider_error(e))


# -----------------------------
# Create
# -----------------------------
@router.post(
    "/generate",
    summary="Demander la génération d'une vidéo (renvoie la ligne pending)",
    status_code=status.HTTP_201_CREATED,
    response_model=VideoOut,
    responses={400: {"description": "No avatar configured"}},
)
async def generate_video(
    payload: VideoCreateIn,
    user_id: str = Depends(get_current_user_id),
    svc: VideoService = Depends(get_video_service),
):
    try:
        return await svc.request_manual_video(user_id, payload)
    except (NotFoundError, ConfigurationError) as e:
        raise _http_error(e)


# -----------------------------
# Read
# -----------------------------
@router.get(
    "",
    summary="Lister mes vidéos",
    response_model=VideoListOut,
)
def list_videos(
    status_filter: Optional[VideoStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, min_length=1, description="Sous-chaîne du sujet"),
    page: dict = Depends(pagination),
    user_id: str = Depends(get_current_user_id),
    svc: VideoService = Depends(get_video_service),
):
    items, total = svc.list_videos(
        user_id,
        status=status_filter.value if status_filter else None,
        search=search,
        offset=page["offset"],
        limit=page["limit"],
    )
    return VideoListOut(items=[VideoOut.model_validate(v) for v in items], total=total)


@router.get(
    "/{video_id}",
    summary="Récupérer une vidéo",
    response_model=VideoOut,
)
def get_video(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: VideoService = Depends(get_video_service),
):
    try:
        return svc.get_video(video_id, user_id)
    except NotFoundError as e:
        raise _http_error(e)


@router.get(
    "/{video_id}/status",
    summary="Rafraîchir le statut auprès de HeyGen",
    response_model=VideoStatusOut,
    responses={502: {"description": "HeyGen error"}},
)
async def refresh_status(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: VideoService = Depends(get_video_service),
):
    try:
        video, progress = await svc.refresh_video_status(video_id, user_id)
    except (NotFoundError, ConfigurationError, ProviderError) as e:
        raise _http_error(e)
    return VideoStatusOut(video=VideoOut.model_validate(video), progress=progress)


# -----------------------------
# Retry / share
# -----------------------------
@router.post(
    "/{video_id}/retry",
    summary="Relancer une vidéo en échec",
    response_model=VideoOut,
    responses={409: {"description": "Video is not in failed state"}},
)
async def retry_video(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: VideoService = Depends(get_video_service),
):
    try:
        return await svc.retry_video(video_id, user_id)
    except (NotFoundError, ConfigurationError, ValidationError) as e:
        raise _http_error(e)


@router.post(
    "/{video_id}/share",
    summary="Obtenir l'URL de partage HeyGen",
    response_model=ShareUrlOut,
)
async def share_video(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: VideoService = Depends(get_video_service),
):
    try:
        return ShareUrlOut(share_url=await svc.get_share_url(video_id, user_id))
    except (NotFoundError, ConfigurationError, ValidationError, ProviderError) as e:
        raise _http_error(e)


# -----------------------------
# Delete
# -----------------------------
@router.delete(
    "/{video_id}",
    summary="Supprimer une vidéo",
    response_model=MessageOut,
)
def delete_video(
    video_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: VideoService = Depends(get_video_service),
):
    try:
        svc.delete_video(video_id, user_id)
    except NotFoundError as e:
        raise _http_error(e)
    return MessageOut(message="Video deleted successfully")
