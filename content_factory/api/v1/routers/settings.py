from fastapi import APIRouter, Depends

from content_factory.api.v1.dependencies import get_app_settings_service, get_current_user_id
from content_factory.features.settings.schemas import VideoProviderIn, VideoProviderOut
from content_factory.features.settings.services import AppSettingsService


router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/video-provider", summary="Fournisseur text-to-video actif", response_model=VideoProviderOut)
def get_video_provider(
    _user_id: str = Depends(get_current_user_id),
    svc: AppSettingsService = Depends(get_app_settings_service),
):
    return VideoProviderOut(provider=svc.get_video_provider())


@router.put("/video-provider", summary="Changer de fournisseur text-to-video", response_model=VideoProviderOut)
def set_video_provider(
    payload: VideoProviderIn,
    _user_id: str = Depends(get_current_user_id),
    svc: AppSettingsService = Depends(get_app_settings_service),
):
    return VideoProviderOut(provider=svc.set_video_provider(payload.provider))
