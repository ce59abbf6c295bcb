from fastapi import APIRouter, Depends

from content_factory.api.v1.dependencies import get_current_user_id, get_preferences_service
from content_factory.features.preferences.schemas import TemplatePreferencesIn, TemplatePreferencesOut
from content_factory.features.preferences.services import PreferencesService


router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("/template", summary="Mes préférences de template HeyGen", response_model=TemplatePreferencesOut)
def get_template_preferences(
    user_id: str = Depends(get_current_user_id),
    svc: PreferencesService = Depends(get_preferences_service),
):
    return svc.get_template_preferences(user_id)


@router.put("/template", summary="Modifier mes préférences de template", response_model=TemplatePreferencesOut)
def update_template_preferences(
    payload: TemplatePreferencesIn,
    user_id: str = Depends(get_current_user_id),
    svc: PreferencesService = Depends(get_preferences_service),
):
    return svc.update_template_preferences(user_id, payload)
