from typing import Any, Dict

from content_factory.db.models.user_preferences import UserPreferences
from content_factory.db.repositories.user_preferences import UserPreferencesRepository
from content_factory.features.preferences.schemas import TemplatePreferencesIn


class PreferencesService:
    def __init__(self, repo: UserPreferencesRepository):
        self.repo = repo

    def get_template_preferences(self, user_id: str) -> UserPreferences:
        # pas de ligne = valeurs par défaut, non persistées
        return self.repo.get(user_id) or UserPreferences(user_id=user_id)

    def update_template_preferences(self, user_id: str, payload: TemplatePreferencesIn) -> UserPreferences:
        changes: Dict[str, Any] = {}
        if payload.heygen_vertical_template_id is not None:
            changes["heygen_vertical_template_id"] = payload.heygen_vertical_template_id.strip() or None
        if payload.heygen_vertical_template_script_key is not None:
            changes["heygen_vertical_template_script_key"] = (
                payload.heygen_vertical_template_script_key.strip() or "script"
            )
        if payload.heygen_vertical_template_variables is not None:
            changes["heygen_vertical_template_variables"] = payload.heygen_vertical_template_variables
        if payload.heygen_vertical_template_overrides is not None:
            changes["heygen_vertical_template_overrides"] = payload.heygen_vertical_template_overrides
        return self.repo.upsert(user_id, **changes)
