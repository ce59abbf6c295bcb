import logging

from content_factory.db.repositories.app_settings import AppSettingRepository

logger = logging.getLogger(__name__)

VIDEO_PROVIDER_KEY = "sora_provider"
DEFAULT_VIDEO_PROVIDER = "poyo"
VIDEO_PROVIDERS = {"poyo", "kie"}


def normalize_video_provider(value: object) -> str:
    if isinstance(value, str) and value in VIDEO_PROVIDERS:
        return value
    return DEFAULT_VIDEO_PROVIDER


class AppSettingsService:
    """Accès au réglage global de sélection du fournisseur text-to-video."""

    def __init__(self, repo: AppSettingRepository):
        self.repo = repo

    def get_video_provider(self) -> str:
        """Valeur par défaut sur ligne absente, valeur inconnue, ou toute erreur de lecture."""
        try:
            value = self.repo.get_value(VIDEO_PROVIDER_KEY)
        except Exception as e:
            logger.warning("Failed to load video provider setting: %s", e)
            return DEFAULT_VIDEO_PROVIDER
        return normalize_video_provider(value)

    def set_video_provider(self, provider: str) -> str:
        normalized = normalize_video_provider(provider)
        self.repo.upsert(VIDEO_PROVIDER_KEY, normalized)
        return normalized
