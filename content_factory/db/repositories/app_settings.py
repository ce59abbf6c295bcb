from typing import Optional

from content_factory.db.repositories.base import BaseRepository
from content_factory.db.models.app_settings import AppSetting
from content_factory.db.models.base import utcnow


class AppSettingRepository(BaseRepository[AppSetting]):
    model = AppSetting

    def get_value(self, key: str) -> Optional[str]:
        row = self.get(key)
        return row.value if row else None

    def upsert(self, key: str, value: str) -> AppSetting:
        """Une seule ligne par clé : met à jour si elle existe, sinon crée."""
        row = self.get(key)
        if row:
            return self.update(row, value=value, updated_at=utcnow())
        return self.create(key=key, value=value)
