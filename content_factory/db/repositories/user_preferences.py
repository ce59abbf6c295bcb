from content_factory.db.repositories.base import BaseRepository
from content_factory.db.models.user_preferences import UserPreferences
from content_factory.db.models.base import utcnow


class UserPreferencesRepository(BaseRepository[UserPreferences]):
    model = UserPreferences

    def upsert(self, user_id: str, **changes) -> UserPreferences:
        prefs = self.get(user_id)
        if prefs:
            return self.update(prefs, updated_at=utcnow(), **changes)
        return self.create(user_id=user_id, **changes)
