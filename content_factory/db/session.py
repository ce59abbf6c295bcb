"""
➡️ But : Moteur SQL et sessions.

- engine : construit une fois depuis settings.DATABASE_URL (SQLite en dev, Postgres/Supabase en prod).
- get_session() : une session par requête HTTP (Depends).
- session_factory() : session autonome pour les tâches de génération, qui survivent à la requête.

Toutes les sessions gardent leurs objets chargés après commit (expire_on_commit=False) :
les services renvoient les entités aux routers après avoir commité.
"""

from typing import Iterator
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine

# Les modèles doivent être importés pour être présents dans SQLModel.metadata
from content_factory.db.models.avatars import Avatar  # noqa: F401
from content_factory.db.models.videos import Video  # noqa: F401
from content_factory.db.models.video_plan_items import VideoPlanItem  # noqa: F401
from content_factory.db.models.app_settings import AppSetting  # noqa: F401
from content_factory.db.models.user_preferences import UserPreferences  # noqa: F401

from content_factory.core.config import settings


def make_engine(url: str) -> Engine:
    if not url:
        raise RuntimeError("DATABASE_URL must be set")
    if url.startswith("sqlite:"):
        # les tâches asyncio et le threadpool de FastAPI partagent le fichier
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        echo=settings.ENV == "dev" and settings.LOG_LEVEL == "DEBUG",
        pool_pre_ping=True,
    )


engine: Engine = make_engine(settings.DATABASE_URL)


def init_db(bind: Engine = engine) -> None:
    """create_all en dev/demo ; en prod le schéma vient des migrations SQL."""
    SQLModel.metadata.create_all(bind)


def session_factory() -> Session:
    """À utiliser en context manager : `with session_factory() as s: ...`."""
    return Session(engine, expire_on_commit=False)


def get_session() -> Iterator[Session]:
    with session_factory() as session:
        yield session
