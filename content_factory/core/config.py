"""
➡️ But : Centraliser tous les paramètres configurables (nom d'app, DB, secrets, HeyGen...).

Utilise pydantic-settings pour charger les variables d'environnement (.env, variables système…)
une seule fois au démarrage du process.

Fournit :

settings : l'objet brut, importable partout
jwt_settings : paramètres de validation des tokens
generation_settings : paramètres figés passés au service de génération vidéo

🔹 Avantages :

Aucun service ne lit l'environnement au moment de l'appel → tests déterministes.

Facilite le passage entre environnements (dev / prod / test).
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Tuple

from pydantic_settings import BaseSettings
from content_factory.security.tokens import JWTSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Content-Factory"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: str = "INFO"

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "content_factory.db"
    # Pour Postgres (Supabase), définir DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # JWT / Auth (tokens émis par le fournisseur d'identité)
    # -----------------------------
    JWT_SECRET_KEY: str = "CHANGE_ME"     # ⚠️ change en prod
    JWT_ISSUER: str = "content-factory"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TTL_MINUTES: int = 60

    # -----------------------------
    # HeyGen
    # -----------------------------
    HEYGEN_KEY: str = ""
    HEYGEN_API_URL: str = "https://api.heygen.com"
    HEYGEN_REQUEST_TIMEOUT: float = 30.0
    HEYGEN_OUTPUT_RESOLUTION: str = "720p"
    HEYGEN_VOICE_ID: Optional[str] = None
    HEYGEN_TEMPLATE_ID: Optional[str] = None
    HEYGEN_TEMPLATE_SCRIPT_KEY: str = "script"
    HEYGEN_TEMPLATE_AVATAR_KEY: str = "avatar"
    HEYGEN_TEMPLATE_AVATAR_NODE_IDS: str = ""  # liste séparée par des virgules

    # -----------------------------
    # Stockage (heuristique "photo avatar" des lignes historiques)
    # -----------------------------
    STORAGE_PUBLIC_URL: str = "/storage/v1/object/"

    # -----------------------------
    # Orchestration
    # -----------------------------
    DUPLICATE_WINDOW_HOURS: int = 6
    DISPATCH_TIMEOUT_SECONDS: float = 600.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    def model_post_init(self, __context):
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")

    @property
    def template_avatar_node_ids(self) -> Tuple[str, ...]:
        """Parse la liste de node ids (séparés par des virgules)."""
        return tuple(
            node_id.strip()
            for node_id in self.HEYGEN_TEMPLATE_AVATAR_NODE_IDS.split(",")
            if node_id.strip()
        )


@dataclass(frozen=True)
class GenerationSettings:
    """
    Configuration figée de la génération vidéo, construite une fois au démarrage.

    - `default_resolution` : résolution de sortie si l'appelant n'en fournit pas
    - `template_id` : template HeyGen par défaut (None = génération avatar directe)
    - `script_key` / `avatar_key` : noms des variables du template
    - `avatar_node_ids` : nodes du template où injecter le personnage
    - `storage_url_marker` : fragment d'URL du stockage de l'application
    - `duplicate_window` : fenêtre de détection des doublons
    - `dispatch_timeout` : durée max d'une génération en arrière-plan (secondes)
    """
    default_resolution: str = "720p"
    voice_id: Optional[str] = None
    template_id: Optional[str] = None
    script_key: str = "script"
    avatar_key: str = "avatar"
    avatar_node_ids: Tuple[str, ...] = field(default_factory=tuple)
    storage_url_marker: str = "/storage/v1/object/"
    duplicate_window: timedelta = timedelta(hours=6)
    dispatch_timeout: float = 600.0


def build_generation_settings(s: Settings) -> GenerationSettings:
    return GenerationSettings(
        default_resolution=s.HEYGEN_OUTPUT_RESOLUTION.strip() or "720p",
        voice_id=(s.HEYGEN_VOICE_ID or "").strip() or None,
        template_id=(s.HEYGEN_TEMPLATE_ID or "").strip() or None,
        script_key=s.HEYGEN_TEMPLATE_SCRIPT_KEY.strip() or "script",
        avatar_key=s.HEYGEN_TEMPLATE_AVATAR_KEY.strip() or "avatar",
        avatar_node_ids=s.template_avatar_node_ids,
        storage_url_marker=s.STORAGE_PUBLIC_URL,
        duplicate_window=timedelta(hours=s.DUPLICATE_WINDOW_HOURS),
        dispatch_timeout=s.DISPATCH_TIMEOUT_SECONDS,
    )


# Instance globale importable partout
settings = Settings()

# Objet JWT prêt à l'emploi pour les dépendances d'auth
jwt_settings = JWTSettings(
    secret=settings.JWT_SECRET_KEY,
    issuer=settings.JWT_ISSUER,
    algorithm=settings.JWT_ALGORITHM,
    access_ttl=timedelta(minutes=settings.ACCESS_TTL_MINUTES),
)

generation_settings = build_generation_settings(settings)
