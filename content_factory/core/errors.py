"""
➡️ But : Exceptions métier partagées par les services.

Les services lèvent ces exceptions, les routers les traduisent en HTTPException.
Les erreurs survenues pendant la génération en arrière-plan ne remontent jamais
à un appelant : elles sont écrites sur la vidéo (status/error_message).
"""

from enum import Enum
from typing import Any, Optional


class ConfigurationError(Exception):
    """Rien de configuré pour cette opération (avatar, template, clé API)."""


class NotFoundError(LookupError):
    """Ressource absente ou non possédée par l'appelant."""


class ValidationError(Exception):
    """Transition interdite (ex: retry d'une vidéo non échouée)."""


class ErrorKind(str, Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    AVATAR_NOT_FOUND = "avatar_not_found"
    VOICE_NOT_FOUND = "voice_not_found"
    GENERIC = "generic"


class ProviderError(Exception):
    """
    Échec d'un appel fournisseur (HeyGen).

    - `status_code` : code HTTP de la réponse (None si erreur réseau)
    - `payload` : corps JSON décodé de la réponse (ou None)
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
