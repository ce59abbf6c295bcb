"""
Classement des erreurs fournisseur et messages lisibles.

Deux listes de règles ordonnées (la première qui matche gagne) :
- ERROR_KIND_RULES : ProviderError -> ErrorKind
- describe_provider_error : champ message explicite > défaut par bande de status > message générique
"""

from typing import Any, Callable, List, Optional, Tuple

from content_factory.core.errors import ErrorKind, ProviderError
from content_factory.db.models.videos import VideoStatus

VOICE_NOT_FOUND_CODES = {400116, "400116", "voice_not_found"}

AVATAR_NOT_FOUND_CODES = {
    "avatar_not_found",
    "invalid_avatar",
    "avatar_unavailable",
    "talking_photo_not_found",
}

AVATAR_NOT_FOUND_HINTS = (
    "avatar not found",
    "avatar_not_found",
    "talking photo not found",
    "talking_photo not found",
    "photo not found",
    "avatar does not exist",
    "avatar is not available",
)

STATUS_BAND_MESSAGES = {
    "auth": "HeyGen API authentication failed. Please check your HEYGEN_KEY configuration.",
    "rate_limit": "HeyGen API rate limit exceeded. Please try again later.",
    "server": "HeyGen API server error. Please try again later.",
}


# ---------- Lecture du corps d'erreur ----------

def _error_code(payload: Any) -> Any:
    if not isinstance(payload, dict):
        return None
    err = payload.get("error")
    if isinstance(err, dict) and err.get("code") is not None:
        return err["code"]
    code = payload.get("code")
    if code is not None and code != 100:  # 100 = succès
        return code
    return payload.get("error_code")


def _explicit_message(payload: Any) -> Optional[str]:
    """Champs message connus, dans l'ordre : error.message, message, error (str), msg."""
    if not isinstance(payload, dict):
        return None
    err = payload.get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if payload.get("message"):
        return str(payload["message"])
    if isinstance(err, str) and err:
        return err
    if payload.get("msg"):
        return str(payload["msg"])
    return None


def _haystack(err: ProviderError) -> str:
    return f"{err} {_explicit_message(err.payload) or ''}".lower()


# ---------- Classement ----------

def _is_voice_not_found(err: ProviderError) -> bool:
    return _error_code(err.payload) in VOICE_NOT_FOUND_CODES or "voice not found" in _haystack(err)


def is_avatar_not_found(err: ProviderError) -> bool:
    code = _error_code(err.payload)
    if isinstance(code, str) and code.lower() in AVATAR_NOT_FOUND_CODES:
        return True
    text = _haystack(err)
    if any(hint in text for hint in AVATAR_NOT_FOUND_HINTS):
        return True
    # 404 sur /video/generate : l'avatar n'existe pas (ou plus) côté HeyGen
    return err.status_code == 404


ERROR_KIND_RULES: List[Tuple[Callable[[ProviderError], bool], ErrorKind]] = [
    (_is_voice_not_found, ErrorKind.VOICE_NOT_FOUND),
    (is_avatar_not_found, ErrorKind.AVATAR_NOT_FOUND),
    (lambda e: e.status_code == 401, ErrorKind.AUTH),
    (lambda e: e.status_code == 429, ErrorKind.RATE_LIMIT),
    (lambda e: e.status_code is not None and e.status_code >= 500, ErrorKind.SERVER),
]


def classify_provider_error(err: ProviderError) -> ErrorKind:
    for matches, kind in ERROR_KIND_RULES:
        if matches(err):
            return kind
    return ErrorKind.GENERIC


def _status_band_message(err: ProviderError) -> Optional[str]:
    if err.status_code == 401:
        return STATUS_BAND_MESSAGES["auth"]
    if err.status_code == 429:
        return STATUS_BAND_MESSAGES["rate_limit"]
    if err.status_code is not None and err.status_code >= 500:
        return STATUS_BAND_MESSAGES["server"]
    return None


def _voice_message(err: ProviderError) -> Optional[str]:
    if _is_voice_not_found(err):
        return "Voice not found. Please use a valid HEYGEN_VOICE_ID from List All Voices (V2)."
    return None


MESSAGE_RULES: List[Callable[[ProviderError], Optional[str]]] = [
    _voice_message,
    lambda e: _explicit_message(e.payload),
    _status_band_message,
]


def describe_provider_error(err: Exception) -> str:
    """Message humain stocké dans video.error_message."""
    if isinstance(err, ProviderError):
        for rule in MESSAGE_RULES:
            message = rule(err)
            if message:
                return message
    return str(err) or "Failed to generate video"


# ---------- Statuts ----------

def map_provider_status(status: Optional[str]) -> str:
    """completed -> completed, failed -> failed, tout le reste -> generating."""
    if status == "completed":
        return VideoStatus.COMPLETED.value
    if status == "failed":
        return VideoStatus.FAILED.value
    return VideoStatus.GENERATING.value
