"""
➡️ But : Client HTTP de l'API HeyGen (génération avatar / template, statut, partage).

Ne contient aucune logique métier : construit les requêtes, décode les réponses,
et transforme toute réponse non-2xx ou erreur réseau en ProviderError
(code HTTP + corps JSON) pour que le service puisse classer l'erreur.

Doc : https://docs.heygen.com/reference/create-an-avatar-video-v2
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from content_factory.core.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

RESOLUTION_ERROR_HINTS = ("output_resolution", "video_config", "resolution")


@dataclass(frozen=True)
class ProviderVideo:
    video_id: str
    status: str
    video_url: Optional[str] = None


@dataclass(frozen=True)
class ProviderVideoStatus:
    status: str
    video_url: Optional[str] = None
    error: Optional[str] = None
    progress: Optional[float] = None


def _unwrap(body: Any) -> Dict[str, Any]:
    """HeyGen répond { code, data: {...}, message } ; certaines routes renvoient directement l'objet."""
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, dict):
            return data
        return body
    return {}


def _error_text(body: Any) -> str:
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
        if body.get("message"):
            return str(body["message"])
    return ""


class HeyGenClient:
    """
    Client async (httpx) pour HeyGen.

    `transport` permet d'injecter un httpx.MockTransport dans les tests.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.heygen.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    # ---------- HTTP ----------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not self.api_key:
            raise ConfigurationError("Missing HEYGEN_KEY environment variable")

        headers = {
            "X-Api-Key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderError(f"HeyGen request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text} if response.text else None

        if response.status_code >= 400:
            raise ProviderError(
                _error_text(body) or f"HeyGen API error ({response.status_code})",
                status_code=response.status_code,
                payload=body,
            )

        # 200 avec { error: {...}, data: null }
        if isinstance(body, dict) and body.get("error") and not body.get("data"):
            raise ProviderError(_error_text(body) or "HeyGen API error", status_code=response.status_code, payload=body)

        return body

    # ---------- Génération ----------

    async def generate_video(self, payload: Dict[str, Any]) -> ProviderVideo:
        """POST /v2/video/generate. Rejoue une fois sans video_config si la résolution est refusée."""
        try:
            body = await self._request("POST", "/v2/video/generate", json=payload)
        except ProviderError as e:
            message = str(e).lower()
            if (
                "video_config" in payload
                and e.status_code == 400
                and any(hint in message for hint in RESOLUTION_ERROR_HINTS)
            ):
                logger.warning("Output resolution not supported, retrying without video_config: %s", e)
                payload = {k: v for k, v in payload.items() if k != "video_config"}
                body = await self._request("POST", "/v2/video/generate", json=payload)
            else:
                raise
        return self._to_provider_video(body)

    async def generate_video_from_template(self, template_id: str, payload: Dict[str, Any]) -> ProviderVideo:
        body = await self._request("POST", f"/v2/template/{template_id}/generate", json=payload)
        return self._to_provider_video(body)

    def _to_provider_video(self, body: Any) -> ProviderVideo:
        data = _unwrap(body)
        video_id = data.get("video_id") or data.get("id") or data.get("videoId")
        if not video_id:
            raise ProviderError(f"Failed to get video_id from HeyGen response: {body}", payload=body)
        return ProviderVideo(
            video_id=str(video_id),
            status=data.get("status") or "pending",
            video_url=data.get("video_url") or data.get("videoUrl") or data.get("url"),
        )

    # ---------- Lecture ----------

    async def get_video_status(self, video_id: str) -> ProviderVideoStatus:
        try:
            body = await self._request("GET", f"/v2/video/{video_id}")
        except ProviderError as e:
            logger.info("v2 status lookup failed (%s), trying v1 for %s", e.status_code, video_id)
            body = await self._request("GET", "/v1/video_status.get", params={"video_id": video_id})

        data = _unwrap(body)
        error = data.get("error") or data.get("error_message")
        if isinstance(error, dict):
            error = error.get("message") or error.get("detail") or str(error)
        progress = data.get("progress", data.get("progress_percentage"))
        return ProviderVideoStatus(
            status=data.get("status") or "pending",
            video_url=data.get("video_url") or data.get("videoUrl") or data.get("url"),
            error=error or None,
            progress=float(progress) if progress is not None else None,
        )

    async def get_template(self, template_id: str) -> Dict[str, Any]:
        """Schéma du template : {"variables": {nom: {"type": ...}}, ...}."""
        return _unwrap(await self._request("GET", f"/v2/template/{template_id}"))

    async def get_avatar_group_member(self, group_id: str) -> Optional[str]:
        """Premier avatar individuel d'un groupe photo (talking_photo_id attendu par HeyGen)."""
        data = _unwrap(await self._request("GET", f"/v2/avatar_group/{group_id}/avatars"))
        members = data.get("avatar_list") or []
        if members and members[0].get("id"):
            return str(members[0]["id"])
        return None

    async def get_share_url(self, video_id: str) -> str:
        body = await self._request("POST", "/v1/video/share", json={"video_id": video_id})
        # v1 renvoie parfois { code, data: "<url>" }
        if isinstance(body, dict) and isinstance(body.get("data"), str) and body["data"]:
            return body["data"]
        data = _unwrap(body)
        share_url = data.get("share_url") or data.get("shareUrl") or data.get("url")
        if not share_url:
            raise ProviderError("HeyGen did not return a share URL", payload=data)
        return str(share_url)
