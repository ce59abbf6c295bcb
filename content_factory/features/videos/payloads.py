"""
Construction des corps de requête HeyGen (v2 avatar / v2 template).

Fonctions pures : mêmes entrées -> même dict, aucune I/O.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

VERTICAL_ASPECT_RATIO = "9:16"
VERTICAL_RESOLUTION = "720p"
VERTICAL_DIMENSION = {"width": 720, "height": 1280}

AVATAR_STYLE = "normal"


@dataclass(frozen=True)
class OutputFormat:
    resolution: Optional[str]
    aspect_ratio: Optional[str]
    dimension: Optional[Dict[str, int]]
    force_vertical: bool = False


def resolve_output_format(
    *,
    aspect_ratio: Optional[str],
    output_resolution: Optional[str],
    dimension: Optional[Mapping[str, int]] = None,
    default_resolution: Optional[str] = None,
) -> OutputFormat:
    """
    9:16 impose la résolution et les dimensions verticales, quelle que soit la
    résolution demandée. Sinon les valeurs de l'appelant passent telles quelles.
    """
    if aspect_ratio == VERTICAL_ASPECT_RATIO:
        return OutputFormat(
            resolution=VERTICAL_RESOLUTION,
            aspect_ratio=VERTICAL_ASPECT_RATIO,
            dimension=dict(VERTICAL_DIMENSION),
            force_vertical=True,
        )
    resolution = (output_resolution or "").strip() or default_resolution
    return OutputFormat(
        resolution=resolution,
        aspect_ratio=aspect_ratio,
        dimension=dict(dimension) if dimension else None,
    )


def spoken_text(topic: str, script: Optional[str]) -> str:
    return script if script and script.strip() else topic


def build_character(avatar_id: str, is_photo_avatar: bool) -> Dict[str, Any]:
    """Photo avatar -> talking_photo_id ; avatar standard -> avatar_id."""
    if is_photo_avatar:
        return {"type": "talking_photo", "talking_photo_id": avatar_id}
    return {"type": "avatar", "avatar_id": avatar_id, "avatar_style": AVATAR_STYLE}


def build_avatar_payload(
    *,
    topic: str,
    script: Optional[str],
    avatar_id: str,
    is_photo_avatar: bool,
    output: OutputFormat,
    voice_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Corps de POST /v2/video/generate."""
    text = spoken_text(topic, script)

    # voice.text.* (schéma actuel) + input_text/voice_id (schéma historique)
    voice: Dict[str, Any] = {"type": "text", "input_text": text, "text": {"text": text}}
    if voice_id:
        voice["voice_id"] = voice_id
        voice["text"]["voice_id"] = voice_id

    payload: Dict[str, Any] = {
        "video_inputs": [
            {
                "character": build_character(avatar_id, is_photo_avatar),
                "voice": voice,
            }
        ],
    }

    video_config: Dict[str, Any] = {}
    if output.resolution:
        video_config["output_resolution"] = output.resolution
    if output.aspect_ratio:
        video_config["aspect_ratio"] = output.aspect_ratio
    if video_config:
        payload["video_config"] = video_config

    if output.dimension:
        payload["dimension"] = dict(output.dimension)
    if output.force_vertical:
        payload["force_vertical"] = True
    return payload


# ---------- Templates ----------

def find_character_variable(template: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Nom de la première variable de type "character" du template, ou None si schéma inconnu."""
    if not template:
        return None
    variables = template.get("variables")
    if isinstance(variables, Mapping):
        for name, var in variables.items():
            if isinstance(var, Mapping) and var.get("type") == "character":
                return str(var.get("name") or name)
    elif isinstance(variables, list):
        for var in variables:
            if isinstance(var, Mapping) and var.get("type") == "character" and var.get("name"):
                return str(var["name"])
    return None


def build_character_variable(name: str, avatar_id: str, is_photo_avatar: bool) -> Dict[str, Any]:
    return {
        "name": name,
        "type": "character",
        "properties": {
            "character_id": avatar_id,
            "type": "talking_photo" if is_photo_avatar else "avatar",
        },
    }


def build_nodes_override(
    *,
    node_ids: Iterable[str],
    avatar_id: str,
    is_photo_avatar: bool,
    existing: Optional[Mapping[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """
    Injection du personnage dans les nodes du template quand le schéma est inconnu.
    Les champs déjà présents sur un node (motion, moteur de génération...) sont
    conservés ; seule la référence au personnage est écrasée.
    """
    existing = existing or {}
    ordered_ids = list(dict.fromkeys([*node_ids, *existing.keys()]))
    overrides = []
    for node_id in ordered_ids:
        base = existing.get(node_id)
        node: Dict[str, Any] = copy.deepcopy(dict(base)) if isinstance(base, Mapping) else {}
        node["id"] = node_id
        node["character"] = build_character(avatar_id, is_photo_avatar)
        overrides.append(node)
    return overrides


def build_template_payload(
    *,
    topic: str,
    script: Optional[str],
    avatar_id: str,
    is_photo_avatar: bool,
    output: OutputFormat,
    script_key: str = "script",
    template: Optional[Mapping[str, Any]] = None,
    avatar_key: Optional[str] = None,
    base_variables: Optional[Mapping[str, Any]] = None,
    node_ids: Iterable[str] = (),
    node_overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Corps de POST /v2/template/{id}/generate."""
    variables: Dict[str, Any] = copy.deepcopy(dict(base_variables or {}))
    variables[script_key] = {
        "name": script_key,
        "type": "text",
        "properties": {"content": spoken_text(topic, script)},
    }

    payload: Dict[str, Any] = {
        "caption": False,
        "title": topic[:100],
        "variables": variables,
    }

    character_var = find_character_variable(template)
    if character_var:
        variables[character_var] = build_character_variable(character_var, avatar_id, is_photo_avatar)
    else:
        nodes = build_nodes_override(
            node_ids=node_ids,
            avatar_id=avatar_id,
            is_photo_avatar=is_photo_avatar,
            existing=node_overrides,
        )
        if nodes:
            payload["nodes_override"] = nodes
        elif avatar_key:
            # dernier recours : variable character sous le nom configuré
            variables[avatar_key] = build_character_variable(avatar_key, avatar_id, is_photo_avatar)

    if output.dimension:
        payload["dimension"] = dict(output.dimension)
    if output.force_vertical:
        payload["force_vertical"] = True
    return payload
