from typing import Any, Dict, Optional
from pydantic import BaseModel, Field as PydField


class TemplatePreferencesIn(BaseModel):
    heygen_vertical_template_id: Optional[str] = PydField(None, description="Template HeyGen (vide = aucun)")
    heygen_vertical_template_script_key: Optional[str] = PydField(None, examples=["script"])
    heygen_vertical_template_variables: Optional[Dict[str, Any]] = None
    heygen_vertical_template_overrides: Optional[Dict[str, Any]] = PydField(
        None, description="Champs à conserver par node id (motion, moteur...)"
    )


class TemplatePreferencesOut(BaseModel):
    heygen_vertical_template_id: Optional[str]
    heygen_vertical_template_script_key: str
    heygen_vertical_template_variables: Dict[str, Any]
    heygen_vertical_template_overrides: Dict[str, Any]

    model_config = {"from_attributes": True}
