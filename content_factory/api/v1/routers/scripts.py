from fastapi import APIRouter, Depends

from content_factory.api.v1.dependencies import get_current_user_id
from content_factory.features.scripts.schemas import (
    ScriptLimitIn,
    ScriptLimitOut,
    VoiceoverPromptIn,
    VoiceoverPromptOut,
)
from content_factory.utils.prompts import build_voiceover_prompt
from content_factory.utils.script_limits import enforce_word_limit, max_characters_for_duration


router = APIRouter(prefix="/scripts", tags=["scripts"])


@router.post("/limits", summary="Tronquer un script au budget de sa durée", response_model=ScriptLimitOut)
def apply_script_limits(
    payload: ScriptLimitIn,
    _user_id: str = Depends(get_current_user_id),
):
    result = enforce_word_limit(payload.script, payload.duration)
    return ScriptLimitOut(
        script=result.text,
        was_trimmed=result.was_trimmed,
        max_words=result.max_words,
        word_count=result.word_count,
        max_characters=max_characters_for_duration(payload.duration),
    )


@router.post("/voiceover-prompt", summary="Construire le prompt voix-off", response_model=VoiceoverPromptOut)
def voiceover_prompt(
    payload: VoiceoverPromptIn,
    _user_id: str = Depends(get_current_user_id),
):
    prompt = build_voiceover_prompt(
        topic=payload.topic,
        style=payload.style.value,
        script=payload.script,
        duration=payload.duration,
    )
    return VoiceoverPromptOut(prompt=prompt)
