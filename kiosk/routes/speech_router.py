from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from kiosk.core.config import Settings
from kiosk.routes.dependencies import get_settings
from kiosk.services.speech_service import synthesize_speech, trigger_broadcast

speech_router = APIRouter(prefix="/api", tags=["Speech"])


class SpeechRequest(BaseModel):
    text: str = ""


@speech_router.post("/tts")
async def text_to_speech(payload: SpeechRequest, settings: Settings = Depends(get_settings)):
    result = await synthesize_speech(payload.text, settings)
    if isinstance(result, dict):
        return result
    return Response(
        content=result,
        media_type="audio/mpeg",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@speech_router.post("/trigger-broadcast")
async def broadcast(settings: Settings = Depends(get_settings)):
    return await trigger_broadcast(settings)
