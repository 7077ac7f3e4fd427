import asyncio
from typing import Any, Dict, Union

import aiohttp

from kiosk.core.config import Settings
from kiosk.core.errors import InvalidArgument, MalformedResponse, UpstreamError, UpstreamUnavailable
from kiosk.core.logger import get_logger

logger = get_logger("speech_service")

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
}


async def synthesize_speech(text: str, settings: Settings) -> Union[bytes, Dict[str, Any]]:
    """
    Pass ``text`` through to ElevenLabs and return the MP3 bytes.
    Without an API key the kiosk falls back to the browser's own speech
    synthesis, signalled by ``{"useBrowserTTS": True}``.
    """
    if not text or not text.strip():
        raise InvalidArgument("Text is required")

    if not settings.ELEVENLABS_API_KEY:
        return {"useBrowserTTS": True}

    url = f"{settings.ELEVENLABS_BASE_URL.rstrip('/')}/text-to-speech/{settings.ELEVENLABS_VOICE_ID}"
    payload = {"text": text, "model_id": settings.ELEVENLABS_MODEL_ID, "voice_settings": VOICE_SETTINGS}
    headers = {
        "Accept": "audio/mpeg",
        "Content-Type": "application/json",
        "xi-api-key": settings.ELEVENLABS_API_KEY,
    }
    timeout = aiohttp.ClientTimeout(total=settings.UPSTREAM_TIMEOUT_SECONDS)

    logger.info(f"Requesting speech for {len(text)} characters")
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, json=payload, headers=headers) as res:
                if res.status >= 300:
                    body = await res.text()
                    logger.error(f"ElevenLabs error {res.status}: {body}")
                    raise UpstreamError(res.status, body, f"ElevenLabs API error: {body}")
                return await res.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise UpstreamUnavailable(f"Speech service unreachable: {e}") from e


async def trigger_broadcast(settings: Settings) -> Dict[str, Any]:
    timeout = aiohttp.ClientTimeout(total=settings.UPSTREAM_TIMEOUT_SECONDS)
    logger.info(f"Triggering broadcast at {settings.BROADCAST_URL}")
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(settings.BROADCAST_URL, json={}) as res:
                text = await res.text()
                if res.status >= 300:
                    logger.error(f"Broadcast backend error {res.status}: {text}")
                    raise UpstreamError(res.status, text)
                try:
                    return await res.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponse("Broadcast backend returned invalid JSON") from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise UpstreamUnavailable(f"Broadcast backend unreachable: {e}") from e
