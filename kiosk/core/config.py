from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Kiosk Checkout Orchestrator"
    RESERVATION_BASE_URL: str = "https://hackatum25.sixt.io/api"
    RESERVATION_API_KEY: Optional[str] = None
    RECOMMENDER_BASE_URL: str = "http://127.0.0.1:9000/api"
    BROADCAST_URL: str = "http://127.0.0.1:9000/trigger-broadcast"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0
    UPSTREAM_RETRY_ATTEMPTS: int = 1
    UPSTREAM_RETRY_BACKOFF_SECONDS: float = 0.25
    ELEVENLABS_API_KEY: Optional[str] = None
    ELEVENLABS_BASE_URL: str = "https://api.elevenlabs.io/v1"
    ELEVENLABS_VOICE_ID: str = "6IwYbsNENZgAB1dtBZDp"
    ELEVENLABS_MODEL_ID: str = "eleven_turbo_v2_5"

    class Config:
        env_file = ".env"
        extra = "ignore"
        # built once at startup and handed to the services, never mutated
        frozen = True
