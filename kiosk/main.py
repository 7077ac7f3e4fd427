from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kiosk.core.config import Settings
from kiosk.core.errors import CheckoutError
from kiosk.core.logger import get_logger
from kiosk.core.middleware import log_requests
from kiosk.routes.booking_router import booking_router
from kiosk.routes.kiosk_router import kiosk_router
from kiosk.routes.speech_router import speech_router
from kiosk.services.orchestrator import BookingOrchestrator
from kiosk.services.reservation_client import ReservationClient

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    client = ReservationClient(settings)
    app.state.settings = settings
    app.state.orchestrator = BookingOrchestrator(client, settings)
    logger.info(f"{settings.app_name} started, upstream {settings.RESERVATION_BASE_URL}")

    yield

    logger.info("Shutting down, closing upstream client")
    await client.aclose()


async def handle_checkout_error(request: Request, exc: CheckoutError):
    logger.warning(f"{request.method} {request.url.path} failed with {exc.kind.value}: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


app = FastAPI(title="Kiosk Checkout Orchestrator", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)
app.add_exception_handler(CheckoutError, handle_checkout_error)
app.include_router(kiosk_router)
app.include_router(booking_router)
app.include_router(speech_router)
