import logging
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deckcoach.api import (
    analysis_router,
    cards_router,
    deck_router,
    health_router,
)
from deckcoach.config import settings
from deckcoach.models.failure import FailureResponse, KnownError

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("deckcoach"),
    debug=settings.debug,
)

app.include_router(analysis_router)
app.include_router(cards_router)
app.include_router(deck_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render any classified failure as a FailureResponse body."""
    logger.warning(
        "KNOWN_ERROR",
        extra={"failure_kind": exc.kind.value, "status_code": exc.status_code},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("UNKNOWN_ERROR", extra={"error_type": type(exc).__name__})
    return JSONResponse(
        status_code=500,
        content=FailureResponse.unknown(detail=type(exc).__name__).model_dump(mode="json"),
    )
