"""
FastAPI application exposing the repeated booking generator.
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .. import __version__
from ..adapters.factory import create_store
from ..config import AppConfig, load_config
from ..domain.exceptions import BookingValidationError
from ..domain.models import parse_date
from ..services.repeated_bookings import RepeatedBookingService
from .schemas import (
    MISSING_PARAMETERS,
    ErrorResponse,
    GenerateRepeatedBookingsRequest,
    GenerateRepeatedBookingsResponse,
)

logger = logging.getLogger(__name__)

GENERATE_PATH = "/generate-repeated-bookings"


def get_service(request: Request) -> RepeatedBookingService:
    """FastAPI dependency providing the service; tests override it."""
    state = request.app.state
    # one store per app so the in-memory backend keeps its rows
    if getattr(state, "service", None) is None:
        state.service = RepeatedBookingService(store=create_store(state.config))
    return state.service


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the application; CORS origins come from ``config.server``."""
    config = config or load_config()

    app = FastAPI(title="Repeated Booking Generator", version=__version__)
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_body(request: Request, exc: RequestValidationError):
        logger.info("Rejected request body: %s", exc.errors())
        return _error(MISSING_PARAMETERS, status.HTTP_400_BAD_REQUEST)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.options(GENERATE_PATH)
    async def generate_preflight():
        return Response(status_code=status.HTTP_200_OK)

    @app.post(
        GENERATE_PATH,
        response_model=GenerateRepeatedBookingsResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def generate_repeated_bookings(
        payload: GenerateRepeatedBookingsRequest,
        service: RepeatedBookingService = Depends(get_service),
    ):
        missing = payload.missing_fields()
        if missing:
            logger.info("Missing parameters: %s", ", ".join(missing))
            return _error(MISSING_PARAMETERS, status.HTTP_400_BAD_REQUEST)

        try:
            template = payload.to_template()
            end_date = parse_date(payload.end_date) if payload.end_date else None
            result = await service.expand(
                template=template,
                repeat_type=payload.repeat_type,
                end_date=end_date,
                requester_id=payload.user_id,
            )
        except (ValueError, BookingValidationError) as exc:
            return _error(str(exc), status.HTTP_400_BAD_REQUEST)
        except Exception as exc:
            logger.exception("Repeated booking generation failed")
            return _error(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

        if not result.ok:
            return _error(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)

        return GenerateRepeatedBookingsResponse(
            message="Repeated bookings generated successfully.",
            count=result.generated_count,
        )

    return app
