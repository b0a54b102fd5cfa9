"""Inbound HTTP endpoints of an interface."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from simple_ipc.application.services import Dispatcher
from simple_ipc.domain.exceptions import (
    EnvelopeDecodeError,
    HandlerError,
    PayloadDecodeError,
    SimpleIPCError,
)
from simple_ipc.domain.ports import PortPair
from simple_ipc.infrastructure.logging import get_logger

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Liveness information of a listening interface."""

    port: int = Field(..., description="Port this interface listens on")
    partner_port: int = Field(..., description="Port this interface posts to")
    message_types: list[str] = Field(
        default_factory=list, description="Message types with a registered handler"
    )
    pending_handlers: int = Field(default=0, description="Async handlers still running")


def _error_detail(error: SimpleIPCError) -> dict[str, object]:
    return {"error_code": error.error_code, "message": error.message, "details": error.details}


def create_listener_router(
    dispatcher: Dispatcher,
    ports: PortPair,
    message_types: Callable[[], list[str]],
    path: str = "/",
) -> APIRouter:
    """Create the router that accepts message envelopes.

    Args:
        dispatcher: Dispatcher invoked for every envelope
        ports: Port pair of the owning interface
        message_types: Callable listing currently registered discriminators
        path: Path that accepts envelopes

    Returns:
        Configured FastAPI router
    """
    router = APIRouter(
        tags=["IPC"],
        responses={
            400: {"description": "Malformed envelope"},
            500: {"description": "Payload could not be decoded or handler failed"},
        },
    )

    @router.post(  # type: ignore[misc]
        path,
        status_code=status.HTTP_202_ACCEPTED,
        response_class=Response,
        summary="Receive a message envelope",
    )
    async def receive_envelope(request: Request) -> Response:
        """Dispatch one envelope; unhandled types are acknowledged and dropped."""
        body = await request.body()

        try:
            result = dispatcher.dispatch(body)
        except EnvelopeDecodeError as e:
            logger.warning(
                "Rejected malformed envelope",
                extra={"reason": e.details.get("reason"), "body_size": len(body)},
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=_error_detail(e),
            ) from e
        except PayloadDecodeError as e:
            logger.error(
                "Payload does not match registered message type",
                extra={"message_type": e.details.get("message_type"), "reason": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=_error_detail(e),
            ) from e
        except HandlerError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=_error_detail(e),
            ) from e

        logger.debug(
            "Envelope dispatched",
            extra={
                "port": ports.port,
                "message_type": result.message_type,
                "outcome": result.outcome.value,
            },
        )
        return Response(status_code=status.HTTP_202_ACCEPTED)

    @router.get(  # type: ignore[misc]
        "/health",
        response_model=HealthResponse,
        summary="Interface health",
    )
    async def health() -> HealthResponse:
        """Report the port pair and registered message types."""
        return HealthResponse(
            port=ports.port,
            partner_port=ports.partner_port,
            message_types=message_types(),
            pending_handlers=dispatcher.pending_count,
        )

    return router


def create_listener_app(
    dispatcher: Dispatcher,
    ports: PortPair,
    message_types: Callable[[], list[str]],
    path: str = "/",
    drain_timeout: float = 5.0,
) -> FastAPI:
    """Create the ASGI application served by an interface's listener.

    Scheduled async handlers are drained when the application shuts down.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await dispatcher.drain(drain_timeout)

    app = FastAPI(
        title=f"simple-ipc listener :{ports.port}",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.include_router(create_listener_router(dispatcher, ports, message_types, path))
    return app
