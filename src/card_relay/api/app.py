"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from card_relay.api.models import (
    IssueCardRequest,
    NotificationRequest,
    RegisterRequest,
    SubscribeRequest,
)
from card_relay.api.streams import router as streams_router
from card_relay.app_logging import configure_logging
from card_relay.containers import AppContainer
from card_relay.domain.errors import RelayError
from card_relay.domain.results import IssuerResult, WebhookEvent
from card_relay.services.connections import PushOutcome


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(streams_router)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/v1/register")
    async def register(body: RegisterRequest, request: Request) -> dict[str, str]:
        """Register a user and return their session token."""
        state_container: AppContainer = request.app.state.container
        token = state_container.user_service.register(body.to_identity())
        return {"token": token}

    @app.post("/v1/issue", status_code=status.HTTP_202_ACCEPTED)
    async def issue(body: IssueCardRequest, request: Request) -> dict[str, str]:
        """Start an asynchronous card issuance."""
        state_container: AppContainer = request.app.state.container
        request_uuid = await state_container.issuance_service.request_card(
            body.user_token, body.card_type
        )
        return {"request_uuid": request_uuid}

    @app.post("/subscribe")
    async def subscribe(body: SubscribeRequest, request: Request) -> dict[str, str]:
        """Register a webhook subscriber."""
        state_container: AppContainer = request.app.state.container
        token = state_container.subscribers.subscribe(body.name, str(body.callback_url))
        return {"suscriptor_token": token}

    @app.post("/response")
    async def issuer_response(
        body: IssuerResult, request: Request
    ) -> dict[str, object]:
        """Receive an asynchronous result from the issuer."""
        state_container: AppContainer = request.app.state.container
        report = await state_container.dispatcher.dispatch(body)
        return report.to_dict()

    @app.post("/v1/webhook")
    async def webhook(body: WebhookEvent, request: Request) -> dict[str, object]:
        """Receive a result forwarded by a separate upstream webhook hop.

        Results already processed through ``/response`` have no pending
        request left, so this route must not be registered as one of the
        relay's own subscriber callbacks.
        """
        state_container: AppContainer = request.app.state.container
        report = await state_container.dispatcher.dispatch(body.data)
        return report.to_dict()

    @app.post("/notify")
    async def notify(body: NotificationRequest, request: Request) -> JSONResponse:
        """Push a result straight to a user's live stream."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.connections.push(
            body.user_token, body.issuer_response
        )
        if outcome is PushOutcome.DELIVERED:
            return JSONResponse(
                {"status": "success", "message": "Notification sent successfully"}
            )
        if outcome is PushOutcome.DROPPED:
            return JSONResponse(
                {"status": "dropped", "message": "A notification is already pending"},
                status_code=status.HTTP_409_CONFLICT,
            )
        return JSONResponse(
            {"status": "error", "message": "User not connected"},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    return app
