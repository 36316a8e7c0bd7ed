from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

import logging
import sys
from typing import Optional

import uvicorn

from .events import EventInterpreter
from .logging_setup import configure_logging
from .models import SessionCreateResponse, WebhookEnvelope
from .notify import NotificationForwarder
from .pages import render_pages
from .processor import StripeGateway, UpstreamError
from .settings import ConfigError, Settings, load_settings
from .signing import WEBHOOK_BODY_LIMIT, SignatureVerificationError, WebhookVerifier
from .validation import SESSION_BODY_LIMIT, CheckoutValidationError, validate_checkout_request

logger = logging.getLogger(__name__)

router = APIRouter()


def capped_body(limit: int):
    """Dependency reading at most `limit` bytes of the request body."""

    async def read(request: Request) -> bytes:
        body = bytearray()
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > limit:
                raise HTTPException(status_code=400, detail="Malformed request")
        return bytes(body)

    return read


@router.get("/health")
def health():
    return {"ok": True}


@router.post("/session", response_model=SessionCreateResponse)
def create_session(request: Request, body: bytes = Depends(capped_body(SESSION_BODY_LIMIT))):
    state = request.app.state
    try:
        req = validate_checkout_request(body)
    except CheckoutValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    try:
        handle = state.gateway.create_session(req, state.settings.host_domain)
    except UpstreamError:
        raise HTTPException(status_code=502, detail="Failed creating session")

    client = request.client.host if request.client else "unknown"
    logger.info("Created new checkout session for %s", client)
    return SessionCreateResponse(SessionID=handle.session_id)


@router.post("/webhook")
def webhook(
    request: Request,
    body: bytes = Depends(capped_body(WEBHOOK_BODY_LIMIT)),
    signature: Optional[str] = Header(None, alias="Stripe-Signature"),
):
    """
    Always 200 once the signature checks out: Stripe only needs an ack, and
    lookup or sink failures are logged, not reported back.
    """
    state = request.app.state
    try:
        event = state.verifier.verify(WebhookEnvelope(raw_body=body, signature_header=signature))
    except SignatureVerificationError:
        logger.warning("Rejected webhook request")
        raise HTTPException(status_code=400, detail="Malformed request")

    checkout = state.interpreter.interpret(event)
    if checkout is not None:
        state.forwarder.forward(checkout)
    return Response(status_code=200)


async def render_http_error(request: Request, exc: StarletteHTTPException):
    message = "Method not allowed" if exc.status_code == 405 else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


def _static_page(content: str):
    def serve():
        return HTMLResponse(content)

    return serve


def create_app(
    settings: Settings,
    gateway: Optional[StripeGateway] = None,
    forwarder: Optional[NotificationForwarder] = None,
    verifier: Optional[WebhookVerifier] = None,
) -> FastAPI:
    app = FastAPI(title="Checkout Relay", version="0.1.0")
    app.add_exception_handler(StarletteHTTPException, render_http_error)

    gateway = gateway or StripeGateway(settings.stripe_secret_key, settings.processor_timeout_seconds)
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.verifier = verifier or WebhookVerifier(
        settings.stripe_webhook_secret, settings.webhook_tolerance_seconds
    )
    app.state.interpreter = EventInterpreter(gateway)
    app.state.forwarder = forwarder or NotificationForwarder(
        settings.sink_webhook_url, settings.sink_timeout_seconds
    )

    app.include_router(router)
    for path, page in render_pages(settings).items():
        app.add_api_route(
            path,
            _static_page(page),
            methods=["GET"],
            response_class=HTMLResponse,
            include_in_schema=False,
        )
    return app


def main():
    configure_logging("checkout_relay")
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.critical("Failed loading config: %s", e)
        sys.exit(1)

    app = create_app(settings)
    logger.info("Listening on %s", settings.host_domain)
    uvicorn.run(app, host="localhost", port=settings.host_port, log_config=None)


if __name__ == "__main__":
    main()
