"""
Strava webhook endpoints.

- GET  /webhook/strava       - Subscription handshake (hub.challenge echo)
- POST /webhook/strava       - Event delivery: acknowledge, then reconcile
- GET  /webhook/strava/info  - Setup instructions
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_webhook_dispatcher
from app.config import settings
from app.features.strava import WebhookEvent
from app.features.strava.sync import WebhookDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["Webhook"])


@router.get("/strava")
async def verify_subscription(
    mode: str | None = Query(None, alias="hub.mode"),
    token: str | None = Query(None, alias="hub.verify_token"),
    challenge: str | None = Query(None, alias="hub.challenge"),
):
    """Answer Strava's push subscription validation request."""
    logger.info(f"Webhook verification request (mode={mode})")

    expected = settings.strava_webhook_verify_token
    if mode == "subscribe" and expected and token == expected:
        logger.info("Webhook verified")
        return {"hub.challenge": challenge}

    logger.error("Webhook verification failed")
    return JSONResponse(status_code=403, content={"error": "Forbidden"})


@router.post("/strava")
async def receive_event(
    event: WebhookEvent,
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
):
    """
    Receive a Strava event.

    Strava expects a 200 within two seconds. Reconciliation runs as an
    independent task; its outcome never reaches this response.
    """
    logger.info(
        f"Webhook event: {event.aspect_type} {event.object_type} {event.object_id} "
        f"(owner {event.owner_id})"
    )
    dispatcher.submit(event)
    return {"success": True}


@router.get("/strava/info")
async def webhook_info(request: Request):
    """Describe how to register the push subscription."""
    callback_url = str(request.url_for("receive_event"))
    return {
        "message": "Strava Webhook Endpoint",
        "verification_url": callback_url,
        "verify_token": "set" if settings.strava_webhook_verify_token else "not set",
        "instructions": {
            "step1": "Ensure this server is publicly accessible (use ngrok for local dev)",
            "step2": "Add STRAVA_WEBHOOK_VERIFY_TOKEN to your .env file",
            "step3": "Register webhook at: https://www.strava.com/settings/api",
            "step4": "Or use: POST https://www.strava.com/api/v3/push_subscriptions",
            "step5": f"Callback URL should be: {callback_url}",
        },
        "curl_command": (
            "curl -X POST https://www.strava.com/api/v3/push_subscriptions \\\n"
            "  -F client_id=<YOUR_CLIENT_ID> \\\n"
            "  -F client_secret=<YOUR_CLIENT_SECRET> \\\n"
            f"  -F 'callback_url={callback_url}' \\\n"
            "  -F 'verify_token=<YOUR_VERIFY_TOKEN>'"
        ),
    }
