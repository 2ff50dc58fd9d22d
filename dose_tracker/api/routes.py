"""HTTP routes for the dose tracker.

GET/POST /api/dose           read the schedule / log a dose
GET /api/cron/remind         run one reminder check (bearer-protected)
POST /api/telegram/webhook   feed a Telegram update to the bot
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from dose_tracker.api.schemas import DoseLogRequest
from dose_tracker.services.dose_service import DoseValidationError
from dose_tracker.services.schedule import format_time

router = APIRouter(prefix="/api")


@router.get("/dose")
async def get_dose(request: Request):
    """Return the last dose, the next two due doses and today's progress."""
    dose_service = request.app.state.dose_service
    try:
        status = await dose_service.get_status()
        return status.to_dict()
    except Exception as e:
        logger.opt(exception=True).error(f"GET /api/dose error: {e}")
        return JSONResponse({"error": "Failed to fetch dose data"}, status_code=500)


async def _read_dose_request(request: Request) -> DoseLogRequest:
    """Parse the optional body; a missing or non-JSON body means "now"."""
    try:
        body = await request.json()
    except ValueError:
        return DoseLogRequest()
    if not isinstance(body, dict):
        return DoseLogRequest()
    return DoseLogRequest.model_validate(body)


@router.post("/dose")
async def post_dose(request: Request):
    """Log a dose, optionally backdated by up to 4 hours."""
    dose_service = request.app.state.dose_service
    notification_manager = request.app.state.notification_manager

    try:
        payload = await _read_dose_request(request)
    except ValidationError as e:
        logger.warning(f"Rejected dose payload: {e}")
        return JSONResponse({"error": "Invalid timestamp"}, status_code=400)

    # A zero timestamp means "now", like a missing one
    timestamp = payload.timestamp or None

    try:
        logged = await dose_service.log_dose(timestamp)
    except DoseValidationError as e:
        logger.warning(f"Rejected dose {timestamp}: {e}")
        return JSONResponse({"error": str(e)}, status_code=400)
    except Exception as e:
        logger.opt(exception=True).error(f"POST /api/dose error: {e}")
        return JSONResponse({"error": "Failed to log dose"}, status_code=500)

    try:
        chat_id = await dose_service.dose_log.get_telegram_chat_id()
        if chat_id:
            await notification_manager.send_dose_confirmation(
                chat_id, format_time(logged.next_dose)
            )
    except Exception as e:
        logger.opt(exception=True).error(f"Failed to confirm dose via Telegram: {e}")

    return logged.to_dict()


@router.get("/cron/remind")
async def cron_remind(request: Request):
    """Run one reminder check; meant for an external cron trigger."""
    cron_secret = request.app.state.cron_secret
    auth_header = request.headers.get("authorization")
    if not cron_secret or auth_header != f"Bearer {cron_secret}":
        logger.warning("Unauthorized cron request")
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    try:
        result = await request.app.state.reminder_scheduler.check_and_send_reminder()
        return result.to_dict()
    except Exception as e:
        logger.opt(exception=True).error(f"Cron reminder error: {e}")
        return JSONResponse({"error": "Cron job failed"}, status_code=500)


@router.post("/telegram/webhook")
async def telegram_webhook(request: Request):
    """Dispatch a Telegram update.

    Always answers ``{"ok": true}`` so Telegram does not redeliver the
    update, even when the payload is malformed or handling fails.
    """
    dispatcher = request.app.state.dispatcher
    bot = request.app.state.bot

    try:
        update = await request.json()
        message = update.get("message") or {}
        if not message.get("text"):
            return {"ok": True}

        if dispatcher is None or bot is None:
            logger.warning("Webhook update received but the bot is not configured")
            return {"ok": True}

        await dispatcher.feed_raw_update(bot, update)
    except Exception as e:
        logger.opt(exception=True).error(f"Telegram webhook error: {e}")

    return {"ok": True}
