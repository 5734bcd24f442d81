# tollgate/routers/events.py
"""
Lane identification webhook.
POST /events/identity: receives RFID reads and ANPR results from lane devices.
"""

from fastapi import APIRouter, Request, Depends
from tollgate.dependencies import get_toll_system
from tollgate.schemas.transaction import TollResultOut
from tollgate.services.identity_resolver import resolve_identity
from tollgate.services.toll_event_service import handle_identity_event
from tollgate.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/events/identity", summary="Lane webhook, RFID read or ANPR result")
async def receive_identity_event(request: Request, system=Depends(get_toll_system)):
    """
    Single entry point for lane identification events.
    Always returns HTTP 200. Lane devices retry on non-200 and a retry
    would charge the vehicle twice.
    """
    try:
        raw_body = await request.body()
        if not raw_body:
            return {"status": "ignored", "reason": "empty body"}

        content_type = request.headers.get("content-type", "")
        logger.info(f"Identity event from {request.client.host if request.client else '?'} | "
                    f"{len(raw_body)} bytes | {content_type}")

        identity = resolve_identity(raw_body, content_type)
        if identity is None:
            return {"status": "ignored", "reason": "no vehicle identifier"}

        result = await handle_identity_event(identity, system)
        return {"status": "ok", "result": TollResultOut.from_result(result)}

    except Exception as e:
        logger.error(f"Identity event processing error: {e}", exc_info=True)
        return {"status": "error", "detail": str(e)}  # Still return 200
