# tollgate/services/identity_resolver.py
"""
Turns an identification event from a lane device into a VehicleIdentity.

Accepted JSON payloads:
  RFID reader:       {"rfid": "RF1", "lane_id": "L1"}
  ANPR result:       {"plate": "ABC-123", "lane_id": "L1", "image_ref": "snap_0001.jpg"}
  Camera ANPR event: {"eventType": "AccessControllerEvent",
                      "AccessControllerEvent": {"cardNo": "ABC-123"}}

Plate recognition itself happens upstream; only its text result arrives here.
`image_ref` is carried through for the audit trail and never opened.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from tollgate.services.ledger import PaymentMethod
from tollgate.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class VehicleIdentity:
    identifier: str
    payment_method: PaymentMethod
    lane_id: Optional[str] = None
    image_ref: Optional[str] = None


def safe_parse_json(raw_body: bytes) -> Optional[dict]:
    """Parse a JSON object body. Returns None on error or if the body is not an object."""
    try:
        data = json.loads(raw_body.decode("utf-8", errors="replace"))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_identity(raw_body: bytes, content_type: str = "") -> Optional[VehicleIdentity]:
    """
    Extract the vehicle identifier and its provenance from an event body.
    Returns None when the body carries no usable identifier.
    """
    if content_type and "json" not in content_type.lower():
        logger.warning(f"[IDENTITY] Unsupported content-type {content_type!r}")
        return None

    data = safe_parse_json(raw_body)
    if data is None:
        logger.warning(f"[IDENTITY] Body is not a JSON object ({len(raw_body)} bytes)")
        return None

    lane_id = _text(data.get("lane_id"))
    image_ref = _text(data.get("image_ref"))

    rfid = _text(data.get("rfid"))
    if rfid:
        return VehicleIdentity(rfid, PaymentMethod.RFID, lane_id, image_ref)

    plate = _text(data.get("plate"))
    if not plate and data.get("eventType") == "AccessControllerEvent":
        ace = data.get("AccessControllerEvent")
        if isinstance(ace, dict):
            plate = _text(ace.get("cardNo"))
            lane_id = lane_id or _text(ace.get("deviceName"))
    if plate:
        return VehicleIdentity(plate, PaymentMethod.ANPR, lane_id, image_ref)

    logger.warning(f"[IDENTITY] No rfid/plate in event: keys={sorted(data.keys())}")
    return None
