# tollgate/services/toll_event_service.py
"""
Lane event handling: runs a resolved identity through the toll processor
and raises a lane alert for rejected vehicles (barrier stays down).
"""

from tollgate.services.identity_resolver import VehicleIdentity
from tollgate.services.toll_processor import TollResult
from tollgate.utils.logger import get_logger

logger = get_logger(__name__)


async def raise_lane_alert(lane_id, result: TollResult):
    """Signal lane control that the barrier stays closed. Extend here: PLC, signage, SMS."""
    logger.warning(f"[LANE][{(lane_id or 'default').upper()}] Barrier closed — "
                   f"{result.vehicle_id}: {result.reason}")


async def handle_identity_event(identity: VehicleIdentity, system) -> TollResult:
    logger.info(f"[LANE] lane={identity.lane_id} id={identity.identifier} "
                f"method={identity.payment_method.value} image={identity.image_ref}")

    result = system.processor.process(identity.identifier, identity.payment_method)

    if not result.accepted:
        await raise_lane_alert(identity.lane_id, result)
    return result
