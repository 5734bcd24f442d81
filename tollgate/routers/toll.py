# tollgate/routers/toll.py
"""Direct toll charges for lane controllers that resolve identity themselves."""

from fastapi import APIRouter, Depends
from tollgate.dependencies import get_toll_system
from tollgate.schemas.transaction import TollResultOut

router = APIRouter()


@router.post("/toll/rfid/{tag}", response_model=TollResultOut, summary="Charge by RFID tag")
def charge_rfid(tag: str, system=Depends(get_toll_system)):
    return TollResultOut.from_result(system.processor.process_rfid(tag))


@router.post("/toll/anpr/{plate}", response_model=TollResultOut, summary="Charge by recognised plate")
def charge_plate(plate: str, system=Depends(get_toll_system)):
    """Plate text comes from an upstream ANPR step; billed as anpr-billing."""
    return TollResultOut.from_result(system.processor.process_plate(plate))
