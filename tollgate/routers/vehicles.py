# tollgate/routers/vehicles.py
"""Registered vehicles: list, register, look up, top up."""

from fastapi import APIRouter, Depends, HTTPException
from tollgate.dependencies import get_toll_system
from tollgate.errors import DuplicateVehicle
from tollgate.schemas.vehicle import VehicleCreate, VehicleOut, TopUpIn
from tollgate.services.config_store import VehicleClass
from tollgate.services.vehicle_registry import Vehicle

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleOut], summary="List registered vehicles")
def list_vehicles(vehicle_class: str = None, system=Depends(get_toll_system)):
    vehicles = system.registry.vehicles()
    if vehicle_class:
        vehicles = [v for v in vehicles if v.vehicle_class.value == vehicle_class]
    return [VehicleOut.from_vehicle(v) for v in vehicles]


@router.post("/vehicles", response_model=VehicleOut, summary="Register a new vehicle")
def register_vehicle(body: VehicleCreate, system=Depends(get_toll_system)):
    vehicle = Vehicle(
        plate=body.plate.strip(),
        rfid_tag=body.rfid.strip(),
        vehicle_class=VehicleClass.from_raw(body.type),
        balance=body.balance,
    )
    try:
        system.registry.register(vehicle)
    except DuplicateVehicle as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VehicleOut.from_vehicle(vehicle)


@router.get("/vehicles/lookup/{identifier}", summary="Look up an RFID tag or plate")
def lookup_vehicle(identifier: str, system=Depends(get_toll_system)):
    vehicle = system.registry.lookup(identifier)
    if not vehicle:
        return {"identifier": identifier, "status": "unknown", "registered": False}
    return {"identifier": identifier, "status": "known", "registered": True,
            "vehicle": VehicleOut.from_vehicle(vehicle)}


@router.post("/vehicles/{identifier}/top-up", response_model=VehicleOut, summary="Credit a vehicle balance")
def top_up(identifier: str, body: TopUpIn, system=Depends(get_toll_system)):
    vehicle = system.registry.top_up(identifier, body.amount)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return VehicleOut.from_vehicle(vehicle)
