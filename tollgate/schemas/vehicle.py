# tollgate/schemas/vehicle.py
from pydantic import BaseModel, Field
from decimal import Decimal


class VehicleCreate(BaseModel):
    plate: str = Field(min_length=1)
    rfid: str = Field(min_length=1)
    balance: Decimal = Decimal("0")
    type: str                # car | truck | bus (anything else bills at the fallback rate)


class VehicleOut(BaseModel):
    plate: str
    rfid_tag: str
    vehicle_class: str
    balance: Decimal

    @classmethod
    def from_vehicle(cls, vehicle) -> "VehicleOut":
        return cls(plate=vehicle.plate, rfid_tag=vehicle.rfid_tag,
                   vehicle_class=vehicle.vehicle_class.value, balance=vehicle.balance)


class TopUpIn(BaseModel):
    amount: Decimal = Field(gt=0)
