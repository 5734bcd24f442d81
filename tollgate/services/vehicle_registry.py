# tollgate/services/vehicle_registry.py
"""
In-memory registry of toll accounts, loaded once from a CSV file:

    plate,rfid,balance,type
    ABC-123,RF1,100.0,car

Vehicles are keyed by RFID tag, with the plate as a secondary lookup key.
Balance changes go through charge() / top_up(), which hold a per-vehicle
lock for the whole read-check-write.
"""

import csv
import threading
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Optional, Union

from tollgate.errors import DuplicateVehicle, MalformedRecord
from tollgate.services.config_store import VehicleClass
from tollgate.utils.logger import get_logger

logger = get_logger(__name__)

REGISTRY_COLUMNS = ("plate", "rfid", "balance", "type")


@dataclass
class Vehicle:
    plate: str
    rfid_tag: str
    vehicle_class: VehicleClass
    balance: Decimal


@dataclass(frozen=True)
class Charged:
    new_balance: Decimal


@dataclass(frozen=True)
class InsufficientFunds:
    balance: Decimal
    required: Decimal


ChargeResult = Union[Charged, InsufficientFunds]


def parse_registry_row(row: dict) -> Vehicle:
    """Turn one CSV row into a Vehicle. Raises MalformedRecord on missing/bad fields."""
    values = {}
    for column in REGISTRY_COLUMNS:
        value = (row.get(column) or "").strip()
        if not value:
            raise MalformedRecord(f"missing {column}")
        values[column] = value

    try:
        balance = Decimal(values["balance"])
    except InvalidOperation:
        raise MalformedRecord(f"non-numeric balance {values['balance']!r}")
    if not balance.is_finite():
        raise MalformedRecord(f"non-numeric balance {values['balance']!r}")

    return Vehicle(
        plate=values["plate"],
        rfid_tag=values["rfid"],
        vehicle_class=VehicleClass.from_raw(values["type"]),
        balance=balance,
    )


class VehicleRegistry:
    def __init__(self, vehicles=()):
        self._by_rfid: Dict[str, Vehicle] = {}
        self._by_plate: Dict[str, Vehicle] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._index_lock = threading.Lock()
        for vehicle in vehicles:
            self.register(vehicle)

    @classmethod
    def load(cls, path: str, ledger=None) -> "VehicleRegistry":
        """
        Load the registry CSV. Bad rows are skipped; an unreadable file gives an
        empty registry and an entry in the ledger error log (when a ledger is given).
        """
        registry = cls()
        try:
            # utf-8-sig drops the BOM spreadsheet exports put before the header
            with open(path, "r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f)
                for lineno, row in enumerate(reader, start=2):
                    try:
                        registry._insert(parse_registry_row(row), replace=True)
                    except MalformedRecord as e:
                        logger.warning(f"[REGISTRY] {path}:{lineno} skipped — {e}")
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            message = f"Could not open registered vehicles file {path}: {e}"
            logger.error(f"[REGISTRY] {message}")
            if ledger is not None:
                ledger.record_error(message)
            return cls()

        logger.info(f"[REGISTRY] Loaded {len(registry)} vehicles from {path}")
        return registry

    # ── Index ─────────────────────────────────────────────────────────────

    def _insert(self, vehicle: Vehicle, replace: bool = False):
        with self._index_lock:
            by_rfid = self._by_rfid.get(vehicle.rfid_tag)
            by_plate = self._by_plate.get(vehicle.plate)
            if not replace and (by_rfid or by_plate):
                raise DuplicateVehicle(
                    f"RFID {vehicle.rfid_tag} or plate {vehicle.plate} already registered"
                )
            # A plate stays bound to the first tag that claims it
            if by_plate and by_plate.rfid_tag != vehicle.rfid_tag:
                raise MalformedRecord(
                    f"plate {vehicle.plate} already belongs to rfid {by_plate.rfid_tag}"
                )
            # Same tag again: the later row wins
            if by_rfid:
                logger.warning(f"[REGISTRY] Duplicate entry replaces rfid={by_rfid.rfid_tag} plate={by_rfid.plate}")
                self._by_plate.pop(by_rfid.plate, None)

            self._by_rfid[vehicle.rfid_tag] = vehicle
            self._by_plate[vehicle.plate] = vehicle
            self._locks.setdefault(vehicle.rfid_tag, threading.Lock())

    def register(self, vehicle: Vehicle) -> Vehicle:
        """Add a new vehicle. Raises DuplicateVehicle if its RFID tag or plate is taken."""
        self._insert(vehicle)
        logger.info(f"[REGISTRY] Registered rfid={vehicle.rfid_tag} plate={vehicle.plate} "
                    f"class={vehicle.vehicle_class.value}")
        return vehicle

    def lookup(self, identifier: str) -> Optional[Vehicle]:
        """Resolve an RFID tag or a plate. RFID takes precedence."""
        if not identifier:
            return None
        return self._by_rfid.get(identifier) or self._by_plate.get(identifier)

    def vehicles(self) -> List[Vehicle]:
        with self._index_lock:
            return list(self._by_rfid.values())

    def __len__(self):
        return len(self._by_rfid)

    # ── Balance mutation ──────────────────────────────────────────────────

    def charge(self, vehicle: Vehicle, amount: Decimal,
               on_accept: Optional[Callable[[Decimal], object]] = None) -> ChargeResult:
        """
        Atomically deduct `amount` if the balance covers it.

        `on_accept(new_balance)` runs under the vehicle lock before the balance
        changes; if it raises, the balance is left as it was.
        """
        with self._locks[vehicle.rfid_tag]:
            if vehicle.balance < amount:
                return InsufficientFunds(balance=vehicle.balance, required=amount)
            new_balance = vehicle.balance - amount
            if on_accept is not None:
                on_accept(new_balance)
            vehicle.balance = new_balance
            return Charged(new_balance=new_balance)

    def top_up(self, identifier: str, amount: Decimal) -> Optional[Vehicle]:
        """Credit a positive amount. Returns the vehicle, or None if not registered."""
        if not amount.is_finite() or amount <= 0:
            raise ValueError(f"Top-up amount must be positive, got {amount}")
        vehicle = self.lookup(identifier)
        if vehicle is None:
            return None
        with self._locks[vehicle.rfid_tag]:
            vehicle.balance += amount
        logger.info(f"[REGISTRY] Top-up rfid={vehicle.rfid_tag} +{amount} → {vehicle.balance}")
        return vehicle
