# tollgate/services/toll_processor.py
"""
Toll transaction processor.

One call = one toll attempt, run to completion:
  identifier → registry lookup → rate by vehicle class → charge → ledger

Every attempt leaves exactly one ledger record:
  - accepted                     → TransactionRecord (written before the balance changes)
  - rejected-unregistered        → ErrorRecord, nothing mutated
  - rejected-insufficient-funds  → ErrorRecord, balance unchanged

Rejections are returned as TollResult, never raised. Only a ledger
write failure (PersistenceUnavailable) propagates to the caller.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from tollgate.services.config_store import TollConfig
from tollgate.services.ledger import Ledger, PaymentMethod
from tollgate.services.vehicle_registry import Charged, VehicleRegistry
from tollgate.utils.logger import get_logger

logger = get_logger(__name__)

REASON_UNREGISTERED = "unregistered vehicle"
REASON_INSUFFICIENT = "insufficient balance"


class TollOutcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED_UNREGISTERED = "rejected-unregistered"
    REJECTED_INSUFFICIENT_FUNDS = "rejected-insufficient-funds"


@dataclass(frozen=True)
class TollResult:
    outcome: TollOutcome
    vehicle_id: str
    payment_method: PaymentMethod
    amount: Optional[Decimal] = None      # charged (accepted) or required (insufficient)
    balance: Optional[Decimal] = None     # balance after the attempt
    reason: Optional[str] = None
    fallback_rate_applied: bool = False

    @property
    def accepted(self) -> bool:
        return self.outcome is TollOutcome.ACCEPTED


class TollProcessor:
    def __init__(self, registry: VehicleRegistry, ledger: Ledger, config: TollConfig):
        self.registry = registry
        self.ledger = ledger
        self.config = config

    def process_rfid(self, tag: str) -> TollResult:
        return self.process(tag, PaymentMethod.RFID)

    def process_plate(self, plate: str) -> TollResult:
        return self.process(plate, PaymentMethod.ANPR)

    def process(self, identifier: str, payment_method: PaymentMethod) -> TollResult:
        identifier = (identifier or "").strip()
        payment_method = PaymentMethod(payment_method)

        vehicle = self.registry.lookup(identifier)
        if vehicle is None:
            self.ledger.record_error(
                f"Unregistered vehicle: id={identifier or '<empty>'} method={payment_method.value}"
            )
            logger.warning(f"[TOLL] {identifier or '<empty>'} ({payment_method.value}) — {REASON_UNREGISTERED}")
            return TollResult(
                outcome=TollOutcome.REJECTED_UNREGISTERED,
                vehicle_id=identifier,
                payment_method=payment_method,
                reason=REASON_UNREGISTERED,
            )

        rate, fallback = self.config.rate_for(vehicle.vehicle_class)
        if fallback:
            logger.warning(f"[TOLL] No rate for class {vehicle.vehicle_class.value} "
                           f"(rfid={vehicle.rfid_tag}) — fallback rate {rate} applied")

        result = self.registry.charge(
            vehicle, rate,
            on_accept=lambda new_balance: self.ledger.record_transaction(
                identifier, payment_method, rate, new_balance
            ),
        )

        if isinstance(result, Charged):
            logger.info(f"[TOLL] {identifier} ({payment_method.value}) charged {rate} → balance {result.new_balance}")
            return TollResult(
                outcome=TollOutcome.ACCEPTED,
                vehicle_id=identifier,
                payment_method=payment_method,
                amount=rate,
                balance=result.new_balance,
                fallback_rate_applied=fallback,
            )

        self.ledger.record_error(
            f"Insufficient balance: id={identifier} method={payment_method.value} "
            f"class={vehicle.vehicle_class.value} balance={result.balance} required={result.required}"
        )
        logger.warning(f"[TOLL] {identifier} ({payment_method.value}) — {REASON_INSUFFICIENT} "
                       f"(balance {result.balance}, required {result.required})")
        return TollResult(
            outcome=TollOutcome.REJECTED_INSUFFICIENT_FUNDS,
            vehicle_id=identifier,
            payment_method=payment_method,
            amount=result.required,
            balance=result.balance,
            reason=REASON_INSUFFICIENT,
            fallback_rate_applied=fallback,
        )
