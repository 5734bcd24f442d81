# tollgate/services/ledger.py
"""
Append-only toll ledger.

Owns two files for the lifetime of the process:
  - transaction log (CSV): timestamp,vehicle_id,payment_method,amount,balance_remaining
  - error log (text):      "<timestamp>: <message>" per line

Every append goes through one lock and is flushed + fsynced before the call
returns, so a caller that gets a record back can rely on it being on disk.
Records are optionally mirrored into the database for the query API; the
files stay authoritative.
"""

import csv
import os
import threading
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional

from tollgate.errors import PersistenceUnavailable
from tollgate.utils.logger import get_logger

logger = get_logger(__name__)

TRANSACTION_HEADER = ["timestamp", "vehicle_id", "payment_method", "amount", "balance_remaining"]


class PaymentMethod(str, Enum):
    RFID = "rfid"
    ANPR = "anpr-billing"


@dataclass(frozen=True)
class TransactionRecord:
    timestamp: datetime
    vehicle_id: str
    payment_method: PaymentMethod
    amount: Decimal
    balance_remaining: Decimal

    def as_row(self) -> list:
        return [self.timestamp.isoformat(timespec="microseconds"), self.vehicle_id,
                self.payment_method.value, str(self.amount), str(self.balance_remaining)]


@dataclass(frozen=True)
class ErrorRecord:
    timestamp: datetime
    message: str

    def as_line(self) -> str:
        # One record per line: embedded newlines would split an entry
        message = " ".join(self.message.splitlines())
        return f"{self.timestamp.isoformat(timespec='microseconds')}: {message}\n"


def _open_append(path: str):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return open(path, "a", encoding="utf-8", newline="")


class Ledger:
    def __init__(self, transaction_log_path: str, error_log_path: str,
                 session_factory: Optional[Callable] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.transaction_log_path = transaction_log_path
        self.error_log_path = error_log_path
        self._session_factory = session_factory
        self._lock = threading.Lock()
        self._clock = clock
        self._last_timestamp: Optional[datetime] = None

        try:
            self._tx_file = _open_append(transaction_log_path)
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot open transaction log {transaction_log_path}: {e}") from e
        try:
            self._error_file = _open_append(error_log_path)
        except OSError as e:
            self._tx_file.close()
            raise PersistenceUnavailable(f"Cannot open error log {error_log_path}: {e}") from e

        self._tx_writer = csv.writer(self._tx_file, lineterminator="\n")
        if self._tx_file.tell() == 0:
            self._tx_writer.writerow(TRANSACTION_HEADER)
            self._sync(self._tx_file)

        logger.info(f"[LEDGER] Transactions → {transaction_log_path} | Errors → {error_log_path}")

    # ── Appends ───────────────────────────────────────────────────────────

    def record_transaction(self, vehicle_id: str, payment_method: PaymentMethod,
                           amount: Decimal, balance_remaining: Decimal) -> TransactionRecord:
        with self._lock:
            record = TransactionRecord(
                timestamp=self._next_timestamp(),
                vehicle_id=vehicle_id,
                payment_method=PaymentMethod(payment_method),
                amount=amount,
                balance_remaining=balance_remaining,
            )
            self._write(self._tx_file, lambda: self._tx_writer.writerow(record.as_row()))
            self._mirror_transaction(record)
        return record

    def record_error(self, message: str) -> ErrorRecord:
        with self._lock:
            record = ErrorRecord(timestamp=self._next_timestamp(), message=message)
            self._write(self._error_file, lambda: self._error_file.write(record.as_line()))
            self._mirror_error(record)
        return record

    def _next_timestamp(self) -> datetime:
        """Wall-clock time, never earlier than the previous record (caller holds the lock)."""
        now = self._clock()
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    def _write(self, handle, write):
        try:
            write()
            self._sync(handle)
        except (OSError, ValueError) as e:
            # ValueError: write to a closed file
            raise PersistenceUnavailable(f"Ledger write failed on {handle.name}: {e}") from e

    @staticmethod
    def _sync(handle):
        handle.flush()
        os.fsync(handle.fileno())

    # ── Database mirror ───────────────────────────────────────────────────

    def _mirror_transaction(self, record: TransactionRecord):
        if self._session_factory is None:
            return
        from tollgate.models.toll_transaction import TollTransaction
        self._mirror(TollTransaction(
            timestamp=record.timestamp,
            vehicle_id=record.vehicle_id,
            payment_method=record.payment_method.value,
            amount=record.amount,
            balance_remaining=record.balance_remaining,
        ))

    def _mirror_error(self, record: ErrorRecord):
        if self._session_factory is None:
            return
        from tollgate.models.toll_error import TollError
        self._mirror(TollError(timestamp=record.timestamp, message=record.message))

    def _mirror(self, row):
        db = self._session_factory()
        try:
            db.add(row)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"[LEDGER] DB mirror failed for {row!r}: {e}")
        finally:
            db.close()

    # ── Reads ─────────────────────────────────────────────────────────────

    def read_transactions(self) -> List[TransactionRecord]:
        """All transaction records, oldest first."""
        with self._lock:
            self._tx_file.flush()
        with open(self.transaction_log_path, "r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            return [
                TransactionRecord(
                    timestamp=datetime.fromisoformat(row["timestamp"]),
                    vehicle_id=row["vehicle_id"],
                    payment_method=PaymentMethod(row["payment_method"]),
                    amount=Decimal(row["amount"]),
                    balance_remaining=Decimal(row["balance_remaining"]),
                )
                for row in reader
            ]

    def read_errors(self) -> List[ErrorRecord]:
        """All error records, oldest first."""
        with self._lock:
            self._error_file.flush()
        records = []
        with open(self.error_log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\n")
                if not line:
                    continue
                timestamp, _, message = line.partition(": ")
                records.append(ErrorRecord(timestamp=datetime.fromisoformat(timestamp), message=message))
        return records

    def daily_summary(self, day: Optional[date] = None) -> dict:
        """Transaction count and revenue for one day, total and per payment method."""
        day = day or date.today()
        by_method = {m.value: {"transactions": 0, "revenue": Decimal("0")} for m in PaymentMethod}
        for record in self.read_transactions():
            if record.timestamp.date() != day:
                continue
            bucket = by_method[record.payment_method.value]
            bucket["transactions"] += 1
            bucket["revenue"] += record.amount
        return {
            "date": str(day),
            "transactions": sum(b["transactions"] for b in by_method.values()),
            "revenue": sum((b["revenue"] for b in by_method.values()), Decimal("0")),
            "by_payment_method": by_method,
        }

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def close(self):
        with self._lock:
            self._tx_file.close()
            self._error_file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
