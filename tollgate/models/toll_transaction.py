# tollgate/models/toll_transaction.py
"""
Toll transactions table, database mirror of the CSV transaction ledger.
One row per accepted charge, inserted by services/ledger.py.
Read by the transactions router.
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric
from tollgate.database import Base


class TollTransaction(Base):
    __tablename__ = "toll_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    vehicle_id = Column(String(100), nullable=False, index=True)   # RFID tag or plate as presented
    payment_method = Column(String(20), nullable=False)            # rfid | anpr-billing
    amount = Column(Numeric(12, 2), nullable=False)
    balance_remaining = Column(Numeric(12, 2), nullable=False)

    def __repr__(self):
        return f"<TollTransaction {self.id} vehicle={self.vehicle_id} amount={self.amount}>"
