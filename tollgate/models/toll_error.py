# tollgate/models/toll_error.py
"""
Toll errors table, database mirror of the ledger error log.
Stores rejected transactions (unregistered vehicle, insufficient balance)
and load-time errors such as an unreadable registry file.
"""

from sqlalchemy import Column, Integer, DateTime, Text
from tollgate.database import Base


class TollError(Base):
    __tablename__ = "toll_errors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    message = Column(Text, nullable=False)

    def __repr__(self):
        return f"<TollError {self.id} at={self.timestamp}>"
