# tollgate/routers/transactions.py
"""Transaction and error history (database mirror) + daily summary (ledger file)."""

from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tollgate.database import get_db
from tollgate.dependencies import get_toll_system
from tollgate.models.toll_transaction import TollTransaction
from tollgate.models.toll_error import TollError
from tollgate.schemas.transaction import TransactionOut, TollErrorOut

router = APIRouter()


@router.get("/transactions", response_model=list[TransactionOut], summary="Recent toll transactions")
def list_transactions(limit: int = 50, vehicle_id: str = None, payment_method: str = None,
                      db: Session = Depends(get_db)):
    q = db.query(TollTransaction)
    if vehicle_id:
        q = q.filter(TollTransaction.vehicle_id == vehicle_id)
    if payment_method:
        q = q.filter(TollTransaction.payment_method == payment_method)
    return q.order_by(TollTransaction.id.desc()).limit(limit).all()


@router.get("/transactions/summary/today", summary="Today's transaction count and revenue")
def get_today_summary(system=Depends(get_toll_system)):
    """Computed from the CSV ledger, the authoritative record."""
    return system.ledger.daily_summary(date.today())


@router.get("/errors", response_model=list[TollErrorOut], summary="Recent toll errors")
def list_errors(limit: int = 50, db: Session = Depends(get_db)):
    return db.query(TollError).order_by(TollError.id.desc()).limit(limit).all()
