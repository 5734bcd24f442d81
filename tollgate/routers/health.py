# tollgate/routers/health.py
"""
System health check endpoint.
Returns status of backend + ledger files + DB mirror.
"""

import os
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from tollgate.database import get_db
from tollgate.dependencies import get_toll_system
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), system=Depends(get_toll_system)):
    """
    Returns:
    - Backend status
    - Ledger files writable
    - Database connectivity
    - Registry size and rate source
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "ledger": {},
        "database": "unknown",
        "registered_vehicles": len(system.registry),
        "rates_from_defaults": system.config.from_defaults,
    }

    for name, path in (("transactions", system.ledger.transaction_log_path),
                       ("errors", system.ledger.error_log_path)):
        if os.access(path, os.W_OK):
            result["ledger"][name] = "ok"
        else:
            result["ledger"][name] = "not writable"
            result["status"] = "degraded"

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
