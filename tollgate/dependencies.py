# tollgate/dependencies.py
"""FastAPI dependencies shared by routers."""

from fastapi import HTTPException, Request, status


def get_toll_system(request: Request):
    """The TollSystem built at startup (see main.py)."""
    system = getattr(request.app.state, "toll_system", None)
    if system is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            detail="Toll system not initialised")
    return system
