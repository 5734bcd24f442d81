# tollgate/routers/rates.py
"""Active toll rate table."""

from fastapi import APIRouter, Depends
from tollgate.dependencies import get_toll_system
from tollgate.schemas.rates import RateTableOut
from tollgate.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/rates", response_model=RateTableOut, summary="Current toll rates")
def get_rates(system=Depends(get_toll_system)):
    return RateTableOut.from_config(system.config)


@router.post("/rates/reload", response_model=RateTableOut, summary="Re-read the toll config file")
def reload_rates(system=Depends(get_toll_system)):
    config = system.reload_config()
    logger.info("Toll config reloaded via API")
    return RateTableOut.from_config(config)
