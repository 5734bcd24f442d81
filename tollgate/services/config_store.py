# tollgate/services/config_store.py
"""
Toll configuration store.
Reads the key=value config file (toll rates + camera parameters) and
returns a TollConfig. A missing file is never an error: the documented
defaults are written out and returned instead. An existing file is never
overwritten, even when it cannot be read or holds undecodable bytes.

File format:
    # comment
    toll_rate_car=50.0
    camera_fps=30
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Optional, Tuple

from tollgate.errors import MalformedRecord
from tollgate.utils.logger import get_logger

logger = get_logger(__name__)


class VehicleClass(str, Enum):
    CAR = "car"
    TRUCK = "truck"
    BUS = "bus"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> "VehicleClass":
        """Map a registry `type` cell to a class. Anything unrecognized is UNKNOWN."""
        value = (raw or "").strip().lower()
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN


# Charged to vehicles whose class has no configured rate. Matches the
# default truck rate so an unclassified vehicle is never under-billed.
DEFAULT_FALLBACK_RATE = Decimal("100.0")

DEFAULT_TOLL_RATES = {
    VehicleClass.CAR: Decimal("50.0"),
    VehicleClass.TRUCK: Decimal("100.0"),
    VehicleClass.BUS: Decimal("75.0"),
}


@dataclass(frozen=True)
class TollConfig:
    toll_rates: Dict[VehicleClass, Decimal] = field(default_factory=lambda: dict(DEFAULT_TOLL_RATES))
    camera_resolution_width: int = 1920
    camera_resolution_height: int = 1080
    camera_fps: int = 30
    fallback_rate: Decimal = DEFAULT_FALLBACK_RATE
    from_defaults: bool = False   # True when the file was missing or unreadable and defaults were used

    def rate_for(self, vehicle_class: VehicleClass) -> Tuple[Decimal, bool]:
        """Return (rate, fallback_applied) for a vehicle class."""
        rate = self.toll_rates.get(vehicle_class)
        if rate is None:
            return self.fallback_rate, True
        return rate, False


RATE_KEYS = {
    "toll_rate_car": VehicleClass.CAR,
    "toll_rate_truck": VehicleClass.TRUCK,
    "toll_rate_bus": VehicleClass.BUS,
}
CAMERA_KEYS = ("camera_resolution_width", "camera_resolution_height", "camera_fps")
FALLBACK_KEY = "toll_rate_default"


def parse_positive_decimal(raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise MalformedRecord(f"not a decimal: {raw!r}")
    if not value.is_finite() or value <= 0:
        raise MalformedRecord(f"not a positive decimal: {raw!r}")
    return value


def parse_positive_int(raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise MalformedRecord(f"not an integer: {raw!r}")
    if value <= 0:
        raise MalformedRecord(f"not a positive integer: {raw!r}")
    return value


def parse_config_lines(lines) -> TollConfig:
    """
    Build a TollConfig from key=value lines, starting from the defaults.
    Unknown keys are ignored; a bad value skips only its own assignment.
    """
    rates = dict(DEFAULT_TOLL_RATES)
    camera = {}
    fallback = DEFAULT_FALLBACK_RATE

    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            logger.warning(f"[CONFIG] Line {lineno} has no '=' — skipped: {line!r}")
            continue

        key, value = (part.strip() for part in line.split("=", 1))
        try:
            if key in RATE_KEYS:
                rates[RATE_KEYS[key]] = parse_positive_decimal(value)
            elif key in CAMERA_KEYS:
                camera[key] = parse_positive_int(value)
            elif key == FALLBACK_KEY:
                fallback = parse_positive_decimal(value)
        except MalformedRecord as e:
            logger.warning(f"[CONFIG] Line {lineno} key={key} skipped: {e}")

    return TollConfig(toll_rates=rates, fallback_rate=fallback, **camera)


def render_config(config: TollConfig) -> str:
    lines = ["# Toll Rates"]
    for key, vehicle_class in RATE_KEYS.items():
        lines.append(f"{key}={config.toll_rates.get(vehicle_class, DEFAULT_TOLL_RATES[vehicle_class])}")
    if config.fallback_rate != DEFAULT_FALLBACK_RATE:
        lines.append(f"{FALLBACK_KEY}={config.fallback_rate}")
    lines += [
        "",
        "# Camera Settings",
        f"camera_resolution_width={config.camera_resolution_width}",
        f"camera_resolution_height={config.camera_resolution_height}",
        f"camera_fps={config.camera_fps}",
    ]
    return "\n".join(lines) + "\n"


class ConfigStore:
    def __init__(self, path: str):
        self.path = path

    def load(self) -> TollConfig:
        # Undecodable bytes become U+FFFD, so only the line holding them is skipped
        try:
            with open(self.path, "r", encoding="utf-8", errors="replace") as f:
                config = parse_config_lines(f)
        except FileNotFoundError:
            logger.warning(f"[CONFIG] {self.path} not found — creating default toll config")
            config = TollConfig(from_defaults=True)
            self.save(config)
            return config
        except OSError as e:
            # The file exists but cannot be read; leave it untouched on disk
            logger.warning(f"[CONFIG] Cannot read {self.path} ({e}) — using default toll config")
            return TollConfig(from_defaults=True)

        rates = ", ".join(f"{c.value}={r}" for c, r in config.toll_rates.items())
        logger.info(f"[CONFIG] Loaded {self.path}: {rates} fallback={config.fallback_rate}")
        return config

    def save(self, config: TollConfig) -> bool:
        """Write config to disk. Returns False (and logs) if the file cannot be written."""
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(render_config(config))
        except OSError as e:
            logger.error(f"[CONFIG] Could not write {self.path}: {e}")
            return False
        logger.info(f"[CONFIG] Wrote toll config to {self.path}")
        return True

