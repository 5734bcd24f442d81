# tollgate/schemas/rates.py
from pydantic import BaseModel
from decimal import Decimal


class RateTableOut(BaseModel):
    toll_rates: dict[str, Decimal]
    fallback_rate: Decimal
    camera_resolution_width: int
    camera_resolution_height: int
    camera_fps: int
    from_defaults: bool

    @classmethod
    def from_config(cls, config) -> "RateTableOut":
        return cls(
            toll_rates={c.value: r for c, r in config.toll_rates.items()},
            fallback_rate=config.fallback_rate,
            camera_resolution_width=config.camera_resolution_width,
            camera_resolution_height=config.camera_resolution_height,
            camera_fps=config.camera_fps,
            from_defaults=config.from_defaults,
        )
