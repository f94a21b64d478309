from dataclasses import dataclass


@dataclass
class Measurement:
    measurement_type: str
    w_now: float


@dataclass
class ProductionSnapshot:
    production_watts_now: float = 0.0
    consumption_watts_now: float = 0.0
