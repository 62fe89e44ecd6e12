import enum
import typing

from typing_extensions import TypeAlias


__all__ = [
    "Phase",
    "EntityKind",
    "FlowDirection",
    "Measure",
    "EngineState",
    "EntityKey",
]


class Phase(enum.Enum):
    """Fluid phases carried by a well rate vector."""

    WATER = "water"
    OIL = "oil"
    GAS = "gas"

    @property
    def code(self) -> str:
        """Single letter used for the phase in summary keywords."""
        return _PHASE_CODES[self]

    @classmethod
    def from_code(cls, code: str) -> "Phase":
        for phase, phase_code in _PHASE_CODES.items():
            if phase_code == code:
                return phase
        raise ValueError(f"Unknown phase code {code!r}")


_PHASE_CODES = {Phase.WATER: "W", Phase.OIL: "O", Phase.GAS: "G"}


class EntityKind(enum.Enum):
    """Level of the entity a summary keyword reports on."""

    WELL = "W"
    GROUP = "G"
    FIELD = "F"


class FlowDirection(enum.Enum):
    PRODUCTION = "P"
    INJECTION = "I"


class Measure(enum.Enum):
    """What a summary keyword measures."""

    RATE = "rate"
    """Instantaneous rate per day."""
    TOTAL = "total"
    """Cumulative volume, integrated over elapsed days."""
    WATER_CUT = "water_cut"
    GAS_OIL_RATIO = "gas_oil_ratio"
    GAS_LIQUID_RATIO = "gas_liquid_ratio"
    BOTTOM_HOLE_PRESSURE = "bhp"
    TUBING_HEAD_PRESSURE = "thp"


class EngineState(enum.Enum):
    """Lifecycle states of a `SummaryEngine`."""

    UNINITIALIZED = "uninitialized"
    ACCEPTING_STEPS = "accepting_steps"
    FLUSHED = "flushed"


EntityKey: TypeAlias = typing.Tuple[str, str]
"""(entity name, keyword) pair identifying a summary vector."""
