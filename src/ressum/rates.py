"""Well rate and pressure snapshots."""

import typing

import attrs
from typing_extensions import Self

from ressum.types import FlowDirection, Phase

__all__ = ["RateVector", "WellSnapshot", "PhaseRates", "FlowRates"]


def _as_float(value: typing.Any) -> float:
    return 0.0 if value is None else float(value)


@attrs.frozen(slots=True)
class RateVector:
    """
    Signed surface flow rates of one well at one instant, in m³/s.

    Negative rates are produced, positive rates are injected. A phase that
    is not given is zero.
    """

    water: float = attrs.field(default=0.0, converter=_as_float)
    """Water rate (m³/s)."""
    oil: float = attrs.field(default=0.0, converter=_as_float)
    """Oil rate (m³/s)."""
    gas: float = attrs.field(default=0.0, converter=_as_float)
    """Gas rate (m³/s)."""

    @classmethod
    def from_mapping(
        cls, rates: typing.Mapping[typing.Union[Phase, str], float]
    ) -> Self:
        """
        Build a rate vector from a mapping keyed by `Phase` or phase name.

        :param rates: Mapping of phase to signed rate.
        :return: The rate vector, with absent phases set to zero.
        """
        values = {}
        for phase, rate in rates.items():
            values[Phase(phase).value] = rate
        return cls(**values)

    def __getitem__(self, phase: typing.Union[Phase, str]) -> float:
        return getattr(self, Phase(phase).value)

    def items(self) -> typing.Iterator[typing.Tuple[Phase, float]]:
        for phase in Phase:
            yield phase, self[phase]


@attrs.frozen(slots=True)
class WellSnapshot:
    """State of one well at one instant, as handed over by the simulator."""

    rates: RateVector = attrs.field(factory=RateVector)
    """Signed phase rates of the well (m³/s)."""
    bhp: float = attrs.field(default=0.0, converter=_as_float)
    """Bottom-hole pressure (Pa)."""
    thp: float = attrs.field(default=0.0, converter=_as_float)
    """Tubing-head pressure (Pa)."""
    connections: typing.Tuple[typing.Any, ...] = attrs.field(
        default=(), converter=tuple
    )
    """Per-connection records. Carried along, never inspected."""


@attrs.frozen(slots=True)
class PhaseRates:
    """Non-negative per-phase rate magnitudes in report units."""

    water: float = 0.0
    oil: float = 0.0
    gas: float = 0.0

    def __getitem__(self, phase: typing.Union[Phase, str]) -> float:
        return getattr(self, Phase(phase).value)

    def __add__(self, other: "PhaseRates") -> "PhaseRates":
        if not isinstance(other, PhaseRates):
            return NotImplemented
        return PhaseRates(
            water=self.water + other.water,
            oil=self.oil + other.oil,
            gas=self.gas + other.gas,
        )

    @property
    def liquid(self) -> float:
        """Water plus oil."""
        return self.water + self.oil


@attrs.frozen(slots=True)
class FlowRates:
    """Sign-normalized production and injection rates of a well, group or field."""

    production: PhaseRates = attrs.field(factory=PhaseRates)
    """Produced rates per phase."""
    injection: PhaseRates = attrs.field(factory=PhaseRates)
    """Injected rates per phase."""

    def __add__(self, other: "FlowRates") -> "FlowRates":
        if not isinstance(other, FlowRates):
            return NotImplemented
        return FlowRates(
            production=self.production + other.production,
            injection=self.injection + other.injection,
        )

    def direction(self, direction: FlowDirection) -> PhaseRates:
        if direction is FlowDirection.PRODUCTION:
            return self.production
        return self.injection
