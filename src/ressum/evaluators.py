"""
Instantaneous rate and ratio variables.

All functions here are pure and total. Ratios fall back to zero when their
denominator is zero, and non-finite inputs are treated as zero, so no value
computed here can be NaN or infinite.
"""

import math
import typing

from ressum.errors import KeywordError
from ressum.keywords import SummaryKeyword
from ressum.rates import FlowRates, PhaseRates, RateVector
from ressum.types import Measure

__all__ = [
    "production_rate",
    "injection_rate",
    "pressure",
    "flow_rates",
    "liquid_rate",
    "water_cut",
    "gas_oil_ratio",
    "gas_liquid_ratio",
    "safe_ratio",
    "evaluate",
]


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def production_rate(rate: float) -> float:
    """Magnitude of a signed rate if it is produced (negative), else zero."""
    rate = _finite(rate)
    return -rate if rate < 0.0 else 0.0


def injection_rate(rate: float) -> float:
    """Magnitude of a signed rate if it is injected (positive), else zero."""
    rate = _finite(rate)
    return rate if rate > 0.0 else 0.0


def pressure(value: float, scale: float = 1.0) -> float:
    """Pressure in report units. Non-finite pressures read as zero."""
    return _finite(value) * scale


def flow_rates(rates: typing.Optional[RateVector], scale: float = 1.0) -> FlowRates:
    """
    Split a signed rate vector into production and injection magnitudes.

    Each phase is classified by its own sign, so a well may produce one
    phase while injecting another. A zero rate is neither.

    :param rates: Signed rate vector, or None for no data.
    :param scale: Factor converting the snapshot rate unit to the report unit.
    :return: Sign-normalized `FlowRates`.
    """
    if rates is None:
        return FlowRates()
    return FlowRates(
        production=PhaseRates(
            water=production_rate(rates.water) * scale,
            oil=production_rate(rates.oil) * scale,
            gas=production_rate(rates.gas) * scale,
        ),
        injection=PhaseRates(
            water=injection_rate(rates.water) * scale,
            oil=injection_rate(rates.oil) * scale,
            gas=injection_rate(rates.gas) * scale,
        ),
    )


def safe_ratio(numerator: float, denominator: float) -> float:
    """`numerator / denominator`, or zero when the denominator is zero."""
    if denominator == 0.0:
        return 0.0
    return _finite(numerator / denominator)


def liquid_rate(flow: FlowRates) -> float:
    return flow.production.liquid


def water_cut(flow: FlowRates) -> float:
    return safe_ratio(flow.production.water, flow.production.liquid)


def gas_oil_ratio(flow: FlowRates) -> float:
    return safe_ratio(flow.production.gas, flow.production.oil)


def gas_liquid_ratio(flow: FlowRates) -> float:
    return safe_ratio(flow.production.gas, flow.production.liquid)


_RATIOS: typing.Dict[Measure, typing.Callable[[FlowRates], float]] = {
    Measure.WATER_CUT: water_cut,
    Measure.GAS_OIL_RATIO: gas_oil_ratio,
    Measure.GAS_LIQUID_RATIO: gas_liquid_ratio,
}


def evaluate(keyword: SummaryKeyword, flow: FlowRates) -> float:
    """
    Evaluate a rate or ratio keyword on sign-normalized rates.

    The caller picks the simulated or historical `FlowRates` according to
    `keyword.historical`; the computation is the same for both.

    :param keyword: Rate or ratio keyword.
    :param flow: Rates of the entity the keyword reports on.
    :return: The keyword value.
    :raises KeywordError: If the keyword is neither a rate nor a ratio.
    """
    if keyword.measure is Measure.RATE:
        if keyword.is_liquid:
            return liquid_rate(flow)
        rates = flow.direction(keyword.direction)  # type: ignore[arg-type]
        return {"W": rates.water, "O": rates.oil, "G": rates.gas}[keyword.phase]  # type: ignore[index]

    ratio = _RATIOS.get(keyword.measure)
    if ratio is None:
        raise KeywordError(f"Keyword {keyword.name!r} is not an instantaneous rate or ratio")
    return ratio(flow)
