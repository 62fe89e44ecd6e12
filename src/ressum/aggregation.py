"""Aggregation of well quantities into groups and the field."""

import typing

from ressum.accumulators import Accumulator
from ressum.rates import FlowRates

__all__ = ["aggregate_flow", "aggregate_total"]


def aggregate_flow(
    flows: typing.Mapping[str, FlowRates], members: typing.Iterable[str]
) -> FlowRates:
    """
    Sum the sign-normalized rates of the member wells present in `flows`.

    Members without an entry contribute nothing. Ratios of the result are
    computed from the summed components.

    :param flows: Rates of the wells in the current step, keyed by well name.
    :param members: Names of the wells to aggregate.
    :return: Aggregated `FlowRates`.
    """
    total = FlowRates()
    for well in members:
        flow = flows.get(well)
        if flow is not None:
            total = total + flow
    return total


def aggregate_total(
    accumulator: Accumulator, members: typing.Iterable[str], keyword: str
) -> float:
    """
    Sum the well-level totals of the member wells.

    Wells that have not been seen yet contribute zero. Wells missing from the
    current step still contribute what they accumulated earlier, so group
    totals never decrease.

    :param accumulator: Accumulator holding well-level totals.
    :param members: Names of the wells to aggregate.
    :param keyword: Well-level total keyword, e.g. ``"WOPT"``.
    :return: Aggregated total.
    """
    return sum((accumulator.total(well, keyword) for well in members), 0.0)
