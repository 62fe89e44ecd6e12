"""Summary keyword grammar."""

import functools
import re
import typing

import attrs

from ressum.errors import KeywordError
from ressum.types import EntityKind, FlowDirection, Measure, Phase

__all__ = ["SummaryKeyword", "parse_keyword", "total_keywords", "LIQUID"]

LIQUID = "L"
"""Keyword code of the liquid (water plus oil) pseudo-phase."""

_FLOW_PATTERN = re.compile(
    r"^(?P<phase>[WOGL])(?P<direction>[PI])(?P<measure>[RT])(?P<historical>H?)$"
)
_RATIO_BODIES = {
    "WCT": Measure.WATER_CUT,
    "GOR": Measure.GAS_OIL_RATIO,
    "GLR": Measure.GAS_LIQUID_RATIO,
}
_PRESSURE_BODIES = {
    "BHP": Measure.BOTTOM_HOLE_PRESSURE,
    "THP": Measure.TUBING_HEAD_PRESSURE,
}


@attrs.frozen(slots=True)
class SummaryKeyword:
    """
    A parsed summary keyword such as ``WOPR`` or ``GGORH``.

    The first letter names the entity level (``W`` well, ``G`` group,
    ``F`` field). The rest is the body:

    - ``<phase><P|I><R|T>[H]``: production/injection rate or total of
      phase ``W``, ``O``, ``G`` or liquid ``L`` (production only).
    - ``WCT``, ``GOR``, ``GLR`` with optional ``H``: water cut, gas-oil
      ratio and gas-liquid ratio.
    - ``BHP``, ``THP``: well pressures.

    A trailing ``H`` selects the historical variant.
    """

    name: str
    kind: EntityKind
    measure: Measure
    phase: typing.Optional[str] = None
    """Phase code (``W``, ``O``, ``G`` or ``L``) for rates and totals."""
    direction: typing.Optional[FlowDirection] = None
    historical: bool = False

    @property
    def body(self) -> str:
        return self.name[1:]

    @property
    def is_total(self) -> bool:
        return self.measure is Measure.TOTAL

    @property
    def is_pressure(self) -> bool:
        return self.measure in _PRESSURE_BODIES.values()

    @property
    def is_liquid(self) -> bool:
        return self.phase == LIQUID

    def for_kind(self, kind: EntityKind) -> "SummaryKeyword":
        """The same quantity reported at another entity level."""
        return parse_keyword(kind.value + self.body)

    def as_rate(self) -> "SummaryKeyword":
        """The rate keyword a total keyword integrates."""
        if not self.is_total:
            return self
        suffix = "H" if self.historical else ""
        return parse_keyword(
            f"{self.kind.value}{self.phase}{self.direction.value}R{suffix}"  # type: ignore[union-attr]
        )


@functools.cache
def parse_keyword(name: str) -> SummaryKeyword:
    """
    Parse and validate a summary keyword.

    :param name: Keyword name, e.g. ``"WWPT"`` or ``"FGORH"``.
    :return: The parsed `SummaryKeyword`.
    :raises KeywordError: If the keyword is malformed or not supported.
    """
    if not isinstance(name, str) or len(name) < 2:
        raise KeywordError(f"Invalid summary keyword {name!r}")

    name = name.upper()
    try:
        kind = EntityKind(name[0])
    except ValueError:
        raise KeywordError(
            f"Summary keyword {name!r} must start with one of 'W', 'G' or 'F'"
        ) from None

    body = name[1:]
    historical = body.endswith("H") and len(body) == 4
    stem = body[:-1] if historical else body

    if stem in _RATIO_BODIES:
        return SummaryKeyword(
            name=name, kind=kind, measure=_RATIO_BODIES[stem], historical=historical
        )

    if body in _PRESSURE_BODIES:
        if kind is not EntityKind.WELL:
            raise KeywordError(f"Pressure keyword {name!r} is only defined for wells")
        return SummaryKeyword(name=name, kind=kind, measure=_PRESSURE_BODIES[body])

    match = _FLOW_PATTERN.match(body)
    if match is None:
        raise KeywordError(f"Unsupported summary keyword {name!r}")

    direction = FlowDirection(match["direction"])
    phase = match["phase"]
    if phase == LIQUID and direction is FlowDirection.INJECTION:
        raise KeywordError(f"Liquid injection keyword {name!r} is not defined")
    return SummaryKeyword(
        name=name,
        kind=kind,
        measure=Measure.RATE if match["measure"] == "R" else Measure.TOTAL,
        phase=phase,
        direction=direction,
        historical=bool(match["historical"]),
    )


def total_keywords(kind: EntityKind = EntityKind.WELL) -> typing.Tuple[SummaryKeyword, ...]:
    """All total keywords of an entity level, historical variants included."""
    keywords = []
    for historical in ("", "H"):
        for phase in Phase:
            for direction in FlowDirection:
                keywords.append(
                    parse_keyword(f"{kind.value}{phase.code}{direction.value}T{historical}")
                )
        keywords.append(parse_keyword(f"{kind.value}{LIQUID}PT{historical}"))
    return tuple(keywords)
