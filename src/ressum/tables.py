"""Flushed summary tables and their retrieval interface."""

import logging
import types
import typing

import attrs
import numpy as np
import numpy.typing as npt

from ressum.constants import c
from ressum.errors import SummaryKeyError, ValidationError
from ressum.keywords import parse_keyword
from ressum.stores import StoreSerializable
from ressum.types import EntityKind

logger = logging.getLogger(__name__)

__all__ = ["SummaryTable", "vector_key"]


def vector_key(keyword: str, entity: typing.Optional[str] = None) -> str:
    """
    Key of a summary vector.

    Well and group vectors are keyed ``KEYWORD:ENTITY``, field vectors by the
    bare keyword.

    :param keyword: Summary keyword.
    :param entity: Well or group name. Ignored for field keywords.
    :return: The vector key.
    """
    keyword = parse_keyword(keyword).name
    if keyword.startswith(EntityKind.FIELD.value):
        return keyword
    if not entity:
        raise ValidationError(f"Keyword {keyword!r} requires an entity name")
    return f"{keyword}{c.KEY_SEPARATOR}{entity}"


def _int_tuple(value: typing.Iterable[typing.Any]) -> typing.Tuple[int, ...]:
    return tuple(int(v) for v in value)


def _float_tuple(value: typing.Iterable[typing.Any]) -> typing.Tuple[float, ...]:
    return tuple(float(v) for v in value)


def _frozen_vectors(
    value: typing.Optional[typing.Mapping[str, typing.Any]],
) -> typing.Mapping[str, npt.NDArray[np.float64]]:
    vectors = {}
    for key, values in (value or {}).items():
        array = np.array(values, dtype=np.float64).reshape(-1)
        array.flags.writeable = False
        vectors[str(key)] = array
    return types.MappingProxyType(vectors)


def _vectors_equal(
    first: typing.Mapping[str, npt.NDArray], second: typing.Mapping[str, npt.NDArray]
) -> bool:
    if first.keys() != second.keys():
        return False
    return all(np.array_equal(first[key], second[key]) for key in first)


@attrs.frozen
class SummaryTable(StoreSerializable):
    """
    Summary vectors of a finished run, one value per report step.

    Each report step holds the values of the last ministep ingested for it.
    Rates and ratios are per day, totals are integrated over days, pressures
    are in bar and times in days.
    """

    report_steps: typing.Tuple[int, ...] = attrs.field(
        default=(), converter=_int_tuple
    )
    """Written report steps, in increasing order."""
    sim_days: typing.Tuple[float, ...] = attrs.field(
        default=(), converter=_float_tuple
    )
    """Simulated time (days) of each report step."""
    ministep_days: typing.Tuple[float, ...] = attrs.field(
        default=(), converter=_float_tuple
    )
    """Simulated time (days) of every ingested ministep."""
    vectors: typing.Mapping[str, npt.NDArray[np.float64]] = attrs.field(
        factory=dict,
        converter=_frozen_vectors,
        eq=attrs.cmp_using(eq=_vectors_equal),
    )
    """Values keyed by `vector_key`, aligned with `report_steps`."""

    def __attrs_post_init__(self) -> None:
        if len(self.sim_days) != len(self.report_steps):
            raise ValidationError(
                f"Got {len(self.sim_days)} report times for {len(self.report_steps)} report steps"
            )
        if any(a >= b for a, b in zip(self.report_steps, self.report_steps[1:])):
            raise ValidationError("Report steps must be strictly increasing")
        for key, values in self.vectors.items():
            if values.shape[0] != len(self.report_steps):
                raise ValidationError(
                    f"Vector {key!r} has {values.shape[0]} values for "
                    f"{len(self.report_steps)} report steps"
                )

    def __len__(self) -> int:
        return len(self.report_steps)

    @property
    def sim_length(self) -> float:
        """Simulated time (days) of the last ingested ministep."""
        return self.ministep_days[-1] if self.ministep_days else 0.0

    def keys(self) -> typing.Tuple[str, ...]:
        return tuple(self.vectors)

    def has_report_step(self, report_step: int) -> bool:
        return report_step in self.report_steps

    def has_key(self, keyword: str, entity: typing.Optional[str] = None) -> bool:
        return vector_key(keyword, entity) in self.vectors

    def _index(self, report_step: int) -> int:
        try:
            return self.report_steps.index(report_step)
        except ValueError:
            raise SummaryKeyError(
                f"Report step {report_step} has not been written. "
                f"Available report steps: {list(self.report_steps)}"
            ) from None

    def series(
        self, keyword: str, entity: typing.Optional[str] = None
    ) -> npt.NDArray[np.float64]:
        """
        All values of a vector, aligned with `report_steps`.

        :param keyword: Summary keyword.
        :param entity: Well or group name. Ignored for field keywords.
        :return: Read-only array of values.
        """
        key = vector_key(keyword, entity)
        try:
            return self.vectors[key]
        except KeyError:
            raise SummaryKeyError(f"No summary vector {key!r}") from None

    def get(
        self, keyword: str, entity: typing.Optional[str], report_step: int
    ) -> float:
        """
        Value of a keyword for an entity at a report step.

        :raises SummaryKeyError: If the vector or the report step is missing.
        """
        values = self.series(keyword, entity)
        return float(values[self._index(report_step)])

    def get_well_var(self, report_step: int, well: str, keyword: str) -> float:
        return self.get(keyword, well, report_step)

    def get_group_var(self, report_step: int, group: str, keyword: str) -> float:
        return self.get(keyword, group, report_step)

    def get_field_var(self, report_step: int, keyword: str) -> float:
        return self.get(keyword, None, report_step)

    def sim_time(self, report_step: int) -> float:
        """Simulated time (days) of a report step."""
        return self.sim_days[self._index(report_step)]

    def iget_sim_days(self, index: int) -> float:
        """Simulated time (days) of the ministep at position `index`."""
        try:
            return self.ministep_days[index]
        except IndexError:
            raise SummaryKeyError(
                f"Ministep index {index} out of range, {len(self.ministep_days)} ministeps written"
            ) from None
