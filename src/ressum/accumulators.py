"""Running totals integrated over simulated time."""

import logging
import typing

import attrs

from ressum.errors import OrderingError
from ressum.types import EntityKey

logger = logging.getLogger(__name__)

__all__ = ["Accumulator", "AccumulatorEntry"]


@attrs.define(slots=True)
class AccumulatorEntry:
    """Running total of one (entity, keyword) pair."""

    total: float = 0.0
    """Integrated volume so far."""
    time: float = 0.0
    """Time of the last observation (days)."""
    rate: float = 0.0
    """Rate observed at `time`, held over the next interval."""


@attrs.define
class Accumulator:
    """
    Per (entity, keyword) running totals.

    Totals integrate rates rectangularly: the rate observed at one point is
    held until the next point, so each advance adds
    ``previous_rate * (time - previous_time)``. The first observation of a key
    only records its rate and time.

    One accumulator belongs to one summary-writing session. Keys must be
    advanced in non-decreasing time order.
    """

    _entries: typing.Dict[EntityKey, AccumulatorEntry] = attrs.field(
        factory=dict, init=False
    )

    def __contains__(self, key: EntityKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> typing.KeysView[EntityKey]:
        return self._entries.keys()

    def total(self, entity: str, keyword: str) -> float:
        """
        Current total of a key. Keys never advanced have a total of zero.
        """
        entry = self._entries.get((entity, keyword))
        return entry.total if entry is not None else 0.0

    def advance(self, entity: str, keyword: str, rate: float, time: float) -> float:
        """
        Advance the total of a key to `time`.

        :param entity: Entity name.
        :param keyword: Total keyword the entry accumulates.
        :param rate: Rate observed at `time`, in volume per time unit of `time`.
        :param time: Time of the observation.
        :return: The total after advancing.
        :raises OrderingError: If `time` is earlier than the key's last observation.
        """
        key = (entity, keyword)
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = AccumulatorEntry(total=0.0, time=time, rate=rate)
            return 0.0

        if time < entry.time:
            raise OrderingError(
                f"Cannot advance {keyword!r} of {entity!r} to time {time}, "
                f"it was last advanced at {entry.time}"
            )
        entry.total += entry.rate * (time - entry.time)
        entry.time = time
        entry.rate = rate
        return entry.total

    def reset(self) -> None:
        logger.debug(f"Discarding {len(self._entries)} accumulator entries")
        self._entries.clear()
