"""Summary engine: per-step evaluation, aggregation and accumulation."""

import logging
import math
import numbers
import typing

from ressum.accumulators import Accumulator
from ressum.aggregation import aggregate_flow, aggregate_total
from ressum.config import Config
from ressum.errors import EngineStateError, OrderingError, ValidationError
from ressum.evaluators import evaluate, flow_rates, pressure
from ressum.keywords import SummaryKeyword, total_keywords
from ressum.models import EntityModel
from ressum.rates import FlowRates, RateVector, WellSnapshot
from ressum.stores import DataStore
from ressum.tables import SummaryTable, vector_key
from ressum.types import EngineState, EntityKind, Measure

logger = logging.getLogger(__name__)

__all__ = ["SummaryEngine"]

_NO_FLOW = FlowRates()
_WELL_TOTALS = total_keywords(EntityKind.WELL)


class SummaryEngine:
    """
    Turns a sequence of well snapshots into summary vectors.

    The engine starts `UNINITIALIZED`, accepts steps through `ingest` and
    ends `FLUSHED` once `flush` has built the `SummaryTable`. Steps must be
    ingested in non-decreasing simulated time. Several ministeps may share a
    report step: the table keeps the values of the last one, while totals
    integrate over all of them.

    Example:
    ```python
    model = EntityModel(keywords=["WOPR", "WOPT"], groups={"G1": ["P1"]})
    engine = SummaryEngine(model)
    engine.ingest(0, 0.0, {"P1": WellSnapshot(RateVector(oil=-0.01))})
    engine.ingest(1, 86400.0, {"P1": WellSnapshot(RateVector(oil=-0.01))})
    table = engine.flush()
    table.get_well_var(1, "P1", "WOPT")  # 864.0
    ```
    """

    def __init__(
        self,
        model: EntityModel,
        config: typing.Optional[Config] = None,
        store: typing.Optional[DataStore] = None,
    ) -> None:
        """
        :param model: Wells, group membership and requested keywords.
        :param config: Unit scales and logging options.
        :param store: Optional store the table is dumped to on flush.
        """
        self.model = model
        self.config = config or Config()
        self.store = store

        # Membership snapshot, fixed for the whole run
        self._groups: typing.Dict[str, typing.Tuple[str, ...]] = {
            group: tuple(members) for group, members in model.groups.items()
        }
        self._declared_wells = model.well_names
        self._known_wells = frozenset(self._declared_wells)
        self._keywords = {kind: model.requested(kind) for kind in EntityKind}
        for keyword in self._keywords[EntityKind.GROUP]:
            for group in model.selection(keyword.name) or ():
                if group not in self._groups:
                    raise ValidationError(
                        f"Keyword {keyword.name!r} is selected for unknown group {group!r}"
                    )

        self._state = EngineState.UNINITIALIZED
        self._accumulator = Accumulator()
        self._seen_wells: typing.List[str] = []
        self._seen_well_set: typing.Set[str] = set()
        # Declared wells first, then undeclared ones in order of appearance
        self._well_entities: typing.Tuple[str, ...] = self._declared_wells
        self._last_time: typing.Optional[float] = None
        self._last_report_step: typing.Optional[int] = None
        self._report_values: typing.Dict[int, typing.Dict[str, float]] = {}
        self._report_days: typing.Dict[int, float] = {}
        self._ministep_days: typing.List[float] = []
        self._table: typing.Optional[SummaryTable] = None
        self._ingested = 0

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def accumulator(self) -> Accumulator:
        """
        Running well-level totals, keyed by (well, keyword).

        This is the live accumulator the engine advances, not a copy. Read
        totals from it; resetting or advancing it corrupts later steps.
        """
        return self._accumulator

    @property
    def report_steps(self) -> typing.List[int]:
        """Report steps recorded so far, in increasing order."""
        return sorted(self._report_values)

    @property
    def table(self) -> typing.Optional[SummaryTable]:
        """The flushed table, or None before `flush`."""
        return self._table

    def ingest(
        self,
        report_step: int,
        sim_time: float,
        wells: typing.Mapping[str, WellSnapshot],
        history: typing.Optional[typing.Mapping[str, RateVector]] = None,
    ) -> None:
        """
        Evaluate, accumulate and record one ministep.

        :param report_step: Report step the ministep belongs to.
        :param sim_time: Elapsed simulated time in seconds.
        :param wells: Snapshots of the wells active in this step, keyed by name.
            Wells unknown to the entity model are reported for well and field
            keywords only.
        :param history: Optional historical rates of this step, keyed by well
            name. Wells without history report zero for historical keywords.
        :raises EngineStateError: If the engine has been flushed.
        :raises ValidationError: If the report step or time is invalid.
        :raises OrderingError: If the time or report step goes backwards.
        """
        if self._state is EngineState.FLUSHED:
            raise EngineStateError("Cannot ingest steps after the summary has been flushed")
        if (
            isinstance(report_step, bool)
            or not isinstance(report_step, numbers.Integral)
            or report_step < 0
        ):
            raise ValidationError(
                f"Report step must be a non-negative integer, got {report_step!r}"
            )
        report_step = int(report_step)
        sim_time = float(sim_time)
        if not math.isfinite(sim_time) or sim_time < 0.0:
            raise ValidationError(
                f"Simulated time must be a non-negative number, got {sim_time!r}"
            )
        if self._last_time is not None and sim_time < self._last_time:
            raise OrderingError(
                f"Simulated time {sim_time} s is earlier than the previously ingested {self._last_time} s"
            )
        if self._last_report_step is not None and report_step < self._last_report_step:
            raise OrderingError(
                f"Report step {report_step} is earlier than the previously ingested "
                f"report step {self._last_report_step}"
            )

        history = history or {}
        time_days = sim_time * self.config.time_scale
        flows = {
            name: flow_rates(snapshot.rates, self.config.rate_scale)
            for name, snapshot in wells.items()
        }
        history_flows = {
            name: flow_rates(rates, self.config.rate_scale)
            for name, rates in history.items()
        }
        for name in (*wells, *history):
            if name not in self._seen_well_set:
                if name not in self._known_wells:
                    logger.debug(f"Well {name!r} is not part of the entity model")
                    self._well_entities += (name,)
                self._seen_well_set.add(name)
                self._seen_wells.append(name)
        if self.config.warn_mixed_flow:
            self._check_mixed_flow(flows)

        self._advance_totals(flows, history_flows, time_days)

        values: typing.Dict[str, float] = {}
        self._record_wells(values, wells, flows, history_flows)
        self._record_groups(values, flows, history_flows)
        self._record_field(values, flows, history_flows)

        if report_step in self._report_values:
            logger.debug(f"Overwriting report step {report_step} with ministep at {time_days} days")
        self._report_values[report_step] = values
        self._report_days[report_step] = time_days
        self._ministep_days.append(time_days)
        self._last_time = sim_time
        self._last_report_step = report_step
        self._state = EngineState.ACCEPTING_STEPS
        self._ingested += 1

        logger.debug(
            f"Ingested report step {report_step} at {time_days:.4f} days: "
            f"{len(wells)} wells, {len(values)} values"
        )
        if self._ingested % self.config.log_interval == 0:
            logger.info(
                f"Ingested {self._ingested} ministeps, "
                f"{len(self._report_values)} report steps, {time_days:.2f} days"
            )

    def _check_mixed_flow(self, flows: typing.Mapping[str, FlowRates]) -> None:
        for name, flow in flows.items():
            producing = flow.production.liquid + flow.production.gas > 0.0
            injecting = flow.injection.liquid + flow.injection.gas > 0.0
            if producing and injecting:
                logger.warning(
                    f"Well {name!r} produces and injects in the same step, "
                    f"production={flow.production}, injection={flow.injection}"
                )

    def _advance_totals(
        self,
        flows: typing.Mapping[str, FlowRates],
        history_flows: typing.Mapping[str, FlowRates],
        time_days: float,
    ) -> None:
        """Advance every well total. Wells missing from the step carry a zero rate."""
        for well in self._seen_wells:
            flow = flows.get(well, _NO_FLOW)
            history_flow = history_flows.get(well, _NO_FLOW)
            for keyword in _WELL_TOTALS:
                rate = evaluate(
                    keyword.as_rate(), history_flow if keyword.historical else flow
                )
                self._accumulator.advance(well, keyword.name, rate, time_days)

    def _entities(self, keyword: SummaryKeyword) -> typing.Iterable[str]:
        selection = self.model.selection(keyword.name)
        if selection is not None:
            return selection
        if keyword.kind is EntityKind.WELL:
            return self._well_entities
        return self._groups.keys()

    def _record_wells(
        self,
        values: typing.Dict[str, float],
        wells: typing.Mapping[str, WellSnapshot],
        flows: typing.Mapping[str, FlowRates],
        history_flows: typing.Mapping[str, FlowRates],
    ) -> None:
        for keyword in self._keywords[EntityKind.WELL]:
            for well in self._entities(keyword):
                key = vector_key(keyword.name, well)
                if keyword.is_total:
                    values[key] = self._accumulator.total(well, keyword.name)
                elif keyword.is_pressure:
                    snapshot = wells.get(well)
                    if snapshot is None:
                        values[key] = 0.0
                    elif keyword.measure is Measure.BOTTOM_HOLE_PRESSURE:
                        values[key] = pressure(snapshot.bhp, self.config.pressure_scale)
                    else:
                        values[key] = pressure(snapshot.thp, self.config.pressure_scale)
                else:
                    source = history_flows if keyword.historical else flows
                    values[key] = evaluate(keyword, source.get(well, _NO_FLOW))

    def _record_aggregate(
        self,
        values: typing.Dict[str, float],
        keyword: SummaryKeyword,
        entity: str,
        members: typing.Iterable[str],
        flows: typing.Mapping[str, FlowRates],
        history_flows: typing.Mapping[str, FlowRates],
    ) -> None:
        key = vector_key(keyword.name, entity)
        if keyword.is_total:
            values[key] = aggregate_total(
                self._accumulator, members, keyword.for_kind(EntityKind.WELL).name
            )
        else:
            source = history_flows if keyword.historical else flows
            values[key] = evaluate(keyword, aggregate_flow(source, members))

    def _record_groups(
        self,
        values: typing.Dict[str, float],
        flows: typing.Mapping[str, FlowRates],
        history_flows: typing.Mapping[str, FlowRates],
    ) -> None:
        for keyword in self._keywords[EntityKind.GROUP]:
            for group in self._entities(keyword):
                self._record_aggregate(
                    values, keyword, group, self._groups[group], flows, history_flows
                )

    def _record_field(
        self,
        values: typing.Dict[str, float],
        flows: typing.Mapping[str, FlowRates],
        history_flows: typing.Mapping[str, FlowRates],
    ) -> None:
        for keyword in self._keywords[EntityKind.FIELD]:
            self._record_aggregate(
                values,
                keyword,
                self.config.field_name,
                self._seen_wells,
                flows,
                history_flows,
            )

    def flush(self) -> SummaryTable:
        """
        Build the summary table and hand it to the store, if any.

        Flushing ends ingestion. Flushing again returns the same table without
        writing it again. Flushing before any step yields an empty table.

        :return: The flushed `SummaryTable`.
        :raises StorageError: If the store fails to write the table.
        """
        if self._state is EngineState.FLUSHED:
            logger.debug("Summary already flushed")
            return self._table  # type: ignore[return-value]

        table = self._build_table()
        if self.store is not None:
            logger.debug(f"Writing summary table to {self.store!r}")
            table.to_store(self.store)

        self._table = table
        self._state = EngineState.FLUSHED
        logger.info(
            f"Flushed summary with {len(table)} report steps and {len(table.vectors)} vectors"
        )
        return table

    def _build_table(self) -> SummaryTable:
        report_steps = sorted(self._report_values)
        keys: typing.Dict[str, None] = {}
        for step in report_steps:
            keys.update(dict.fromkeys(self._report_values[step]))

        # Vectors that appear late (wells first seen after the first step) read zero before
        vectors = {
            key: [self._report_values[step].get(key, 0.0) for step in report_steps]
            for key in keys
        }
        return SummaryTable(
            report_steps=report_steps,
            sim_days=[self._report_days[step] for step in report_steps],
            ministep_days=self._ministep_days,
            vectors=vectors,
        )
