import attrs

from ressum.constants import c

__all__ = ["Config"]


@attrs.frozen
class Config:
    """Summary-writing options and unit scales."""

    rate_scale: float = attrs.field(
        factory=lambda: c.SECONDS_PER_DAY, validator=attrs.validators.gt(0)
    )
    """
    Factor converting snapshot rates to reported rates.

    Snapshots carry SI rates (m³/s) while summaries report per day, so the
    default is the number of seconds in a day.
    """
    time_scale: float = attrs.field(
        factory=lambda: 1 / c.SECONDS_PER_DAY, validator=attrs.validators.gt(0)
    )
    """Factor converting step times (seconds) to reported times (days)."""
    pressure_scale: float = attrs.field(
        factory=lambda: c.BARS_PER_PASCAL, validator=attrs.validators.gt(0)
    )
    """Factor converting snapshot pressures (Pa) to reported pressures (bar)."""
    field_name: str = attrs.field(
        factory=lambda: c.FIELD_NAME, validator=attrs.validators.min_len(1)
    )
    """Entity name used for field level keywords."""
    log_interval: int = attrs.field(default=10, validator=attrs.validators.ge(1))
    """Interval (in ingested steps) at which to log progress."""
    warn_mixed_flow: bool = True
    """Whether to warn about wells producing one phase while injecting another."""
