"""Battery temperature estimation.

There is no thermal sensor behind these numbers; the estimate is a linear
model over what the sensor collaborator can report. Two variants exist:

* **full**: baseline + CPU load term + depletion term + uptime term.
* **reduced**: baseline + depletion term, for callers without load data.

Keep them apart. A reduced estimate is systematically cooler than a full
one for the same device, so mixing them in one history skews comparisons.
"""

from __future__ import annotations

from pybattmon._constants import BASELINE_TEMP_C, CPU_LOAD_SPAN_C, DEPLETION_SPAN_C, UPTIME_C_PER_HOUR
from pybattmon.models.sample import DeviceSample, EstimatedSample, EstimatorVariant


def _depletion_term(battery_fraction: float) -> float:
    return (1.0 - battery_fraction) * DEPLETION_SPAN_C


def estimate_temperature_full(
    battery_fraction: float,
    cpu_load_pct: float,
    accumulated_uptime_hours: float,
) -> float:
    """Estimate °C from battery level, CPU load (0-100) and accumulated uptime hours."""
    return (
        BASELINE_TEMP_C
        + (cpu_load_pct / 100.0) * CPU_LOAD_SPAN_C
        + _depletion_term(battery_fraction)
        + accumulated_uptime_hours * UPTIME_C_PER_HOUR
    )


def estimate_temperature_reduced(battery_fraction: float) -> float:
    """Estimate °C from battery level alone."""
    return BASELINE_TEMP_C + _depletion_term(battery_fraction)


def estimate(sample: DeviceSample, accumulated_uptime_hours: float) -> EstimatedSample:
    """Derive an :class:`EstimatedSample`, using the full formula when load data exists."""
    cpu_load = sample.effective_cpu_load_pct
    if cpu_load is None:
        return EstimatedSample(
            timestamp_ms=sample.timestamp_ms,
            battery_pct=sample.battery_pct,
            temperature_c=estimate_temperature_reduced(sample.battery_fraction),
            cpu_load_pct=None,
            variant=EstimatorVariant.REDUCED,
        )
    return EstimatedSample(
        timestamp_ms=sample.timestamp_ms,
        battery_pct=sample.battery_pct,
        temperature_c=estimate_temperature_full(sample.battery_fraction, cpu_load, accumulated_uptime_hours),
        cpu_load_pct=cpu_load,
        variant=EstimatorVariant.FULL,
    )
