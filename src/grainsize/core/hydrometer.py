"""
Hydrometer analysis for the fraction passing the #200 sieve.

Readings are converted to equivalent particle diameters with Stokes' law and to
percent finer, scaled so the hydrometer curve continues the sieve curve at the
#200 sieve.
"""

import logging
import math
from typing import List, Optional, Sequence

from grainsize.core.models import (
    AnalysisResult, GradationRow, HydrometerPoint, HydrometerReading, TemperatureContext
)
from grainsize.utils.constants import (
    DEFAULT_DISPERSANT_CORRECTION, DEFAULT_MENISCUS_CORRECTION, DEFAULT_SPECIFIC_GRAVITY,
    DEFAULT_SPECIMEN_WEIGHT_G, DEFAULT_TEMPERATURE_C, DEFAULT_VISCOSITY_TEMPERATURE,
    GRAVITY, HYDROMETER_CONSTANT, HYDROMETER_DEPTH_INTERCEPT, HYDROMETER_DEPTH_SLOPE,
    HYDROMETER_SCHEDULE_MINUTES, SAND_FINES_BOUNDARY_MM, SIEVE_SIZE_TOLERANCE,
    WATER_VISCOSITY_TABLE
)

logger = logging.getLogger(__name__)

def get_water_viscosity(temperature_c: float) -> float:
    """
    Dynamic viscosity of water in Pa·s.

    Only whole-degree temperatures in the table are matched; anything else
    uses the 20 °C value.
    """
    if float(temperature_c).is_integer() and int(temperature_c) in WATER_VISCOSITY_TABLE:
        return WATER_VISCOSITY_TABLE[int(temperature_c)]

    logger.debug(f"No viscosity entry for {temperature_c} °C, using {DEFAULT_VISCOSITY_TEMPERATURE} °C")
    return WATER_VISCOSITY_TABLE[DEFAULT_VISCOSITY_TEMPERATURE]

def effective_depth(reading: float) -> float:
    """Effective depth (m) of a 151H hydrometer at the given reading."""
    return HYDROMETER_DEPTH_INTERCEPT - HYDROMETER_DEPTH_SLOPE * reading

def stokes_diameter(viscosity: float, depth_m: float, time_minutes: float,
                    specific_gravity: float = DEFAULT_SPECIFIC_GRAVITY) -> float:
    """
    Equivalent particle diameter from Stokes' law.

    Args:
        viscosity: Water viscosity (Pa·s)
        depth_m: Effective depth (m)
        time_minutes: Elapsed sedimentation time
        specific_gravity: Specific gravity of soil solids

    Returns:
        Diameter in mm, 0 when the inputs give no real settling velocity
    """
    denominator = (specific_gravity - 1) * GRAVITY * time_minutes * 60
    if denominator <= 0 or depth_m <= 0 or viscosity <= 0:
        return 0.0

    return math.sqrt(18 * viscosity * depth_m / denominator) * 1000

def corrected_reading(raw_reading: float, ctx: TemperatureContext) -> float:
    return raw_reading - ctx.meniscus_correction - ctx.dispersant_correction

def unscaled_percent_finer(raw_reading: float, ctx: TemperatureContext) -> float:
    """Percent finer relative to the hydrometer specimen only."""
    if ctx.specimen_weight_g <= 0:
        return 0.0
    return corrected_reading(raw_reading, ctx) * HYDROMETER_CONSTANT / ctx.specimen_weight_g * 100

def fines_scaling_factor(sieve_rows: Sequence[GradationRow]) -> float:
    """Fraction of the whole sample passing #200, 1 if the sieve is absent."""
    sieve_200 = next(
        (r for r in sieve_rows if abs(r.sieve_size_mm - SAND_FINES_BOUNDARY_MM) < SIEVE_SIZE_TOLERANCE),
        None
    )
    return sieve_200.percent_passing / 100 if sieve_200 else 1.0

def compute_hydrometer_points(ctx: TemperatureContext,
                              sieve_rows: Sequence[GradationRow]) -> List[HydrometerPoint]:
    """
    Translate hydrometer readings into curve points.

    Args:
        ctx: Test conditions and readings
        sieve_rows: Gradation rows of the same sample

    Returns:
        Hydrometer points sorted by descending particle size
    """
    viscosity = get_water_viscosity(ctx.temperature_c)
    specific_gravity = ctx.specific_gravity or DEFAULT_SPECIFIC_GRAVITY
    scaling = fines_scaling_factor(sieve_rows)

    points = []
    for reading in ctx.readings:
        particle_size = stokes_diameter(
            viscosity,
            effective_depth(reading.raw_reading),
            reading.time_minutes,
            specific_gravity
        )
        points.append(HydrometerPoint(
            time_minutes=reading.time_minutes,
            particle_size_mm=particle_size,
            percent_finer=unscaled_percent_finer(reading.raw_reading, ctx) * scaling
        ))

    return sorted(points, key=lambda p: p.particle_size_mm, reverse=True)

def specimen_weight_for(result: AnalysisResult, total_mass_g: float) -> float:
    """Mass of the sample passing #200, used as the hydrometer specimen."""
    if result.fines_percent:
        return result.fines_percent / 100 * total_mass_g
    return DEFAULT_SPECIMEN_WEIGHT_G

def default_temperature_context(result: AnalysisResult, total_mass_g: float,
                                raw_readings: Sequence[float],
                                specific_gravity: Optional[float] = None) -> TemperatureContext:
    """
    Build a hydrometer context with the laboratory's standard test conditions.

    Args:
        result: Sieve analysis result of the sample
        total_mass_g: Total dry mass of the sample
        raw_readings: One reading per scheduled time, in schedule order
        specific_gravity: Sample specific gravity, if measured

    Returns:
        Temperature context
    """
    readings = [
        HydrometerReading(time_minutes=t, raw_reading=r)
        for t, r in zip(HYDROMETER_SCHEDULE_MINUTES, raw_readings)
    ]
    return TemperatureContext(
        temperature_c=DEFAULT_TEMPERATURE_C,
        meniscus_correction=DEFAULT_MENISCUS_CORRECTION,
        dispersant_correction=DEFAULT_DISPERSANT_CORRECTION,
        specimen_weight_g=specimen_weight_for(result, total_mass_g),
        readings=readings,
        specific_gravity=specific_gravity or None
    )
