"""
Grain size distribution curve assembly.

This module merges sieve and hydrometer results into a single curve per sample
and aligns several samples onto a shared particle size axis so that their
curves can be compared and tabulated side by side.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from grainsize.core.hydrometer import compute_hydrometer_points
from grainsize.core.models import (
    AlignedRow, AnalysisFile, ChartPoint, DataSource, GradationRow, HydrometerPoint, SampleCurve
)
from grainsize.utils.constants import (
    CURVE_MATCH_TOLERANCE, PLOT_MAX_PARTICLE_SIZE, PLOT_MIN_PARTICLE_SIZE, STANDARD_AXIS_SIZES
)

logger = logging.getLogger(__name__)

def _in_plot_domain(size: float) -> bool:
    return PLOT_MIN_PARTICLE_SIZE <= size <= PLOT_MAX_PARTICLE_SIZE

def assemble_curve(sieve_rows: Sequence[GradationRow],
                   hydrometer_points: Optional[Sequence[HydrometerPoint]] = None) -> List[ChartPoint]:
    """
    Merge sieve rows and hydrometer points into one curve.

    Points of both kinds are kept even where their sizes coincide. Hydrometer
    percent finer is clamped to 0-100 like sieve percent passing.

    Args:
        sieve_rows: Gradation rows of the sample
        hydrometer_points: Hydrometer points of the sample, if any

    Returns:
        Chart points sorted by descending particle size
    """
    points = [
        ChartPoint(row.sieve_size_mm, row.percent_passing, DataSource.SIEVE)
        for row in sieve_rows
        if row.sieve_size_mm > 0
    ]
    points.extend(
        ChartPoint(p.particle_size_mm, max(0.0, min(100.0, p.percent_finer)), DataSource.HYDROMETER)
        for p in hydrometer_points or []
        if p.particle_size_mm > 0
    )

    points = [p for p in points if _in_plot_domain(p.particle_size_mm)]
    return sorted(points, key=lambda p: p.particle_size_mm, reverse=True)

def curve_for_analysis_file(analysis_file: AnalysisFile) -> List[ChartPoint]:
    """Assemble the curve of a loaded analysis file, including hydrometer data."""
    hydrometer_points = None
    ctx = analysis_file.temperature_data
    if ctx is not None:
        if ctx.specific_gravity is None and analysis_file.file_info.specific_gravity:
            ctx = replace(ctx, specific_gravity=analysis_file.file_info.specific_gravity)
        hydrometer_points = compute_hydrometer_points(ctx, analysis_file.sieve_data)
    return assemble_curve(analysis_file.sieve_data, hydrometer_points)

def interpolate_percent_passing(curve: Sequence[ChartPoint], size_mm: float) -> Optional[float]:
    """
    Percent passing of a curve at an arbitrary particle size.

    Interpolates linearly in log10(size) between the bracketing points. Sizes
    beyond the measured range take the nearest end point's value.

    Args:
        curve: Curve points in any order
        size_mm: Particle size to evaluate

    Returns:
        Percent passing, or None for an empty curve
    """
    if not curve:
        return None

    points = sorted(curve, key=lambda p: p.particle_size_mm, reverse=True)

    for point in points:
        if abs(point.particle_size_mm - size_mm) < CURVE_MATCH_TOLERANCE:
            return point.percent_passing

    upper = None
    lower = None
    for point in points:
        if point.particle_size_mm > size_mm:
            upper = point
        else:
            lower = point
            break

    if upper is None:
        return lower.percent_passing
    if lower is None:
        return upper.percent_passing

    log_target, log_upper, log_lower = np.log10([size_mm, upper.particle_size_mm, lower.particle_size_mm])
    if log_upper == log_lower:
        return upper.percent_passing

    ratio = (log_target - log_upper) / (log_lower - log_upper)
    return float(upper.percent_passing + ratio * (lower.percent_passing - upper.percent_passing))

def shared_axis(samples: Sequence[SampleCurve], include_standard_sizes: bool = True) -> List[float]:
    """Union of all sample particle sizes and the standard reference sizes."""
    sizes = {p.particle_size_mm for sample in samples for p in sample.curve}
    if include_standard_sizes:
        sizes.update(float(s) for s in STANDARD_AXIS_SIZES)

    return sorted((s for s in sizes if _in_plot_domain(s)), reverse=True)

def align_samples(samples: Sequence[SampleCurve],
                  extrapolate_fines: bool = False,
                  include_standard_sizes: bool = True) -> List[AlignedRow]:
    """
    Resolve every sample's percent passing on a shared particle size axis.

    Args:
        samples: Sample curves to compare
        extrapolate_fines: Carry each sample's finest measured value to finer
            axis sizes instead of leaving them empty
        include_standard_sizes: Add the standard reference sizes to the axis

    Returns:
        One row per axis size, largest first
    """
    axis = shared_axis(samples, include_standard_sizes)

    finest = {
        s.sample_id: min(p.particle_size_mm for p in s.curve)
        for s in samples if s.curve
    }

    rows = []
    for size in axis:
        values: Dict[str, Optional[float]] = {}
        for sample in samples:
            if sample.sample_id not in finest:
                values[sample.sample_id] = None
            elif not extrapolate_fines and size < finest[sample.sample_id] - CURVE_MATCH_TOLERANCE:
                values[sample.sample_id] = None
            else:
                values[sample.sample_id] = interpolate_percent_passing(sample.curve, size)
        rows.append(AlignedRow(particle_size_mm=size, values=values))

    logger.debug(f"Aligned {len(samples)} samples on {len(axis)} axis sizes")
    return rows

def alignment_to_dataframe(rows: Sequence[AlignedRow],
                           samples: Sequence[SampleCurve]) -> pd.DataFrame:
    """
    Tabulate aligned rows with one column per sample.

    Args:
        rows: Output of align_samples
        samples: Samples that were aligned

    Returns:
        DataFrame indexed by particle size (mm); missing values are NaN
    """
    columns = {s.sample_id: s.name or s.sample_id for s in samples}
    if len(set(columns.values())) != len(columns):
        columns = {s.sample_id: s.sample_id for s in samples}

    data = [
        {columns[sample_id]: (np.nan if value is None else value)
         for sample_id, value in row.values.items()}
        for row in rows
    ]

    df = pd.DataFrame(data, columns=list(columns.values()),
                      index=pd.Index([r.particle_size_mm for r in rows], name="particle_size_mm"))
    return df.astype(float)
