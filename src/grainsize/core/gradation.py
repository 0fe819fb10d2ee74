"""
Gradation calculation engine for sieve analysis data.

This module turns retained masses on a sieve stack into cumulative retained and
passing percentages, reads characteristic diameters off the gradation curve and
derives the gradation coefficients and soil fractions.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from grainsize.core.models import (
    AnalysisResult, GradationAnalysis, GradationRow, SieveMeasurement
)
from grainsize.utils.constants import (
    CHARACTERISTIC_DIAMETERS, GRAVEL_SAND_BOUNDARY_MM, SAND_FINES_BOUNDARY_MM,
    SIEVE_SIZE_TOLERANCE, STANDARD_SIEVE_STACK, SUPPLEMENTARY_DIAMETERS
)

logger = logging.getLogger(__name__)

class GradationCalculator:
    """Calculator for sieve analysis gradation results."""

    def compute(self, sieves: Sequence[SieveMeasurement],
                total_mass_g: float) -> GradationAnalysis:
        """
        Compute gradation rows and the analysis result.

        Args:
            sieves: Sieve measurements in any order
            total_mass_g: Total dry mass of the sample

        Returns:
            Gradation rows sorted largest sieve first and their analysis result
        """
        rows = self.build_rows(sieves, total_mass_g)

        diameters = {
            name: self.interpolate_particle_size(rows, percent)
            for name, percent in {**CHARACTERISTIC_DIAMETERS, **SUPPLEMENTARY_DIAMETERS}.items()
        }
        d10, d30, d60 = diameters['d10'], diameters['d30'], diameters['d60']

        uniformity_coefficient = d60 / d10 if d10 > 0 else 0.0
        coefficient_of_curvature = (d30 * d30) / (d10 * d60) if d10 > 0 and d60 > 0 else 0.0

        gravel_percent = self.cumulative_percent_retained_at(rows, GRAVEL_SAND_BOUNDARY_MM)
        fines_percent = self.percent_passing_at(rows, SAND_FINES_BOUNDARY_MM)
        sand_percent = 100.0 - gravel_percent - fines_percent

        total_retained = rows[-1].cumulative_mass_retained_g if rows else 0.0

        result = AnalysisResult(
            d10=d10,
            d30=d30,
            d60=d60,
            effective_size=d10,
            uniformity_coefficient=uniformity_coefficient,
            coefficient_of_curvature=coefficient_of_curvature,
            gravel_percent=gravel_percent,
            sand_percent=sand_percent,
            fines_percent=fines_percent,
            total_mass_retained_g=total_retained,
            pan_mass_g=total_mass_g - total_retained,
            d15=diameters['d15'],
            d50=diameters['d50'],
            d85=diameters['d85'],
        )

        logger.debug(f"Gradation computed: D10={d10:.4f} D30={d30:.4f} D60={d60:.4f} "
                     f"Cu={uniformity_coefficient:.2f} Cc={coefficient_of_curvature:.2f}")

        return GradationAnalysis(rows=rows, result=result)

    def build_rows(self, sieves: Sequence[SieveMeasurement],
                   total_mass_g: float) -> List[GradationRow]:
        """Sort sieves largest first and accumulate retained mass."""
        if total_mass_g <= 0:
            logger.warning(f"Non-positive total mass {total_mass_g}; percentages set to zero")

        rows = []
        cumulative_mass = 0.0

        for sieve in sorted(sieves, key=lambda s: s.sieve_size_mm, reverse=True):
            cumulative_mass += sieve.mass_retained_g

            if total_mass_g > 0:
                percent_retained = sieve.mass_retained_g / total_mass_g * 100
                cumulative_percent = cumulative_mass / total_mass_g * 100
            else:
                percent_retained = 0.0
                cumulative_percent = 0.0

            rows.append(GradationRow(
                sieve_size_mm=sieve.sieve_size_mm,
                label=sieve.label,
                mass_retained_g=sieve.mass_retained_g,
                cumulative_mass_retained_g=cumulative_mass,
                percent_retained=percent_retained,
                cumulative_percent_retained=cumulative_percent,
                percent_passing=max(0.0, min(100.0, 100.0 - cumulative_percent))
            ))

        return rows

    def interpolate_particle_size(self, rows: Sequence[GradationRow],
                                  target_percent_passing: float) -> float:
        """
        Read the particle size at a percent passing off the gradation curve.

        Sizes are interpolated linearly in log10(size) between the two rows that
        bracket the target. Targets outside the curve clamp to the largest or
        smallest sieve size.

        Args:
            rows: Gradation rows sorted largest sieve first
            target_percent_passing: Percent passing to read the size at

        Returns:
            Particle size in mm, or 0 when there are no rows
        """
        if not rows:
            return 0.0

        for upper, lower in zip(rows, rows[1:]):
            p_upper = upper.percent_passing
            p_lower = lower.percent_passing

            if p_upper >= target_percent_passing >= p_lower:
                if p_upper == p_lower or target_percent_passing == p_upper:
                    return upper.sieve_size_mm
                if target_percent_passing == p_lower:
                    return lower.sieve_size_mm
                if upper.sieve_size_mm <= 0 or lower.sieve_size_mm <= 0:
                    return upper.sieve_size_mm

                log_upper = math.log10(upper.sieve_size_mm)
                log_lower = math.log10(lower.sieve_size_mm)
                log_d = log_upper + (log_lower - log_upper) * (p_upper - target_percent_passing) / (p_upper - p_lower)
                return 10 ** log_d

        if target_percent_passing > rows[0].percent_passing:
            return rows[0].sieve_size_mm
        return rows[-1].sieve_size_mm

    def cumulative_percent_retained_at(self, rows: Sequence[GradationRow],
                                       sieve_size_mm: float) -> float:
        """Cumulative percent retained on a sieve, 0 if the sieve is absent."""
        row = self._find_row(rows, sieve_size_mm)
        return row.cumulative_percent_retained if row else 0.0

    def percent_passing_at(self, rows: Sequence[GradationRow],
                           sieve_size_mm: float) -> float:
        """Percent passing a sieve, 100 if the sieve is absent."""
        row = self._find_row(rows, sieve_size_mm)
        return row.percent_passing if row else 100.0

    def _find_row(self, rows: Sequence[GradationRow],
                  sieve_size_mm: float) -> Optional[GradationRow]:
        return next((r for r in rows if abs(r.sieve_size_mm - sieve_size_mm) < SIEVE_SIZE_TOLERANCE), None)

# Convenience functions
def compute_gradation(sieves: Sequence[SieveMeasurement],
                      total_mass_g: float) -> GradationAnalysis:
    """
    Compute gradation rows and analysis result for a sieve stack.

    Args:
        sieves: Sieve measurements
        total_mass_g: Total dry mass of the sample

    Returns:
        Gradation analysis with rows and result
    """
    return GradationCalculator().compute(sieves, total_mass_g)

def standard_sieve_stack(masses: Optional[Dict[float, float]] = None) -> List[SieveMeasurement]:
    """
    Build the standard 10-sieve stack.

    Args:
        masses: Mass retained keyed by sieve size in mm; missing sieves get 0

    Returns:
        Sieve measurements, largest first
    """
    masses = masses or {}
    return [
        SieveMeasurement(sieve_size_mm=size, label=label, mass_retained_g=masses.get(size, 0.0))
        for size, label in STANDARD_SIEVE_STACK
    ]

def pan_mass(sieves: Sequence[SieveMeasurement], total_mass_g: float) -> float:
    """Mass left in the pan after all sieves."""
    return total_mass_g - sum(s.mass_retained_g for s in sieves)

def sieves_from_rows(rows: Sequence[GradationRow]) -> List[SieveMeasurement]:
    """Strip derived fields from gradation rows."""
    return [SieveMeasurement(r.sieve_size_mm, r.label, r.mass_retained_g) for r in rows]
