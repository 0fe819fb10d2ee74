"""
Data validation for sieve and hydrometer input and saved analysis files.

The calculation modules assume numeric, complete input. The checks here are
applied before an analysis is computed and when a saved analysis is loaded.
"""

import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from dataclasses import dataclass
from enum import Enum

from grainsize.core.models import AnalysisResult, SieveMeasurement, TemperatureContext
from grainsize.core.gradation import pan_mass
from grainsize.utils.constants import (
    HYDROMETER_SCHEDULE_MINUTES, MIN_PAN_MASS_G, PERCENT_SUM_TOLERANCE, SIEVE_SIZE_TOLERANCE
)

logger = logging.getLogger(__name__)

NUMERIC_INPUT_RE = re.compile(r"^\d*\.?\d*$")

SIEVE_ROW_FIELDS = [
    'sieveSize', 'massRetained', 'cumulativeMassRetained', 'percentRetained',
    'cumulativePercentRetained', 'percentPassing'
]
ANALYSIS_RESULT_FIELDS = [
    'd10', 'd30', 'd60', 'effectiveSize', 'uniformityCoefficient', 'coefficientOfCurvature',
    'gravelPercent', 'sandPercent', 'finesPercent', 'totalMassRetained', 'panMass'
]

class ValidationSeverity(Enum):
    """Validation result severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    severity: ValidationSeverity
    message: str
    field_name: Optional[str] = None
    suggested_value: Optional[Any] = None

def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)

def _parses_as_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True

class AnalysisValidator:
    """Validation of sieve analysis input and results."""

    def __init__(self):
        """Initialize validator with an empty result list."""
        self.validation_results: List[ValidationResult] = []

    def clear_results(self):
        """Clear previous validation results."""
        self.validation_results.clear()

    def add_result(self, result: ValidationResult):
        """Add validation result to the list."""
        self.validation_results.append(result)

    def get_results(self) -> List[ValidationResult]:
        """Get all validation results."""
        return self.validation_results.copy()

    def has_errors(self) -> bool:
        """Check if any validation errors exist."""
        return any(r.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
                   for r in self.validation_results)

    def has_warnings(self) -> bool:
        """Check if any validation warnings exist."""
        return any(r.severity == ValidationSeverity.WARNING
                   for r in self.validation_results)

    def _error(self, message: str, field_name: Optional[str] = None,
               suggested_value: Optional[Any] = None):
        self.add_result(ValidationResult(
            is_valid=False,
            severity=ValidationSeverity.ERROR,
            message=message,
            field_name=field_name,
            suggested_value=suggested_value
        ))

    def _warning(self, message: str, field_name: Optional[str] = None,
                 suggested_value: Optional[Any] = None):
        self.add_result(ValidationResult(
            is_valid=False,
            severity=ValidationSeverity.WARNING,
            message=message,
            field_name=field_name,
            suggested_value=suggested_value
        ))

    def validate_numeric_text(self, value: str, field_name: str) -> bool:
        """
        Validate a form entry that must hold an unsigned decimal number.

        Args:
            value: Raw text entered by the user
            field_name: Name of the form field

        Returns:
            True if the text is empty or numeric
        """
        if not NUMERIC_INPUT_RE.match(value.strip()):
            self._error(f"Only numeric input is allowed: {value!r}", field_name)
            return False
        return True

    def validate_total_mass(self, total_mass_g: Optional[float]) -> bool:
        """Validate that a positive total sample mass was entered."""
        if total_mass_g is None or not _is_finite_number(total_mass_g) or total_mass_g <= 0:
            self._error(f"Total mass must be a positive number: {total_mass_g}", "total_mass")
            return False
        return True

    def validate_sieve_stack(self, sieves: Sequence[SieveMeasurement]) -> bool:
        """
        Validate sieve sizes and retained masses.

        Args:
            sieves: Sieve measurements

        Returns:
            True if the stack is usable
        """
        is_valid = True

        if not sieves:
            self._error("At least one sieve is required", "sieves")
            return False

        seen: List[float] = []
        for sieve in sieves:
            if not _is_finite_number(sieve.sieve_size_mm) or sieve.sieve_size_mm <= 0:
                self._error(f"Sieve size must be positive: {sieve.sieve_size_mm}", sieve.label)
                is_valid = False
            elif any(abs(sieve.sieve_size_mm - s) < SIEVE_SIZE_TOLERANCE for s in seen):
                self._error(f"Duplicate sieve size: {sieve.sieve_size_mm} mm", sieve.label)
                is_valid = False
            else:
                seen.append(sieve.sieve_size_mm)

            if not _is_finite_number(sieve.mass_retained_g) or sieve.mass_retained_g < 0:
                self._error(f"Mass retained on {sieve.label} must be zero or more: {sieve.mass_retained_g}",
                            sieve.label)
                is_valid = False

        return is_valid

    def validate_pan_mass(self, sieves: Sequence[SieveMeasurement], total_mass_g: float) -> bool:
        """
        Validate the mass left in the pan.

        Args:
            sieves: Sieve measurements
            total_mass_g: Total sample mass

        Returns:
            True if at least the minimum pan mass remains
        """
        remaining = pan_mass(sieves, total_mass_g)
        if remaining < MIN_PAN_MASS_G:
            self._error(f"Pan mass {remaining:.2f} g is below {MIN_PAN_MASS_G} g; check the retained masses",
                        "pan_mass", suggested_value=MIN_PAN_MASS_G)
            return False
        return True

    def validate_hydrometer_readings(self, readings: Mapping[int, Union[str, float, None]]) -> bool:
        """
        Validate that every scheduled hydrometer reading was entered.

        Args:
            readings: Reading keyed by elapsed time in minutes

        Returns:
            True if all scheduled readings are present and numeric
        """
        missing = [t for t in HYDROMETER_SCHEDULE_MINUTES
                   if readings.get(t) is None or str(readings.get(t)).strip() == ""]
        if missing:
            self._error(f"Missing hydrometer readings at {', '.join(str(t) for t in missing)} minutes",
                        "hydrometer_readings")
            return False

        is_valid = True
        for time_minutes in HYDROMETER_SCHEDULE_MINUTES:
            value = readings[time_minutes]
            if isinstance(value, str):
                if not self.validate_numeric_text(value, f"hydrometer_{time_minutes}"):
                    is_valid = False
                elif not _parses_as_number(value):
                    self._error(f"Hydrometer reading at {time_minutes} min is not a number: {value!r}",
                                f"hydrometer_{time_minutes}")
                    is_valid = False
            elif not _is_finite_number(value):
                self._error(f"Hydrometer reading at {time_minutes} min is not a number: {value}",
                            f"hydrometer_{time_minutes}")
                is_valid = False

        unscheduled = sorted(set(readings) - set(HYDROMETER_SCHEDULE_MINUTES))
        if unscheduled:
            self._warning(f"Readings at unscheduled times are ignored: {unscheduled}", "hydrometer_readings")

        return is_valid

    def validate_temperature_context(self, ctx: TemperatureContext) -> bool:
        """Validate hydrometer test conditions."""
        is_valid = True

        if ctx.specimen_weight_g <= 0:
            self._error(f"Specimen weight must be positive: {ctx.specimen_weight_g}", "specimen_weight")
            is_valid = False

        if not float(ctx.temperature_c).is_integer() or not (15 <= ctx.temperature_c <= 25):
            self._warning(f"No viscosity calibration at {ctx.temperature_c} °C; 20 °C value will be used",
                          "temperature")

        if ctx.specific_gravity is not None and ctx.specific_gravity <= 1:
            self._error(f"Specific gravity must exceed 1: {ctx.specific_gravity}", "specific_gravity")
            is_valid = False

        return is_valid

    def validate_gradation_result(self, result: AnalysisResult) -> bool:
        """
        Validate an analysis result.

        Args:
            result: Analysis result to check

        Returns:
            True if the result is internally consistent
        """
        is_valid = True

        for key in ['gravel_percent', 'sand_percent', 'fines_percent']:
            value = getattr(result, key)
            if not (-PERCENT_SUM_TOLERANCE <= value <= 100 + PERCENT_SUM_TOLERANCE):
                self._error(f"{key} must be between 0 and 100: {value}", key)
                is_valid = False

        total = result.gravel_percent + result.sand_percent + result.fines_percent
        if abs(total - 100.0) > PERCENT_SUM_TOLERANCE:
            self._warning(f"Gradation percentages sum to {total}%, should be 100%", "gradation_total")

        for d_val in ['d10', 'd30', 'd60']:
            value = getattr(result, d_val)
            if value < 0:
                self._error(f"{d_val} must not be negative: {value}", d_val)
                is_valid = False

        # Uniformity coefficient (Cu = d60/d10)
        if result.d10 > 0:
            calculated_cu = result.d60 / result.d10
            if abs(result.uniformity_coefficient - calculated_cu) > 0.01 * calculated_cu:
                self._warning(f"Stored Cu ({result.uniformity_coefficient}) differs from calculated Cu "
                              f"({calculated_cu:.2f})", "uniformity_coefficient", calculated_cu)

        # Coefficient of curvature (Cc = d30²/(d60*d10))
        if result.d10 > 0 and result.d60 > 0:
            calculated_cc = result.d30 ** 2 / (result.d10 * result.d60)
            if abs(result.coefficient_of_curvature - calculated_cc) > 0.01 * calculated_cc:
                self._warning(f"Stored Cc ({result.coefficient_of_curvature}) differs from calculated Cc "
                              f"({calculated_cc:.3f})", "coefficient_of_curvature", calculated_cc)

        return is_valid

    def validate_atterberg_limits(self, liquid_limit: float, plastic_limit: float) -> bool:
        """
        Validate Atterberg limits entered with the sample.

        Args:
            liquid_limit: Liquid limit (%), 0 if not measured
            plastic_limit: Plastic limit (%), 0 if not measured

        Returns:
            True if the limits are consistent
        """
        is_valid = True

        for limit_name, limit_value in [('liquid_limit', liquid_limit), ('plastic_limit', plastic_limit)]:
            if not (0 <= limit_value <= 200):
                self._error(f"{limit_name} must be between 0 and 200: {limit_value}", limit_name)
                is_valid = False

        if liquid_limit > 0 and plastic_limit > liquid_limit:
            self._error(f"Plastic limit ({plastic_limit}) cannot exceed liquid limit ({liquid_limit})",
                        "atterberg_limits")
            is_valid = False

        if (liquid_limit > 0) != (plastic_limit > 0):
            self._warning("Only one Atterberg limit entered; plasticity will not be evaluated",
                          "atterberg_limits")

        return is_valid

    def validate_file_sections(self, data: Dict[str, Any]) -> bool:
        """
        Validate the data sections of a saved analysis file.

        Args:
            data: Parsed JSON document

        Returns:
            True if the sieve data and analysis results are usable
        """
        is_valid = True

        sieve_data = data.get('sieveData')
        if not isinstance(sieve_data, list) or not sieve_data:
            self._error("Analysis file has no sieve data", "sieveData")
            is_valid = False
        else:
            sizes: List[float] = []
            for index, row in enumerate(sieve_data):
                if not isinstance(row, dict):
                    self._error(f"Sieve row {index} is not an object", "sieveData")
                    is_valid = False
                    continue
                for key in SIEVE_ROW_FIELDS:
                    if key in row and not _is_finite_number(row[key]):
                        self._error(f"Sieve row {index} field {key} is not a finite number: {row[key]}",
                                    "sieveData")
                        is_valid = False
                size = row.get('sieveSize')
                if _is_finite_number(size):
                    if any(abs(size - s) < SIEVE_SIZE_TOLERANCE for s in sizes):
                        self._error(f"Duplicate sieve size in file: {size}", "sieveData")
                        is_valid = False
                    sizes.append(size)

        results = data.get('analysisResults')
        if not isinstance(results, dict):
            self._error("Analysis file has no analysis results", "analysisResults")
            is_valid = False
        else:
            for key in ANALYSIS_RESULT_FIELDS:
                if not _is_finite_number(results.get(key)):
                    self._error(f"Analysis result {key} is missing or not a finite number", "analysisResults")
                    is_valid = False

        return is_valid

def validate_sieve_input(sieves: Sequence[SieveMeasurement],
                         total_mass_g: Optional[float]) -> Tuple[bool, List[ValidationResult]]:
    """
    Validate sieve input before computing a gradation.

    Args:
        sieves: Sieve measurements
        total_mass_g: Total sample mass

    Returns:
        Tuple of (is_valid, validation_results)
    """
    validator = AnalysisValidator()

    mass_ok = validator.validate_total_mass(total_mass_g)
    stack_ok = validator.validate_sieve_stack(sieves)
    if mass_ok and stack_ok:
        validator.validate_pan_mass(sieves, total_mass_g)

    return not validator.has_errors(), validator.get_results()

def validate_analysis_file_data(data: Dict[str, Any]) -> Tuple[bool, List[ValidationResult]]:
    """
    Validate a parsed analysis file.

    Args:
        data: Parsed JSON document

    Returns:
        Tuple of (is_valid, validation_results)
    """
    validator = AnalysisValidator()
    validator.validate_file_sections(data)

    file_info = data.get('fileInfo') or {}
    ll = file_info.get('liquidLimit', 0)
    pl = file_info.get('plasticLimit', 0)
    if _is_finite_number(ll) and _is_finite_number(pl):
        validator.validate_atterberg_limits(ll, pl)

    return not validator.has_errors(), validator.get_results()
