"""
JSON export engine for sieve analysis files.

This module writes a completed analysis (sample information, gradation rows,
analysis results and hydrometer conditions) to the analysis file format so it
can be reloaded or compared with other samples later.
"""

import json
import logging
from typing import Dict, Optional, Any, Sequence, Union
from datetime import datetime
from pathlib import Path
import gzip

from grainsize.core.models import (
    AnalysisFile, AnalysisResult, GradationRow, SampleInfo, TemperatureContext
)
from grainsize.core.validators import AnalysisValidator
from grainsize.utils.constants import (
    ANALYSIS_FILE_EXTENSION, ANALYSIS_FILE_VERSION, HYDROMETER_TYPE, INPUT_DATA_METHOD
)

logger = logging.getLogger(__name__)

def sample_info_to_dict(info: SampleInfo) -> Dict[str, Any]:
    return {
        'fileName': info.file_name,
        'sampleId': info.sample_id,
        'location': info.location,
        'depth': info.depth,
        'testDate': info.test_date,
        'totalMass': info.total_mass,
        'specificGravity': info.specific_gravity,
        'liquidLimit': info.liquid_limit,
        'plasticLimit': info.plastic_limit,
    }

def gradation_row_to_dict(row: GradationRow) -> Dict[str, Any]:
    return {
        'sieveSize': row.sieve_size_mm,
        'sieveOpening': row.label,
        'massRetained': row.mass_retained_g,
        'cumulativeMassRetained': row.cumulative_mass_retained_g,
        'percentRetained': row.percent_retained,
        'cumulativePercentRetained': row.cumulative_percent_retained,
        'percentPassing': row.percent_passing,
    }

def analysis_result_to_dict(result: AnalysisResult) -> Dict[str, Any]:
    return {
        'd10': result.d10,
        'd30': result.d30,
        'd60': result.d60,
        'effectiveSize': result.effective_size,
        'uniformityCoefficient': result.uniformity_coefficient,
        'coefficientOfCurvature': result.coefficient_of_curvature,
        'gravelPercent': result.gravel_percent,
        'sandPercent': result.sand_percent,
        'finesPercent': result.fines_percent,
        'totalMassRetained': result.total_mass_retained_g,
        'panMass': result.pan_mass_g,
        'd15': result.d15,
        'd50': result.d50,
        'd85': result.d85,
    }

def temperature_context_to_dict(ctx: TemperatureContext) -> Dict[str, Any]:
    data = {
        'specimenWeight': ctx.specimen_weight_g,
        'temperature': ctx.temperature_c,
        'meniscusCorrection': ctx.meniscus_correction,
        'dispersantCorrection': ctx.dispersant_correction,
        'inputDataMethod': ctx.input_data_method,
        'totalDataPoints': len(ctx.readings),
        'hydrometerReadings': {str(r.time_minutes): r.raw_reading for r in ctx.readings},
    }
    if ctx.specific_gravity is not None:
        data['specificGravity'] = ctx.specific_gravity
    return data

class AnalysisFileExporter:
    """Handles exporting sieve analyses to the analysis file format."""

    def __init__(self, validate: bool = True):
        """
        Initialize exporter.

        Args:
            validate: Whether to validate analysis results before writing
        """
        self.validate = validate
        self.validator = AnalysisValidator()

    def build_file_data(self, sample_info: SampleInfo,
                        rows: Sequence[GradationRow],
                        result: AnalysisResult,
                        temperature_data: Optional[TemperatureContext] = None) -> Dict[str, Any]:
        """
        Build the analysis file document.

        Args:
            sample_info: Sample metadata
            rows: Gradation rows
            result: Analysis result
            temperature_data: Hydrometer test conditions, if a hydrometer test was run

        Returns:
            JSON-serializable document
        """
        return {
            'version': ANALYSIS_FILE_VERSION,
            'fileInfo': sample_info_to_dict(sample_info),
            'testMethod': {
                'inputDataMethod': INPUT_DATA_METHOD,
                'hydrometerType': HYDROMETER_TYPE,
            },
            'sieveData': [gradation_row_to_dict(row) for row in rows],
            'analysisResults': analysis_result_to_dict(result),
            'temperatureData': temperature_context_to_dict(temperature_data) if temperature_data else None,
            'exportDate': datetime.now().isoformat(),
        }

    def export_analysis(self, output_path: Union[str, Path],
                        sample_info: SampleInfo,
                        rows: Sequence[GradationRow],
                        result: AnalysisResult,
                        temperature_data: Optional[TemperatureContext] = None,
                        compress: bool = False) -> bool:
        """
        Export an analysis to file.

        Args:
            output_path: Output file path
            sample_info: Sample metadata
            rows: Gradation rows
            result: Analysis result
            temperature_data: Hydrometer test conditions
            compress: Whether to gzip the output

        Returns:
            True if export successful, False otherwise
        """
        try:
            if self.validate and not self._validate_export_data(rows, result):
                logger.error("Export validation failed")
                return False

            file_data = self.build_file_data(sample_info, rows, result, temperature_data)

            output_path = Path(output_path)
            if not output_path.suffix:
                output_path = output_path.with_suffix(ANALYSIS_FILE_EXTENSION)

            if compress:
                output_path = output_path.with_name(output_path.name + '.gz')
                with gzip.open(output_path, 'wt', encoding='utf-8') as f:
                    json.dump(file_data, f, indent=2, ensure_ascii=False, default=self._json_serializer)
            else:
                with open(output_path, 'w', encoding='utf-8') as f:
                    json.dump(file_data, f, indent=2, ensure_ascii=False, default=self._json_serializer)

            logger.info(f"Analysis {sample_info.sample_id or sample_info.file_name} exported to {output_path}")
            return True

        except OSError as e:
            logger.error(f"Export failed: {e}")
            return False

    def export_analysis_file(self, analysis_file: AnalysisFile,
                             output_path: Union[str, Path],
                             compress: bool = False) -> bool:
        """Re-export a loaded analysis file."""
        return self.export_analysis(
            output_path,
            analysis_file.file_info,
            analysis_file.sieve_data,
            analysis_file.analysis_results,
            analysis_file.temperature_data,
            compress
        )

    def _validate_export_data(self, rows: Sequence[GradationRow], result: AnalysisResult) -> bool:
        """Validate rows and result before writing."""
        self.validator.clear_results()

        if not rows:
            logger.error("No sieve data to export")
            return False

        self.validator.validate_gradation_result(result)
        for r in self.validator.get_results():
            if r.severity.value == 'warning':
                logger.warning(f"Validation warning: {r.message}")
            else:
                logger.error(f"Validation error: {r.message}")

        return not self.validator.has_errors()

    def _json_serializer(self, obj):
        """Custom JSON serializer for non-standard types."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

# Convenience functions
def export_analysis_to_file(output_path: Union[str, Path],
                            sample_info: SampleInfo,
                            rows: Sequence[GradationRow],
                            result: AnalysisResult,
                            temperature_data: Optional[TemperatureContext] = None,
                            compress: bool = False) -> bool:
    """
    Export an analysis to an analysis file.

    Args:
        output_path: Output file path
        sample_info: Sample metadata
        rows: Gradation rows
        result: Analysis result
        temperature_data: Hydrometer test conditions
        compress: Whether to compress the output

    Returns:
        True if export successful, False otherwise
    """
    exporter = AnalysisFileExporter()
    return exporter.export_analysis(output_path, sample_info, rows, result, temperature_data, compress)
