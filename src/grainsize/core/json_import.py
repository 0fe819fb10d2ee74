"""
JSON import engine for sieve analysis files.

This module loads saved analyses with version, schema and data integrity
checks, and imports several files at once for sample comparison.
"""

import json
import logging
import gzip
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Union, Tuple, Sequence
from pathlib import Path
import jsonschema

from grainsize.core.models import (
    AnalysisFile, AnalysisResult, GradationRow, HydrometerReading, SampleInfo, TemperatureContext
)
from grainsize.core.validators import ValidationResult, ValidationSeverity, validate_analysis_file_data
from grainsize.utils.constants import (
    ANALYSIS_FILE_EXTENSION, ANALYSIS_FILE_SCHEMA_PATH, ANALYSIS_FILE_VERSION,
    HYDROMETER_INPUT_METHOD, MAX_COMPARISON_FILES, SUPPORTED_ANALYSIS_FILE_VERSIONS
)

logger = logging.getLogger(__name__)

@dataclass
class ImportMessage:
    """Per-file outcome of a batch import."""
    file_name: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR

@dataclass
class BatchImportResult:
    """Files loaded by a batch import and the messages for rejected files."""
    files: List[AnalysisFile] = field(default_factory=list)
    messages: List[ImportMessage] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(m.severity == ValidationSeverity.ERROR for m in self.messages)

def is_analysis_file_name(path: Union[str, Path]) -> bool:
    """True for .gsa files and their gzip-compressed form."""
    name = Path(path).name.lower()
    return name.endswith(ANALYSIS_FILE_EXTENSION) or name.endswith(ANALYSIS_FILE_EXTENSION + '.gz')

class AnalysisFileImporter:
    """Handles importing sieve analyses from the analysis file format."""

    def __init__(self):
        """Initialize importer and load the file schema."""
        self.schema = self._load_json_schema()
        self.last_errors: List[str] = []

    def load_analysis_file(self, input_path: Union[str, Path],
                           validate_schema: bool = True) -> Optional[AnalysisFile]:
        """
        Load an analysis file.

        Args:
            input_path: Input file path
            validate_schema: Whether to validate against the JSON schema

        Returns:
            AnalysisFile if successful, None otherwise
        """
        self.last_errors = []

        json_data = self._load_json_file(input_path)
        if json_data is None:
            return None

        if not isinstance(json_data, dict):
            self._reject(f"{input_path} does not contain an analysis object")
            return None

        if not self._check_version_compatibility(json_data):
            return None

        if validate_schema and not self._validate_json_schema(json_data):
            return None

        is_valid, validation_results = validate_analysis_file_data(json_data)
        self._log_validation_results(validation_results)
        if not is_valid:
            self._reject(f"Analysis data validation failed for {input_path}")
            return None

        try:
            analysis_file = self.parse_analysis_data(json_data)
        except (KeyError, TypeError, ValueError) as e:
            self._reject(f"Failed to parse {input_path}: {e}")
            return None

        if not analysis_file.file_info.file_name:
            analysis_file.file_info.file_name = Path(input_path).name

        logger.info(f"Analysis file loaded: {input_path} ({len(analysis_file.sieve_data)} sieves)")
        return analysis_file

    def parse_analysis_data(self, json_data: Dict[str, Any]) -> AnalysisFile:
        """
        Convert a validated document into model objects.

        Args:
            json_data: Parsed analysis document

        Returns:
            AnalysisFile
        """
        temperature_data = json_data.get('temperatureData')

        return AnalysisFile(
            file_info=self._parse_file_info(json_data.get('fileInfo') or {}),
            sieve_data=[self._parse_sieve_row(row) for row in json_data['sieveData']],
            analysis_results=self._parse_analysis_results(json_data['analysisResults']),
            temperature_data=self._parse_temperature_data(temperature_data) if temperature_data else None,
            version=json_data.get('version', ANALYSIS_FILE_VERSION),
            export_date=json_data.get('exportDate')
        )

    def import_batch(self, input_paths: Sequence[Union[str, Path]]) -> BatchImportResult:
        """
        Import several analysis files for comparison.

        Rejected files get a message and the remaining files are still loaded.

        Args:
            input_paths: Input file paths

        Returns:
            BatchImportResult with the loaded files and per-file messages
        """
        batch = BatchImportResult()

        for index, input_path in enumerate(input_paths):
            file_name = Path(input_path).name

            if index >= MAX_COMPARISON_FILES:
                batch.messages.append(ImportMessage(
                    file_name,
                    f"Skipped: at most {MAX_COMPARISON_FILES} files can be compared",
                    ValidationSeverity.WARNING
                ))
                continue

            if not is_analysis_file_name(input_path):
                batch.messages.append(ImportMessage(
                    file_name,
                    f"Skipped: not a {ANALYSIS_FILE_EXTENSION} file"
                ))
                continue

            analysis_file = self.load_analysis_file(input_path)
            if analysis_file is None:
                reason = self.last_errors[0] if self.last_errors else "unknown error"
                batch.messages.append(ImportMessage(file_name, f"Failed to load: {reason}"))
                continue

            batch.files.append(analysis_file)

        logger.info(f"Batch import: {len(batch.files)} loaded, {len(batch.messages)} rejected")
        return batch

    def validate_import_schema(self, input_path: Union[str, Path]) -> Tuple[bool, List[str]]:
        """
        Validate an analysis file against the schema without loading it.

        Args:
            input_path: Input file path

        Returns:
            Tuple of (is_valid, error_messages)
        """
        json_data = self._load_json_file(input_path)
        if json_data is None:
            return False, ["Failed to load JSON file"]

        if not self.schema:
            return False, ["JSON schema not available"]

        try:
            jsonschema.validate(json_data, self.schema)
            return True, []
        except jsonschema.ValidationError as e:
            return False, [f"Schema validation error: {e.message}"]
        except jsonschema.SchemaError as e:
            return False, [f"Schema error: {e.message}"]

    def _parse_file_info(self, info: Dict[str, Any]) -> SampleInfo:
        return SampleInfo(
            file_name=str(info.get('fileName') or ''),
            sample_id=str(info.get('sampleId') or ''),
            location=str(info.get('location') or ''),
            depth=str(info.get('depth') or ''),
            test_date=info.get('testDate'),
            total_mass=float(info.get('totalMass') or 0.0),
            specific_gravity=float(info.get('specificGravity') or 0.0),
            liquid_limit=float(info.get('liquidLimit') or 0.0),
            plastic_limit=float(info.get('plasticLimit') or 0.0)
        )

    def _parse_sieve_row(self, row: Dict[str, Any]) -> GradationRow:
        return GradationRow(
            sieve_size_mm=row['sieveSize'],
            label=str(row.get('sieveOpening') or ''),
            mass_retained_g=row.get('massRetained', 0.0),
            cumulative_mass_retained_g=row.get('cumulativeMassRetained', 0.0),
            percent_retained=row.get('percentRetained', 0.0),
            cumulative_percent_retained=row.get('cumulativePercentRetained', 0.0),
            percent_passing=row['percentPassing']
        )

    def _parse_analysis_results(self, results: Dict[str, Any]) -> AnalysisResult:
        return AnalysisResult(
            d10=results['d10'],
            d30=results['d30'],
            d60=results['d60'],
            effective_size=results['effectiveSize'],
            uniformity_coefficient=results['uniformityCoefficient'],
            coefficient_of_curvature=results['coefficientOfCurvature'],
            gravel_percent=results['gravelPercent'],
            sand_percent=results['sandPercent'],
            fines_percent=results['finesPercent'],
            total_mass_retained_g=results['totalMassRetained'],
            pan_mass_g=results['panMass'],
            d15=results.get('d15', 0.0),
            d50=results.get('d50', 0.0),
            d85=results.get('d85', 0.0)
        )

    def _parse_temperature_data(self, data: Dict[str, Any]) -> TemperatureContext:
        readings = [
            HydrometerReading(time_minutes=int(float(time)), raw_reading=float(reading))
            for time, reading in (data.get('hydrometerReadings') or {}).items()
            if reading is not None
        ]
        readings.sort(key=lambda r: r.time_minutes)

        return TemperatureContext(
            temperature_c=data['temperature'],
            meniscus_correction=data['meniscusCorrection'],
            dispersant_correction=data['dispersantCorrection'],
            specimen_weight_g=data['specimenWeight'],
            readings=readings,
            specific_gravity=data.get('specificGravity'),
            input_data_method=data.get('inputDataMethod', HYDROMETER_INPUT_METHOD)
        )

    def _load_json_file(self, input_path: Union[str, Path]) -> Optional[Any]:
        """Load JSON data from file, handling compression."""
        try:
            input_path = Path(input_path)

            if input_path.suffix == '.gz':
                with gzip.open(input_path, 'rt', encoding='utf-8') as f:
                    return json.load(f)
            else:
                with open(input_path, 'r', encoding='utf-8') as f:
                    return json.load(f)

        except FileNotFoundError:
            self._reject(f"Import file not found: {input_path}")
            return None
        except json.JSONDecodeError as e:
            self._reject(f"Invalid JSON format in {input_path}: {e}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            self._reject(f"Failed to load {input_path}: {e}")
            return None

    def _load_json_schema(self) -> Optional[Dict[str, Any]]:
        """Load JSON schema for validation."""
        try:
            if ANALYSIS_FILE_SCHEMA_PATH.exists():
                with open(ANALYSIS_FILE_SCHEMA_PATH, 'r', encoding='utf-8') as f:
                    return json.load(f)
            else:
                logger.warning(f"JSON schema not found: {ANALYSIS_FILE_SCHEMA_PATH}")
                return None
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load JSON schema: {e}")
            return None

    def _check_version_compatibility(self, json_data: Dict[str, Any]) -> bool:
        """Check if the file version is supported; files without one are 1.0."""
        version = str(json_data.get('version', ANALYSIS_FILE_VERSION))

        if version not in SUPPORTED_ANALYSIS_FILE_VERSIONS:
            self._reject(f"Unsupported analysis file version: {version}")
            return False

        return True

    def _validate_json_schema(self, json_data: Dict[str, Any]) -> bool:
        """Validate JSON data against schema."""
        if not self.schema:
            logger.warning("No schema available for validation")
            return True

        try:
            jsonschema.validate(json_data, self.schema)
            return True
        except jsonschema.ValidationError as e:
            self._reject(f"Schema validation failed: {e.message}")
            return False
        except jsonschema.SchemaError as e:
            self._reject(f"Schema error: {e.message}")
            return False

    def _reject(self, message: str):
        logger.error(message)
        self.last_errors.append(message)

    def _log_validation_results(self, results: List[ValidationResult]):
        """Log validation results."""
        for result in results:
            if result.severity in (ValidationSeverity.ERROR, ValidationSeverity.CRITICAL):
                self._reject(f"Validation error: {result.message}")
            elif result.severity == ValidationSeverity.WARNING:
                logger.warning(f"Validation warning: {result.message}")
            else:
                logger.info(f"Validation info: {result.message}")

# Convenience functions
def load_analysis_file(input_path: Union[str, Path]) -> Optional[AnalysisFile]:
    """
    Load an analysis file.

    Args:
        input_path: Input file path

    Returns:
        AnalysisFile if successful, None otherwise
    """
    importer = AnalysisFileImporter()
    return importer.load_analysis_file(input_path)

def import_comparison_files(input_paths: Sequence[Union[str, Path]]) -> BatchImportResult:
    """
    Import up to the comparison limit of analysis files.

    Args:
        input_paths: Input file paths

    Returns:
        BatchImportResult
    """
    importer = AnalysisFileImporter()
    return importer.import_batch(input_paths)

def validate_analysis_file(input_path: Union[str, Path]) -> Tuple[bool, List[str]]:
    """
    Validate an analysis file against the schema.

    Args:
        input_path: Input file path

    Returns:
        Tuple of (is_valid, error_messages)
    """
    importer = AnalysisFileImporter()
    return importer.validate_import_schema(input_path)
