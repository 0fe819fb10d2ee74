"""
Tests for analysis file import and batch comparison import.
"""

import json
from dataclasses import replace

import pytest

from grainsize.core.json_export import AnalysisFileExporter
from grainsize.core.json_import import (
    AnalysisFileImporter, import_comparison_files, is_analysis_file_name, load_analysis_file,
    validate_analysis_file
)
from grainsize.core.validators import ValidationSeverity

def _write(path, data):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f)
    return path

class TestAnalysisFileImporter:
    """Test loading single analysis files."""

    @pytest.fixture
    def importer(self):
        return AnalysisFileImporter()

    @pytest.fixture
    def exported_file(self, tmp_path, sample_info, silty_sand_analysis, temperature_context):
        output_path = tmp_path / "b1.gsa"
        AnalysisFileExporter().export_analysis(output_path, sample_info, silty_sand_analysis.rows,
                                               silty_sand_analysis.result, temperature_context)
        return output_path

    def test_schema_loaded(self, importer):
        assert importer.schema is not None
        assert "sieveData" in importer.schema["required"]

    def test_round_trip(self, importer, exported_file, sample_info, silty_sand_analysis,
                        temperature_context):
        """Test export then import reproduces identical values."""
        loaded = importer.load_analysis_file(exported_file)

        assert loaded is not None
        assert loaded.sieve_data == silty_sand_analysis.rows
        assert loaded.analysis_results == silty_sand_analysis.result
        assert loaded.temperature_data == temperature_context
        assert replace(loaded.file_info, file_name="") == sample_info
        assert loaded.version == "1.0"
        assert loaded.export_date is not None

    def test_file_name_defaults_to_path(self, importer, exported_file):
        loaded = importer.load_analysis_file(exported_file)

        assert loaded.file_info.file_name == "b1.gsa"
        assert loaded.display_name == "b1.gsa"

    def test_compressed_round_trip(self, importer, tmp_path, sample_info, silty_sand_analysis):
        AnalysisFileExporter().export_analysis(tmp_path / "b1.gsa", sample_info, silty_sand_analysis.rows,
                                               silty_sand_analysis.result, compress=True)

        loaded = importer.load_analysis_file(tmp_path / "b1.gsa.gz")

        assert loaded is not None
        assert loaded.analysis_results == silty_sand_analysis.result
        assert loaded.temperature_data is None

    def test_missing_sieve_data(self, importer, tmp_path, analysis_document):
        """Test a file without sieve data is rejected."""
        del analysis_document['sieveData']
        path = _write(tmp_path / "no_sieves.gsa", analysis_document)

        assert importer.load_analysis_file(path) is None
        assert importer.last_errors

    def test_missing_analysis_results(self, importer, tmp_path, analysis_document):
        del analysis_document['analysisResults']
        path = _write(tmp_path / "no_results.gsa", analysis_document)

        assert importer.load_analysis_file(path) is None

    def test_business_validation_without_schema(self, importer, tmp_path, analysis_document):
        """Test data checks still reject a bad file when schema validation is skipped."""
        analysis_document['analysisResults']['d10'] = None
        path = _write(tmp_path / "bad_d10.gsa", analysis_document)

        assert importer.load_analysis_file(path, validate_schema=False) is None
        assert any("d10" in e for e in importer.last_errors)

    def test_invalid_json(self, importer, tmp_path):
        path = tmp_path / "broken.gsa"
        path.write_text("{ not json", encoding='utf-8')

        assert importer.load_analysis_file(path) is None
        assert "Invalid JSON" in importer.last_errors[0]

    def test_file_not_found(self, importer, tmp_path):
        assert importer.load_analysis_file(tmp_path / "absent.gsa") is None
        assert "not found" in importer.last_errors[0]

    def test_not_an_object(self, importer, tmp_path):
        path = _write(tmp_path / "list.gsa", [1, 2, 3])

        assert importer.load_analysis_file(path) is None

    def test_version_compatibility(self, importer, tmp_path, analysis_document):
        """Test unsupported versions are rejected and files without a version load."""
        analysis_document['version'] = "2.0"
        path = _write(tmp_path / "future.gsa", analysis_document)
        assert importer.load_analysis_file(path) is None

        del analysis_document['version']
        path = _write(tmp_path / "legacy.gsa", analysis_document)
        loaded = importer.load_analysis_file(path)
        assert loaded is not None
        assert loaded.version == "1.0"

    def test_partial_hydrometer_readings(self, importer, analysis_document):
        """Test readings not yet entered are skipped."""
        analysis_document['temperatureData']['hydrometerReadings'] = {"5": 26.0, "2": 30.5, "15": None}

        loaded = importer.parse_analysis_data(analysis_document)

        assert [r.time_minutes for r in loaded.temperature_data.readings] == [2, 5]

    def test_sparse_file_info(self, importer, analysis_document):
        analysis_document['fileInfo'] = {'sampleId': "S-9", 'liquidLimit': None}

        loaded = importer.parse_analysis_data(analysis_document)

        assert loaded.file_info.sample_id == "S-9"
        assert loaded.file_info.liquid_limit == 0.0
        assert loaded.file_info.atterberg_limits() is None

    def test_atterberg_limits_loaded(self, importer, analysis_document):
        analysis_document['fileInfo']['liquidLimit'] = 32.0
        analysis_document['fileInfo']['plasticLimit'] = 18.0

        limits = importer.parse_analysis_data(analysis_document).file_info.atterberg_limits()

        assert limits.plasticity_index == 14.0

    def test_validate_import_schema(self, importer, tmp_path, analysis_document):
        path = _write(tmp_path / "b1.gsa", analysis_document)
        is_valid, errors = importer.validate_import_schema(path)
        assert is_valid
        assert errors == []

        analysis_document['sieveData'][0]['sieveSize'] = "large"
        path = _write(tmp_path / "b2.gsa", analysis_document)
        is_valid, errors = importer.validate_import_schema(path)
        assert not is_valid
        assert errors[0].startswith("Schema validation error")

class TestBatchImport:
    """Test importing several files for comparison."""

    @pytest.fixture
    def valid_files(self, tmp_path, analysis_document):
        paths = []
        for index in range(7):
            analysis_document['fileInfo']['sampleId'] = f"S-{index}"
            paths.append(_write(tmp_path / f"sample_{index}.gsa", analysis_document))
        return paths

    def test_batch_continues_after_failures(self, tmp_path, valid_files):
        """Test malformed and foreign files are reported while the rest load."""
        broken = tmp_path / "broken.gsa"
        broken.write_text("{}", encoding='utf-8')
        foreign = tmp_path / "notes.txt"
        foreign.write_text("not an analysis", encoding='utf-8')

        batch = AnalysisFileImporter().import_batch([valid_files[0], broken, foreign, valid_files[1]])

        assert [f.file_info.sample_id for f in batch.files] == ["S-0", "S-1"]
        assert [m.file_name for m in batch.messages] == ["broken.gsa", "notes.txt"]
        assert batch.messages[0].message.startswith("Failed to load")
        assert ".gsa" in batch.messages[1].message
        assert batch.has_errors

    def test_comparison_limit(self, valid_files):
        """Test files beyond the five-file limit are skipped with a message."""
        batch = import_comparison_files(valid_files)

        assert len(batch.files) == 5
        assert [m.file_name for m in batch.messages] == ["sample_5.gsa", "sample_6.gsa"]
        assert all("at most 5" in m.message for m in batch.messages)
        assert all(m.severity == ValidationSeverity.WARNING for m in batch.messages)
        assert not batch.has_errors

    def test_all_valid(self, valid_files):
        batch = import_comparison_files(valid_files[:3])

        assert len(batch.files) == 3
        assert batch.messages == []
        assert not batch.has_errors

class TestConvenienceFunctions:
    """Test module-level import helpers."""

    def test_load_analysis_file_function(self, tmp_path, analysis_document):
        path = _write(tmp_path / "b1.gsa", analysis_document)

        assert load_analysis_file(path) is not None

    def test_validate_analysis_file_function(self, tmp_path):
        is_valid, errors = validate_analysis_file(tmp_path / "absent.gsa")

        assert not is_valid
        assert errors == ["Failed to load JSON file"]

    @pytest.mark.parametrize("name,expected", [
        ("b1.gsa", True),
        ("B1.GSA", True),
        ("b1.gsa.gz", True),
        ("b1.json", False),
        ("gsa", False),
    ])
    def test_is_analysis_file_name(self, name, expected):
        assert is_analysis_file_name(name) == expected
