"""
Tests for analysis file export.
"""

import gzip
import json
from datetime import datetime
from dataclasses import replace

import pytest

from grainsize.core.json_export import AnalysisFileExporter, export_analysis_to_file
from grainsize.core.models import AnalysisFile

class TestAnalysisFileExporter:
    """Test analysis file export functionality."""

    @pytest.fixture
    def exporter(self):
        return AnalysisFileExporter()

    def test_build_file_data_structure(self, analysis_document):
        """Test the document sections and keys."""
        assert analysis_document['version'] == "1.0"
        assert analysis_document['testMethod'] == {
            'inputDataMethod': "Wt. retained",
            'hydrometerType': "151H",
        }
        assert analysis_document['fileInfo']['sampleId'] == "B-1 S-3"
        assert len(analysis_document['sieveData']) == 10
        assert 'exportDate' in analysis_document

        row = analysis_document['sieveData'][3]
        assert row == {
            'sieveSize': 4.75,
            'sieveOpening': "No. 4",
            'massRetained': 50.0,
            'cumulativeMassRetained': 100.0,
            'percentRetained': 12.5,
            'cumulativePercentRetained': 25.0,
            'percentPassing': 75.0,
        }

        results = analysis_document['analysisResults']
        assert results['finesPercent'] == 12.5
        assert results['panMass'] == 50.0
        assert 'd50' in results

    def test_temperature_data(self, analysis_document):
        temperature = analysis_document['temperatureData']

        assert temperature['totalDataPoints'] == 6
        assert temperature['hydrometerReadings']['2'] == 30.5
        assert temperature['hydrometerReadings']['250'] == 11.0
        assert temperature['specificGravity'] == 2.68
        assert temperature['inputDataMethod'] == "time-rdgs"

    def test_no_hydrometer_test(self, exporter, sample_info, silty_sand_analysis):
        data = exporter.build_file_data(sample_info, silty_sand_analysis.rows,
                                        silty_sand_analysis.result)

        assert data['temperatureData'] is None

    def test_export_analysis(self, exporter, tmp_path, sample_info, silty_sand_analysis,
                             temperature_context):
        """Test writing an analysis to disk."""
        output_path = tmp_path / "b1.gsa"

        success = exporter.export_analysis(output_path, sample_info, silty_sand_analysis.rows,
                                           silty_sand_analysis.result, temperature_context)

        assert success
        with open(output_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        assert data['analysisResults']['gravelPercent'] == 25.0
        assert data['temperatureData']['temperature'] == 22.0

    def test_export_adds_extension(self, exporter, tmp_path, sample_info, silty_sand_analysis):
        assert exporter.export_analysis(tmp_path / "b1", sample_info, silty_sand_analysis.rows,
                                        silty_sand_analysis.result)

        assert (tmp_path / "b1.gsa").exists()

    def test_export_compressed(self, exporter, tmp_path, sample_info, silty_sand_analysis):
        success = exporter.export_analysis(tmp_path / "b1.gsa", sample_info, silty_sand_analysis.rows,
                                           silty_sand_analysis.result, compress=True)

        assert success
        with gzip.open(tmp_path / "b1.gsa.gz", 'rt', encoding='utf-8') as f:
            data = json.load(f)
        assert len(data['sieveData']) == 10

    def test_export_rejects_invalid_result(self, exporter, tmp_path, sample_info, silty_sand_analysis):
        """Test an inconsistent result is not written."""
        result = replace(silty_sand_analysis.result, fines_percent=150.0)
        output_path = tmp_path / "bad.gsa"

        assert not exporter.export_analysis(output_path, sample_info, silty_sand_analysis.rows, result)
        assert not output_path.exists()

    def test_export_rejects_empty_rows(self, exporter, tmp_path, sample_info, silty_sand_analysis):
        assert not exporter.export_analysis(tmp_path / "empty.gsa", sample_info, [],
                                            silty_sand_analysis.result)

    def test_export_unwritable_path(self, exporter, tmp_path, sample_info, silty_sand_analysis):
        output_path = tmp_path / "missing_dir" / "b1.gsa"

        assert not exporter.export_analysis(output_path, sample_info, silty_sand_analysis.rows,
                                            silty_sand_analysis.result)

    def test_export_analysis_file(self, exporter, tmp_path, sample_info, silty_sand_analysis):
        analysis_file = AnalysisFile(sample_info, silty_sand_analysis.rows, silty_sand_analysis.result)

        assert exporter.export_analysis_file(analysis_file, tmp_path / "copy.gsa")
        assert (tmp_path / "copy.gsa").exists()

    def test_serializer_rejects_unknown_types(self, exporter):
        assert exporter._json_serializer(datetime(2024, 5, 1, 9, 30)) == "2024-05-01T09:30:00"
        with pytest.raises(TypeError):
            exporter._json_serializer(object())

    def test_export_analysis_to_file_function(self, tmp_path, sample_info, silty_sand_analysis):
        assert export_analysis_to_file(tmp_path / "b1.gsa", sample_info, silty_sand_analysis.rows,
                                       silty_sand_analysis.result)
