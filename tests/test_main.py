"""
Tests for the command line interface.
"""

import json

import pytest

from grainsize.main import build_parser, main

@pytest.fixture
def analysis_path(tmp_path, analysis_document):
    path = tmp_path / "b1.gsa"
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(analysis_document, f)
    return path

class TestCommandLine:
    """Test the analyze and compare commands."""

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_analyze(self, tmp_path, analysis_path, capsys):
        exit_code = main(["--log-file", str(tmp_path / "cli.log"), "analyze", str(analysis_path)])

        output = capsys.readouterr().out
        assert exit_code == 0
        assert "USCS: SM - Silty sand" in output
        assert "AASHTO: A-3" in output
        assert "No. 200" in output

    def test_analyze_with_export(self, tmp_path, analysis_path):
        output_path = tmp_path / "recomputed.gsa"

        exit_code = main(["--log-file", str(tmp_path / "cli.log"), "analyze", str(analysis_path),
                          "--export", str(output_path)])

        assert exit_code == 0
        assert output_path.exists()

    def test_analyze_missing_file(self, tmp_path, capsys):
        exit_code = main(["--log-file", str(tmp_path / "cli.log"), "analyze", str(tmp_path / "absent.gsa")])

        assert exit_code == 1
        assert "Could not load" in capsys.readouterr().out

    def test_compare(self, tmp_path, analysis_path, analysis_document, capsys):
        analysis_document['fileInfo']['fileName'] = "second.gsa"
        second = tmp_path / "second.gsa"
        with open(second, 'w', encoding='utf-8') as f:
            json.dump(analysis_document, f)

        exit_code = main(["--log-file", str(tmp_path / "cli.log"), "compare",
                          str(analysis_path), str(second), str(tmp_path / "notes.txt")])

        output = capsys.readouterr().out
        assert exit_code == 0
        assert "particle_size_mm" in output
        assert "second.gsa" in output
        assert "notes.txt: Skipped" in output

    def test_compare_nothing_loaded(self, tmp_path, capsys):
        exit_code = main(["--log-file", str(tmp_path / "cli.log"), "compare", str(tmp_path / "notes.txt")])

        assert exit_code == 1
        assert "No analysis files could be loaded" in capsys.readouterr().out
