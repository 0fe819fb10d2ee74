"""
Shared fixtures for grain size analysis tests.
"""

import pytest

from grainsize.core.gradation import compute_gradation, standard_sieve_stack
from grainsize.core.json_export import AnalysisFileExporter
from grainsize.core.models import HydrometerReading, SampleInfo, TemperatureContext

# Retained masses on the standard stack for a 400 g sample. Every cumulative
# mass is a multiple of 25 g so all percentages are exact binary fractions.
SILTY_SAND_MASSES = {
    25.4: 0.0,
    19.05: 25.0,
    9.525: 25.0,
    4.75: 50.0,
    2.0: 50.0,
    0.85: 50.0,
    0.425: 50.0,
    0.25: 50.0,
    0.15: 25.0,
    0.075: 25.0,
}
SILTY_SAND_TOTAL_MASS = 400.0

@pytest.fixture
def silty_sand_sieves():
    """Standard sieve stack with 350 g retained and 50 g in the pan."""
    return standard_sieve_stack(SILTY_SAND_MASSES)

@pytest.fixture
def silty_sand_analysis(silty_sand_sieves):
    """Computed gradation of the silty sand sample."""
    return compute_gradation(silty_sand_sieves, SILTY_SAND_TOTAL_MASS)

@pytest.fixture
def sample_info():
    return SampleInfo(
        file_name="",
        sample_id="B-1 S-3",
        location="Borehole B-1",
        depth="3.0-3.5 m",
        test_date="2024-05-14",
        total_mass=SILTY_SAND_TOTAL_MASS,
        specific_gravity=2.68
    )

@pytest.fixture
def temperature_context():
    return TemperatureContext(
        temperature_c=22.0,
        meniscus_correction=0.5,
        dispersant_correction=4.0,
        specimen_weight_g=50.0,
        readings=[
            HydrometerReading(2, 30.5),
            HydrometerReading(5, 26.0),
            HydrometerReading(15, 21.5),
            HydrometerReading(30, 18.0),
            HydrometerReading(60, 15.5),
            HydrometerReading(250, 11.0),
        ],
        specific_gravity=2.68
    )

@pytest.fixture
def analysis_document(sample_info, silty_sand_analysis, temperature_context):
    """Analysis file document as written by the exporter."""
    return AnalysisFileExporter().build_file_data(
        sample_info, silty_sand_analysis.rows, silty_sand_analysis.result, temperature_context
    )
