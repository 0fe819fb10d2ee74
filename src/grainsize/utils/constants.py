"""
Application constants and configuration values.
"""

from pathlib import Path

# Application information
APP_NAME = "Grain Size Analyzer"
APP_VERSION = "0.1.0"

# File paths
APP_DIR = Path(__file__).parent.parent
RESOURCES_DIR = APP_DIR / "resources"
SCHEMA_DIR = RESOURCES_DIR / "schema"

# Schema files
ANALYSIS_FILE_SCHEMA_PATH = SCHEMA_DIR / "analysis_file_schema.json"

# Analysis file settings
ANALYSIS_FILE_EXTENSION = ".gsa"
ANALYSIS_FILE_VERSION = "1.0"
SUPPORTED_ANALYSIS_FILE_VERSIONS = ["1.0"]
MAX_COMPARISON_FILES = 5

# Logging settings
LOG_FILE_NAME = "grain_size_analyzer.log"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Test method information
INPUT_DATA_METHOD = "Wt. retained"
HYDROMETER_TYPE = "151H"
HYDROMETER_INPUT_METHOD = "time-rdgs"

# Standard sieve stack (aperture in mm, label), largest first
STANDARD_SIEVE_STACK = [
    (25.4, "1 in."),
    (19.05, "3/4 in."),
    (9.525, "3/8 in."),
    (4.75, "No. 4"),
    (2.0, "No. 10"),
    (0.85, "No. 20"),
    (0.425, "No. 40"),
    (0.25, "No. 60"),
    (0.15, "No. 100"),
    (0.075, "No. 200"),
]

# Fraction boundaries (mm)
GRAVEL_SAND_BOUNDARY_MM = 4.75
SAND_FINES_BOUNDARY_MM = 0.075
SIEVE_SIZE_TOLERANCE = 0.001

# Minimum mass left in the pan before an analysis may proceed (g)
MIN_PAN_MASS_G = 4.2

# Characteristic diameters and the percent passing they are read at
CHARACTERISTIC_DIAMETERS = {
    'd10': 90.0,
    'd30': 70.0,
    'd60': 40.0,
}
SUPPLEMENTARY_DIAMETERS = {
    'd15': 85.0,
    'd50': 50.0,
    'd85': 15.0,
}

# Hydrometer analysis
HYDROMETER_SCHEDULE_MINUTES = (2, 5, 15, 30, 60, 250)
HYDROMETER_DEPTH_INTERCEPT = 0.164  # m
HYDROMETER_DEPTH_SLOPE = 0.00264  # m per reading division
HYDROMETER_CONSTANT = 0.013
DEFAULT_SPECIFIC_GRAVITY = 2.65
GRAVITY = 9.81  # m/s²

# Dynamic viscosity of water (Pa·s) by temperature (°C)
WATER_VISCOSITY_TABLE = {
    15: 0.001139,
    16: 0.001109,
    17: 0.001081,
    18: 0.001053,
    19: 0.001027,
    20: 0.001002,
    21: 0.000978,
    22: 0.000955,
    23: 0.000933,
    24: 0.000911,
    25: 0.00089,
}
DEFAULT_VISCOSITY_TEMPERATURE = 20

# Default hydrometer test conditions
DEFAULT_TEMPERATURE_C = 22.0
DEFAULT_MENISCUS_CORRECTION = 0.5
DEFAULT_DISPERSANT_CORRECTION = 4.0
DEFAULT_SPECIMEN_WEIGHT_G = 4.9999

# Plot settings
PLOT_MIN_PARTICLE_SIZE = 0.001  # mm
PLOT_MAX_PARTICLE_SIZE = 100.0  # mm
STANDARD_AXIS_SIZES = [
    100, 75, 50, 37.5, 25, 19, 12.5, 9.5, 4.75, 2.36, 1.18, 0.6, 0.3, 0.15,
    0.075, 0.05, 0.02, 0.01, 0.005, 0.002, 0.001,
]
CURVE_MATCH_TOLERANCE = 0.0001

# Calculation tolerances
PERCENT_SUM_TOLERANCE = 0.01

# Standard test methods
ASTM_STANDARDS = {
    'D6913': 'Particle-Size Distribution (Gradation) of Soils Using Sieve Analysis',
    'D7928': 'Particle-Size Distribution of Fine-Grained Soils Using the Sedimentation (Hydrometer) Analysis',
    'D2487': 'Classification of Soils for Engineering Purposes (Unified Soil Classification System)',
    'D4318': 'Liquid Limit, Plastic Limit, and Plasticity Index of Soils',
    'M145': 'AASHTO Classification of Soils and Soil-Aggregate Mixtures for Highway Construction Purposes',
}
