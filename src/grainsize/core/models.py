"""
Data models for grain size analysis.

This module defines the core data structures used throughout the application,
including sieve measurements, gradation rows, hydrometer readings,
classification results and analysis file contents.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple
from enum import Enum

class USCSGroup(Enum):
    """USCS group symbols produced by the classifier."""
    # Coarse-grained soils
    GW = "GW"
    GP = "GP"
    GM = "GM"
    GC = "GC"
    SW = "SW"
    SP = "SP"
    SM = "SM"
    SC = "SC"

    # Coarse-grained soils with 5-12% fines
    GW_GM = "GW-GM"
    GW_GC = "GW-GC"
    GP_GM = "GP-GM"
    GP_GC = "GP-GC"
    SW_SM = "SW-SM"
    SW_SC = "SW-SC"
    SP_SM = "SP-SM"
    SP_SC = "SP-SC"

    # Fine-grained soils
    ML = "ML"
    CL = "CL"
    CL_ML = "CL-ML"
    MH = "MH"
    CH = "CH"

class AASHTOGroup(Enum):
    """AASHTO groups produced by the classifier."""
    A_1_A = "A-1-a"
    A_1_B = "A-1-b"
    A_2_4 = "A-2-4"
    A_3 = "A-3"
    A_4 = "A-4"
    A_6 = "A-6"

class DataSource(Enum):
    """Measurement method behind a curve point."""
    SIEVE = "sieve"
    HYDROMETER = "hydrometer"

@dataclass
class SieveMeasurement:
    """One physical sieve in the stack."""
    sieve_size_mm: float
    label: str
    mass_retained_g: float = 0.0

@dataclass
class GradationRow:
    """Sieve measurement enriched with cumulative and passing percentages."""
    sieve_size_mm: float
    label: str
    mass_retained_g: float
    cumulative_mass_retained_g: float
    percent_retained: float
    cumulative_percent_retained: float
    percent_passing: float

@dataclass(frozen=True)
class AnalysisResult:
    """Summary statistics of a completed sieve analysis."""
    d10: float
    d30: float
    d60: float
    effective_size: float
    uniformity_coefficient: float  # Cu = d60/d10
    coefficient_of_curvature: float  # Cc = d30²/(d10·d60)
    gravel_percent: float
    sand_percent: float
    fines_percent: float
    total_mass_retained_g: float
    pan_mass_g: float
    d15: float = 0.0
    d50: float = 0.0
    d85: float = 0.0

@dataclass
class GradationAnalysis:
    """Gradation rows together with their analysis result."""
    rows: List[GradationRow]
    result: AnalysisResult

@dataclass
class AtterbergLimits:
    """Atterberg limits test results."""
    liquid_limit: float
    plastic_limit: float

    @property
    def plasticity_index(self) -> float:
        return max(0.0, self.liquid_limit - self.plastic_limit)

@dataclass
class HydrometerReading:
    """Single hydrometer reading at a scheduled time."""
    time_minutes: int
    raw_reading: float

@dataclass
class TemperatureContext:
    """Test conditions and readings of a hydrometer analysis."""
    temperature_c: float
    meniscus_correction: float
    dispersant_correction: float
    specimen_weight_g: float  # mass passing #200
    readings: List[HydrometerReading] = field(default_factory=list)
    specific_gravity: Optional[float] = None
    input_data_method: str = "time-rdgs"

@dataclass
class HydrometerPoint:
    """Particle size and percent finer derived from one hydrometer reading."""
    time_minutes: int
    particle_size_mm: float
    percent_finer: float

@dataclass(frozen=True)
class USCSClassificationResult:
    """USCS classification of a sample."""
    symbol: str
    name: str
    description: str
    criteria: Tuple[str, ...]
    properties: Tuple[str, ...]

@dataclass(frozen=True)
class AASHTOClassificationResult:
    """AASHTO classification of a sample."""
    group: str
    name: str
    description: str
    group_index: int
    criteria: Tuple[str, ...]
    suitability: Tuple[str, ...]

@dataclass
class ChartPoint:
    """Point on a grain size distribution curve."""
    particle_size_mm: float
    percent_passing: float
    source: DataSource

@dataclass
class SampleCurve:
    """Distribution curve of one sample in a comparison."""
    sample_id: str
    curve: List[ChartPoint]
    name: str = ""

@dataclass
class AlignedRow:
    """Percent passing of every compared sample at one particle size."""
    particle_size_mm: float
    values: Dict[str, Optional[float]]

@dataclass
class SampleInfo:
    """Sample metadata stored with an analysis."""
    file_name: str = ""
    sample_id: str = ""
    location: str = ""
    depth: str = ""
    test_date: Optional[str] = None
    total_mass: float = 0.0
    specific_gravity: float = 0.0
    liquid_limit: float = 0.0
    plastic_limit: float = 0.0

    def atterberg_limits(self) -> Optional[AtterbergLimits]:
        """Return Atterberg limits when both limits were measured."""
        if self.liquid_limit > 0 and self.plastic_limit > 0:
            return AtterbergLimits(self.liquid_limit, self.plastic_limit)
        return None

@dataclass
class AnalysisFile:
    """Contents of a saved analysis file."""
    file_info: SampleInfo
    sieve_data: List[GradationRow]
    analysis_results: AnalysisResult
    temperature_data: Optional[TemperatureContext] = None
    version: str = "1.0"
    export_date: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.file_info.file_name or self.file_info.sample_id
