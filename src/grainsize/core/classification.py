"""
Soil classification from sieve analysis results.

Implements the Unified Soil Classification System (ASTM D2487) and the AASHTO
classification (M 145) as pure decision functions over an AnalysisResult.

Both procedures are simplified:

- Without Atterberg limits, USCS cannot split fine-grained soils. It reports
  ML for any sample with 50% fines or more, and it types the fines of coarse
  soils as silt.
- The AASHTO group index is computed from the fines content alone. The
  liquid limit and plasticity index terms of the full formula are not used.
"""

import logging
import math
from typing import List, Optional, Tuple

from grainsize.core.models import (
    AASHTOClassificationResult, AASHTOGroup, AnalysisResult, AtterbergLimits,
    USCSClassificationResult, USCSGroup
)

logger = logging.getLogger(__name__)

# Casagrande A-line: PI = 0.73 * (LL - 20)
A_LINE_SLOPE = 0.73
A_LINE_OFFSET = 20

USCS_NAMES = {
    USCSGroup.GW: "Well-graded gravel",
    USCSGroup.GP: "Poorly graded gravel",
    USCSGroup.GM: "Silty gravel",
    USCSGroup.GC: "Clayey gravel",
    USCSGroup.SW: "Well-graded sand",
    USCSGroup.SP: "Poorly graded sand",
    USCSGroup.SM: "Silty sand",
    USCSGroup.SC: "Clayey sand",
    USCSGroup.GW_GM: "Well-graded gravel with silt",
    USCSGroup.GW_GC: "Well-graded gravel with clay",
    USCSGroup.GP_GM: "Poorly graded gravel with silt",
    USCSGroup.GP_GC: "Poorly graded gravel with clay",
    USCSGroup.SW_SM: "Well-graded sand with silt",
    USCSGroup.SW_SC: "Well-graded sand with clay",
    USCSGroup.SP_SM: "Poorly graded sand with silt",
    USCSGroup.SP_SC: "Poorly graded sand with clay",
    USCSGroup.ML: "Silt",
    USCSGroup.CL: "Lean clay",
    USCSGroup.CL_ML: "Silty clay",
    USCSGroup.MH: "Elastic silt",
    USCSGroup.CH: "Fat clay",
}

USCS_DESCRIPTIONS = {
    USCSGroup.GW: "Well-graded gravel with little or no fines",
    USCSGroup.GP: "Poorly graded gravel with little or no fines",
    USCSGroup.GM: "Gravel with silty fines",
    USCSGroup.GC: "Gravel with clayey fines",
    USCSGroup.SW: "Well-graded sand with little or no fines",
    USCSGroup.SP: "Poorly graded sand with little or no fines",
    USCSGroup.SM: "Sand with silty fines",
    USCSGroup.SC: "Sand with clayey fines",
    USCSGroup.GW_GM: "Well-graded gravel containing 5-12% silty fines",
    USCSGroup.GW_GC: "Well-graded gravel containing 5-12% clayey fines",
    USCSGroup.GP_GM: "Poorly graded gravel containing 5-12% silty fines",
    USCSGroup.GP_GC: "Poorly graded gravel containing 5-12% clayey fines",
    USCSGroup.SW_SM: "Well-graded sand containing 5-12% silty fines",
    USCSGroup.SW_SC: "Well-graded sand containing 5-12% clayey fines",
    USCSGroup.SP_SM: "Poorly graded sand containing 5-12% silty fines",
    USCSGroup.SP_SC: "Poorly graded sand containing 5-12% clayey fines",
    USCSGroup.ML: "Inorganic silt of low plasticity",
    USCSGroup.CL: "Inorganic clay of low to medium plasticity",
    USCSGroup.CL_ML: "Silty clay of low plasticity",
    USCSGroup.MH: "Inorganic silt of high plasticity",
    USCSGroup.CH: "Inorganic clay of high plasticity",
}

USCS_PROPERTIES = {
    USCSGroup.GW: ("Excellent drainage", "High strength", "Low compressibility"),
    USCSGroup.GP: ("Good drainage", "Medium strength", "Low compressibility"),
    USCSGroup.GM: ("Fair drainage", "Medium strength", "Medium compressibility"),
    USCSGroup.GC: ("Poor drainage", "Medium strength", "Medium compressibility"),
    USCSGroup.SW: ("Good drainage", "Medium strength", "Low compressibility"),
    USCSGroup.SP: ("Good drainage", "Low to medium strength", "Low compressibility"),
    USCSGroup.SM: ("Fair drainage", "Medium strength", "Medium compressibility"),
    USCSGroup.SC: ("Poor drainage", "Medium strength", "Medium compressibility"),
    USCSGroup.GW_GM: ("Good drainage", "High strength", "Low compressibility"),
    USCSGroup.GW_GC: ("Fair drainage", "High strength", "Low compressibility"),
    USCSGroup.GP_GM: ("Good drainage", "Medium strength", "Low compressibility"),
    USCSGroup.GP_GC: ("Fair drainage", "Medium strength", "Low compressibility"),
    USCSGroup.SW_SM: ("Good drainage", "Medium strength", "Low compressibility"),
    USCSGroup.SW_SC: ("Fair drainage", "Medium strength", "Low compressibility"),
    USCSGroup.SP_SM: ("Fair drainage", "Low to medium strength", "Low compressibility"),
    USCSGroup.SP_SC: ("Fair drainage", "Low to medium strength", "Medium compressibility"),
    USCSGroup.ML: ("Poor drainage", "Low strength", "High compressibility"),
    USCSGroup.CL: ("Practically impervious", "Medium strength", "Medium compressibility"),
    USCSGroup.CL_ML: ("Poor drainage", "Low strength", "Medium compressibility"),
    USCSGroup.MH: ("Poor drainage", "Low strength", "High compressibility"),
    USCSGroup.CH: ("Practically impervious", "Low strength", "High compressibility"),
}

AASHTO_NAMES = {
    AASHTOGroup.A_1_A: "Stone fragments, gravel and sand",
    AASHTOGroup.A_1_B: "Stone fragments, gravel and sand",
    AASHTOGroup.A_2_4: "Silty or clayey gravel and sand",
    AASHTOGroup.A_3: "Fine sand",
    AASHTOGroup.A_4: "Silty soils",
    AASHTOGroup.A_6: "Clayey soils",
}

AASHTO_DESCRIPTIONS = {
    AASHTOGroup.A_1_A: "Well-graded granular material, predominantly gravel",
    AASHTOGroup.A_1_B: "Well-graded granular material, predominantly sand",
    AASHTOGroup.A_2_4: "Granular material with silty fines",
    AASHTOGroup.A_3: "Poorly graded fine sand",
    AASHTOGroup.A_4: "Silty soil of low plasticity",
    AASHTOGroup.A_6: "Clayey soil of medium plasticity",
}

AASHTO_SUITABILITY = {
    AASHTOGroup.A_1_A: ("Excellent subgrade material", "Good base material", "Excellent drainage"),
    AASHTOGroup.A_1_B: ("Excellent subgrade material", "Good base material", "Excellent drainage"),
    AASHTOGroup.A_2_4: ("Good to fair subgrade material", "Fair base material", "Good drainage"),
    AASHTOGroup.A_3: ("Fair subgrade material", "Poor base material", "Good drainage"),
    AASHTOGroup.A_4: ("Fair to poor subgrade material", "Not suitable for base", "Poor drainage"),
    AASHTOGroup.A_6: ("Poor subgrade material", "Not suitable for base", "Very poor drainage"),
}

# Maximum group index reported by each AASHTO group
AASHTO_GROUP_INDEX_LIMITS = {
    AASHTOGroup.A_2_4: 4,
    AASHTOGroup.A_4: 8,
    AASHTOGroup.A_6: 20,
}

def _uscs_result(group: USCSGroup, criteria: List[str]) -> USCSClassificationResult:
    return USCSClassificationResult(
        symbol=group.value,
        name=USCS_NAMES[group],
        description=USCS_DESCRIPTIONS[group],
        criteria=tuple(criteria),
        properties=USCS_PROPERTIES[group]
    )

def _aashto_result(group: AASHTOGroup, group_index: int,
                   criteria: List[str]) -> AASHTOClassificationResult:
    return AASHTOClassificationResult(
        group=group.value,
        name=AASHTO_NAMES[group],
        description=AASHTO_DESCRIPTIONS[group],
        group_index=group_index,
        criteria=tuple(criteria),
        suitability=AASHTO_SUITABILITY[group]
    )

def is_above_a_line(atterberg: AtterbergLimits) -> bool:
    """Check whether the limits plot on or above the Casagrande A-line."""
    return atterberg.plasticity_index >= A_LINE_SLOPE * (atterberg.liquid_limit - A_LINE_OFFSET)

def _has_clayey_fines(atterberg: Optional[AtterbergLimits]) -> bool:
    if atterberg is None:
        return False
    return atterberg.plasticity_index > 7 and is_above_a_line(atterberg)

def _fines_criterion(atterberg: Optional[AtterbergLimits]) -> str:
    if atterberg is None:
        return "Fines assumed silty (no plasticity data)"
    pi = atterberg.plasticity_index
    return f"Fines {'clayey' if _has_clayey_fines(atterberg) else 'silty'} (PI = {pi:.1f})"

def _coarse_group(family: str, well_graded: bool, fines_percent: float,
                  atterberg: Optional[AtterbergLimits]) -> USCSGroup:
    grading = "W" if well_graded else "P"
    fines = "C" if _has_clayey_fines(atterberg) else "M"

    if fines_percent < 5:
        return USCSGroup(f"{family}{grading}")
    if fines_percent <= 12:
        return USCSGroup(f"{family}{grading}-{family}{fines}")
    return USCSGroup(f"{family}{fines}")

def _classify_fine_grained(atterberg: Optional[AtterbergLimits],
                           criteria: List[str]) -> USCSGroup:
    if atterberg is None:
        criteria.append("Plasticity not evaluated; reported as low-plasticity silt")
        return USCSGroup.ML

    ll = atterberg.liquid_limit
    pi = atterberg.plasticity_index
    above = is_above_a_line(atterberg)
    criteria.append(f"LL = {ll:.1f}, PI = {pi:.1f}")
    criteria.append("Above A-line" if above else "Below A-line")

    if ll >= 50:
        return USCSGroup.CH if above else USCSGroup.MH
    if above and pi > 7:
        return USCSGroup.CL
    if above and pi >= 4:
        return USCSGroup.CL_ML
    return USCSGroup.ML

def classify_soil_uscs(result: AnalysisResult,
                       atterberg: Optional[AtterbergLimits] = None) -> USCSClassificationResult:
    """
    Classify a sample under the Unified Soil Classification System.

    Args:
        result: Sieve analysis result
        atterberg: Atterberg limits of the fines, if measured

    Returns:
        USCS classification with the evaluated criteria
    """
    fines = result.fines_percent
    gravel = result.gravel_percent
    sand = result.sand_percent
    cu = result.uniformity_coefficient
    cc = result.coefficient_of_curvature

    if fines >= 50:
        criteria = [f"Fines = {fines:.1f}% ≥ 50%"]
        group = _classify_fine_grained(atterberg, criteria)
        return _uscs_result(group, criteria)

    criteria = [f"Fines = {fines:.1f}% < 50%"]

    if gravel > sand:
        family = "G"
        min_cu = 4
        criteria.append(f"Gravel {gravel:.1f}% > sand {sand:.1f}%")
    else:
        family = "S"
        min_cu = 6
        criteria.append(f"Sand {sand:.1f}% ≥ gravel {gravel:.1f}%")

    well_graded = cu >= min_cu and 1 <= cc <= 3

    if fines <= 12:
        criteria.append(f"Cu = {cu:.2f} {'≥' if cu >= min_cu else '<'} {min_cu}")
        criteria.append(f"Cc = {cc:.2f} {'within' if 1 <= cc <= 3 else 'outside'} 1-3")

    if fines < 5:
        criteria.append("Fines < 5%")
    elif fines <= 12:
        criteria.append("5% ≤ fines ≤ 12%")
        criteria.append(_fines_criterion(atterberg))
    else:
        criteria.append("Fines > 12%")
        criteria.append(_fines_criterion(atterberg))

    group = _coarse_group(family, well_graded, fines, atterberg)
    logger.debug(f"USCS {group.value}: fines={fines:.1f} gravel={gravel:.1f} sand={sand:.1f} Cu={cu:.2f} Cc={cc:.2f}")
    return _uscs_result(group, criteria)

def aashto_group_index(fines_percent: float) -> int:
    """Simplified group index from the fines content, rounded half up."""
    if fines_percent <= 35:
        return 0
    return int(math.floor((fines_percent - 35) * 0.2 + 0.5))

def classify_soil_aashto(result: AnalysisResult) -> AASHTOClassificationResult:
    """
    Classify a sample under the AASHTO system.

    Args:
        result: Sieve analysis result

    Returns:
        AASHTO classification with group index
    """
    fines = result.fines_percent
    gravel = result.gravel_percent
    group_index = aashto_group_index(fines)

    if fines <= 35:
        criteria = [f"Passing #200 = {fines:.1f}% ≤ 35% (granular)"]
        if gravel > 50:
            criteria.append(f"Gravel = {gravel:.1f}% > 50%")
            if fines <= 15:
                criteria.append("Passing #200 ≤ 15%")
                return _aashto_result(AASHTOGroup.A_1_A, 0, criteria)
            criteria.append("Passing #200 > 15%")
            group = AASHTOGroup.A_2_4
        else:
            criteria.append(f"Gravel = {gravel:.1f}% ≤ 50%")
            if fines <= 10:
                criteria.append("Passing #200 ≤ 10%")
                return _aashto_result(AASHTOGroup.A_1_B, 0, criteria)
            criteria.append("Passing #200 > 10%")
            return _aashto_result(AASHTOGroup.A_3, 0, criteria)
    else:
        criteria = [f"Passing #200 = {fines:.1f}% > 35% (silt-clay)"]
        if fines <= 50:
            criteria.append("Passing #200 ≤ 50%")
            group = AASHTOGroup.A_4
        else:
            criteria.append("Passing #200 > 50%")
            group = AASHTOGroup.A_6

    group_index = min(group_index, AASHTO_GROUP_INDEX_LIMITS[group])
    criteria.append(f"GI = {group_index} (fines only)")
    return _aashto_result(group, group_index, criteria)

def gradation_assessment(result: AnalysisResult) -> str:
    """Describe the gradation from Cu and Cc."""
    cu = result.uniformity_coefficient
    cc = result.coefficient_of_curvature
    if cu > 4 and 1 < cc < 3:
        return "Well graded"
    return "Poorly graded"

def classify(result: AnalysisResult,
             atterberg: Optional[AtterbergLimits] = None
             ) -> Tuple[USCSClassificationResult, AASHTOClassificationResult]:
    """Classify a sample under both systems."""
    return classify_soil_uscs(result, atterberg), classify_soil_aashto(result)

def classification_summary(result: AnalysisResult,
                           atterberg: Optional[AtterbergLimits] = None) -> List[str]:
    """
    Summary lines for classification reports.

    Args:
        result: Sieve analysis result
        atterberg: Atterberg limits, if measured

    Returns:
        Human-readable summary lines
    """
    uscs, aashto = classify(result, atterberg)
    return [
        f"USCS: {uscs.symbol} - {uscs.name}",
        f"AASHTO: {aashto.group} (GI = {aashto.group_index})",
        f"Gradation: {gradation_assessment(result)}",
        f"Uniformity coefficient Cu: {result.uniformity_coefficient:.2f}",
        f"Coefficient of curvature Cc: {result.coefficient_of_curvature:.2f}",
        f"Composition: gravel {result.gravel_percent:.1f}%, sand {result.sand_percent:.1f}%, "
        f"fines {result.fines_percent:.1f}%",
    ]
