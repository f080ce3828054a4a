"""
Coverage Estimator

Pure functions turning a location specification into an area and an
area plus budget into reach/impression/CPM estimates.

Polygon areas are planar (raw coordinate pairs, fixed degrees-to-km
factor), not geodesic. City and state lists have no numeric area.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from core.config import EstimationConfig

from .models import (
    CityListLocation,
    CoverageEstimate,
    LocationKind,
    LocationSection,
    LocationSpec,
    PolygonLocation,
    RadiusLocation,
    StateListLocation,
    parse_location,
)

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class EstimationParameters:
    """Estimation constants; defaults are uncalibrated averages"""
    population_density: float = 5000.0  # people per km²
    impressions_per_person: int = 3
    km_per_degree: float = 111.0

    @classmethod
    def from_config(cls, config: EstimationConfig) -> "EstimationParameters":
        return cls(
            population_density=config.population_density,
            impressions_per_person=config.impressions_per_person,
            km_per_degree=config.km_per_degree,
        )


DEFAULT_PARAMETERS = EstimationParameters()


def radius_area_km2(radius_km: Number) -> float:
    """Area of a circle, π·r²"""
    r = float(radius_km)
    return math.pi * r * r


def shoelace_area(points: Sequence[Tuple[float, float]]) -> float:
    """Planar polygon area over raw coordinate pairs; <3 vertices is 0"""
    n = len(points)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        x_i, y_i = points[i]
        x_j, y_j = points[(i + 1) % n]
        total += x_i * y_j - x_j * y_i
    return abs(total) / 2


def polygon_area_km2(
    points: Sequence[Tuple[float, float]],
    params: EstimationParameters = DEFAULT_PARAMETERS,
) -> float:
    """Shoelace area converted with the fixed degrees-to-km approximation"""
    return shoelace_area(points) * params.km_per_degree * params.km_per_degree / 1_000_000


def area_km2(
    spec: LocationSpec,
    params: EstimationParameters = DEFAULT_PARAMETERS,
) -> Optional[float]:
    """Area of a location spec; None for qualitative (city/state) variants"""
    if isinstance(spec, RadiusLocation):
        return radius_area_km2(spec.radius_km)
    if isinstance(spec, PolygonLocation):
        return polygon_area_km2(spec.polygon, params)
    return None


def estimate_reach(area: float, params: EstimationParameters = DEFAULT_PARAMETERS) -> int:
    return round(area * params.population_density)


def estimate_impressions(reach: int, params: EstimationParameters = DEFAULT_PARAMETERS) -> int:
    return reach * params.impressions_per_person


def estimate_cpm(budget: Optional[Number], impressions: int) -> Optional[float]:
    """Cost per thousand impressions; None without impressions or budget"""
    if not budget or impressions <= 0:
        return None
    return float(budget) / impressions * 1000


def describe_location(spec: LocationSpec) -> str:
    """Qualitative coverage description"""
    if isinstance(spec, CityListLocation):
        count = len(spec.cities)
        return f"{count} city" if count == 1 else f"{count} cities"
    if isinstance(spec, StateListLocation):
        count = len(spec.states)
        return f"{count} state" if count == 1 else f"{count} states"
    if isinstance(spec, RadiusLocation):
        return f"{spec.radius_km:g} km radius"
    return f"polygon with {len(spec.polygon)} vertices"


def estimate_coverage(
    spec: LocationSpec,
    budget: Optional[Number] = None,
    params: EstimationParameters = DEFAULT_PARAMETERS,
) -> CoverageEstimate:
    """Full coverage estimate for a location spec"""
    area = area_km2(spec, params)
    description = describe_location(spec)
    if area is None:
        return CoverageEstimate.empty(description)

    reach = estimate_reach(area, params)
    impressions = estimate_impressions(reach, params)
    return CoverageEstimate(
        area_km2=area,
        estimated_reach=reach,
        estimated_impressions=impressions,
        estimated_cpm=estimate_cpm(budget, impressions),
        description=description,
    )


def estimate_from_section(
    section: LocationSection,
    budget: Optional[Number] = None,
    params: EstimationParameters = DEFAULT_PARAMETERS,
) -> CoverageEstimate:
    """
    Estimate from raw location form values.

    Never raises: a section that does not form a valid variant yields an
    empty estimate. Polygons with fewer than 3 vertices are estimated as
    area 0 rather than rejected.
    """
    if section.kind == LocationKind.POLYGON.value and section.polygon is not None:
        if len(section.polygon) < 3:
            return CoverageEstimate(
                area_km2=0.0,
                estimated_reach=0,
                estimated_impressions=0,
                description=f"polygon with {len(section.polygon)} vertices",
            )
    try:
        spec = parse_location(section)
    except ValidationError:
        return CoverageEstimate.empty()
    return estimate_coverage(spec, budget, params)


__all__ = [
    "EstimationParameters",
    "DEFAULT_PARAMETERS",
    "radius_area_km2",
    "shoelace_area",
    "polygon_area_km2",
    "area_km2",
    "estimate_reach",
    "estimate_impressions",
    "estimate_cpm",
    "describe_location",
    "estimate_coverage",
    "estimate_from_section",
]
