"""
Budget Advisor

Budget tiers, ROI projection and KPI presets derived from coverage area,
objective and duration. Presentation aids only; none of this gates
navigation or finishing.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Union

from .balance_gate import Amount, to_decimal
from .coverage_estimator import DEFAULT_PARAMETERS, EstimationParameters, estimate_reach
from .models import (
    BudgetAdequacy,
    BudgetOptimization,
    BudgetSuggestion,
    KpiTargets,
    PrimaryObjective,
    RoiSimulation,
)

Objective = Union[PrimaryObjective, str]

CENT = Decimal("0.01")

# Average cost per km² per day
COST_PER_KM2_PER_DAY: Dict[PrimaryObjective, Decimal] = {
    PrimaryObjective.AWARENESS: Decimal("50"),
    PrimaryObjective.CONSIDERATION: Decimal("75"),
    PrimaryObjective.CONVERSION: Decimal("100"),
    PrimaryObjective.RETENTION: Decimal("100"),
    PrimaryObjective.ENGAGEMENT: Decimal("60"),
}

CONVERSION_RATES: Dict[PrimaryObjective, Decimal] = {
    PrimaryObjective.AWARENESS: Decimal("0.01"),
    PrimaryObjective.CONSIDERATION: Decimal("0.02"),
    PrimaryObjective.CONVERSION: Decimal("0.05"),
    PrimaryObjective.RETENTION: Decimal("0.05"),
    PrimaryObjective.ENGAGEMENT: Decimal("0.03"),
}

MINIMUM_BUDGET = Decimal("100")
AVERAGE_CONVERSION_VALUE = Decimal("50")
MAX_OPTIMIZATION_ATTEMPTS = 10

KPI_PRESETS: Dict[PrimaryObjective, KpiTargets] = {
    PrimaryObjective.AWARENESS: KpiTargets(views=10000, clicks=500, ctr=5),
    PrimaryObjective.CONSIDERATION: KpiTargets(views=15000, clicks=1500, ctr=10),
    PrimaryObjective.CONVERSION: KpiTargets(
        views=20000, clicks=2000, conversions=200, ctr=10, cpc=Decimal("0.50")
    ),
    PrimaryObjective.RETENTION: KpiTargets(views=10000, clicks=1000, conversions=500, ctr=10),
    PrimaryObjective.ENGAGEMENT: KpiTargets(views=15000, clicks=3000, ctr=20),
}


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def campaign_duration_days(start: Optional[date], end: Optional[date]) -> int:
    """Whole days between start and end; 0 when either is missing"""
    if start is None or end is None:
        return 0
    return abs((end - start).days)


def suggest_budget(area_km2: float, objective: Objective, duration_days: int) -> BudgetSuggestion:
    objective = PrimaryObjective(objective)
    base = to_decimal(area_km2) * COST_PER_KM2_PER_DAY[objective] * duration_days
    return BudgetSuggestion(
        minimum=_money(max(MINIMUM_BUDGET, base * Decimal("0.5"))),
        recommended=_money(base),
        optimized=_money(base * Decimal("1.5")),
        reason=(
            f"Based on {area_km2:.2f} km² of coverage over {duration_days} days "
            f"for a {objective.value} objective"
        ),
    )


def simulate_roi(
    investment: Amount,
    estimated_reach: int,
    objective: Objective,
    conversion_value: Amount = AVERAGE_CONVERSION_VALUE,
    params: EstimationParameters = DEFAULT_PARAMETERS,
) -> RoiSimulation:
    objective = PrimaryObjective(objective)
    investment = to_decimal(investment)
    conversions = _round_half_up(estimated_reach * CONVERSION_RATES[objective])
    revenue = conversions * to_decimal(conversion_value)
    roi = revenue - investment
    roi_percent = float(round(roi / investment * 100, 2)) if investment > 0 else 0.0
    return RoiSimulation(
        investment=investment,
        estimated_reach=estimated_reach,
        estimated_impressions=estimated_reach * params.impressions_per_person,
        estimated_conversions=conversions,
        estimated_revenue=revenue,
        roi=roi,
        roi_percent=roi_percent,
    )


def check_budget_for_area(
    budget: Amount,
    area_km2: float,
    duration_days: int,
    objective: Objective,
) -> BudgetAdequacy:
    budget = to_decimal(budget)
    suggestion = suggest_budget(area_km2, objective, duration_days)
    sufficient = budget >= suggestion.minimum

    if not sufficient:
        message = f"Budget too low for this coverage. Suggested minimum: {suggestion.minimum:.2f}"
    elif budget >= suggestion.optimized:
        message = "Excellent budget, allows full optimization."
    elif budget >= suggestion.recommended:
        message = "Budget is adequate for good results."
    else:
        message = "Minimum budget met. Consider increasing it for better results."

    return BudgetAdequacy(
        sufficient=sufficient,
        minimum=suggestion.minimum,
        difference=max(Decimal("0"), suggestion.minimum - budget),
        message=message,
    )


def optimize_budget(
    area_km2: float,
    duration_days: int,
    objective: Objective,
    target_roi_percent: float = 100,
    params: EstimationParameters = DEFAULT_PARAMETERS,
) -> BudgetOptimization:
    """
    Start from the recommended budget and lower it 10% at a time, at most
    10 times, until the projected ROI reaches the target.
    """
    reach = estimate_reach(area_km2, params)
    budget = suggest_budget(area_km2, objective, duration_days).recommended
    simulation = simulate_roi(budget, reach, objective, params=params)

    attempts = 0
    while simulation.roi_percent < target_roi_percent and attempts < MAX_OPTIMIZATION_ATTEMPTS:
        budget = budget * Decimal("0.9")
        simulation = simulate_roi(budget, reach, objective, params=params)
        attempts += 1

    if simulation.roi_percent >= target_roi_percent:
        reason = f"Budget optimized to reach a {target_roi_percent:g}% ROI"
    else:
        reason = f"Budget adjusted for the best ROI found ({simulation.roi_percent:.1f}%)"

    return BudgetOptimization(
        optimized_budget=_money(budget),
        reason=reason,
        simulation=simulation,
    )


def suggest_kpis(objective: Objective) -> KpiTargets:
    """KPI presets for an objective"""
    return KPI_PRESETS[PrimaryObjective(objective)]


__all__ = [
    "COST_PER_KM2_PER_DAY",
    "CONVERSION_RATES",
    "KPI_PRESETS",
    "campaign_duration_days",
    "suggest_budget",
    "simulate_roi",
    "check_budget_for_area",
    "optimize_budget",
    "suggest_kpis",
]
