"""Weight trajectory projection from logged weigh-ins.

Fits an ordinary least-squares line through (elapsed days, weight) and
extrapolates it forward. Body fat is projected with a simpler two-point
slope between the first and last entries that carry a body-fat reading.

With fewer than two weigh-ins no line can be fitted, so a conservative
assumed rate is projected instead and the confidence score is zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

import numpy as np

from mealman.profiles.body_calc import MacroPlan, round_half_up
from mealman.tracking.models import WeightLogEntry

SECONDS_PER_DAY = 86400.0

DEFAULT_HORIZON_DAYS = 28
FALLBACK_WEEKLY_CHANGE_KG = -0.5

GRAPH_ACTUAL_POINTS = 5
GRAPH_PROJECTION_WEEKS = 4

# Approximate energy content of 1 kg of body weight change
KCAL_PER_KG = 7700

# Pace boundaries (kg/week)
MAX_HEALTHY_LOSS = -1.0
MIN_STEADY_LOSS = -0.3
MAX_HEALTHY_GAIN = 0.5


class PaceClass(Enum):
    """Classification of the weekly rate of weight change."""
    TOO_AGGRESSIVE = "too_aggressive"
    HEALTHY_LOSS = "healthy_loss"
    SLOW_LOSS = "slow_loss"
    MAINTENANCE = "maintenance"
    HEALTHY_GAIN = "healthy_gain"
    TOO_FAST_GAIN = "too_fast_gain"
    INSUFFICIENT_DATA = "insufficient_data"


PACE_RECOMMENDATIONS = {
    PaceClass.TOO_AGGRESSIVE: (
        "Rate too steep (>1 kg/week): too aggressive, risk of muscle loss. "
        "Increase calories."
    ),
    PaceClass.HEALTHY_LOSS: "Healthy fat-loss pace. Maintain protocol.",
    PaceClass.SLOW_LOSS: "Slow but steady. Stay consistent.",
    PaceClass.MAINTENANCE: "Weight stable. Maintenance pace.",
    PaceClass.HEALTHY_GAIN: "Healthy surplus pace for lean gains.",
    PaceClass.TOO_FAST_GAIN: (
        "Gaining too fast (>0.5 kg/week): potential fat gain. Trim calories."
    ),
    PaceClass.INSUFFICIENT_DATA: (
        "Insufficient data. Projection based on an assumed conservative rate; "
        "log at least two weigh-ins for a trend."
    ),
}


def classify_pace(weekly_rate: float) -> tuple[PaceClass, bool]:
    """Classify a weekly rate of change and say whether it is healthy.

    Boundary values go to the healthier neighbouring bucket: -1.0 and -0.3
    are healthy loss, 0.5 is a healthy gain.

    Returns:
        Tuple of (pace class, is_healthy)
    """
    if weekly_rate < MAX_HEALTHY_LOSS:
        return PaceClass.TOO_AGGRESSIVE, False
    if weekly_rate <= MIN_STEADY_LOSS:
        return PaceClass.HEALTHY_LOSS, True
    if weekly_rate < 0:
        return PaceClass.SLOW_LOSS, True
    if weekly_rate == 0:
        return PaceClass.MAINTENANCE, True
    if weekly_rate <= MAX_HEALTHY_GAIN:
        return PaceClass.HEALTHY_GAIN, True
    return PaceClass.TOO_FAST_GAIN, False


def estimate_daily_calorie_balance(weekly_change_kg: float) -> float:
    """
    Estimate daily calorie surplus/deficit from weekly weight change.

    Uses the approximation 7700 kcal = 1 kg of body weight.

    Args:
        weekly_change_kg: Weekly weight change in kg (negative = loss)

    Returns:
        Daily calorie balance (negative = deficit, positive = surplus)
    """
    return (weekly_change_kg * KCAL_PER_KG) / 7


@dataclass
class Milestone:
    """Projected date of reaching a target weight on the current trend."""

    target_weight_kg: float
    day_offset: float  # days since the first weigh-in
    estimated_date: date


@dataclass
class GraphPoint:
    """A display point; projections are synthetic weekly values."""

    date: date
    weight_kg: float
    is_projection: bool

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "weight_kg": self.weight_kg,
            "is_projection": self.is_projection,
        }


@dataclass
class RegressionFit:
    """Least-squares line weight = slope × day + intercept."""

    slope: float
    intercept: float
    r_squared: float

    def at(self, day: float) -> float:
        return self.slope * day + self.intercept


@dataclass
class WeightPrediction:
    """Projected weight and body fat plus trend diagnostics."""

    projected_weight_kg: float
    projected_body_fat_pct: float
    confidence_score: int
    weekly_rate_kg: float
    slope_kg_per_day: float
    intercept_kg: float
    r_squared: float
    pace: PaceClass
    is_healthy_pace: bool
    recommendation: str
    horizon_days: int
    daily_balance_kcal: float  # implied by the trend (negative = deficit)
    estimated_tdee_kcal: float  # planned intake minus implied balance
    milestone: Optional[Milestone] = None
    graph_data: list[GraphPoint] = field(default_factory=list)
    is_fallback: bool = False

    def to_dict(self) -> dict:
        """Convert to dict for JSON output."""
        data = {
            "projected_weight_kg": round(self.projected_weight_kg, 1),
            "projected_body_fat_pct": round(self.projected_body_fat_pct, 1),
            "horizon_days": self.horizon_days,
            "confidence_score": self.confidence_score,
            "trend": {
                "weekly_rate_kg": round(self.weekly_rate_kg, 2),
                "slope_kg_per_day": round(self.slope_kg_per_day, 3),
                "r_squared": round(self.r_squared, 3),
                "pace": self.pace.value,
                "is_healthy_pace": self.is_healthy_pace,
                "recommendation": self.recommendation,
                "daily_balance_kcal": round(self.daily_balance_kcal),
                "estimated_tdee_kcal": round(self.estimated_tdee_kcal),
            },
            "graph_data": [p.to_dict() for p in self.graph_data],
            "is_fallback": self.is_fallback,
            "milestone": None,
        }
        if self.milestone is not None:
            data["milestone"] = {
                "target_weight_kg": self.milestone.target_weight_kg,
                "estimated_date": self.milestone.estimated_date.isoformat(),
            }
        return data


def fit_line(days: np.ndarray, weights: np.ndarray) -> RegressionFit:
    """Ordinary least squares from the closed-form sums.

    Zero variance in weight gives R² = 0 and a flat line; identical
    timestamps (no spread in x) also give a flat line at the mean weight.
    """
    n = len(days)
    sum_x = days.sum()
    sum_y = weights.sum()
    sum_xy = (days * weights).sum()
    sum_xx = (days * days).sum()

    mean_y = sum_y / n
    sst = float(((weights - mean_y) ** 2).sum())
    denom = n * sum_xx - sum_x * sum_x

    if sst == 0 or denom == 0:
        return RegressionFit(slope=0.0, intercept=float(mean_y), r_squared=0.0)

    slope = float((n * sum_xy - sum_x * sum_y) / denom)
    intercept = float((sum_y - slope * sum_x) / n)

    residuals = weights - (slope * days + intercept)
    sse = float((residuals ** 2).sum())

    return RegressionFit(slope=slope, intercept=intercept, r_squared=1 - sse / sst)


def project_body_fat(
    entries: list[WeightLogEntry],
    elapsed_days: list[float],
    projection_day: float,
) -> float:
    """Two-point body-fat extrapolation.

    Uses the first and last entries that carry a body-fat reading. With one
    reading the value is held; with none, 0.
    """
    readings = [
        (day, e.body_fat_pct)
        for day, e in zip(elapsed_days, entries)
        if e.body_fat_pct is not None
    ]
    if not readings:
        return 0.0

    last_day, last_bf = readings[-1]
    if len(readings) < 2:
        return float(last_bf)

    first_day, first_bf = readings[0]
    span = last_day - first_day
    if span == 0:
        return float(last_bf)

    bf_slope = (last_bf - first_bf) / span
    return float(last_bf + bf_slope * (projection_day - last_day))


def fallback_prediction(
    entries: list[WeightLogEntry],
    plan: MacroPlan,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    weekly_change: float = FALLBACK_WEEKLY_CHANGE_KG,
) -> WeightPrediction:
    """Projection for sparse history: assume a conservative weekly change.

    No observed trend exists, so the estimated TDEE is the plan's
    formula-based maintenance.
    """
    current_weight = entries[-1].weight_kg if entries else 0.0
    known_bf = [e.body_fat_pct for e in entries if e.body_fat_pct is not None]
    body_fat = float(known_bf[-1]) if known_bf else 0.0

    return WeightPrediction(
        projected_weight_kg=current_weight + weekly_change * horizon_days / 7,
        projected_body_fat_pct=body_fat,
        confidence_score=0,
        weekly_rate_kg=weekly_change,
        slope_kg_per_day=weekly_change / 7,
        intercept_kg=current_weight,
        r_squared=0.0,
        pace=PaceClass.INSUFFICIENT_DATA,
        is_healthy_pace=True,
        recommendation=PACE_RECOMMENDATIONS[PaceClass.INSUFFICIENT_DATA],
        horizon_days=horizon_days,
        daily_balance_kcal=estimate_daily_calorie_balance(weekly_change),
        estimated_tdee_kcal=float(plan.maintenance),
        is_fallback=True,
    )


def predict_weight_trajectory(
    entries: Iterable[WeightLogEntry],
    plan: MacroPlan,
    target_weight: Optional[float] = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    fallback_weekly_change: float = FALLBACK_WEEKLY_CHANGE_KG,
) -> WeightPrediction:
    """Project weight and body fat from logged history.

    Args:
        entries: Weigh-ins in any order
        plan: Current macro plan; its calories are taken as actual intake
              when back-calculating TDEE from the trend
        target_weight: Optional goal weight for a milestone estimate
        horizon_days: Days past the last weigh-in to project
        fallback_weekly_change: Assumed kg/week when history is too sparse

    Returns:
        WeightPrediction
    """
    ordered = sorted(entries, key=lambda e: e.measured_at)
    if len(ordered) < 2:
        return fallback_prediction(ordered, plan, horizon_days, fallback_weekly_change)

    origin = ordered[0].measured_at
    elapsed = [(e.measured_at - origin).total_seconds() / SECONDS_PER_DAY for e in ordered]
    days = np.array(elapsed, dtype=float)
    weights = np.array([e.weight_kg for e in ordered], dtype=float)

    fit = fit_line(days, weights)
    last_day = elapsed[-1]
    projection_day = last_day + horizon_days

    weekly_rate = fit.slope * 7
    pace, healthy = classify_pace(weekly_rate)
    daily_balance = estimate_daily_calorie_balance(weekly_rate)
    confidence = min(100, max(0, round_half_up(fit.r_squared * 100)))

    milestone = None
    if target_weight is not None and fit.slope != 0:
        target_day = (target_weight - fit.intercept) / fit.slope
        if target_day > last_day:
            milestone = Milestone(
                target_weight_kg=target_weight,
                day_offset=target_day,
                estimated_date=(origin + timedelta(days=target_day)).date(),
            )

    graph = [
        GraphPoint(date=e.measured_at.date(), weight_kg=e.weight_kg, is_projection=False)
        for e in ordered[-GRAPH_ACTUAL_POINTS:]
    ]
    for week in range(1, GRAPH_PROJECTION_WEEKS + 1):
        day = last_day + week * 7
        graph.append(
            GraphPoint(
                date=(origin + timedelta(days=day)).date(),
                weight_kg=round(fit.at(day), 1),
                is_projection=True,
            )
        )

    return WeightPrediction(
        projected_weight_kg=fit.at(projection_day),
        projected_body_fat_pct=project_body_fat(ordered, elapsed, projection_day),
        confidence_score=confidence,
        weekly_rate_kg=weekly_rate,
        slope_kg_per_day=fit.slope,
        intercept_kg=fit.intercept,
        r_squared=fit.r_squared,
        pace=pace,
        is_healthy_pace=healthy,
        recommendation=PACE_RECOMMENDATIONS[pace],
        horizon_days=horizon_days,
        daily_balance_kcal=daily_balance,
        estimated_tdee_kcal=plan.calories - daily_balance,
        milestone=milestone,
        graph_data=graph,
    )
