"""Brewing metrics derived from a recipe.

Every metric is recomputed from the recipe on each call. Original gravity
and efficiency depend on each other: the estimated gravity is scaled by the
efficiency, and an efficiency realized from a measured gravity is relative to
the gravity a loss-free (ideal) extraction would give. The cycle is broken by
the ``ideal`` keyword, under which efficiency is 100% without looking at
gravities at all.
"""

import logging
import math

from brewcalc.models import (
    Recipe,
    kg_to_ounces,
    kg_to_pounds,
    liters_to_gallons,
    srm_to_ebc,
)

logger = logging.getLogger(__name__)

BASE_GRAVITY = 1000.0


class UndefinedMetricError(ArithmeticError):
    """A metric divided by zero."""

    def __init__(self, metric: str, divisor: str):
        super().__init__(f"{metric} is undefined: {divisor} is zero")
        self.metric = metric
        self.divisor = divisor


def _divide(metric: str, divisor: str, numerator: float, denominator: float) -> float:
    if denominator == 0:
        raise UndefinedMetricError(metric, divisor)
    return numerator / denominator


def _batch_gallons(recipe: Recipe, metric: str) -> float:
    gallons = liters_to_gallons(recipe.target_volume)
    if gallons == 0:
        raise UndefinedMetricError(metric, "target volume")
    return gallons


# === Volumes and Times ===


def total_process_time(recipe: Recipe) -> float:
    """Total process time in minutes: steps plus boiled hop additions."""
    total = sum((s.total_time for s in recipe.steps), 0.0)
    total += sum(h.time for h in recipe.hops if h.contributes_bitterness)
    return total


def start_volume(recipe: Recipe) -> float:
    """Volume in liters needed to end up with the target volume.

    Grain absorption and boil evaporation are added on top of the target.
    """
    settings = recipe.settings
    grain = recipe.total_fermentable_amount * settings.grain_loss
    evaporation = settings.evaporation_rate * total_process_time(recipe) / 60
    return recipe.target_volume + grain + evaporation


# === Color and Bitterness ===


def color(recipe: Recipe) -> float:
    """Beer color in SRM (Morey equation)."""
    if not recipe.fermentables:
        return 0.0

    gallons = _batch_gallons(recipe, "color")
    mcu = 0.0
    for f in recipe.fermentables:
        mcu += kg_to_pounds(f.amount) * f.color / gallons

    if mcu < 0:
        # No real power of a negative MCU
        logger.debug("Negative MCU %.3f, color is NaN", mcu)
        return math.nan
    return 1.4922 * math.pow(mcu, 0.6859)


def color_ebc(recipe: Recipe) -> float:
    """Beer color in EBC."""
    return srm_to_ebc(color(recipe))


def ibu(recipe: Recipe) -> float:
    """Bitterness in IBU (Tinseth formula)."""
    hops = [h for h in recipe.hops if h.contributes_bitterness]
    if not hops:
        return 0.0

    gallons = _batch_gallons(recipe, "ibu")
    og = original_gravity(recipe)
    correction = 1.65 * math.pow(0.000125, og / 1000 - 1)

    total = 0.0
    for h in hops:
        utilization = (1 - math.exp(-0.04 * h.time)) / 4.15
        raw = (h.alpha / 100) * kg_to_ounces(h.amount) * 7490 / gallons
        total += raw * utilization * correction
    return total


def bitterness_ratio(recipe: Recipe) -> float:
    """BU:GU ratio."""
    points = original_gravity(recipe) - BASE_GRAVITY
    return _divide("bitterness_ratio", "original gravity points", ibu(recipe), points)


# === Gravities and Efficiency ===


def original_gravity(recipe: Recipe) -> float:
    """Measured original gravity, or the estimate when none was measured."""
    if recipe.original_gravity_measured is not None:
        return recipe.original_gravity_measured
    return estimated_original_gravity(recipe)


def estimated_original_gravity(recipe: Recipe, *, ideal: bool = False) -> float:
    """Original gravity estimated from the fermentables.

    With ``ideal`` set the extraction is assumed loss-free.
    """
    if not recipe.fermentables:
        return BASE_GRAVITY

    gallons = _batch_gallons(recipe, "estimated_original_gravity")
    points = 0.0
    for f in recipe.fermentables:
        points += f.potential * kg_to_pounds(f.amount) / gallons
    points *= efficiency(recipe, ideal=ideal) / 100

    return BASE_GRAVITY + points


def ideal_original_gravity(recipe: Recipe) -> float:
    return estimated_original_gravity(recipe, ideal=True)


def efficiency(recipe: Recipe, *, ideal: bool = False) -> float:
    """Extraction efficiency in percent.

    When an original gravity was measured, the efficiency actually realized
    is returned instead of the configured one.
    """
    if ideal:
        return 100.0

    measured = recipe.original_gravity_measured
    if measured is None:
        return recipe.settings.efficiency

    ideal_points = ideal_original_gravity(recipe) - BASE_GRAVITY
    realized = _divide(
        "efficiency", "ideal gravity points", measured - BASE_GRAVITY, ideal_points
    ) * 100
    logger.debug(
        "Realized efficiency %.1f%% (measured %.1f, ideal %.1f)",
        realized, measured, ideal_points + BASE_GRAVITY,
    )
    return realized


def final_gravity(recipe: Recipe) -> float:
    """Measured final gravity, or the estimate when none was measured."""
    if recipe.final_gravity_measured is not None:
        return recipe.final_gravity_measured
    return estimated_final_gravity(recipe)


def estimated_final_gravity(recipe: Recipe, *, ideal: bool = False) -> float:
    """Final gravity estimated from the yeast attenuation.

    Attenuation applies to the points above water. In ideal mode the original
    gravity is the ideal estimate, even when one was measured.
    """
    if ideal:
        og = estimated_original_gravity(recipe, ideal=True)
    else:
        og = original_gravity(recipe)
    return og - (og - BASE_GRAVITY) * estimated_attenuation(recipe) / 100


def ideal_final_gravity(recipe: Recipe) -> float:
    return estimated_final_gravity(recipe, ideal=True)


# === Attenuation and Alcohol ===


def estimated_attenuation(recipe: Recipe) -> float:
    """Yeast attenuation in percent, averaged by yeast amount."""
    weighted = sum(y.attenuation * y.amount for y in recipe.yeasts)
    total = sum(y.amount for y in recipe.yeasts)
    return _divide("estimated_attenuation", "yeast amount", weighted, total)


def attenuation(recipe: Recipe) -> float:
    """Apparent attenuation in percent.

    Computed from the gravities when both were measured.
    """
    og = recipe.original_gravity_measured
    fg = recipe.final_gravity_measured
    if og is None or fg is None:
        return estimated_attenuation(recipe)

    return _divide("attenuation", "original gravity points", og - fg, og - BASE_GRAVITY) * 100


def abv(recipe: Recipe) -> float:
    """Alcohol by volume in percent."""
    og = original_gravity(recipe)
    fg = final_gravity(recipe)
    return _divide("abv", "final gravity", 1.05 * (og - fg), fg) / 0.79 * 100


METRICS = {
    "total_process_time": total_process_time,
    "start_volume": start_volume,
    "color": color,
    "color_ebc": color_ebc,
    "ibu": ibu,
    "bitterness_ratio": bitterness_ratio,
    "original_gravity": original_gravity,
    "estimated_original_gravity": estimated_original_gravity,
    "ideal_original_gravity": ideal_original_gravity,
    "efficiency": efficiency,
    "final_gravity": final_gravity,
    "estimated_final_gravity": estimated_final_gravity,
    "ideal_final_gravity": ideal_final_gravity,
    "estimated_attenuation": estimated_attenuation,
    "attenuation": attenuation,
    "abv": abv,
}


def calculate_all(recipe: Recipe) -> dict[str, float | UndefinedMetricError]:
    """Compute every metric.

    An undefined metric maps to its error instead of a value.
    """
    results: dict[str, float | UndefinedMetricError] = {}
    for name, metric in METRICS.items():
        try:
            results[name] = metric(recipe)
        except UndefinedMetricError as e:
            results[name] = e
    return results
