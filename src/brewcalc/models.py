"""Pydantic models for beer recipes.

Units expected throughout (see ``brewcalc.calc`` for the formulas):

- Masses in kilograms.
- Volumes in liters.
- Times in minutes.
- Temperatures in degrees Celsius.
- Fermentable color in degrees Lovibond.
- Fermentable potential in gravity points per pound per gallon (PPG).
- Efficiency, attenuation and alpha acid in percent.
- Gravities in thousand scale (1050.0 is a specific gravity of 1.050).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# === Unit Conversion Helpers ===

LITERS_TO_GALLONS = 0.264172
KG_TO_POUNDS = 2.20462
KG_TO_OUNCES = 35.274
SRM_TO_EBC = 1.97
SUCROSE_PPG = 46.214  # BeerXML yields are relative to sucrose


def liters_to_gallons(l: float) -> float:
    """Convert liters to US gallons."""
    return l * LITERS_TO_GALLONS


def kg_to_pounds(kg: float) -> float:
    """Convert kilograms to pounds."""
    return kg * KG_TO_POUNDS


def kg_to_ounces(kg: float) -> float:
    """Convert kilograms to weight ounces."""
    return kg * KG_TO_OUNCES


def srm_to_ebc(srm: float) -> float:
    """Convert SRM color to EBC."""
    return srm * SRM_TO_EBC


def yield_to_ppg(yield_pct: float) -> float:
    """Convert a percent extract yield to points per pound per gallon."""
    return yield_pct * SUCROSE_PPG / 100


def ppg_to_yield(ppg: float) -> float:
    """Convert points per pound per gallon to a percent extract yield."""
    return ppg * 100 / SUCROSE_PPG


def sg_to_points(sg: float) -> float:
    """Convert a specific gravity (1.050) to thousand scale (1050.0)."""
    return sg * 1000


def points_to_sg(points: float) -> float:
    """Convert a thousand scale gravity (1050.0) to specific gravity (1.050)."""
    return points / 1000


# === Enums ===


class HopUse(str, Enum):
    """When hops are used in the brewing process."""

    BOIL = "Boil"
    DRY_HOP = "Dry Hop"
    MASH = "Mash"
    FIRST_WORT = "First Wort"
    AROMA = "Aroma"  # Whirlpool/steep after the boil


class FermentableType(str, Enum):
    """Fermentable classification."""

    GRAIN = "Grain"
    SUGAR = "Sugar"
    EXTRACT = "Extract"
    DRY_EXTRACT = "Dry Extract"
    ADJUNCT = "Adjunct"


# === Ingredient Models ===


class Ingredient(BaseModel):
    """Base model for recipe records; immutable once added."""

    model_config = ConfigDict(frozen=True)

    name: str = ""


class Fermentable(Ingredient):
    """Malt or other sugar source."""

    type: FermentableType = FermentableType.GRAIN
    color: float = 0.0  # Lovibond
    potential: float = 0.0  # PPG
    amount: float = 0.0  # kg

    @property
    def yield_pct(self) -> float:
        return ppg_to_yield(self.potential)


class Hop(Ingredient):
    """Hop addition."""

    alpha: float = 0.0  # Alpha acid %
    amount: float = 0.0  # kg
    time: float = 0.0  # minutes
    use: HopUse = HopUse.BOIL

    @property
    def contributes_bitterness(self) -> bool:
        """Whether the addition is boiled.

        Aroma and dry hop times measure steeping after the boil has ended,
        so they count neither toward bitterness nor toward process time.
        """
        return self.use not in (HopUse.AROMA, HopUse.DRY_HOP)


class Yeast(Ingredient):
    """Yeast strain."""

    attenuation: float = 0.0  # %
    amount: float = 1.0  # Relative weight among strains


class ProcessStep(Ingredient):
    """Timed process step, e.g. a mash rest."""

    temperature: float = 0.0  # Celsius
    duration: float = 0.0  # minutes
    ramp_time: float = 0.0  # minutes

    @property
    def total_time(self) -> float:
        return self.duration + self.ramp_time


# === Settings ===


class Settings(BaseModel):
    """Equipment and process settings."""

    model_config = ConfigDict(frozen=True)

    efficiency: float = 70.0  # %
    evaporation_rate: float = 1.0  # L/h
    grain_loss: float = 1.0  # L/kg of fermentable


# === Recipe ===


class Recipe(BaseModel):
    """A beer recipe: ingredients, process steps and settings."""

    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    description: str = ""
    target_volume: float = 20.0  # L
    fermentables: list[Fermentable] = Field(default_factory=list)
    hops: list[Hop] = Field(default_factory=list)
    yeasts: list[Yeast] = Field(default_factory=list)
    steps: list[ProcessStep] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)
    original_gravity_measured: float | None = None
    final_gravity_measured: float | None = None

    def add_fermentable(
        self,
        name: str,
        color: float,
        potential: float,
        amount: float,
        type: FermentableType = FermentableType.GRAIN,
    ) -> Fermentable:
        fermentable = Fermentable(
            name=name, type=type, color=color, potential=potential, amount=amount
        )
        self.fermentables.append(fermentable)
        return fermentable

    def add_hop(
        self,
        name: str,
        alpha: float,
        amount: float,
        time: float,
        use: HopUse = HopUse.BOIL,
    ) -> Hop:
        hop = Hop(name=name, alpha=alpha, amount=amount, time=time, use=use)
        self.hops.append(hop)
        return hop

    def add_yeast(self, name: str, attenuation: float, amount: float = 1.0) -> Yeast:
        yeast = Yeast(name=name, attenuation=attenuation, amount=amount)
        self.yeasts.append(yeast)
        return yeast

    def add_step(
        self,
        temperature: float,
        duration: float,
        name: str = "",
        ramp_time: float = 0.0,
    ) -> ProcessStep:
        step = ProcessStep(
            name=name, temperature=temperature, duration=duration, ramp_time=ramp_time
        )
        self.steps.append(step)
        return step

    @property
    def total_fermentable_amount(self) -> float:
        return sum((f.amount for f in self.fermentables), 0.0)
