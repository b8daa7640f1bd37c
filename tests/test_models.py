"""
Tests for recipe data models.
"""

import pytest
from pydantic import ValidationError

from brewcalc.models import (
    Fermentable,
    FermentableType,
    Hop,
    HopUse,
    Recipe,
    Settings,
    kg_to_ounces,
    kg_to_pounds,
    liters_to_gallons,
    points_to_sg,
    ppg_to_yield,
    sg_to_points,
    yield_to_ppg,
)


class TestRecipe:
    """Tests for Recipe construction."""

    def test_empty_recipe(self):
        recipe = Recipe()
        assert recipe.fermentables == []
        assert recipe.hops == []
        assert recipe.yeasts == []
        assert recipe.steps == []
        assert recipe.original_gravity_measured is None
        assert recipe.final_gravity_measured is None

    def test_default_settings(self):
        settings = Recipe().settings
        assert settings.efficiency == 70.0
        assert settings.evaporation_rate > 0
        assert settings.grain_loss > 0

    def test_add_returns_record(self):
        recipe = Recipe()
        hop = recipe.add_hop("Cascade", alpha=5.5, amount=0.03, time=60)
        assert hop.name == "Cascade"
        assert hop.use == HopUse.BOIL
        assert recipe.hops == [hop]

    def test_insertion_order(self):
        recipe = Recipe()
        names = ["Pilsner", "Munich", "Carapils", "Wheat"]
        for name in names:
            recipe.add_fermentable(name, color=2.0, potential=36.0, amount=1.0)
        recipe.add_yeast("WLP001", attenuation=76)
        recipe.add_yeast("S-04", attenuation=72)
        recipe.add_step(65.0, 60.0, name="Saccharification")
        recipe.add_step(78.0, 10.0, name="Mash Out")

        assert [f.name for f in recipe.fermentables] == names
        assert [y.name for y in recipe.yeasts] == ["WLP001", "S-04"]
        assert [s.name for s in recipe.steps] == ["Saccharification", "Mash Out"]

    def test_add_fermentable_type(self):
        recipe = Recipe()
        sugar = recipe.add_fermentable(
            "Dextrose", color=0.0, potential=46.0, amount=0.5, type=FermentableType.SUGAR
        )
        assert sugar.type == FermentableType.SUGAR
        assert recipe.total_fermentable_amount == 0.5

    def test_measured_gravity_zero_is_set(self):
        recipe = Recipe()
        recipe.original_gravity_measured = 0.0
        assert recipe.original_gravity_measured is not None

    def test_assignment_is_validated(self):
        recipe = Recipe()
        with pytest.raises(ValidationError):
            recipe.target_volume = "twenty"

    def test_settings_replaced(self):
        recipe = Recipe()
        recipe.settings = Settings(efficiency=82.0)
        assert recipe.settings.efficiency == 82.0
        assert recipe.settings.grain_loss == Settings().grain_loss


class TestIngredients:
    """Tests for ingredient records."""

    def test_immutable(self):
        malt = Fermentable(name="Pale Malt", potential=36.0, amount=4.0)
        with pytest.raises(ValidationError):
            malt.amount = 5.0

    @pytest.mark.parametrize(
        "use, boiled",
        [
            (HopUse.BOIL, True),
            (HopUse.FIRST_WORT, True),
            (HopUse.MASH, True),
            (HopUse.AROMA, False),
            (HopUse.DRY_HOP, False),
        ],
    )
    def test_contributes_bitterness(self, use, boiled):
        assert Hop(name="Saaz", alpha=3.5, use=use).contributes_bitterness is boiled

    def test_hop_use_from_beerxml_name(self):
        assert Hop(name="Citra", use="Dry Hop").use == HopUse.DRY_HOP

    def test_step_total_time(self):
        recipe = Recipe()
        step = recipe.add_step(66.0, 60.0, ramp_time=5.0)
        assert step.total_time == 65.0


class TestConversions:
    """Tests for unit conversion helpers."""

    def test_constants(self):
        assert liters_to_gallons(1) == pytest.approx(0.264172)
        assert kg_to_pounds(1) == pytest.approx(2.20462)
        assert kg_to_ounces(1) == pytest.approx(35.274)

    def test_yield(self):
        assert yield_to_ppg(100) == pytest.approx(46.214)
        assert ppg_to_yield(yield_to_ppg(78.0)) == pytest.approx(78.0)

    def test_gravity(self):
        assert sg_to_points(1.050) == pytest.approx(1050.0)
        assert points_to_sg(1012.0) == pytest.approx(1.012)
