import pytest

from brewcalc.models import Recipe, Settings


@pytest.fixture
def pale_ale() -> Recipe:
    """20 L of pale ale from 4 kg of 36 PPG malt at 75% efficiency."""
    recipe = Recipe(name="Pale Ale", target_volume=20.0)
    recipe.settings = Settings(efficiency=75.0)
    recipe.add_fermentable("Pale Malt", color=5.0, potential=36.0, amount=4.0)
    return recipe
