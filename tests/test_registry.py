"""
Calculator registry tests.

Tests:
1-2. Registered project types
3-4. Lookup (validated instance, unknown type)
"""

import pytest

from estimator.calculators import (
    BathroomMaterialCalculator,
    DeckMaterialCalculator,
    KitchenMaterialCalculator,
)
from estimator.calculators.registry import get_calculator, has_calculator, list_calculators
from estimator.errors import EstimateValidationError, UnknownProjectTypeError


# ============================================================
# Registered project types
# ============================================================

def test_all_three_project_types_registered():
    assert set(list_calculators()) == {"deck", "kitchen", "bathroom"}


def test_has_calculator():
    assert has_calculator("kitchen")
    assert not has_calculator("garage")


# ============================================================
# Lookup
# ============================================================

def test_get_calculator_returns_validated_instance(deck_input, kitchen_input, bathroom_input):
    deck = get_calculator("deck", deck_input["dimensions"], deck_input["options"], waste_factor=1.10)
    assert isinstance(deck, DeckMaterialCalculator)
    assert deck.calculate().items[0].quantity == 264

    kitchen = get_calculator("kitchen", kitchen_input["dimensions"], kitchen_input["options"])
    assert isinstance(kitchen, KitchenMaterialCalculator)
    bathroom = get_calculator("bathroom", bathroom_input["dimensions"], bathroom_input["options"])
    assert isinstance(bathroom, BathroomMaterialCalculator)

    with pytest.raises(EstimateValidationError):
        get_calculator("deck", {}, deck_input["options"])


def test_unknown_project_type_raises():
    with pytest.raises(UnknownProjectTypeError) as exc_info:
        get_calculator("garage", {}, {})
    assert "deck" in str(exc_info.value)
