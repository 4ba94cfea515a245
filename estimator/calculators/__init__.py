"""
Deterministic calculation engine.

Pure Python math, no pricing and no AI.
Given validated project dimensions + options, produce an ordered
MaterialList with quantities, labor hours, and complexity.
"""

from .bathroom import BathroomMaterialCalculator
from .deck import DeckMaterialCalculator
from .kitchen import KitchenMaterialCalculator
from .registry import CALCULATOR_REGISTRY, get_calculator, has_calculator, list_calculators

__all__ = [
    "BathroomMaterialCalculator",
    "DeckMaterialCalculator",
    "KitchenMaterialCalculator",
    "CALCULATOR_REGISTRY",
    "get_calculator",
    "has_calculator",
    "list_calculators",
]
