"""
Calculator registry: maps project_type strings to calculator classes.
"""

from ..errors import UnknownProjectTypeError
from .base import BaseCalculator
from .bathroom import BathroomMaterialCalculator
from .deck import DeckMaterialCalculator
from .kitchen import KitchenMaterialCalculator

CALCULATOR_REGISTRY: dict[str, type] = {
    "deck": DeckMaterialCalculator,
    "kitchen": KitchenMaterialCalculator,
    "bathroom": BathroomMaterialCalculator,
}


def get_calculator(project_type: str, dimensions, options, waste_factor: float = None) -> BaseCalculator:
    """
    Returns a validated calculator instance for a project type.
    Raises UnknownProjectTypeError for unregistered types and
    EstimateValidationError for bad dimensions/options.
    """
    if project_type not in CALCULATOR_REGISTRY:
        raise UnknownProjectTypeError(
            f"No calculator registered for project type: {project_type}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    return CALCULATOR_REGISTRY[project_type](dimensions, options, waste_factor=waste_factor)


def has_calculator(project_type: str) -> bool:
    """Check if a calculator exists for a project type."""
    return project_type in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered calculator project types."""
    return list(CALCULATOR_REGISTRY.keys())
