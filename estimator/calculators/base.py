"""
Abstract base class for all project-type calculators.

Input: a Dimensions + Options pair for one project type
Output: MaterialList (items in fixed phase order, area, labor hours)

Inputs are validated together once, in the constructor. A calculator that
finishes construction can assume every required value is present and in
range; nothing downstream falls back to zero.
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from ..errors import EstimateValidationError
from ..schemas import BuildQuality, Complexity, MaterialItem, MaterialList, ProjectType

logger = logging.getLogger(__name__)

# Coverage rates shared by every project type
SQFT_PER_GALLON = 350       # paint / primer
SQFT_PER_THINSET_BAG = 50   # 50 lb thinset
SQFT_PER_GROUT_BAG = 100    # 25 lb grout


class BaseCalculator(ABC):
    """All project-type calculators inherit from this."""

    PROJECT_TYPE: ProjectType
    # pydantic model with `dimensions` and `options` fields + cross-field rules
    PROJECT_MODEL: type

    # Waste factor, override per calculator if needed
    WASTE_FACTOR = 1.10
    PREMIUM_LABOR_MULTIPLIER = 1.0

    def __init__(self, dimensions, options, waste_factor: Optional[float] = None):
        try:
            project = self.PROJECT_MODEL(dimensions=dimensions, options=options)
        except ValidationError as exc:
            raise EstimateValidationError.from_pydantic(self.PROJECT_TYPE.value, exc) from exc
        self.dimensions = project.dimensions
        self.options = project.options
        self.waste_factor = self.WASTE_FACTOR if waste_factor is None else waste_factor
        if self.waste_factor < 1.0:
            raise EstimateValidationError(
                f"waste_factor must be >= 1.0, got {self.waste_factor}",
                [{"loc": ["waste_factor"], "msg": "must be >= 1.0", "type": "value_error"}],
            )
        self._item_counter = 0

    @abstractmethod
    def calculate(self) -> MaterialList:
        """
        Derive the full bill of materials.
        Pure and deterministic: identical inputs give an identical ordered list.
        """
        pass

    # --- Helper methods for all calculators ---

    @property
    def is_premium(self) -> bool:
        return self.options.build_quality == BuildQuality.PREMIUM

    def quality_suffix(self) -> str:
        """' (Premium)' name suffix for premium builds, '' otherwise."""
        return " (Premium)" if self.is_premium else ""

    def apply_waste(self, quantity: float, waste_factor: Optional[float] = None) -> int:
        """Apply waste multiplier to a quantity. Always round UP."""
        factor = self.waste_factor if waste_factor is None else waste_factor
        return math.ceil(round(quantity * factor, 6))

    def spacing_count(self, span_ft: float, spacing_ft: float) -> int:
        """Members laid out at a fixed spacing, including both ends."""
        return math.ceil(round(span_ft / spacing_ft, 6)) + 1

    def support_count(self, span_ft: float, spacing_ft: float) -> int:
        """Supports needed so no gap exceeds spacing_ft."""
        return math.ceil(round(span_ft / spacing_ft, 6))

    def pieces_for_length(self, total_length_ft: float, stock_length_ft: float = 8.0) -> int:
        """Stock boards needed to cover a run. You can't buy half a board."""
        return math.ceil(round(total_length_ft / stock_length_ft, 6))

    def gallons_for_area(self, area_sqft: float) -> int:
        return math.ceil(round(area_sqft / SQFT_PER_GALLON, 6))

    def bags_for_area(self, area_sqft: float, sqft_per_bag: float) -> int:
        return math.ceil(round(area_sqft / sqft_per_bag, 6))

    def finish_labor_hours(self, hours: float) -> int:
        """Scale raw hours by the premium multiplier, then round up."""
        if self.is_premium:
            hours *= self.PREMIUM_LABOR_MULTIPLIER
        return math.ceil(round(hours, 6))

    def complexity_from_hours(self, hours: float, moderate_at: float, complex_at: float) -> Complexity:
        if hours >= complex_at:
            return Complexity.COMPLEX
        if hours >= moderate_at:
            return Complexity.MODERATE
        return Complexity.SIMPLE

    def label(self, table: dict, value, field: str) -> str:
        """
        Display name for an enumerated option.
        Every legal value has an entry; anything else is rejected, never defaulted.
        """
        try:
            return table[value]
        except KeyError:
            raise EstimateValidationError(
                f"Unsupported {field}: {value!r}",
                [{"loc": [field], "msg": f"unsupported value {value!r}", "type": "enum"}],
            ) from None

    def generate_id(self, category: str, name: str) -> str:
        """Unique-within-run item id: '<category>-<name>-<sequence>'."""
        slug = "%s-%s-%d" % (
            re.sub(r"\s+", "-", category.lower()),
            re.sub(r"\s+", "-", name.lower()),
            self._item_counter,
        )
        self._item_counter += 1
        return slug

    def make_material_item(self, category: str, name: str, quantity: float, unit: str,
                           description: str = None, notes: str = None,
                           item_id: str = None, **tags) -> MaterialItem:
        """Build a MaterialItem; id is generated unless a fixed slug is given."""
        return MaterialItem(
            id=item_id or self.generate_id(category, name),
            category=category,
            name=name,
            quantity=quantity,
            unit=unit,
            description=description,
            notes=notes,
            **tags,
        )

    def make_material_list(self, items: list, area: float, labor_hours: float,
                           demolition_hours: float = 0,
                           complexity: Complexity = Complexity.MODERATE) -> MaterialList:
        logger.debug(
            "%s calculation: %d items, %.1f sqft, %s labor hours",
            self.PROJECT_TYPE.value, len(items), area, labor_hours,
        )
        return MaterialList(
            project_type=self.PROJECT_TYPE,
            items=items,
            area=area,
            estimated_labor_hours=labor_hours,
            demolition_hours=demolition_hours,
            complexity=complexity,
        )

    def _reset(self):
        self._item_counter = 0
