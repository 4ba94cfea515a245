"""
Static fallback pricing.

Used when an item has no cached price and the AI estimate is unavailable
or did not cover it. Prices are wholesale contractor rates per item unit.

Lookup order: first name substring match (table order matters, more
specific keys come first) → category price → DEFAULT_UNIT_PRICE.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..config import settings
from ..schemas import Complexity

# (substring of item name, unit price). First match wins.
NAME_PRICES: List[Tuple[str, float]] = [
    # Decking (per sqft)
    ("Pressure-Treated Pine Decking", 3.50),
    ("Cedar Decking", 6.00),
    ("Composite Decking (Trex-style)", 8.50),
    ("PVC Decking", 10.00),

    # Fasteners, before the lumber sizes they mention
    ("Galvanized Joist Hangers", 2.50),     # each
    ("Lag Bolts", 1.50),                    # each
    ("Deck Screws", 45.00),                 # per box

    # Framing (per piece)
    ("2x8", 12.00),
    ("2x10", 15.00),
    ("2x12", 18.00),
    ("6x6", 35.00),
    ("4x4", 18.00),

    # Concrete
    ("Concrete Mix (80lb bags)", 5.50),
    ('12" Concrete Footing Forms', 8.00),

    # Misc deck
    ("Galvanized Ledger Flashing", 12.00),  # per linear foot
    ("Stainless Steel Cable Railing Kit", 250.00),

    # Setting materials and paint, before the surfaces they name
    ("Thinset", 25.00),                     # per 50 lb bag
    ("Grout Sealer", 15.00),
    ("Grout", 20.00),                       # per 25 lb bag
    ("Paint", 40.00),                       # per gallon
    ("Primer", 30.00),

    # Interior finishes (per sqft)
    ("Cement Backer Board", 1.25),
    ("Waterproof Membrane", 1.50),
    ("Natural Stone Floor Tile", 9.00),
    ("Porcelain Floor Tile", 4.50),
    ("Ceramic Floor Tile", 3.00),
    ("Luxury Vinyl Plank", 3.50),
    ("Wall Tile", 5.00),
    ("Subway Tile", 6.00),
    ("Glass Tile", 15.00),
    ("Underlayment", 0.50),
    ("Granite Countertop", 55.00),
    ("Quartz Countertop", 65.00),
    ("Marble Countertop", 75.00),
    ("Laminate Countertop", 25.00),
    ("Butcher Block Countertop", 40.00),
    ("Concrete Countertop", 70.00),

    # Cabinets (per linear ft)
    ("Upper Cabinets", 150.00),
    ("Lower Cabinets", 200.00),

    # Fixtures (each)
    ("Height Toilet", 300.00),
    ("Wall-Mounted Toilet", 450.00),
    ("Vanity Cabinet", 500.00),
    ("Bathtub", 600.00),
    ("Exhaust Fan", 120.00),
    ("GFCI Outlets", 25.00),
    ("Dumpster Rental", 450.00),
]

CATEGORY_PRICES: Dict[str, float] = {
    "Decking": 5.00,
    "Framing": 12.00,
    "Structure": 30.00,
    "Foundation": 6.00,
    "Fasteners": 40.00,
    "Stairs": 25.00,
    "Railing": 15.00,
    "Cabinets": 175.00,
    "Countertops": 50.00,
    "Appliances": 800.00,
    "Plumbing": 150.00,
    "Fixtures": 250.00,
    "Vanity": 200.00,
}

DEFAULT_UNIT_PRICE = 10.00

# Labor heuristic used when the caller has no calculator labor hours
HOURS_PER_SQFT = {
    Complexity.SIMPLE: 0.5,
    Complexity.MODERATE: 0.75,
    Complexity.COMPLEX: 1.0,
}
DEFAULT_LABOR_AREA_SQFT = 200


class PricingTables(BaseModel):
    """Injectable pricing data. Defaults are the module-level tables."""

    name_prices: List[Tuple[str, float]] = Field(default_factory=lambda: list(NAME_PRICES))
    category_prices: Dict[str, float] = Field(default_factory=lambda: dict(CATEGORY_PRICES))
    default_unit_price: float = DEFAULT_UNIT_PRICE
    labor_rate: float = Field(default_factory=lambda: settings.LABOR_RATE_DEFAULT)
    hours_per_sqft: Dict[Complexity, float] = Field(default_factory=lambda: dict(HOURS_PER_SQFT))
    default_labor_area: float = DEFAULT_LABOR_AREA_SQFT

    def name_price(self, name: str) -> Optional[float]:
        for key, price in self.name_prices:
            if key in name:
                return price
        return None

    def unit_price(self, name: str, category: str) -> float:
        """Fallback unit price: name substring, then category, then default."""
        price = self.name_price(name)
        if price is not None:
            return price
        return self.category_prices.get(category, self.default_unit_price)
