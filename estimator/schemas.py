"""
Shared value types for the estimator pipeline.

Calculator output: MaterialList (items + area + labor hours)
Pricing output:    PricingResult (priced items + subtotal + labor + confidence)

All models are frozen. A MaterialList is never mutated after calculate()
returns, and the price fetcher builds new PricedMaterial records instead of
editing items in place.
"""

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectType(str, enum.Enum):
    DECK = "deck"
    KITCHEN = "kitchen"
    BATHROOM = "bathroom"


class BuildQuality(str, enum.Enum):
    STANDARD = "standard"
    PREMIUM = "premium"


class Complexity(str, enum.Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class Confidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PriceSource(str, enum.Enum):
    CACHE = "cache"
    AI_ESTIMATE = "ai_estimate"
    FALLBACK = "fallback"


class MaterialItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    name: str
    quantity: float = Field(gt=0)
    unit: str
    description: Optional[str] = None
    notes: Optional[str] = None
    # Per-staircase traceability (deck stairs only)
    stair_set: Optional[int] = None
    location: Optional[str] = None


class MaterialList(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_type: ProjectType
    items: List[MaterialItem]
    area: float = Field(gt=0)
    estimated_labor_hours: float = Field(ge=0)
    demolition_hours: float = Field(default=0, ge=0)
    complexity: Complexity = Complexity.MODERATE


class PricedMaterial(MaterialItem):
    unit_price: float = Field(ge=0)
    total_price: float = Field(ge=0)
    confidence: Confidence
    price_notes: Optional[str] = None
    price_source: PriceSource
    last_updated: datetime


class PricingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    materials: List[PricedMaterial]
    subtotal: int
    estimated_labor: int
    labor_hours: float
    total: int
    zip_code: str
    pricing_date: datetime
    confidence: Confidence
    disclaimer: str


class EstimateResponse(BaseModel):
    material_list: MaterialList
    pricing: PricingResult
