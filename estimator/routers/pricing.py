"""
Single-material AI price estimate.

POST /api/pricing/ai-estimate
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..errors import MarketPriceError
from .deps import get_price_fetcher_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["pricing"])


class PriceRange(BaseModel):
    low: float
    high: float


class AIEstimateRequest(BaseModel):
    material_name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    zip_code: Optional[str] = None


class AIEstimateResponse(BaseModel):
    estimated_price: float
    confidence: str
    price_range: PriceRange
    notes: str
    source: str
    timestamp: str


@router.post("/ai-estimate", response_model=AIEstimateResponse)
async def ai_estimate(request: AIEstimateRequest, make_fetcher=Depends(get_price_fetcher_factory)):
    fetcher = make_fetcher(request.zip_code)
    if not fetcher.ai_enabled:
        raise HTTPException(status_code=400, detail="OPENAI_API_KEY not configured")
    try:
        return await fetcher.estimate_single(
            request.material_name, request.category, request.unit, request.zip_code,
        )
    except MarketPriceError as e:
        logger.warning("AI price estimate failed for %s: %s", request.material_name, e)
        raise HTTPException(status_code=502, detail=f"Failed to estimate price: {e}")
