"""
Estimate API: calculator + pricing over HTTP.

POST /api/estimates/{project_type}/materials   bill of materials only
POST /api/estimates/{project_type}              bill of materials + pricing
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..calculators.registry import get_calculator, has_calculator, list_calculators
from ..errors import EstimateValidationError
from ..schemas import EstimateResponse, MaterialList
from .deps import get_price_fetcher_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/estimates", tags=["estimates"])


class EstimateRequest(BaseModel):
    dimensions: dict
    options: dict
    zip_code: Optional[str] = None
    waste_factor: Optional[float] = Field(default=None, ge=1.0, le=2.0)


def _calculate(project_type: str, request: EstimateRequest) -> MaterialList:
    if not has_calculator(project_type):
        raise HTTPException(
            status_code=404,
            detail=f"Unknown project type: {project_type}. Available: {list_calculators()}",
        )
    try:
        calculator = get_calculator(
            project_type, request.dimensions, request.options, waste_factor=request.waste_factor,
        )
    except EstimateValidationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    return calculator.calculate()


@router.post("/{project_type}/materials", response_model=MaterialList)
def calculate_materials(project_type: str, request: EstimateRequest):
    """Run the calculator only. Deterministic, no pricing, no AI."""
    return _calculate(project_type, request)


@router.post("/{project_type}", response_model=EstimateResponse)
async def create_estimate(
    project_type: str,
    request: EstimateRequest,
    make_fetcher=Depends(get_price_fetcher_factory),
):
    """
    Calculate materials, then price them for the request's ZIP code.
    Pricing never fails the request; degraded prices come back with
    lower confidence and an explanatory disclaimer.
    """
    material_list = _calculate(project_type, request)
    fetcher = make_fetcher(request.zip_code)
    pricing = await fetcher.price_material_list(material_list)
    logger.info(
        "%s estimate: %d items, total $%d (%s confidence)",
        project_type, len(material_list.items), pricing.total, pricing.confidence.value,
    )
    return EstimateResponse(material_list=material_list, pricing=pricing)
