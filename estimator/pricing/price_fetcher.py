"""
Pricing stage: MaterialItem list → PricingResult.

Each item's unit price comes from the first tier that resolves it:
  1. price cache (name + unit), confidence inherited from the entry
  2. one batched AI market-price request for everything still unresolved
  3. static fallback table (name substring → category → default)

External failures never escape fetch_pricing(). They degrade to the next
tier and show up as lower confidence plus a note in the disclaimer.
"""

import asyncio
import logging
import math
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..config import settings
from ..errors import MarketPriceError
from ..schemas import (
    Complexity,
    Confidence,
    MaterialItem,
    MaterialList,
    PricedMaterial,
    PriceSource,
    PricingResult,
)
from .market_price_client import MarketPriceClient
from .price_cache import CachedPrice, PriceCache
from .price_table import PricingTables

logger = logging.getLogger(__name__)

CONFIDENCE_SCORES = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
}

FALLBACK_NOTE = "Estimated wholesale contractor pricing"

DISCLAIMER = (
    "Prices are estimates based on current market rates and may vary. "
    "Final costs depend on supplier, location, and market conditions. "
    "Material prices updated: %s"
)
FALLBACK_DISCLAIMER = (
    " Some prices could not be confirmed against current market rates and "
    "use estimated wholesale contractor pricing instead."
)


def overall_confidence(confidences: Sequence[Confidence]) -> Confidence:
    """Average of {high: 3, medium: 2, low: 1} bucketed back. Empty → low."""
    if not confidences:
        return Confidence.LOW
    average = sum(CONFIDENCE_SCORES[c] for c in confidences) / len(confidences)
    if average >= 2.5:
        return Confidence.HIGH
    if average >= 1.5:
        return Confidence.MEDIUM
    return Confidence.LOW


def build_pricing_prompt(materials: Sequence[MaterialItem], zip_code: str, year: int) -> str:
    material_lines = "\n".join(
        "- [%s] %s: %g %s%s" % (
            m.id, m.name, m.quantity, m.unit,
            f" ({m.description})" if m.description else "",
        )
        for m in materials
    )
    return f"""Provide current pricing for the following materials in ZIP code {zip_code}.

Materials needed (material_id in brackets):
{material_lines}

Return your response in the following JSON format (no additional text):
{{
  "materials": [
    {{
      "material_id": "id from the list above",
      "material_name": "Material Name",
      "quantity": number,
      "unit": "unit type",
      "unit_price": number,
      "total_price": number,
      "confidence": "high|medium|low",
      "notes": "any relevant pricing notes"
    }}
  ]
}}

Base prices on current {year} market rates for the {zip_code} area. Include wholesale contractor pricing, not retail. Consider bulk discounts for large quantities."""


def build_single_estimate_prompt(material_name: str, category: str, unit: str,
                                 zip_code: Optional[str]) -> str:
    return f"""Provide a current market price estimate for the following material:

Material: {material_name}
Category: {category}
Unit: {unit}
Location Zip Code: {zip_code or 'General US market'}

Provide your response in the following JSON format:
{{
  "estimated_price": <number>,
  "confidence": "<high|medium|low>",
  "price_range": {{
    "low": <number>,
    "high": <number>
  }},
  "notes": "<brief explanation of pricing factors>"
}}

Consider current market conditions, regional pricing variations, material
quality, typical supplier pricing, and seasonal variations.

Response must be valid JSON only, no additional text."""


def _price_value(raw) -> Optional[float]:
    """Non-negative finite JSON number, or None when the AI sent something unusable."""
    if isinstance(raw, (bool, str)):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def _confidence_value(raw, default: Confidence = Confidence.MEDIUM) -> Confidence:
    try:
        return Confidence(str(raw).lower())
    except ValueError:
        return default


class PriceFetcher:
    """
    Prices a material list for one ZIP code.

    Collaborators are injectable: cache (PriceCache), tables (PricingTables),
    client (MarketPriceClient). Without an API key the AI tier is skipped.
    """

    def __init__(
        self,
        zip_code: Optional[str] = None,
        api_key: Optional[str] = None,
        cache: Optional[PriceCache] = None,
        tables: Optional[PricingTables] = None,
        client: Optional[MarketPriceClient] = None,
        clock=datetime.now,
    ):
        self.zip_code = zip_code or settings.DEFAULT_ZIP_CODE
        self.cache = cache
        self.tables = tables or PricingTables()
        self.client = client or MarketPriceClient(api_key=api_key)
        self._clock = clock

    @property
    def ai_enabled(self) -> bool:
        return self.client.configured

    async def price_material_list(self, material_list: MaterialList) -> PricingResult:
        """Price a calculator result using its own labor hours and complexity."""
        return await self.fetch_pricing(
            material_list.items,
            complexity=material_list.complexity,
            labor_hours=material_list.estimated_labor_hours,
            demolition_hours=material_list.demolition_hours,
        )

    async def fetch_pricing(
        self,
        materials: Sequence[MaterialItem],
        complexity: Complexity = Complexity.MODERATE,
        labor_hours: Optional[float] = None,
        demolition_hours: float = 0,
    ) -> PricingResult:
        now = self._clock()
        complexity = Complexity(complexity)
        priced: Dict[int, PricedMaterial] = {}

        self._price_from_cache(materials, priced, now)

        unresolved = [i for i in range(len(materials)) if i not in priced]
        ai_failed = False
        if unresolved:
            if self.ai_enabled:
                ai_failed = not await self._price_from_ai(materials, unresolved, priced, now)
            else:
                logger.info("No market price API key configured, using fallback pricing for %d items",
                            len(unresolved))

        fallback_count = 0
        for i, item in enumerate(materials):
            if i not in priced:
                priced[i] = self._fallback_price(item, now)
                fallback_count += 1
        if fallback_count and self.ai_enabled:
            logger.warning("Fallback pricing used for %d of %d items", fallback_count, len(materials))

        ordered = [priced[i] for i in range(len(materials))]
        return self._build_result(
            ordered, complexity, labor_hours, demolition_hours, now,
            used_fallback=fallback_count > 0 or ai_failed,
        )

    async def estimate_single(self, material_name: str, category: str, unit: str,
                              zip_code: Optional[str] = None) -> dict:
        """
        One-off AI estimate for a single material.
        Raises MarketPriceError when no key is configured or the call fails.
        """
        prompt = build_single_estimate_prompt(material_name, category, unit, zip_code)
        data = await asyncio.to_thread(self.client.complete_json, prompt, json_mode=True)

        price = _price_value(data.get("estimated_price"))
        if price is None:
            raise MarketPriceError("Market price response has no usable estimated_price")

        price_range = data.get("price_range") or {}
        low = _price_value(price_range.get("low")) if isinstance(price_range, dict) else None
        high = _price_value(price_range.get("high")) if isinstance(price_range, dict) else None
        if low is None or high is None or low > high:
            low, high = round(price * 0.8, 2), round(price * 1.2, 2)

        notes = data.get("notes")
        return {
            "estimated_price": price,
            "confidence": _confidence_value(data.get("confidence")).value,
            "price_range": {"low": low, "high": high},
            "notes": notes if isinstance(notes, str) and notes else "AI-powered market estimate",
            "source": PriceSource.AI_ESTIMATE.value,
            "timestamp": self._clock().isoformat(),
        }

    # --- Tiers ---

    def _price_from_cache(self, materials, priced: dict, now: datetime):
        if self.cache is None:
            return
        for i, item in enumerate(materials):
            try:
                hit = self.cache.get(item.name, item.unit)
            except Exception as e:
                logger.warning("Price cache read failed for %s: %s", item.name, e)
                continue
            if hit is None:
                continue
            logger.debug("Price cache hit: %s (%s)", item.name, item.unit)
            priced[i] = self._priced(
                item, hit.unit_price, hit.confidence, hit.notes, PriceSource.CACHE, now,
            )

    async def _price_from_ai(self, materials, unresolved: List[int], priced: dict,
                             now: datetime) -> bool:
        """
        Credit whatever the AI priced. Returns False when the whole batch failed.
        Entries with an unusable unit_price are dropped one by one.
        """
        batch = [materials[i] for i in unresolved]
        prompt = build_pricing_prompt(batch, self.zip_code, now.year)
        try:
            data = await asyncio.to_thread(self.client.complete_json, prompt)
        except MarketPriceError as e:
            logger.warning("AI market pricing failed, falling back: %s", e)
            return False
        except Exception as e:
            logger.warning("AI market pricing raised %s, falling back: %s", type(e).__name__, e)
            return False

        entries = data.get("materials")
        if not isinstance(entries, list):
            logger.warning("AI market pricing response has no materials list, falling back")
            return False

        by_id = {materials[i].id: i for i in unresolved}
        by_name: Dict[str, int] = {}
        for i in unresolved:
            by_name.setdefault(materials[i].name, i)

        credited = 0
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            material_id = entry.get("material_id")
            material_name = entry.get("material_name")
            index = by_id.get(material_id) if isinstance(material_id, str) else None
            if index is None and isinstance(material_name, str):
                index = by_name.get(material_name)
            if index is None or index in priced:
                continue

            unit_price = _price_value(entry.get("unit_price"))
            if unit_price is None:
                logger.warning("Rejected AI price for %s: unit_price=%r",
                               materials[index].name, entry.get("unit_price"))
                continue

            item = materials[index]
            confidence = _confidence_value(entry.get("confidence"))
            notes = entry.get("notes") if isinstance(entry.get("notes"), str) else None
            priced[index] = self._priced(item, unit_price, confidence, notes,
                                         PriceSource.AI_ESTIMATE, now)
            credited += 1
            self._remember(item, CachedPrice(unit_price, confidence, notes))

        logger.info("AI market pricing resolved %d of %d items", credited, len(unresolved))
        return True

    def _remember(self, item: MaterialItem, price: CachedPrice):
        if self.cache is None:
            return
        try:
            self.cache.set(item.name, item.unit, price)
        except Exception as e:
            logger.warning("Price cache write failed for %s: %s", item.name, e)

    def _fallback_price(self, item: MaterialItem, now: datetime) -> PricedMaterial:
        unit_price = self.tables.unit_price(item.name, item.category)
        return self._priced(item, unit_price, Confidence.MEDIUM, FALLBACK_NOTE,
                            PriceSource.FALLBACK, now)

    def _priced(self, item: MaterialItem, unit_price: float, confidence: Confidence,
                notes: Optional[str], source: PriceSource, now: datetime) -> PricedMaterial:
        return PricedMaterial(
            **item.model_dump(),
            unit_price=unit_price,
            total_price=unit_price * item.quantity,
            confidence=confidence,
            price_notes=notes,
            price_source=source,
            last_updated=now,
        )

    # --- Assembly ---

    def _labor_hours(self, materials, complexity: Complexity, labor_hours: Optional[float]) -> float:
        if labor_hours is not None:
            return labor_hours
        decking = next((m for m in materials if m.category == "Decking"), None)
        area = decking.quantity if decking else self.tables.default_labor_area
        return area * self.tables.hours_per_sqft[complexity]

    def _build_result(self, materials: List[PricedMaterial], complexity: Complexity,
                      labor_hours: Optional[float], demolition_hours: float,
                      now: datetime, used_fallback: bool) -> PricingResult:
        raw_subtotal = sum(m.total_price for m in materials)
        hours = self._labor_hours(materials, complexity, labor_hours) + demolition_hours
        labor_cost = hours * self.tables.labor_rate

        disclaimer = DISCLAIMER % now.date().isoformat()
        if used_fallback:
            disclaimer += FALLBACK_DISCLAIMER

        return PricingResult(
            materials=materials,
            subtotal=math.ceil(round(raw_subtotal, 6)),
            estimated_labor=math.ceil(round(labor_cost, 6)),
            labor_hours=math.ceil(round(hours, 6)),
            total=math.ceil(round(raw_subtotal + labor_cost, 6)),
            zip_code=self.zip_code,
            pricing_date=now,
            confidence=overall_confidence([m.confidence for m in materials]),
            disclaimer=disclaimer,
        )
