"""
Pricing tests: fallback table, AI tier, cache, assembly, HTTP client retry.

Tests:
1-5.   Fallback pricing (completeness, substring order, category, default)
6-10.  Assembly (confidence, subtotal/total, labor)
11-17. AI tier (partial success, batch failure, malformed entries, matching)
18-21. Cache tier (hits, write-back, expiry, pruning)
22-26. MarketPriceClient retry/backoff + parsing
27-29. Single-material estimate

AI calls are always mocked.
"""

import asyncio
import io
import json
import urllib.error
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from estimator.calculators.deck import DeckMaterialCalculator
from estimator.errors import MarketPriceError
from estimator.pricing import (
    CachedPrice,
    InMemoryPriceCache,
    MarketPriceClient,
    PriceFetcher,
    PricingTables,
    overall_confidence,
)
from estimator.pricing.market_price_client import parse_json_content
from estimator.schemas import Complexity, Confidence, MaterialItem, PriceSource


FIXED_NOW = datetime(2026, 3, 2, 9, 30)


def _item(item_id, name, quantity, category="Misc", unit="each"):
    return MaterialItem(id=item_id, category=category, name=name, quantity=quantity, unit=unit)


SAMPLE_ITEMS = [
    _item("decking-boards", "Cedar Decking", 100, category="Decking", unit="sqft"),
    _item("joist-hangers", "Galvanized Joist Hangers (2x8)", 20, category="Fasteners"),
    _item("mystery", "Unobtainium Widget", 3, category="Nowhere"),
]


def _offline_fetcher(**kwargs):
    return PriceFetcher(zip_code="60601", api_key="", clock=lambda: FIXED_NOW, **kwargs)


def _ai_fetcher(response=None, error=None, **kwargs):
    client = MagicMock(spec=MarketPriceClient)
    client.configured = True
    if error is not None:
        client.complete_json.side_effect = error
    else:
        client.complete_json.return_value = response
    return PriceFetcher(zip_code="60601", client=client, clock=lambda: FIXED_NOW, **kwargs), client


def _run(coro):
    return asyncio.run(coro)


# ============================================================
# Fallback pricing
# ============================================================

def test_fallback_prices_every_item_without_api_key(deck_input):
    """No key configured → every item priced > 0, confidence medium."""
    material_list = DeckMaterialCalculator(deck_input["dimensions"], deck_input["options"]).calculate()
    result = _run(_offline_fetcher().fetch_pricing(material_list.items))

    assert len(result.materials) == len(material_list.items)
    assert all(m.unit_price > 0 for m in result.materials)
    assert all(m.price_source == PriceSource.FALLBACK for m in result.materials)
    assert all(m.price_notes == "Estimated wholesale contractor pricing" for m in result.materials)
    assert result.confidence == Confidence.MEDIUM


def test_fallback_specific_name_beats_lumber_size():
    """'Galvanized Joist Hangers (2x8)' is a hanger, not a 2x8 board."""
    result = _run(_offline_fetcher().fetch_pricing(SAMPLE_ITEMS))
    hangers = result.materials[1]
    assert hangers.unit_price == 2.50
    assert hangers.total_price == 50.0


def test_fallback_category_then_default():
    tables = PricingTables()
    assert tables.unit_price("Mystery Board", "Framing") == 12.00
    assert tables.unit_price("Mystery Board", "Decking") == 5.00
    assert tables.unit_price("Mystery Board", "Nowhere") == 10.00
    assert tables.unit_price("Cedar Decking Stair Treads", "Stairs") == 6.00


def test_fallback_setting_materials_before_tile():
    tables = PricingTables()
    assert tables.unit_price("Wall Tile Mortar (Thinset)", "Wall Tile") == 25.00
    assert tables.unit_price("Standard Wall Tile", "Wall Tile") == 5.00
    assert tables.unit_price("Toilet Paper Holder", "Accessories") == 10.00


def test_pricing_tables_are_injectable():
    tables = PricingTables(name_prices=[("Widget", 7.25)], default_unit_price=1.0)
    result = _run(_offline_fetcher(tables=tables).fetch_pricing(SAMPLE_ITEMS))
    assert result.materials[2].unit_price == 7.25
    assert result.materials[0].unit_price == 5.00   # category table still default


# ============================================================
# Assembly
# ============================================================

def test_aggregate_confidence_buckets():
    assert overall_confidence([Confidence.HIGH, Confidence.HIGH, Confidence.LOW]) == Confidence.MEDIUM
    assert overall_confidence([Confidence.HIGH, Confidence.HIGH, Confidence.MEDIUM]) == Confidence.HIGH
    assert overall_confidence([Confidence.LOW, Confidence.MEDIUM, Confidence.LOW]) == Confidence.LOW
    assert overall_confidence([]) == Confidence.LOW


def test_subtotal_total_and_default_labor():
    """
    100 * 6.00 + 20 * 2.50 + 3 * 10.00 = 680
    Labor: Decking quantity 100 sqft * 0.75 h * $65 = $4875
    """
    result = _run(_offline_fetcher().fetch_pricing(SAMPLE_ITEMS))
    assert result.subtotal == 680
    assert result.labor_hours == 75
    assert result.estimated_labor == 4875
    assert result.total == 5555
    assert result.total >= result.subtotal
    assert result.zip_code == "60601"
    assert result.pricing_date == FIXED_NOW


def test_labor_uses_complexity_and_default_area():
    items = [_item("a", "Cedar Decking", 100, category="Decking")]
    simple = _run(_offline_fetcher().fetch_pricing(items, complexity=Complexity.SIMPLE))
    assert simple.labor_hours == 50

    no_decking = [_item("b", "Unobtainium Widget", 1)]
    default_area = _run(_offline_fetcher().fetch_pricing(no_decking, complexity="complex"))
    assert default_area.labor_hours == 200   # 200 sqft default * 1.0


def test_price_material_list_uses_calculator_labor(kitchen_input):
    from estimator.calculators.kitchen import KitchenMaterialCalculator

    data = {
        "dimensions": dict(kitchen_input["dimensions"], include_flooring=True),
        "options": dict(kitchen_input["options"], flooring_material="lvp", include_demolition=True),
    }
    material_list = KitchenMaterialCalculator(data["dimensions"], data["options"]).calculate()
    result = _run(_offline_fetcher().price_material_list(material_list))

    hours = material_list.estimated_labor_hours + material_list.demolition_hours
    assert result.labor_hours == hours
    assert result.estimated_labor == hours * 65


def test_empty_material_list_is_low_confidence():
    result = _run(_offline_fetcher().fetch_pricing([]))
    assert result.materials == []
    assert result.subtotal == 0
    assert result.confidence == Confidence.LOW


# ============================================================
# AI tier
# ============================================================

def test_ai_prices_credited_and_total_recomputed():
    response = {"materials": [
        {"material_id": "decking-boards", "unit_price": 5.25, "total_price": 1, "confidence": "high"},
        {"material_name": "Galvanized Joist Hangers (2x8)", "unit_price": 3.10, "confidence": "high"},
        {"material_id": "mystery", "unit_price": 40, "confidence": "low", "notes": "Special order"},
    ]}
    fetcher, client = _ai_fetcher(response)
    result = _run(fetcher.fetch_pricing(SAMPLE_ITEMS))

    client.complete_json.assert_called_once()
    assert [m.price_source for m in result.materials] == [PriceSource.AI_ESTIMATE] * 3
    assert result.materials[0].total_price == 525.0
    assert result.materials[1].unit_price == 3.10
    assert result.materials[2].price_notes == "Special order"
    # [high, high, low] → medium
    assert result.confidence == Confidence.MEDIUM
    assert "could not be confirmed" not in result.disclaimer


def test_ai_partial_success_keeps_good_entries():
    """A bad unit_price only sends that one item to fallback."""
    response = {"materials": [
        {"material_id": "decking-boards", "unit_price": 5.25, "confidence": "high"},
        {"material_id": "joist-hangers", "unit_price": "call for price"},
        {"material_id": "mystery", "unit_price": -4},
    ]}
    fetcher, _ = _ai_fetcher(response)
    result = _run(fetcher.fetch_pricing(SAMPLE_ITEMS))

    sources = [m.price_source for m in result.materials]
    assert sources == [PriceSource.AI_ESTIMATE, PriceSource.FALLBACK, PriceSource.FALLBACK]
    assert result.materials[1].unit_price == 2.50
    assert "could not be confirmed" in result.disclaimer


def test_ai_failure_falls_back_for_whole_batch():
    fetcher, _ = _ai_fetcher(error=MarketPriceError("quota exceeded"))
    result = _run(fetcher.fetch_pricing(SAMPLE_ITEMS))
    assert all(m.price_source == PriceSource.FALLBACK for m in result.materials)
    assert result.confidence == Confidence.MEDIUM


def test_ai_response_without_materials_key_falls_back():
    fetcher, _ = _ai_fetcher({"prices": []})
    result = _run(fetcher.fetch_pricing(SAMPLE_ITEMS))
    assert all(m.price_source == PriceSource.FALLBACK for m in result.materials)


def test_ai_prompt_contains_every_unresolved_item_and_zip():
    fetcher, client = _ai_fetcher({"materials": []})
    _run(fetcher.fetch_pricing(SAMPLE_ITEMS))
    prompt = client.complete_json.call_args[0][0]
    assert "60601" in prompt
    for item in SAMPLE_ITEMS:
        assert item.name in prompt
        assert item.id in prompt


def test_unknown_ai_entries_ignored():
    response = {"materials": [
        {"material_id": "not-requested", "unit_price": 99},
        "garbage",
        {"material_id": "mystery", "unit_price": 12, "confidence": "certain"},
    ]}
    fetcher, _ = _ai_fetcher(response)
    result = _run(fetcher.fetch_pricing(SAMPLE_ITEMS))
    mystery = result.materials[2]
    assert mystery.unit_price == 12
    # unrecognised confidence label defaults to medium
    assert mystery.confidence == Confidence.MEDIUM


def test_malformed_ai_entries_fall_back():
    """Non-string ids/names and numeric strings never credit an item."""
    response = {"materials": [
        {"material_id": ["decking-boards"], "unit_price": 5},
        {"material_name": {"x": 1}, "unit_price": 5},
        {"material_id": "joist-hangers", "unit_price": "3.10"},
        {"material_id": None, "material_name": "Unobtainium Widget", "unit_price": 7},
    ]}
    fetcher, _ = _ai_fetcher(response)
    result = _run(fetcher.fetch_pricing(SAMPLE_ITEMS))

    sources = [m.price_source for m in result.materials]
    assert sources == [PriceSource.FALLBACK, PriceSource.FALLBACK, PriceSource.AI_ESTIMATE]
    assert result.materials[2].unit_price == 7
    assert "could not be confirmed" in result.disclaimer


# ============================================================
# Cache tier
# ============================================================

def test_cache_hit_skips_ai_and_inherits_confidence():
    cache = InMemoryPriceCache()
    for item in SAMPLE_ITEMS:
        cache.set(item.name, item.unit, CachedPrice(4.0, Confidence.HIGH, "cached"))
    fetcher, client = _ai_fetcher({"materials": []}, cache=cache)

    result = _run(fetcher.fetch_pricing(SAMPLE_ITEMS))
    client.complete_json.assert_not_called()
    assert all(m.price_source == PriceSource.CACHE for m in result.materials)
    assert result.confidence == Confidence.HIGH


def test_ai_prices_written_back_to_cache():
    cache = InMemoryPriceCache()
    response = {"materials": [{"material_id": "decking-boards", "unit_price": 5.25, "confidence": "high"}]}
    fetcher, _ = _ai_fetcher(response, cache=cache)
    _run(fetcher.fetch_pricing(SAMPLE_ITEMS))

    assert cache.get("cedar  decking", "SQFT") == CachedPrice(5.25, Confidence.HIGH, None)
    # fallback prices are not cached
    assert cache.get("Unobtainium Widget", "each") is None


def test_cache_entries_expire():
    now = [datetime(2026, 1, 1)]
    cache = InMemoryPriceCache(ttl=timedelta(days=7), clock=lambda: now[0])
    cache.set("Cedar Decking", "sqft", CachedPrice(6.0, Confidence.HIGH))
    now[0] += timedelta(days=6)
    assert cache.get("Cedar Decking", "sqft").unit_price == 6.0
    now[0] += timedelta(days=2)
    assert cache.get("Cedar Decking", "sqft") is None
    assert len(cache) == 0


def test_cache_set_prunes_expired_entries():
    now = [datetime(2026, 1, 1)]
    cache = InMemoryPriceCache(ttl=timedelta(days=7), clock=lambda: now[0])
    cache.set("Cedar Decking", "sqft", CachedPrice(6.0, Confidence.HIGH))
    cache.set("Lag Bolts", "each", CachedPrice(0.9, Confidence.MEDIUM))
    now[0] += timedelta(days=8)
    cache.set("Joist Hangers", "each", CachedPrice(2.5, Confidence.HIGH))
    assert len(cache) == 1
    assert cache.get("Joist Hangers", "each").unit_price == 2.5


# ============================================================
# MarketPriceClient
# ============================================================

def _http_response(content: str):
    body = json.dumps({"choices": [{"message": {"content": content}}]}).encode()
    response = MagicMock()
    response.__enter__.return_value.read.return_value = body
    return response


def test_client_retries_once_with_backoff():
    sleeps = []
    client = MarketPriceClient(api_key="sk-test", retries=1, backoff=0.5, sleeper=sleeps.append)
    with patch("urllib.request.urlopen") as urlopen:
        urlopen.side_effect = [
            urllib.error.URLError("connection reset"),
            _http_response('{"materials": []}'),
        ]
        data = client.complete_json("price these")

    assert data == {"materials": []}
    assert urlopen.call_count == 2
    assert sleeps == [0.5]


def test_client_gives_up_after_retries():
    client = MarketPriceClient(api_key="sk-test", retries=1, backoff=0, sleeper=lambda s: None)
    with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")) as urlopen:
        with pytest.raises(MarketPriceError):
            client.complete_json("price these")
    assert urlopen.call_count == 2


def test_client_does_not_retry_auth_errors():
    client = MarketPriceClient(api_key="sk-bad", retries=3, backoff=0, sleeper=lambda s: None)
    error = urllib.error.HTTPError(
        "https://example.invalid/v1/chat/completions", 401, "Unauthorized", {}, io.BytesIO(b"bad key"),
    )
    with patch("urllib.request.urlopen", side_effect=error) as urlopen:
        with pytest.raises(MarketPriceError, match="401"):
            client.complete_json("price these")
    assert urlopen.call_count == 1


def test_client_sends_openai_compatible_request():
    client = MarketPriceClient(api_key="sk-test", base_url="https://api.example.com/v1/",
                               model="test-model")
    with patch("urllib.request.urlopen", return_value=_http_response('{"ok": true}')) as urlopen:
        client.complete_json("hello")

    request = urlopen.call_args[0][0]
    body = json.loads(request.data)
    assert request.full_url == "https://api.example.com/v1/chat/completions"
    assert request.get_header("Authorization") == "Bearer sk-test"
    assert body["model"] == "test-model"
    assert body["temperature"] == 0.3
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert urlopen.call_args[1]["timeout"] == client.timeout


def test_parse_json_content():
    assert parse_json_content('```json\n{"a": 1}\n```') == {"a": 1}
    with pytest.raises(MarketPriceError):
        parse_json_content("sorry, I can't price that")
    with pytest.raises(MarketPriceError):
        parse_json_content("[1, 2]")


# ============================================================
# Single-material estimate
# ============================================================

def test_single_estimate_defaults_range_to_twenty_percent():
    fetcher, client = _ai_fetcher({"estimated_price": 10, "confidence": "bogus"})
    result = _run(fetcher.estimate_single("Cedar Decking", "Decking", "sqft", "98101"))

    assert result["estimated_price"] == 10
    assert result["price_range"] == {"low": 8.0, "high": 12.0}
    assert result["confidence"] == "medium"
    assert result["source"] == "ai_estimate"
    assert result["timestamp"] == FIXED_NOW.isoformat()
    assert client.complete_json.call_args[1]["json_mode"] is True
    assert "98101" in client.complete_json.call_args[0][0]


def test_single_estimate_rejects_unusable_price():
    fetcher, _ = _ai_fetcher({"estimated_price": "call for quote"})
    with pytest.raises(MarketPriceError):
        _run(fetcher.estimate_single("Cedar Decking", "Decking", "sqft"))


def test_single_estimate_ignores_non_text_notes():
    fetcher, _ = _ai_fetcher({"estimated_price": 4.5, "notes": 42})
    result = _run(fetcher.estimate_single("Lag Bolts", "Fasteners", "each"))
    assert result["notes"] == "AI-powered market estimate"
