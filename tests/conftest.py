"""
Shared test fixtures: test client with an offline price fetcher.
"""

import os

import pytest
from fastapi.testclient import TestClient

# No real market-price calls from the test suite
os.environ["OPENAI_API_KEY"] = ""

from estimator.main import app
from estimator.pricing import InMemoryPriceCache, PriceFetcher
from estimator.routers.deps import get_price_fetcher_factory


def offline_fetcher_factory():
    cache = InMemoryPriceCache()

    def make(zip_code=None):
        return PriceFetcher(zip_code=zip_code, api_key="", cache=cache)
    return make


@pytest.fixture
def client():
    """FastAPI test client. Pricing uses the static fallback table only."""
    app.dependency_overrides[get_price_fetcher_factory] = offline_fetcher_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def deck_input():
    """20' x 12' pressure-treated deck, no stairs, no railing."""
    return {
        "dimensions": {"length": 20, "width": 12, "height": 2},
        "options": {
            "decking_material": "pressure-treated",
            "framing_material": "pressure-treated",
            "joist_spacing": 16,
            "build_quality": "standard",
        },
    }


@pytest.fixture
def kitchen_input():
    """12' x 10' kitchen, granite tops, no backsplash or flooring."""
    return {
        "dimensions": {
            "length": 12,
            "width": 10,
            "upper_cabinet_linear_feet": 10,
            "lower_cabinet_linear_feet": 12,
            "countertop_square_feet": 30,
        },
        "options": {
            "cabinet_style": "stock",
            "cabinet_material": "plywood",
            "cabinet_finish": "paint",
            "countertop_material": "granite",
            "sink": "single-bowl",
            "faucet": "pulldown",
            "gfci_outlets": 2,
            "build_quality": "standard",
        },
    }


@pytest.fixture
def bathroom_input():
    """8' x 5' full-gut bath: tub surround, 4' wall tile, ceramic floor."""
    return {
        "dimensions": {"length": 8, "width": 5, "scope": "full-gut"},
        "options": {
            "vanity_size": 36,
            "vanity_sink_type": "single",
            "toilet_type": "standard",
            "shower_tub_config": "tub-surround",
            "wall_finish": "tile",
            "tile_height": 4,
            "floor_finish": "ceramic-tile",
            "build_quality": "standard",
            "lighting": {"vanity_lights": 2, "ceiling_light": True, "exhaust_fan": True},
            "gfci_outlets": 1,
        },
    }
