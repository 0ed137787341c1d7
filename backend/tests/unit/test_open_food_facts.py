"""
Open Food Facts client against a mocked HTTP API
Tests: map_category(), get_product(), search_products()
"""

import asyncio

import pytest

from app.core.errors import UpstreamServiceError
from app.services.open_food_facts import DEFAULT_CATEGORY, map_category


def test_map_category():
    assert map_category(["en:dairies", "en:milks"]) == "Lácteos"
    assert map_category(["en:fresh-vegetables"]) == "Verduras"
    assert map_category(["en:unknown-thing"]) == DEFAULT_CATEGORY
    assert map_category([]) == DEFAULT_CATEGORY
    assert map_category(None) == DEFAULT_CATEGORY


def test_get_product_normalizes(food_client):
    product = asyncio.run(food_client.get_product("3017620422003"))

    assert product["barcode"] == "3017620422003"
    assert product["name"] == "Nutella crema de cacao"
    assert product["brand"] == "Ferrero"
    assert product["category"] == DEFAULT_CATEGORY
    assert product["allergens"] == ["milk", "nuts"]
    assert product["nutritional_info"]["calories"] == 539
    assert product["nutritional_info"]["ingredients"].startswith("Azúcar")


def test_get_product_is_cached(food_client, off_requests):
    asyncio.run(food_client.get_product("8410188012092"))
    product = asyncio.run(food_client.get_product("8410188012092"))

    assert product["category"] == "Lácteos"
    assert product["nutritional_info"]["calories"] == 63
    assert len(off_requests) == 1


def test_unknown_barcode_returns_none(food_client):
    assert asyncio.run(food_client.get_product("0000000000000")) is None


def test_upstream_failure_raises_and_is_not_cached(food_client, off_requests, redis_client):
    with pytest.raises(UpstreamServiceError):
        asyncio.run(food_client.get_product("9990000000000"))

    assert redis_client.get("barcode:9990000000000") is None

    with pytest.raises(UpstreamServiceError):
        asyncio.run(food_client.get_product("9990000000000"))
    assert len(off_requests) == 2


def test_search_products(food_client):
    results = asyncio.run(food_client.search_products("leche"))

    assert len(results) == 1
    assert results[0]["barcode"] == "8410188012092"
    assert results[0]["category"] == "Lácteos"


def test_not_found_response_returns_none(food_client):
    assert asyncio.run(food_client.get_product("4040000000000")) is None


def test_non_json_body_raises_upstream_error(food_client, redis_client):
    with pytest.raises(UpstreamServiceError):
        asyncio.run(food_client.get_product("8880000000000"))

    assert redis_client.get("barcode:8880000000000") is None
