"""
Open Food Facts API Client
==========================

Barcode lookups and product search against the public Open Food Facts API.

Barcode payloads go through the Redis lookup cache, so scanning the same
product twice within the TTL costs a single upstream request.
"""

import httpx
import logging
from typing import Dict, List, Optional
from app.core.config import settings
from app.core.errors import UpstreamServiceError
from app.services.cache import LookupCache, generate_cache_key

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Otros"

# Substring of an OFF category tag -> local category
CATEGORY_MAPPING = {
    "milk": "Lácteos",
    "dairy": "Lácteos",
    "cheese": "Lácteos",
    "yogurt": "Lácteos",
    "fruit": "Frutas",
    "vegetable": "Verduras",
    "meat": "Carnes",
    "poultry": "Carnes",
    "seafood": "Pescados",
    "fish": "Pescados",
    "cereal": "Cereales",
    "bread": "Panadería",
    "pastry": "Panadería",
    "pasta": "Cereales",
    "legume": "Legumbres",
    "bean": "Legumbres",
    "canned": "Enlatados",
    "preserved": "Enlatados",
    "spice": "Especias",
    "herb": "Especias",
    "beverage": "Bebidas",
    "drink": "Bebidas",
    "snack": "Snacks",
    "frozen": "Congelados",
    "sauce": "Salsas",
    "condiment": "Salsas",
}


def map_category(categories_tags: Optional[List[str]]) -> str:
    """Map OFF category tags (e.g. 'en:dairies') to a local category"""
    if not categories_tags:
        return DEFAULT_CATEGORY

    for tag in categories_tags:
        lowercase_tag = tag.lower()
        for key, category in CATEGORY_MAPPING.items():
            if key in lowercase_tag:
                return category

    return DEFAULT_CATEGORY


def extract_nutritional_info(product: Dict) -> Dict:
    nutriments = product.get("nutriments") or {}
    return {
        "calories": nutriments.get("energy_value") or nutriments.get("energy-kcal_100g"),
        "proteins": nutriments.get("proteins"),
        "carbs": nutriments.get("carbohydrates"),
        "fats": nutriments.get("fat"),
        "fiber": nutriments.get("fiber"),
        "salt": nutriments.get("salt"),
        "ingredients": product.get("ingredients_text"),
    }


def normalize_product(barcode: str, product: Dict) -> Dict:
    return {
        "barcode": barcode,
        "name": product.get("product_name_es") or product.get("product_name") or "Producto desconocido",
        "brand": product.get("brands") or "",
        "image_url": product.get("image_url"),
        "categories": product.get("categories"),
        "category": map_category(product.get("categories_tags")),
        "quantity": product.get("quantity") or "",
        "allergens": [tag.split(":", 1)[-1] for tag in product.get("allergens_tags") or []],
        "nutritional_info": extract_nutritional_info(product),
    }


class OpenFoodFactsClient:
    """
    Minimal Open Food Facts client

    transport is only there so tests can plug in httpx.MockTransport.
    """

    def __init__(
        self,
        cache: LookupCache,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cache = cache
        self.base_url = (base_url or settings.open_food_facts_base_url).rstrip("/")
        self.timeout = timeout or settings.open_food_facts_timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _fetch_product_payload(self, barcode: str) -> Dict:
        async with self._client() as client:
            response = await client.get(f"{self.base_url}/product/{barcode}.json")
            # OFF answers some unknown barcodes with a 404 instead of status 0
            if response.status_code == 404:
                return {"status": 0}
            response.raise_for_status()
            return response.json()

    async def get_raw_product(self, barcode: str) -> Optional[Dict]:
        """Cached raw OFF product dict, or None if OFF doesn't know the barcode"""
        cache_key = generate_cache_key("barcode", barcode)
        try:
            payload = await self.cache.cache_or_fetch(
                cache_key,
                lambda: self._fetch_product_payload(barcode),
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Open Food Facts lookup failed for {barcode}: {e}")
            raise UpstreamServiceError("Could not reach the product database") from e

        if not payload or payload.get("status") == 0 or not payload.get("product"):
            return None
        return payload["product"]

    async def get_product(self, barcode: str) -> Optional[Dict]:
        product = await self.get_raw_product(barcode)
        if product is None:
            return None
        return normalize_product(barcode, product)

    async def search_products(self, name: str, page_size: int = 10) -> List[Dict]:
        """Search products by name; an upstream failure yields an empty list"""
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/search.json",
                    params={"search_terms": name, "page_size": page_size, "json": True},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Open Food Facts search failed for '{name}': {e}")
            return []

        return [
            {
                "barcode": product.get("code"),
                "name": product.get("product_name") or "Producto desconocido",
                "brand": product.get("brands") or "",
                "image_url": product.get("image_url"),
                "category": map_category(product.get("categories_tags")),
            }
            for product in data.get("products") or []
        ][:page_size]
