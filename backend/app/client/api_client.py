"""
Synchronous HTTP client for the Alacena API.

Every request carries the stored bearer token. When a request comes back 401
the client asks /v1/auth/refresh for a new token once and replays the
request once; if the refresh is refused the stored session is cleared and
AuthenticationExpired is raised.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from app.client.token_store import MemoryTokenStore, TokenStore
from app.services.inventory_filters import InventoryFilters, apply_filters

logger = logging.getLogger(__name__)

AUTH_PREFIX = "/v1/auth/"
REFRESH_PATH = "/v1/auth/refresh"


class ApiError(Exception):

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None, errors: Optional[Dict] = None):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        self.errors = errors
        super().__init__(f"{status_code}: {message}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            response.status_code,
            body.get("message") or response.reason_phrase,
            body.get("error_code"),
            body.get("errors"),
        )


class AuthenticationExpired(ApiError):
    """The session could not be refreshed; the user has to sign in again"""


class AlacenaClient:

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token_store: Optional[TokenStore] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.token_store = token_store or MemoryTokenStore()
        self.http = http_client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self):
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ----- plumbing -----

    def _headers(self) -> Dict[str, str]:
        token = self.token_store.get_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        return self.http.request(method, path, headers=self._headers(), **kwargs)

    def _refresh(self) -> bool:
        response = self._send("POST", REFRESH_PATH)
        if response.status_code != 200:
            return False
        self.token_store.save(response.json()["token"])
        return True

    def request(self, method: str, path: str, **kwargs) -> Any:
        response = self._send(method, path, **kwargs)

        if response.status_code == 401 and not path.startswith(AUTH_PREFIX):
            logger.info(f"{method} {path} returned 401, refreshing token")
            if not self._refresh():
                self.token_store.clear()
                raise AuthenticationExpired(401, "Session expired, please sign in again")
            response = self._send(method, path, **kwargs)

        if response.is_error:
            raise ApiError.from_response(response)
        return response.json()

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)

    @staticmethod
    def _params(**params) -> Dict[str, Any]:
        return {key: value for key, value in params.items() if value is not None}

    # ----- auth -----

    def register(self, name: str, email: str, password: str) -> Dict:
        data = self.post("/v1/auth/register", json={"name": name, "email": email, "password": password})
        self.token_store.save(data["token"], data["user"])
        return data

    def login(self, email: str, password: str) -> Dict:
        data = self.post("/v1/auth/login", json={"email": email, "password": password})
        self.token_store.save(data["token"], data["user"])
        return data

    def logout(self):
        self.token_store.clear()

    def get_profile(self) -> Dict:
        return self.get("/v1/auth/profile")["user"]

    def update_profile(self, **changes) -> Dict:
        user = self.put("/v1/auth/profile", json=changes)["user"]
        token = self.token_store.get_token()
        if token:
            self.token_store.save(token, user)
        return user

    def change_password(self, current_password: str, new_password: str) -> Dict:
        return self.post(
            "/v1/auth/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )

    def forgot_password(self, email: str) -> Dict:
        return self.post("/v1/auth/forgot-password", json={"email": email})

    def reset_password(self, token: str, password: str) -> Dict:
        return self.post(f"/v1/auth/reset-password/{token}", json={"password": password})

    # ----- inventory -----

    def list_inventory(
        self,
        category: Optional[str] = None,
        location: Optional[str] = None,
        expiration_status: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        include_finished: Optional[bool] = None,
    ) -> Dict:
        params = self._params(
            category=category, location=location, expiration_status=expiration_status,
            search=search, sort_by=sort_by, sort_order=sort_order,
            page=page, limit=limit, include_finished=include_finished,
        )
        return self.get("/v1/inventory/", params=params)

    def get_inventory_stats(self) -> Dict:
        return self.get("/v1/inventory/stats")["stats"]

    def lookup_barcode(self, barcode: str) -> Dict:
        return self.get(f"/v1/inventory/barcode/{barcode}")["product_info"]

    def get_inventory_item(self, item_id: int) -> Dict:
        return self.get(f"/v1/inventory/{item_id}")["item"]

    def add_inventory_item(self, **item) -> Dict:
        return self.post("/v1/inventory/", json=item)["item"]

    def update_inventory_item(self, item_id: int, **changes) -> Dict:
        return self.put(f"/v1/inventory/{item_id}", json=changes)["item"]

    def delete_inventory_item(self, item_id: int) -> Dict:
        return self.delete(f"/v1/inventory/{item_id}")

    def finish_inventory_item(self, item_id: int) -> Dict:
        return self.patch(f"/v1/inventory/{item_id}/finish")["item"]

    @staticmethod
    def filter_inventory(items: List[Dict], now: Optional[datetime] = None, **filters) -> List[Dict]:
        """
        Filter and sort already fetched items locally

        Takes the InventoryFilters fields as keywords. "soon" here means
        within settings.filter_soon_days (7), wider than the server window.
        """
        return apply_filters(items, InventoryFilters(**filters), now)

    # ----- recipes -----

    def list_recipes(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        max_time: Optional[int] = None,
    ) -> List[Dict]:
        params = self._params(q=q, category=category, difficulty=difficulty, max_time=max_time)
        return self.get("/v1/recipes/", params=params)["recipes"]

    def search_recipes(self, q: str) -> List[Dict]:
        return self.get("/v1/recipes/search", params={"q": q})["recipes"]

    def get_recipe_categories(self) -> List[str]:
        return self.get("/v1/recipes/categories")["categories"]

    def get_favorite_recipes(self) -> List[Dict]:
        return self.get("/v1/recipes/favorites")["recipes"]

    def get_recommended_recipes(self) -> List[Dict]:
        return self.get("/v1/recipes/recommended")["recipes"]

    def find_recipes_by_ingredients(self, ingredients: List[str]) -> List[Dict]:
        return self.post("/v1/recipes/by-ingredients", json={"ingredients": ingredients})["recipes"]

    def get_recipe(self, recipe_id: int) -> Dict:
        return self.get(f"/v1/recipes/{recipe_id}")["recipe"]

    def create_recipe(self, **recipe) -> Dict:
        return self.post("/v1/recipes/", json=recipe)["recipe"]

    def update_recipe(self, recipe_id: int, **changes) -> Dict:
        return self.put(f"/v1/recipes/{recipe_id}", json=changes)["recipe"]

    def delete_recipe(self, recipe_id: int) -> Dict:
        return self.delete(f"/v1/recipes/{recipe_id}")

    def toggle_favorite(self, recipe_id: int, is_favorite: bool) -> Dict:
        path = f"/v1/recipes/{recipe_id}/favorite"
        data = self.post(path) if is_favorite else self.delete(path)
        return data["recipe"]

    # ----- shopping list -----

    def get_shopping_list(self, list_id: Optional[int] = None) -> Dict:
        path = "/v1/shopping-list/" if list_id is None else f"/v1/shopping-list/{list_id}"
        return self.get(path)["shopping_list"]

    def create_shopping_list(self, **shopping_list) -> Dict:
        return self.post("/v1/shopping-list/", json=shopping_list)["shopping_list"]

    def update_shopping_list(self, list_id: int, **changes) -> Dict:
        return self.put(f"/v1/shopping-list/{list_id}", json=changes)["shopping_list"]

    def delete_shopping_list(self, list_id: int) -> Dict:
        return self.delete(f"/v1/shopping-list/{list_id}")

    def get_shopping_items(self, status: Optional[str] = None) -> List[Dict]:
        """status: None for every item, 'pending' or 'purchased'"""
        path = "/v1/shopping-list/items" if status is None else f"/v1/shopping-list/items/{status}"
        return self.get(path)["items"]

    def add_shopping_item(self, **item) -> Dict:
        return self.post("/v1/shopping-list/items", json=item)["item"]

    def update_shopping_item(self, item_id: int, **changes) -> Dict:
        return self.put(f"/v1/shopping-list/items/{item_id}", json=changes)["item"]

    def mark_purchased(self, item_id: int, purchased: bool = True) -> Dict:
        return self.put(f"/v1/shopping-list/items/{item_id}/purchased", json={"purchased": purchased})["item"]

    def delete_shopping_item(self, item_id: int) -> Dict:
        return self.delete(f"/v1/shopping-list/items/{item_id}")

    def clear_purchased_items(self) -> Dict:
        return self.delete("/v1/shopping-list/items/purchased")

    def clear_shopping_list(self) -> Dict:
        return self.delete("/v1/shopping-list/items")

    def generate_from_inventory(self) -> Dict:
        return self.post("/v1/shopping-list/generate-from-inventory")

    def generate_from_recipes(self, recipe_ids: List[int]) -> Dict:
        return self.post("/v1/shopping-list/generate-from-recipes", json={"recipe_ids": recipe_ids})

    def add_from_inventory(self, inventory_item_ids: List[int]) -> Dict:
        return self.post("/v1/shopping-list/add-from-inventory", json={"inventory_item_ids": inventory_item_ids})
