"""
Recipe endpoints and ingredient matching
Tests: CRUD, filters, search, categories, favorites, recommended, by-ingredients
"""

import pytest

from app.models.database import RecipeIngredient
from app.services.auth import create_token_for_user
from app.services.recipe_service import ingredient_available

pytestmark = pytest.mark.api

TORTILLA = {
    "title": "Tortilla de patatas",
    "description": "Clásica española",
    "instructions": "Freír las patatas, batir los huevos y cuajar.",
    "preparation_time": 30,
    "servings": 4,
    "difficulty": "medio",
    "categories": ["cena", "vegetariano"],
    "ingredients": [
        {"name": "Patatas", "quantity": 500, "unit": "g"},
        {"name": "Huevos", "quantity": 6, "unit": "unidad"},
        {"name": "Cebolla", "quantity": 1, "unit": "unidad", "is_optional": True},
    ],
}


def titles(response):
    return [recipe["title"] for recipe in response.json()["recipes"]]


def test_ingredient_matching_by_slug():
    available = {"leche-entera", "arroz", "tomate-cherry"}

    assert ingredient_available("Leche", available)
    assert ingredient_available("ARROZ", available)
    assert ingredient_available("Tomate", available)
    assert not ingredient_available("Canela", available)
    assert not ingredient_available("Arro", available)
    assert not ingredient_available("", available)


class TestRecipeCrud:

    def test_create_and_get(self, authenticated_client):
        response = authenticated_client.post("/v1/recipes/", json=TORTILLA)

        assert response.status_code == 201
        recipe = response.json()["recipe"]
        assert recipe["difficulty"] == "medio"
        assert [ing["name"] for ing in recipe["ingredients"]] == ["Patatas", "Huevos", "Cebolla"]
        assert [ing["position"] for ing in recipe["ingredients"]] == [0, 1, 2]

        fetched = authenticated_client.get(f"/v1/recipes/{recipe['id']}").json()["recipe"]
        assert fetched["title"] == "Tortilla de patatas"

    def test_defaults(self, authenticated_client):
        recipe = authenticated_client.post("/v1/recipes/", json={
            "title": "Tostada",
            "instructions": "Tostar el pan.",
        }).json()["recipe"]

        assert recipe["difficulty"] == "medio"
        assert recipe["categories"] == []
        assert recipe["ingredients"] == []
        assert recipe["is_favorite"] is False

    def test_instructions_are_required(self, authenticated_client):
        response = authenticated_client.post("/v1/recipes/", json={"title": "Sin pasos"})
        assert response.status_code == 422
        assert "instructions" in response.json()["errors"]

    def test_invalid_difficulty(self, authenticated_client):
        response = authenticated_client.post("/v1/recipes/", json={**TORTILLA, "difficulty": "extrema"})
        assert response.status_code == 422

    def test_update_replaces_ingredients(self, authenticated_client, test_recipe, test_db):
        response = authenticated_client.put(f"/v1/recipes/{test_recipe.id}", json={
            "title": "Arroz con leche de la abuela",
            "ingredients": [{"name": "Arroz bomba", "quantity": 150, "unit": "g"}],
        })

        recipe = response.json()["recipe"]
        assert recipe["title"] == "Arroz con leche de la abuela"
        assert recipe["difficulty"] == "fácil"
        assert [ing["name"] for ing in recipe["ingredients"]] == ["Arroz bomba"]
        assert test_db.query(RecipeIngredient).filter(RecipeIngredient.recipe_id == test_recipe.id).count() == 1

    def test_update_without_ingredients_keeps_them(self, authenticated_client, test_recipe):
        response = authenticated_client.put(f"/v1/recipes/{test_recipe.id}", json={"servings": 6})

        recipe = response.json()["recipe"]
        assert recipe["servings"] == 6
        assert len(recipe["ingredients"]) == 4

    def test_update_cannot_null_favorite_flag(self, authenticated_client, test_recipe):
        response = authenticated_client.put(f"/v1/recipes/{test_recipe.id}", json={"is_favorite": None})
        assert response.status_code == 422
        assert "is_favorite" in response.json()["errors"]

    def test_delete_cascades(self, authenticated_client, test_recipe, test_db):
        recipe_id = test_recipe.id

        assert authenticated_client.delete(f"/v1/recipes/{recipe_id}").status_code == 200
        assert authenticated_client.get(f"/v1/recipes/{recipe_id}").status_code == 404
        assert test_db.query(RecipeIngredient).filter(RecipeIngredient.recipe_id == recipe_id).count() == 0

    def test_other_users_recipe_is_not_found(self, client, test_recipe, second_test_user):
        headers = {"Authorization": f"Bearer {create_token_for_user(second_test_user)}"}

        assert client.get(f"/v1/recipes/{test_recipe.id}", headers=headers).status_code == 404
        assert client.delete(f"/v1/recipes/{test_recipe.id}", headers=headers).status_code == 404


class TestRecipeQueries:

    @pytest.fixture
    def recipes(self, authenticated_client, test_recipe):
        authenticated_client.post("/v1/recipes/", json=TORTILLA)
        authenticated_client.post("/v1/recipes/", json={
            "title": "Gazpacho",
            "description": "Sopa fría de tomate",
            "instructions": "Triturar todo.",
            "preparation_time": 15,
            "difficulty": "fácil",
            "categories": ["Verano", "vegetariano"],
            "ingredients": [{"name": "Tomate", "quantity": 1, "unit": "kg"}],
        })

    def test_filters(self, authenticated_client, recipes):
        response = authenticated_client.get("/v1/recipes/", params={"category": "vegetariano"})
        assert sorted(titles(response)) == ["Gazpacho", "Tortilla de patatas"]

        response = authenticated_client.get("/v1/recipes/", params={"difficulty": "fácil"})
        assert sorted(titles(response)) == ["Arroz con leche", "Gazpacho"]

        response = authenticated_client.get("/v1/recipes/", params={"max_time": 30})
        assert sorted(titles(response)) == ["Gazpacho", "Tortilla de patatas"]

        response = authenticated_client.get("/v1/recipes/", params={"q": "tomate"})
        assert titles(response) == ["Gazpacho"]

    def test_search(self, authenticated_client, recipes):
        response = authenticated_client.get("/v1/recipes/search", params={"q": "postre"})
        assert titles(response) == ["Arroz con leche"]

        assert authenticated_client.get("/v1/recipes/search").status_code == 422

    def test_categories(self, authenticated_client, recipes):
        response = authenticated_client.get("/v1/recipes/categories")
        assert response.json()["categories"] == ["cena", "postre", "vegetariano", "Verano"]

    def test_favorites(self, authenticated_client, recipes, test_recipe):
        assert authenticated_client.get("/v1/recipes/favorites").json()["recipes"] == []

        response = authenticated_client.post(f"/v1/recipes/{test_recipe.id}/favorite")
        assert response.json()["recipe"]["is_favorite"] is True
        assert titles(authenticated_client.get("/v1/recipes/favorites")) == ["Arroz con leche"]

        authenticated_client.delete(f"/v1/recipes/{test_recipe.id}/favorite")
        assert authenticated_client.get("/v1/recipes/favorites").json()["recipes"] == []


class TestRecommendations:

    def test_recommended_uses_usable_pantry(self, authenticated_client, test_recipe, test_inventory):
        authenticated_client.post("/v1/recipes/", json=TORTILLA)

        matches = authenticated_client.get("/v1/recipes/recommended").json()["recipes"]

        # Tortilla matches nothing; Tomate is finished and Yogur expired
        assert len(matches) == 1
        assert matches[0]["recipe"]["title"] == "Arroz con leche"
        assert matches[0]["match_ratio"] == pytest.approx(2 / 3, abs=1e-3)
        assert matches[0]["missing_ingredients"] == ["Canela"]

    def test_recommended_empty_pantry(self, authenticated_client, test_recipe):
        assert authenticated_client.get("/v1/recipes/recommended").json()["recipes"] == []

    def test_by_ingredients_ranks_best_first(self, authenticated_client, test_recipe):
        authenticated_client.post("/v1/recipes/", json=TORTILLA)

        response = authenticated_client.post(
            "/v1/recipes/by-ingredients", json={"ingredients": ["huevos", "patatas", "arroz"]}
        )

        matches = response.json()["recipes"]
        assert [m["recipe"]["title"] for m in matches] == ["Tortilla de patatas", "Arroz con leche"]
        assert matches[0]["match_ratio"] == 1.0
        assert matches[0]["missing_ingredients"] == []
        assert matches[1]["missing_ingredients"] == ["Leche", "Canela"]

    def test_by_ingredients_requires_a_name(self, authenticated_client):
        response = authenticated_client.post("/v1/recipes/by-ingredients", json={"ingredients": []})
        assert response.status_code == 422
