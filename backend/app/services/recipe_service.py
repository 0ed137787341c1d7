#/backend/services/recipe_service.py
from typing import Dict, Iterable, List, Optional, Set
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.models.database import Difficulty, InventoryItem, Recipe, RecipeIngredient
from app.schemas.recipe import IngredientIn, RecipeCreate, RecipeUpdate
from app.core.errors import NotFoundError
from app.core.utils import generate_slug
from app.services.expiration import ExpirationStatus, classify_expiration, utcnow
import logging

logger = logging.getLogger(__name__)


def ingredient_available(name: str, available: Set[str]) -> bool:
    """
    True when an ingredient name matches something in available (slugs).

    'Leche' matches 'leche' and 'leche-entera'; 'tomate' does not match
    'tomatera'.
    """
    slug = generate_slug(name)
    if not slug:
        return False
    for candidate in available:
        if candidate == slug:
            return True
        if f"-{slug}-" in f"-{candidate}-":
            return True
    return False


def available_inventory_slugs(items: Iterable[InventoryItem], now: Optional[datetime] = None) -> Set[str]:
    """Slugs of unfinished, unexpired pantry items"""
    now = now or utcnow()
    return {
        generate_slug(item.name)
        for item in items
        if not item.is_finished
        and classify_expiration(item.expiration_date, now) != ExpirationStatus.EXPIRED
    }


def rank_recipes(recipes: Iterable[Recipe], available: Set[str]) -> List[Dict]:
    """
    Score each recipe by the share of its required ingredients in available.
    Recipes with nothing matched are dropped; best matches come first.
    """
    ranked = []
    for recipe in recipes:
        required = [ing for ing in recipe.ingredients if not ing.is_optional]
        if not required:
            continue

        missing = [ing.name for ing in required if not ingredient_available(ing.name, available)]
        match_ratio = round((len(required) - len(missing)) / len(required), 4)
        if match_ratio <= 0:
            continue

        ranked.append({
            "recipe": recipe,
            "match_ratio": match_ratio,
            "missing_ingredients": missing,
        })

    ranked.sort(key=lambda match: (-match["match_ratio"], len(match["missing_ingredients"]), match["recipe"].title.casefold()))
    return ranked


class RecipeService:

    def __init__(self, db: Session):
        self.db = db

    def _query(self, user_id: int):
        return self.db.query(Recipe).filter(Recipe.user_id == user_id)

    def list_recipes(
        self,
        user_id: int,
        q: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        max_time: Optional[int] = None,
    ) -> List[Recipe]:
        query = self._query(user_id)

        if q:
            pattern = f"%{q}%"
            query = query.filter(or_(Recipe.title.ilike(pattern), Recipe.description.ilike(pattern)))

        if difficulty:
            query = query.filter(Recipe.difficulty == Difficulty(difficulty))

        if max_time is not None:
            query = query.filter(Recipe.preparation_time <= max_time)

        recipes = query.order_by(Recipe.created_at.desc(), Recipe.id.desc()).all()

        # categories is a JSON list; match in Python so it works on any backend
        if category:
            wanted = category.casefold()
            recipes = [r for r in recipes if any(c.casefold() == wanted for c in (r.categories or []))]

        return recipes

    def search(self, user_id: int, q: str) -> List[Recipe]:
        return self.list_recipes(user_id, q=q)

    def get_categories(self, user_id: int) -> List[str]:
        categories = set()
        for recipe in self._query(user_id).all():
            categories.update(recipe.categories or [])
        return sorted(categories, key=str.casefold)

    def get_favorites(self, user_id: int) -> List[Recipe]:
        return self._query(user_id).filter(Recipe.is_favorite.is_(True)).order_by(Recipe.title).all()

    def get_recipe(self, user_id: int, recipe_id: int) -> Recipe:
        recipe = self._query(user_id).filter(Recipe.id == recipe_id).first()
        if not recipe:
            raise NotFoundError("Recipe not found")
        return recipe

    def _build_ingredients(self, ingredients: List[IngredientIn]) -> List[RecipeIngredient]:
        return [
            RecipeIngredient(
                name=ing.name,
                quantity=ing.quantity,
                unit=ing.unit,
                notes=ing.notes,
                is_optional=ing.is_optional,
                inventory_id=ing.inventory_id,
                position=ing.position if ing.position is not None else index,
            )
            for index, ing in enumerate(ingredients)
        ]

    def create_recipe(self, user_id: int, data: RecipeCreate) -> Recipe:
        values = data.model_dump(exclude={"ingredients"})
        recipe = Recipe(user_id=user_id, **values)
        recipe.ingredients = self._build_ingredients(data.ingredients)

        self.db.add(recipe)
        self.db.commit()
        self.db.refresh(recipe)
        logger.info(f"User {user_id} created recipe {recipe.id} ({recipe.title})")
        return recipe

    def update_recipe(self, user_id: int, recipe_id: int, data: RecipeUpdate) -> Recipe:
        recipe = self.get_recipe(user_id, recipe_id)
        updates = data.model_dump(exclude_unset=True, exclude={"ingredients"})
        for field, value in updates.items():
            setattr(recipe, field, value)

        # A supplied ingredient list replaces the old one wholesale
        if "ingredients" in data.model_fields_set and data.ingredients is not None:
            recipe.ingredients = self._build_ingredients(data.ingredients)

        self.db.commit()
        self.db.refresh(recipe)
        return recipe

    def delete_recipe(self, user_id: int, recipe_id: int):
        recipe = self.get_recipe(user_id, recipe_id)
        self.db.delete(recipe)
        self.db.commit()
        logger.info(f"User {user_id} deleted recipe {recipe_id}")

    def set_favorite(self, user_id: int, recipe_id: int, is_favorite: bool) -> Recipe:
        recipe = self.get_recipe(user_id, recipe_id)
        recipe.is_favorite = is_favorite
        self.db.commit()
        self.db.refresh(recipe)
        return recipe

    def find_by_ingredients(self, user_id: int, ingredient_names: List[str]) -> List[Dict]:
        available = {generate_slug(name) for name in ingredient_names if generate_slug(name)}
        return rank_recipes(self._query(user_id).all(), available)

    def get_recommended(self, user_id: int, now: Optional[datetime] = None) -> List[Dict]:
        """Recipes ranked against what is actually usable in the pantry"""
        items = self.db.query(InventoryItem).filter(InventoryItem.user_id == user_id).all()
        available = available_inventory_slugs(items, now)
        return rank_recipes(self._query(user_id).all(), available)
