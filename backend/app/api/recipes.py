from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from app.models.database import get_db, Difficulty, User
from app.schemas.recipe import ByIngredientsRequest, RecipeCreate, RecipeMatch, RecipeResponse, RecipeUpdate
from app.services.auth import get_current_user_dependency as get_current_user
from app.services.recipe_service import RecipeService

router = APIRouter(prefix="/recipes", tags=["Recipes"])


def _recipes(recipes) -> List[RecipeResponse]:
    return [RecipeResponse.model_validate(recipe) for recipe in recipes]


def _matches(matches: List[Dict]) -> List[RecipeMatch]:
    return [
        RecipeMatch(
            recipe=RecipeResponse.model_validate(match["recipe"]),
            match_ratio=match["match_ratio"],
            missing_ingredients=match["missing_ingredients"],
        )
        for match in matches
    ]


@router.get("/")
def get_recipes(
    q: Optional[str] = Query(None, description="Search in title and description"),
    category: Optional[str] = Query(None),
    difficulty: Optional[Difficulty] = Query(None),
    max_time: Optional[int] = Query(None, ge=0, description="Maximum preparation time in minutes"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get recipes with filters"""
    recipes = RecipeService(db).list_recipes(
        current_user.id, q=q, category=category, difficulty=difficulty, max_time=max_time
    )
    return {"recipes": _recipes(recipes)}


@router.get("/search")
def search_recipes(
    q: str = Query(..., min_length=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"recipes": _recipes(RecipeService(db).search(current_user.id, q))}


@router.get("/categories")
def get_recipe_categories(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"categories": RecipeService(db).get_categories(current_user.id)}


@router.get("/favorites")
def get_favorite_recipes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"recipes": _recipes(RecipeService(db).get_favorites(current_user.id))}


@router.get("/recommended")
def get_recommended_recipes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Recipes ranked by how much of them the pantry already covers"""
    return {"recipes": _matches(RecipeService(db).get_recommended(current_user.id))}


@router.post("/by-ingredients")
def find_recipes_by_ingredients(
    request: ByIngredientsRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    matches = RecipeService(db).find_by_ingredients(current_user.id, request.ingredients)
    return {"recipes": _matches(matches)}


@router.get("/{recipe_id}")
def get_recipe(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a specific recipe"""
    recipe = RecipeService(db).get_recipe(current_user.id, recipe_id)
    return {"recipe": RecipeResponse.model_validate(recipe)}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_recipe(
    data: RecipeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    recipe = RecipeService(db).create_recipe(current_user.id, data)
    return {"message": "Recipe created", "recipe": RecipeResponse.model_validate(recipe)}


@router.put("/{recipe_id}")
def update_recipe(
    recipe_id: int,
    data: RecipeUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    recipe = RecipeService(db).update_recipe(current_user.id, recipe_id, data)
    return {"message": "Recipe updated", "recipe": RecipeResponse.model_validate(recipe)}


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    RecipeService(db).delete_recipe(current_user.id, recipe_id)
    return {"message": "Recipe deleted"}


@router.post("/{recipe_id}/favorite")
def add_favorite(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    recipe = RecipeService(db).set_favorite(current_user.id, recipe_id, True)
    return {"message": "Recipe added to favorites", "recipe": RecipeResponse.model_validate(recipe)}


@router.delete("/{recipe_id}/favorite")
def remove_favorite(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    recipe = RecipeService(db).set_favorite(current_user.id, recipe_id, False)
    return {"message": "Recipe removed from favorites", "recipe": RecipeResponse.model_validate(recipe)}
