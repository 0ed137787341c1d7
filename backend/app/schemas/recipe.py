from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.models.database import Difficulty


class IngredientIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = Field(None, max_length=255)
    is_optional: bool = False
    inventory_id: Optional[int] = None
    position: Optional[int] = Field(None, ge=0)


class IngredientResponse(BaseModel):
    id: int
    name: str
    quantity: float
    unit: str
    notes: Optional[str]
    is_optional: bool
    inventory_id: Optional[int]
    position: int

    class Config:
        from_attributes = True


class RecipeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: str = Field(..., min_length=1)
    preparation_time: Optional[int] = Field(None, ge=0, description="Minutes")
    servings: Optional[int] = Field(None, ge=1)
    difficulty: Difficulty = Difficulty.MEDIUM
    image_url: Optional[str] = Field(None, max_length=500)
    categories: List[str] = []
    is_favorite: bool = False
    nutritional_info: Optional[Dict[str, Any]] = None
    source: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    ingredients: List[IngredientIn] = []


class RecipeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: Optional[str] = Field(None, min_length=1)
    preparation_time: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    image_url: Optional[str] = Field(None, max_length=500)
    categories: Optional[List[str]] = None
    is_favorite: Optional[bool] = None
    nutritional_info: Optional[Dict[str, Any]] = None
    source: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    ingredients: Optional[List[IngredientIn]] = None

    @validator('title', 'instructions', 'difficulty', 'categories', 'is_favorite')
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v


class RecipeResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str]
    instructions: str
    preparation_time: Optional[int]
    servings: Optional[int]
    difficulty: Optional[str]
    image_url: Optional[str]
    categories: List[str]
    is_favorite: bool
    nutritional_info: Optional[Dict[str, Any]]
    source: Optional[str]
    notes: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    ingredients: List[IngredientResponse] = []

    @validator('difficulty', pre=True)
    def difficulty_value(cls, v):
        return getattr(v, 'value', v)

    @validator('categories', pre=True)
    def default_categories(cls, v):
        return v or []

    class Config:
        from_attributes = True


class ByIngredientsRequest(BaseModel):
    ingredients: List[str] = Field(..., min_length=1)


class RecipeMatch(BaseModel):
    recipe: RecipeResponse
    match_ratio: float
    missing_ingredients: List[str]
