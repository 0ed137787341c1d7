from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime

from app.core.utils import to_naive_utc
from app.models.database import DEFAULT_UNIT, Priority

DEFAULT_LIST_NAME = "Lista de compras"


class ShoppingListCreate(BaseModel):
    name: str = Field(DEFAULT_LIST_NAME, min_length=1, max_length=255)
    notes: Optional[str] = None
    is_active: bool = True
    planned_date: Optional[datetime] = None
    store: Optional[str] = Field(None, max_length=255)
    budget: Optional[float] = Field(None, ge=0)

    @validator('planned_date')
    def naive_utc(cls, v):
        return to_naive_utc(v)


class ShoppingListUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    notes: Optional[str] = None
    is_active: Optional[bool] = None
    planned_date: Optional[datetime] = None
    store: Optional[str] = Field(None, max_length=255)
    budget: Optional[float] = Field(None, ge=0)
    is_complete: Optional[bool] = None

    @validator('name', 'is_active', 'is_complete')
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @validator('planned_date')
    def naive_utc(cls, v):
        return to_naive_utc(v)


class ShoppingListItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(1, ge=0)
    unit: str = Field(DEFAULT_UNIT, min_length=1, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=255)
    priority: Priority = Priority.MEDIUM
    price: Optional[float] = Field(None, ge=0)
    inventory_id: Optional[int] = None
    recipe_id: Optional[int] = None


class ShoppingListItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=255)
    priority: Optional[Priority] = None
    price: Optional[float] = Field(None, ge=0)
    is_purchased: Optional[bool] = None
    position: Optional[int] = Field(None, ge=0)

    @validator('name', 'quantity', 'unit', 'priority', 'is_purchased', 'position')
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v


class PurchasedRequest(BaseModel):
    purchased: bool = True


class GenerateFromRecipesRequest(BaseModel):
    recipe_ids: List[int] = Field(..., min_length=1)


class AddFromInventoryRequest(BaseModel):
    inventory_item_ids: List[int] = Field(..., min_length=1)


class ShoppingListItemResponse(BaseModel):
    id: int
    shopping_list_id: int
    name: str
    quantity: float
    unit: str
    category: Optional[str]
    notes: Optional[str]
    priority: str
    is_purchased: bool
    price: Optional[float]
    inventory_id: Optional[int]
    recipe_id: Optional[int]
    position: int
    created_at: Optional[datetime]

    @validator('priority', pre=True)
    def priority_value(cls, v):
        return getattr(v, 'value', v)

    class Config:
        from_attributes = True


class ShoppingListResponse(BaseModel):
    id: int
    user_id: int
    name: str
    notes: Optional[str]
    is_active: bool
    planned_date: Optional[datetime]
    store: Optional[str]
    budget: Optional[float]
    is_complete: bool
    completed_at: Optional[datetime]
    created_at: Optional[datetime]
    items: List[ShoppingListItemResponse] = []

    class Config:
        from_attributes = True
