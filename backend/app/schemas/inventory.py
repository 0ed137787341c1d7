from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any
from datetime import datetime

from app.core.utils import to_naive_utc
from app.models.database import DEFAULT_LOCATION, DEFAULT_UNIT
from app.services.expiration import classify_expiration, days_until_expiration

REQUIRED_ON_UPDATE = ("name", "category", "quantity", "unit", "location", "is_finished")


class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    barcode: Optional[str] = Field(None, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    quantity: float = Field(1, ge=0)
    unit: str = Field(DEFAULT_UNIT, min_length=1, max_length=50)
    expiration_date: Optional[datetime] = None
    purchase_date: Optional[datetime] = None
    location: str = Field(DEFAULT_LOCATION, min_length=1, max_length=100)
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    nutritional_info: Optional[Dict[str, Any]] = None

    @validator('expiration_date', 'purchase_date')
    def naive_utc(cls, v):
        return to_naive_utc(v)


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    barcode: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    expiration_date: Optional[datetime] = None
    purchase_date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    nutritional_info: Optional[Dict[str, Any]] = None
    is_finished: Optional[bool] = None

    @validator(*REQUIRED_ON_UPDATE)
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @validator('expiration_date', 'purchase_date')
    def naive_utc(cls, v):
        return to_naive_utc(v)


class InventoryItemResponse(BaseModel):
    id: int
    user_id: int
    name: str
    barcode: Optional[str]
    category: str
    quantity: float
    unit: str
    expiration_date: Optional[datetime]
    purchase_date: Optional[datetime]
    location: str
    notes: Optional[str]
    image_url: Optional[str]
    nutritional_info: Optional[Dict[str, Any]]
    is_finished: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    expiration_status: str = "unknown"
    # 0 for an item expired less than a day ago; read expiration_status for expiry
    days_until_expiration: Optional[int] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_item(cls, item, now: Optional[datetime] = None) -> "InventoryItemResponse":
        response = cls.model_validate(item)
        response.expiration_status = classify_expiration(item.expiration_date, now).value
        response.days_until_expiration = days_until_expiration(item.expiration_date, now)
        return response
