from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.models.database import get_db, User
from app.schemas.inventory import InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
from app.core.config import settings
from app.services.auth import get_current_user_dependency as get_current_user
from app.services.cache import LookupCache
from app.services.inventory_filters import ExpirationBucket, InventoryFilters, SortOrder
from app.services.inventory_service import InventoryService
from app.services.open_food_facts import OpenFoodFactsClient
from app.api.dependencies import get_food_client, get_lookup_cache
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("/")
def list_inventory(
    category: Optional[str] = Query(None, description="Exact category"),
    location: Optional[str] = Query(None, description="Exact location"),
    expiration_status: Optional[ExpirationBucket] = Query(None),
    search: Optional[str] = Query(None, description="Substring of the item name"),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[SortOrder] = Query(None),
    include_finished: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List pantry items with filters, sorting and pagination"""
    filters = InventoryFilters(
        category=category,
        location=location,
        search=search,
        expiration=expiration_status,
        sort_by=sort_by,
        sort_order=sort_order,
        soon_days=settings.expiring_soon_days,
    )
    return InventoryService(db).list_items(
        current_user.id,
        filters,
        page=page,
        limit=limit,
        include_finished=include_finished,
    )


@router.get("/stats")
def get_inventory_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Totals, expiring counts and breakdowns by category and location"""
    return {"stats": InventoryService(db).get_stats(current_user.id)}


@router.get("/barcode/{barcode}")
async def lookup_barcode(
    barcode: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    food_client: OpenFoodFactsClient = Depends(get_food_client)
):
    """Product info from Open Food Facts (cached)"""
    logger.info(f"User {current_user.id} looking up barcode {barcode}")
    product = await InventoryService(db, food_client=food_client).lookup_barcode(barcode)
    return {"product_info": product}


@router.get("/{item_id}")
def get_inventory_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    item = InventoryService(db).get_item(current_user.id, item_id)
    return {"item": InventoryItemResponse.from_item(item)}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    data: InventoryItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: LookupCache = Depends(get_lookup_cache),
    food_client: OpenFoodFactsClient = Depends(get_food_client)
):
    service = InventoryService(db, cache=cache, food_client=food_client)
    item = await service.create_item(current_user.id, data)
    return {
        "message": "Item added to inventory",
        "item": InventoryItemResponse.from_item(item),
    }


@router.put("/{item_id}")
def update_inventory_item(
    item_id: int,
    data: InventoryItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: LookupCache = Depends(get_lookup_cache)
):
    item = InventoryService(db, cache=cache).update_item(current_user.id, item_id, data)
    return {
        "message": "Item updated",
        "item": InventoryItemResponse.from_item(item),
    }


@router.delete("/{item_id}")
def delete_inventory_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: LookupCache = Depends(get_lookup_cache)
):
    InventoryService(db, cache=cache).delete_item(current_user.id, item_id)
    return {"message": "Item deleted from inventory"}


@router.patch("/{item_id}/finish")
def finish_inventory_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: LookupCache = Depends(get_lookup_cache)
):
    item = InventoryService(db, cache=cache).finish_item(current_user.id, item_id)
    return {
        "message": "Item marked as finished",
        "item": InventoryItemResponse.from_item(item),
    }
