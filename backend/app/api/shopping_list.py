from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from app.models.database import get_db, ShoppingListItem, User
from app.schemas.shopping_list import (
    AddFromInventoryRequest,
    GenerateFromRecipesRequest,
    PurchasedRequest,
    ShoppingListCreate,
    ShoppingListItemCreate,
    ShoppingListItemResponse,
    ShoppingListItemUpdate,
    ShoppingListResponse,
    ShoppingListUpdate,
)
from app.services.auth import get_current_user_dependency as get_current_user
from app.services.shopping_list_service import ShoppingListService
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/shopping-list", tags=["Shopping List"])

# Static paths are registered before /{list_id} so they are matched first


def _items(items: List[ShoppingListItem]) -> List[ShoppingListItemResponse]:
    return [ShoppingListItemResponse.model_validate(item) for item in items]


def _generated(service: ShoppingListService, user_id: int, added: List[ShoppingListItem]):
    return {
        "message": f"{len(added)} items added to the shopping list",
        "added": _items(added),
        "shopping_list": ShoppingListResponse.model_validate(service.get_current_list(user_id)),
    }


@router.get("/")
def get_current_shopping_list(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    shopping_list = ShoppingListService(db).get_current_list(current_user.id)
    return {"shopping_list": ShoppingListResponse.model_validate(shopping_list)}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_shopping_list(
    data: ShoppingListCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    shopping_list = ShoppingListService(db).create_list(current_user.id, data)
    return {
        "message": "Shopping list created",
        "shopping_list": ShoppingListResponse.model_validate(shopping_list),
    }


# ----- items on the current list -----

@router.get("/items")
def get_items(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"items": _items(ShoppingListService(db).get_items(current_user.id))}


@router.get("/items/pending")
def get_pending_items(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"items": _items(ShoppingListService(db).get_items(current_user.id, purchased=False))}


@router.get("/items/purchased")
def get_purchased_items(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"items": _items(ShoppingListService(db).get_items(current_user.id, purchased=True))}


@router.post("/items", status_code=status.HTTP_201_CREATED)
def add_item(
    data: ShoppingListItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    item = ShoppingListService(db).add_item(current_user.id, data)
    return {"message": "Item added to the shopping list", "item": ShoppingListItemResponse.model_validate(item)}


@router.delete("/items/purchased")
def clear_purchased_items(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    removed = ShoppingListService(db).clear_purchased(current_user.id)
    return {"message": f"{removed} purchased items removed", "removed": removed}


@router.delete("/items")
def clear_all_items(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    removed = ShoppingListService(db).clear_all(current_user.id)
    return {"message": f"{removed} items removed", "removed": removed}


@router.put("/items/{item_id}")
def update_item(
    item_id: int,
    data: ShoppingListItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    item = ShoppingListService(db).update_item(current_user.id, item_id, data)
    return {"message": "Item updated", "item": ShoppingListItemResponse.model_validate(item)}


@router.put("/items/{item_id}/purchased")
def mark_item_purchased(
    item_id: int,
    request: PurchasedRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    item = ShoppingListService(db).set_purchased(current_user.id, item_id, request.purchased)
    return {"message": "Item updated", "item": ShoppingListItemResponse.model_validate(item)}


@router.delete("/items/{item_id}")
def delete_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ShoppingListService(db).delete_item(current_user.id, item_id)
    return {"message": "Item removed from the shopping list"}


# ----- generators -----

@router.post("/generate-from-inventory")
def generate_from_inventory(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Expired, low-stock and finished pantry items"""
    service = ShoppingListService(db)
    added = service.generate_from_inventory(current_user.id)
    return _generated(service, current_user.id, added)


@router.post("/generate-from-recipes")
def generate_from_recipes(
    request: GenerateFromRecipesRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ingredients the selected recipes need and the pantry lacks"""
    service = ShoppingListService(db)
    added = service.generate_from_recipes(current_user.id, request.recipe_ids)
    return _generated(service, current_user.id, added)


@router.post("/add-from-inventory")
def add_from_inventory(
    request: AddFromInventoryRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ShoppingListService(db)
    added = service.add_from_inventory(current_user.id, request.inventory_item_ids)
    return _generated(service, current_user.id, added)


# ----- lists by id -----

@router.get("/{list_id}")
def get_shopping_list(
    list_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    shopping_list = ShoppingListService(db).get_list(current_user.id, list_id)
    return {"shopping_list": ShoppingListResponse.model_validate(shopping_list)}


@router.put("/{list_id}")
def update_shopping_list(
    list_id: int,
    data: ShoppingListUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    shopping_list = ShoppingListService(db).update_list(current_user.id, list_id, data)
    return {
        "message": "Shopping list updated",
        "shopping_list": ShoppingListResponse.model_validate(shopping_list),
    }


@router.delete("/{list_id}")
def delete_shopping_list(
    list_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ShoppingListService(db).delete_list(current_user.id, list_id)
    return {"message": "Shopping list deleted"}
