#/backend/services/shopping_list_service.py
from typing import List, Optional, Set
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.database import (
    InventoryItem, Priority, Recipe, ShoppingList, ShoppingListItem
)
from app.schemas.shopping_list import (
    DEFAULT_LIST_NAME, ShoppingListCreate, ShoppingListItemCreate,
    ShoppingListItemUpdate, ShoppingListUpdate
)
from app.core.config import settings
from app.core.errors import NotFoundError
from app.core.utils import generate_slug
from app.services.expiration import ExpirationStatus, classify_expiration, utcnow
from app.services.recipe_service import available_inventory_slugs, ingredient_available
import logging

logger = logging.getLogger(__name__)


class ShoppingListService:
    """
    Shopping lists and their items

    "The current list" is the user's newest list that is active and not
    complete; it is created on first use.
    """

    def __init__(self, db: Session):
        self.db = db

    # ----- lists -----

    def get_current_list(self, user_id: int) -> ShoppingList:
        shopping_list = self.db.query(ShoppingList).filter(
            ShoppingList.user_id == user_id,
            ShoppingList.is_active.is_(True),
            ShoppingList.is_complete.is_(False)
        ).order_by(ShoppingList.created_at.desc(), ShoppingList.id.desc()).first()

        if shopping_list is None:
            shopping_list = ShoppingList(user_id=user_id, name=DEFAULT_LIST_NAME)
            self.db.add(shopping_list)
            self.db.commit()
            self.db.refresh(shopping_list)
            logger.info(f"Created shopping list {shopping_list.id} for user {user_id}")

        return shopping_list

    def create_list(self, user_id: int, data: ShoppingListCreate) -> ShoppingList:
        shopping_list = ShoppingList(user_id=user_id, **data.model_dump())
        self.db.add(shopping_list)
        self.db.commit()
        self.db.refresh(shopping_list)
        return shopping_list

    def get_list(self, user_id: int, list_id: int) -> ShoppingList:
        shopping_list = self.db.query(ShoppingList).filter(
            ShoppingList.id == list_id,
            ShoppingList.user_id == user_id
        ).first()
        if not shopping_list:
            raise NotFoundError("Shopping list not found")
        return shopping_list

    def update_list(self, user_id: int, list_id: int, data: ShoppingListUpdate) -> ShoppingList:
        shopping_list = self.get_list(user_id, list_id)
        updates = data.model_dump(exclude_unset=True)

        if "is_complete" in updates:
            if updates["is_complete"] and not shopping_list.is_complete:
                shopping_list.completed_at = datetime.utcnow()
            elif not updates["is_complete"]:
                shopping_list.completed_at = None

        for field, value in updates.items():
            setattr(shopping_list, field, value)

        self.db.commit()
        self.db.refresh(shopping_list)
        return shopping_list

    def delete_list(self, user_id: int, list_id: int):
        shopping_list = self.get_list(user_id, list_id)
        self.db.delete(shopping_list)
        self.db.commit()

    # ----- items -----

    def get_items(self, user_id: int, purchased: Optional[bool] = None) -> List[ShoppingListItem]:
        shopping_list = self.get_current_list(user_id)
        items = shopping_list.items
        if purchased is not None:
            items = [item for item in items if item.is_purchased == purchased]
        return items

    def _get_item(self, user_id: int, item_id: int) -> ShoppingListItem:
        item = self.db.query(ShoppingListItem).join(ShoppingList).filter(
            ShoppingListItem.id == item_id,
            ShoppingList.user_id == user_id
        ).first()
        if not item:
            raise NotFoundError("Shopping list item not found")
        return item

    def _next_position(self, shopping_list: ShoppingList) -> int:
        current_max = self.db.query(func.max(ShoppingListItem.position)).filter(
            ShoppingListItem.shopping_list_id == shopping_list.id
        ).scalar()
        return 0 if current_max is None else current_max + 1

    def _append(self, shopping_list: ShoppingList, **values) -> ShoppingListItem:
        item = ShoppingListItem(
            shopping_list_id=shopping_list.id,
            position=self._next_position(shopping_list),
            **values
        )
        self.db.add(item)
        self.db.flush()
        return item

    def add_item(self, user_id: int, data: ShoppingListItemCreate) -> ShoppingListItem:
        shopping_list = self.get_current_list(user_id)
        item = self._append(shopping_list, **data.model_dump())
        self.db.commit()
        self.db.refresh(item)
        return item

    def update_item(self, user_id: int, item_id: int, data: ShoppingListItemUpdate) -> ShoppingListItem:
        item = self._get_item(user_id, item_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(item, field, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def set_purchased(self, user_id: int, item_id: int, purchased: bool) -> ShoppingListItem:
        item = self._get_item(user_id, item_id)
        item.is_purchased = purchased
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, user_id: int, item_id: int):
        item = self._get_item(user_id, item_id)
        self.db.delete(item)
        self.db.commit()

    def clear_purchased(self, user_id: int) -> int:
        shopping_list = self.get_current_list(user_id)
        removed = self.db.query(ShoppingListItem).filter(
            ShoppingListItem.shopping_list_id == shopping_list.id,
            ShoppingListItem.is_purchased.is_(True)
        ).delete(synchronize_session=False)
        self.db.commit()
        self.db.expire(shopping_list)
        return removed

    def clear_all(self, user_id: int) -> int:
        shopping_list = self.get_current_list(user_id)
        removed = self.db.query(ShoppingListItem).filter(
            ShoppingListItem.shopping_list_id == shopping_list.id
        ).delete(synchronize_session=False)
        self.db.commit()
        self.db.expire(shopping_list)
        return removed

    # ----- generators -----

    def _names_on_list(self, shopping_list: ShoppingList) -> Set[str]:
        return {generate_slug(item.name) for item in shopping_list.items}

    def _user_inventory(self, user_id: int) -> List[InventoryItem]:
        return self.db.query(InventoryItem).filter(InventoryItem.user_id == user_id).all()

    def _finish_generation(self, shopping_list: ShoppingList, added: List[ShoppingListItem]):
        self.db.commit()
        for item in added:
            self.db.refresh(item)
        self.db.refresh(shopping_list)

    def generate_from_inventory(self, user_id: int, now: Optional[datetime] = None) -> List[ShoppingListItem]:
        """
        Restock list: expired or low-stock pantry items, plus finished items
        that are no longer in stock under the same name.
        """
        now = now or utcnow()
        shopping_list = self.get_current_list(user_id)
        seen = self._names_on_list(shopping_list)
        inventory = self._user_inventory(user_id)

        in_stock = {generate_slug(item.name) for item in inventory if not item.is_finished}
        added = []

        for item in inventory:
            slug = generate_slug(item.name)
            if slug in seen:
                continue

            if item.is_finished:
                if slug in in_stock:
                    continue
                note, priority = "Agotado", Priority.HIGH
            elif classify_expiration(item.expiration_date, now) == ExpirationStatus.EXPIRED:
                note, priority = "Caducado", Priority.HIGH
            elif (item.quantity or 0) <= settings.low_stock_threshold:
                note, priority = "Poco stock", Priority.MEDIUM
            else:
                continue

            added.append(self._append(
                shopping_list,
                name=item.name,
                quantity=1,
                unit=item.unit,
                category=item.category,
                notes=note,
                priority=priority,
                inventory_id=item.id,
            ))
            seen.add(slug)

        self._finish_generation(shopping_list, added)
        logger.info(f"Generated {len(added)} shopping items from inventory for user {user_id}")
        return added

    def generate_from_recipes(
        self, user_id: int, recipe_ids: List[int], now: Optional[datetime] = None
    ) -> List[ShoppingListItem]:
        recipes = []
        for recipe_id in dict.fromkeys(recipe_ids):
            recipe = self.db.query(Recipe).filter(Recipe.id == recipe_id, Recipe.user_id == user_id).first()
            if not recipe:
                raise NotFoundError(f"Recipe {recipe_id} not found")
            recipes.append(recipe)

        shopping_list = self.get_current_list(user_id)
        seen = self._names_on_list(shopping_list)
        available = available_inventory_slugs(self._user_inventory(user_id), now)
        added = []

        for recipe in recipes:
            for ingredient in recipe.ingredients:
                if ingredient.is_optional or ingredient_available(ingredient.name, available):
                    continue
                slug = generate_slug(ingredient.name)
                if slug in seen:
                    continue

                added.append(self._append(
                    shopping_list,
                    name=ingredient.name,
                    quantity=ingredient.quantity,
                    unit=ingredient.unit,
                    notes=recipe.title,
                    recipe_id=recipe.id,
                ))
                seen.add(slug)

        self._finish_generation(shopping_list, added)
        logger.info(f"Generated {len(added)} shopping items from {len(recipes)} recipes for user {user_id}")
        return added

    def add_from_inventory(self, user_id: int, inventory_item_ids: List[int]) -> List[ShoppingListItem]:
        items = []
        for inventory_id in dict.fromkeys(inventory_item_ids):
            item = self.db.query(InventoryItem).filter(
                InventoryItem.id == inventory_id,
                InventoryItem.user_id == user_id
            ).first()
            if not item:
                raise NotFoundError(f"Inventory item {inventory_id} not found")
            items.append(item)

        shopping_list = self.get_current_list(user_id)
        seen = self._names_on_list(shopping_list)
        added = []

        for item in items:
            slug = generate_slug(item.name)
            if slug in seen:
                continue
            added.append(self._append(
                shopping_list,
                name=item.name,
                quantity=item.quantity if item.quantity else 1,
                unit=item.unit,
                category=item.category,
                inventory_id=item.id,
            ))
            seen.add(slug)

        self._finish_generation(shopping_list, added)
        return added
