#/backend/services/inventory_service.py
from dataclasses import replace
from typing import Dict, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from app.models.database import InventoryItem
from app.schemas.inventory import InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
from app.core.config import settings
from app.core.errors import AppError, BadRequestError, NotFoundError
from app.core.utils import paginate
from app.services.cache import LookupCache, generate_cache_key
from app.services.expiration import ExpirationStatus, classify_expiration, utcnow
from app.services.inventory_filters import InventoryFilters, SortOrder, apply_filters, count_by
from app.services.open_food_facts import OpenFoodFactsClient
import logging

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Pantry items for one user at a time

    Every lookup is scoped by user_id; an item owned by someone else is
    reported exactly like a missing one.
    """

    def __init__(
        self,
        db: Session,
        cache: Optional[LookupCache] = None,
        food_client: Optional[OpenFoodFactsClient] = None,
    ):
        self.db = db
        self.cache = cache
        self.food_client = food_client

    def _user_items(self, user_id: int, include_finished: bool = True) -> List[InventoryItem]:
        query = self.db.query(InventoryItem).filter(InventoryItem.user_id == user_id)
        if not include_finished:
            query = query.filter(InventoryItem.is_finished.is_(False))
        return query.all()

    def _invalidate(self, user_id: int):
        if self.cache is not None:
            self.cache.invalidate(generate_cache_key("inventory", user_id))

    def list_items(
        self,
        user_id: int,
        filters: InventoryFilters,
        page: int = 1,
        limit: Optional[int] = None,
        include_finished: bool = False,
        now: Optional[datetime] = None,
    ) -> Dict:
        """Filter, sort and paginate the user's items"""
        now = now or utcnow()
        limit = limit or settings.default_page_size

        # Newest first unless the caller says otherwise, each default on its own
        filters = replace(
            filters,
            sort_by=filters.sort_by or "created_at",
            sort_order=filters.sort_order or SortOrder.DESC,
        )

        try:
            items = apply_filters(self._user_items(user_id, include_finished), filters, now)
        except ValueError as e:
            raise BadRequestError(str(e), "INVALID_SORT_KEY")

        page_data = paginate(items, page, limit)
        return {
            "items": [InventoryItemResponse.from_item(item, now) for item in page_data["data"]],
            "pagination": page_data["pagination"],
        }

    def get_item(self, user_id: int, item_id: int) -> InventoryItem:
        item = self.db.query(InventoryItem).filter(
            InventoryItem.id == item_id,
            InventoryItem.user_id == user_id
        ).first()
        if not item:
            raise NotFoundError("Item not found")
        return item

    async def create_item(self, user_id: int, data: InventoryItemCreate) -> InventoryItem:
        values = data.model_dump()

        # Fill nutrition from the barcode lookup when the caller didn't send any
        if values.get("barcode") and not values.get("nutritional_info") and self.food_client is not None:
            try:
                product = await self.food_client.get_product(values["barcode"])
                if product:
                    values["nutritional_info"] = product["nutritional_info"]
                    if not values.get("image_url"):
                        values["image_url"] = product.get("image_url")
            except AppError as e:
                logger.warning(f"Could not enrich barcode {values['barcode']}: {e.message}")

        item = InventoryItem(user_id=user_id, **values)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)

        self._invalidate(user_id)
        logger.info(f"User {user_id} added inventory item {item.id} ({item.name})")
        return item

    def update_item(self, user_id: int, item_id: int, data: InventoryItemUpdate) -> InventoryItem:
        item = self.get_item(user_id, item_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(item, field, value)
        self.db.commit()
        self.db.refresh(item)
        self._invalidate(user_id)
        return item

    def delete_item(self, user_id: int, item_id: int):
        item = self.get_item(user_id, item_id)
        self.db.delete(item)
        self.db.commit()
        self._invalidate(user_id)
        logger.info(f"User {user_id} deleted inventory item {item_id}")

    def finish_item(self, user_id: int, item_id: int) -> InventoryItem:
        item = self.get_item(user_id, item_id)
        item.is_finished = True
        self.db.commit()
        self.db.refresh(item)
        self._invalidate(user_id)
        return item

    def get_stats(self, user_id: int, now: Optional[datetime] = None) -> Dict:
        """Counts over unfinished items, using the server-side expiration window"""
        now = now or utcnow()
        items = self._user_items(user_id, include_finished=False)
        statuses = [classify_expiration(item.expiration_date, now) for item in items]

        return {
            "total_items": len(items),
            "expired_items": statuses.count(ExpirationStatus.EXPIRED),
            "soon_to_expire_items": statuses.count(ExpirationStatus.SOON),
            "items_by_category": count_by(items, "category"),
            "items_by_location": count_by(items, "location"),
        }

    async def lookup_barcode(self, barcode: str) -> Dict:
        product = await self.food_client.get_product(barcode)
        if product is None:
            raise NotFoundError("Product not found", "PRODUCT_NOT_FOUND")
        return product
