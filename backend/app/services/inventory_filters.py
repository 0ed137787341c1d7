"""
In-memory filter/sort pipeline for pantry items.

Works on ORM rows or plain dicts (e.g. items already serialised for a
client). A filter that is None is not applied; every supplied filter must
match for an item to be kept.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from app.core.config import settings
from app.core.utils import to_naive_utc
from app.services.expiration import ExpirationStatus, classify_expiration


class ExpirationBucket(str, Enum):
    EXPIRED = "expired"
    SOON = "soon"
    OK = "ok"
    UNKNOWN = "unknown"
    VALID = "valid"  # not expired: soon or ok


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


TEXT_KEYS = {"name", "category", "location"}
ORDERED_KEYS = {"expiration_date", "purchase_date", "created_at", "updated_at", "quantity"}
SORT_KEYS = TEXT_KEYS | ORDERED_KEYS


@dataclass
class InventoryFilters:
    category: Optional[str] = None
    location: Optional[str] = None
    search: Optional[str] = None
    expiration: Optional[ExpirationBucket] = None
    sort_by: Optional[str] = None
    sort_order: Optional[SortOrder] = None
    soon_days: int = field(default_factory=lambda: settings.filter_soon_days)


def _get(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return to_naive_utc(value)


def in_bucket(status: ExpirationStatus, bucket: ExpirationBucket) -> bool:
    if bucket == ExpirationBucket.VALID:
        return status in (ExpirationStatus.SOON, ExpirationStatus.OK)
    return status.value == bucket.value


def build_predicates(filters: InventoryFilters, now: datetime) -> List[Callable[[Any], bool]]:
    predicates = []

    if filters.category:
        predicates.append(lambda item: _get(item, "category") == filters.category)

    if filters.location:
        predicates.append(lambda item: _get(item, "location") == filters.location)

    if filters.search:
        needle = filters.search.casefold()
        predicates.append(lambda item: needle in (_get(item, "name") or "").casefold())

    if filters.expiration:
        bucket = ExpirationBucket(filters.expiration)
        predicates.append(
            lambda item: in_bucket(
                classify_expiration(_as_datetime(_get(item, "expiration_date")), now, filters.soon_days),
                bucket,
            )
        )

    return predicates


def _sort_value(item: Any, key: str):
    value = _get(item, key)
    if value is None:
        return None
    if key in TEXT_KEYS:
        return str(value).casefold()
    if key == "quantity":
        return float(value)
    return _as_datetime(value)


def sort_items(items: Iterable[Any], sort_by: str, sort_order: SortOrder = SortOrder.ASC) -> List[Any]:
    """Sort by one key. Items missing the key always go last."""
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key: {sort_by}")

    present, missing = [], []
    for item in items:
        (missing if _sort_value(item, sort_by) is None else present).append(item)

    present.sort(key=lambda item: _sort_value(item, sort_by), reverse=SortOrder(sort_order) == SortOrder.DESC)
    return present + missing


def apply_filters(items: Iterable[Any], filters: InventoryFilters, now: Optional[datetime] = None) -> List[Any]:
    now = to_naive_utc(now) or datetime.utcnow()
    predicates = build_predicates(filters, now)
    result = [item for item in items if all(predicate(item) for predicate in predicates)]

    if filters.sort_by:
        result = sort_items(result, filters.sort_by, filters.sort_order or SortOrder.ASC)
    return result


def count_by(items: Iterable[Any], key: str) -> List[Dict[str, Any]]:
    """[{key: value, "count": n}, ...] ordered by descending count, then value."""
    counts: Dict[Any, int] = {}
    for item in items:
        value = _get(item, key)
        counts[value] = counts.get(value, 0) + 1
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], str(kv[0])))
    return [{key: value, "count": count} for value, count in ordered]
