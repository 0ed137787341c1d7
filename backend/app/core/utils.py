import math
import re
import unicodedata
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def paginate(items: List[Any], page: int = 1, limit: int = 10) -> Dict[str, Any]:
    """Slice a list into one page and describe where that page sits"""
    start_index = (page - 1) * limit
    end_index = page * limit

    return {
        "data": items[start_index:end_index],
        "pagination": {
            "total_items": len(items),
            "total_pages": math.ceil(len(items) / limit) if limit else 0,
            "current_page": page,
            "page_size": limit,
            "has_next_page": end_index < len(items),
            "has_prev_page": start_index > 0,
        },
    }


def generate_slug(text: str) -> str:
    """'Azúcar  Moreno!' -> 'azucar-moreno'"""
    text = unicodedata.normalize("NFD", str(text).lower())
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Mn")
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"[^\w-]+", "", text)
    text = re.sub(r"-{2,}", "-", text)
    return text.strip("-")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; normalise aware datetimes to match."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
