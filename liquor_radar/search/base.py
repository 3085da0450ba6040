"""Base search definitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class FoundItem:
    """An item found in stock at one store during a search pass."""

    name: str
    code: str
    store: str
    date: datetime
    price: str


@dataclass(slots=True)
class ProductInfo:
    """Everything the catalog reports about a product, used or not."""

    item_code: str = ""
    name: str = ""
    bottle_price: str = ""
    case_price: str = ""
    size: str = ""
    proof: str = ""
    category: str = ""


class SearchProvider(Protocol):
    """Catalog search used by a subscriber runner."""

    async def search(
        self, term: str, zipcode: str, distance: int
    ) -> list[FoundItem]:
        ...
