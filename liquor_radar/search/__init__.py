"""Catalog search implementations."""

from liquor_radar.search.base import FoundItem, ProductInfo, SearchProvider
from liquor_radar.search.olcc import OlccSearcher

__all__ = ["FoundItem", "OlccSearcher", "ProductInfo", "SearchProvider"]
